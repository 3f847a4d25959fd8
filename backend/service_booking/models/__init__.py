"""
Database models for the service booking platform.

This module exports all SQLAlchemy models used in the application:
- Users and role-based access control
- Service catalog and provider offerings
- Bookings
"""

from .booking import Booking, BookingStatus
from .rbac import Permission, Role, RolePermission, UserRole
from .service_catalog import ProviderService, Service
from .user import User

__all__ = [
    "Booking",
    "BookingStatus",
    "Permission",
    "ProviderService",
    "Role",
    "RolePermission",
    "Service",
    "User",
    "UserRole",
]
