# backend/service_booking/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_actor
from .database import get_db
from .services import get_booking_service, get_permission_service, get_refund_gateway

__all__ = [
    # Auth
    "get_current_actor",
    # Database
    "get_db",
    # Services
    "get_booking_service",
    "get_permission_service",
    "get_refund_gateway",
]
