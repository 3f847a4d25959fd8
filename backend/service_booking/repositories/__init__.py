# backend/service_booking/repositories/__init__.py
"""
Repository Pattern Implementation for the service booking platform

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic read/create operations
- IRepository: Interface defining required methods for all repositories
- RepositoryFactory: Factory for creating repository instances
- BookingRepository: Booking persistence, slot occupancy and listings
- UserRepository: Actor lookups with eager loaded roles and permissions
- RBACRepository: Roles, permissions and their assignments
- ServiceCatalogRepository: Services and provider offerings

Usage:
    from service_booking.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_booking_repository(db)
    taken = repository.exists_for_provider_at(provider_id, scheduled_at)
"""

from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .rbac_repository import RBACRepository
from .service_catalog_repository import ServiceCatalogRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "IRepository",
    "RepositoryFactory",
    "BookingRepository",
    "RBACRepository",
    "ServiceCatalogRepository",
    "UserRepository",
]
