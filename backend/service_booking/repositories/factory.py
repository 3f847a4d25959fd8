# backend/service_booking/repositories/factory.py
"""
Repository Factory for the service booking platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .rbac_repository import RBACRepository
    from .service_catalog_repository import ServiceCatalogRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        """Create repository for user lookups."""
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_rbac_repository(db: Session) -> "RBACRepository":
        """Create repository for roles and permissions."""
        from .rbac_repository import RBACRepository

        return RBACRepository(db)

    @staticmethod
    def create_service_catalog_repository(db: Session) -> "ServiceCatalogRepository":
        """Create repository for catalog lookups."""
        from .service_catalog_repository import ServiceCatalogRepository

        return ServiceCatalogRepository(db)
