# backend/service_booking/repositories/service_catalog_repository.py
"""
Service Catalog Repository for the service booking platform

Read access to the service catalog and to the provider offerings that the
booking engine validates against.
"""

import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.service_catalog import ProviderService, Service
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ServiceCatalogRepository(BaseRepository[Service]):
    """Repository for catalog lookups."""

    def __init__(self, db: Session):
        """Initialize with Service model."""
        super().__init__(db, Service)
        self.logger = logging.getLogger(__name__)

    def get_service(self, service_id: str) -> Optional[Service]:
        """Get a service by ID regardless of its active flag."""
        return self.get_by_id(service_id)

    def get_active_service(self, service_id: str) -> Optional[Service]:
        """Get a service by ID only if it is currently bookable."""
        try:
            return cast(
                Optional[Service],
                self.db.query(Service)
                .filter(Service.id == service_id, Service.is_active.is_(True))
                .first(),
            )
        except Exception as e:
            self.logger.error(f"Error getting active service {service_id}: {str(e)}")
            raise RepositoryException(f"Failed to get service: {str(e)}")

    def provider_offers_service(self, provider_id: str, service_id: str) -> bool:
        """True when the provider is registered as offering the service."""
        try:
            return (
                self.db.query(ProviderService)
                .filter(
                    ProviderService.provider_id == provider_id,
                    ProviderService.service_id == service_id,
                )
                .first()
                is not None
            )
        except Exception as e:
            self.logger.error(
                f"Error checking offering of service {service_id} by {provider_id}: {str(e)}"
            )
            raise RepositoryException(f"Failed to check provider offering: {str(e)}")

    def get_provider_services(self, provider_id: str) -> List[Service]:
        """Active services offered by a provider, by name."""
        try:
            return cast(
                List[Service],
                self.db.query(Service)
                .join(ProviderService, ProviderService.service_id == Service.id)
                .filter(ProviderService.provider_id == provider_id, Service.is_active.is_(True))
                .order_by(Service.name)
                .all(),
            )
        except Exception as e:
            self.logger.error(f"Error getting services for provider {provider_id}: {str(e)}")
            raise RepositoryException(f"Failed to get provider services: {str(e)}")

    def add_provider_service(self, provider_id: str, service_id: str) -> ProviderService:
        """Register a provider offering. Does NOT commit."""
        offering = ProviderService(provider_id=provider_id, service_id=service_id)
        self.db.add(offering)
        self.db.flush()
        return offering
