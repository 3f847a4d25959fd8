# backend/service_booking/repositories/booking_repository.py
"""
Booking Repository for the service booking platform

Implements all data access operations for booking management:
- Booking creation (integrity errors surfaced for slot conflict handling)
- Slot occupancy checks at exact-timestamp granularity
- Customer and provider booking queries
- Provider agenda within a time range
- Paged listing for administrators
"""

from datetime import datetime
import logging
from typing import Any, List, Optional, Tuple, cast

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import ensure_utc
from ..models.booking import Booking, BookingStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """
    Repository for booking data access.

    Bookings hold their own scheduling data, so every query here is a
    plain filter on the bookings table.
    """

    def __init__(self, db: Session):
        """Initialize with Booking model."""
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def create(self, **kwargs: Any) -> Booking:
        """Create a booking, exposing integrity errors for conflict handling."""
        try:
            return super().create(**kwargs)
        except RepositoryException as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise exc.__cause__
            raise

    # Slot occupancy

    def exists_for_provider_at(self, provider_id: str, at: datetime) -> bool:
        """
        Check whether the provider already holds an active booking at ``at``.

        Cancelled bookings do not occupy their slot.

        Args:
            provider_id: The provider's user ID
            at: The exact scheduled instant

        Returns:
            True if the slot is taken, False otherwise
        """
        try:
            query = self.db.query(Booking.id).filter(
                Booking.provider_id == provider_id,
                Booking.scheduled_at == ensure_utc(at),
                Booking.status != BookingStatus.CANCELLED.value,
            )
            return query.first() is not None
        except Exception as e:
            self.logger.error(f"Error checking slot occupancy: {str(e)}")
            raise RepositoryException(f"Failed to check slot occupancy: {str(e)}")

    # Participant queries

    def get_customer_bookings(
        self, customer_id: str, status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        """
        Get bookings for a specific customer, earliest appointment first.

        Args:
            customer_id: The customer's user ID
            status: Optional status filter
        """
        try:
            query = self.db.query(Booking).filter(Booking.customer_id == customer_id)
            if status:
                query = query.filter(Booking.status == status.value)
            return cast(List[Booking], query.order_by(Booking.scheduled_at, Booking.id).all())
        except Exception as e:
            self.logger.error(f"Error getting customer bookings: {str(e)}")
            raise RepositoryException(f"Failed to get customer bookings: {str(e)}")

    def get_provider_bookings(
        self, provider_id: str, status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        """
        Get bookings for a specific provider, earliest appointment first.

        Args:
            provider_id: The provider's user ID
            status: Optional status filter
        """
        try:
            query = self.db.query(Booking).filter(Booking.provider_id == provider_id)
            if status:
                query = query.filter(Booking.status == status.value)
            return cast(List[Booking], query.order_by(Booking.scheduled_at, Booking.id).all())
        except Exception as e:
            self.logger.error(f"Error getting provider bookings: {str(e)}")
            raise RepositoryException(f"Failed to get provider bookings: {str(e)}")

    def get_provider_bookings_between(
        self, provider_id: str, start: datetime, end: datetime
    ) -> List[Booking]:
        """
        Get a provider's agenda between two instants (both inclusive).

        Args:
            provider_id: The provider's user ID
            start: Range start
            end: Range end

        Returns:
            Bookings scheduled within the range, in chronological order
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.provider_id == provider_id,
                Booking.scheduled_at >= ensure_utc(start),
                Booking.scheduled_at <= ensure_utc(end),
            )
            return cast(List[Booking], query.order_by(Booking.scheduled_at, Booking.id).all())
        except Exception as e:
            self.logger.error(f"Error getting provider bookings in range: {str(e)}")
            raise RepositoryException(f"Failed to get provider bookings in range: {str(e)}")

    # Administrative listing

    def get_page(self, page: int, size: int) -> Tuple[List[Booking], int]:
        """
        Get one page of all bookings.

        Args:
            page: 1-based page number
            size: Page size

        Returns:
            Tuple of (bookings on the page, total booking count)
        """
        try:
            total = self.db.query(Booking).count()
            items = (
                self.db.query(Booking)
                .order_by(Booking.scheduled_at, Booking.id)
                .offset((page - 1) * size)
                .limit(size)
                .all()
            )
            return cast(List[Booking], items), total
        except Exception as e:
            self.logger.error(f"Error getting bookings page {page}: {str(e)}")
            raise RepositoryException(f"Failed to get bookings page: {str(e)}")
