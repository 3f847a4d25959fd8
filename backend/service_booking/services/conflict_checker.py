# backend/service_booking/services/conflict_checker.py
"""
Conflict Checker Service for the service booking platform

Handles the temporal rules a booking must satisfy:
- Minimum lead time between booking and appointment
- One active booking per provider per instant
- Customer cancellation window

Checks are read-only. The slot check is advisory; the partial unique index
on bookings is what actually guarantees exclusivity under concurrency.
"""

from datetime import datetime, timedelta
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    CancellationWindowExpiredException,
    InsufficientLeadTimeException,
    SlotConflictException,
)
from ..core.timezone_utils import ensure_utc, hours_between
from ..models.booking import Booking
from ..principal import ActorPrincipal
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class ConflictChecker(BaseService):
    """
    Service for checking booking conflicts and time validation.

    Lead time and cancellation window default to the configured values and
    can be overridden per instance.
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[BookingRepository] = None,
        lead_time_hours: Optional[int] = None,
        cancellation_window_hours: Optional[int] = None,
    ):
        """
        Initialize conflict checker service.

        Args:
            db: Database session
            repository: Optional BookingRepository instance
            lead_time_hours: Minimum hours between now and the appointment
            cancellation_window_hours: Minimum hours before the appointment for
                customer cancellations
        """
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.lead_time_hours = (
            settings.booking_lead_time_hours if lead_time_hours is None else lead_time_hours
        )
        self.cancellation_window_hours = (
            settings.cancellation_window_hours
            if cancellation_window_hours is None
            else cancellation_window_hours
        )

    @BaseService.measure_operation("check_lead_time")
    def check_lead_time(self, scheduled_at: datetime, now: datetime) -> None:
        """
        Raise unless ``scheduled_at`` is at least the lead time after ``now``.

        The boundary itself is accepted.
        """
        earliest = ensure_utc(now) + timedelta(hours=self.lead_time_hours)
        if ensure_utc(scheduled_at) < earliest:
            raise InsufficientLeadTimeException(
                self.lead_time_hours, hours_between(now, scheduled_at)
            )

    @BaseService.measure_operation("check_slot_available")
    def check_slot_available(self, provider_id: str, scheduled_at: datetime) -> None:
        """Raise if the provider already holds an active booking at ``scheduled_at``."""
        if self.repository.exists_for_provider_at(provider_id, scheduled_at):
            raise SlotConflictException(provider_id, ensure_utc(scheduled_at))

    def validate_create(self, provider_id: str, scheduled_at: datetime, now: datetime) -> None:
        """
        Validate the temporal rules for a new booking.

        Raises:
            InsufficientLeadTimeException: Appointment is too soon
            SlotConflictException: Provider is already booked at that instant
        """
        self.check_lead_time(scheduled_at, now)
        self.check_slot_available(provider_id, scheduled_at)

    def is_customer_initiated(
        self, actor: Optional[ActorPrincipal], booking: Optional[Booking]
    ) -> bool:
        """
        True when the cancellation comes from the booking's customer acting as such.

        An actor with provider or administrator standing is never treated as
        a customer here, even if they booked the appointment themselves.
        """
        if actor is None:
            return True
        if actor.is_administrator or actor.is_provider:
            return False
        if booking is not None:
            return actor.user_id == booking.customer_id
        return actor.is_customer

    @BaseService.measure_operation("validate_cancel")
    def validate_cancel(
        self,
        scheduled_at: datetime,
        now: datetime,
        actor: Optional[ActorPrincipal] = None,
        booking: Optional[Booking] = None,
    ) -> None:
        """
        Validate the timing of a cancellation.

        Customer cancellations must leave at least the cancellation window
        before the appointment. Providers and administrators may cancel up to
        the appointment instant; once it has passed nobody can cancel.

        Raises:
            CancellationWindowExpiredException: Too late to cancel
        """
        remaining = hours_between(now, scheduled_at)

        if remaining <= 0:
            raise CancellationWindowExpiredException(0, remaining)

        if self.is_customer_initiated(actor, booking) and remaining < self.cancellation_window_hours:
            raise CancellationWindowExpiredException(self.cancellation_window_hours, remaining)
