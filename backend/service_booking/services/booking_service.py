# backend/service_booking/services/booking_service.py
"""
Booking Service for the service booking platform

Handles all booking-related business logic including:
- Creating bookings against lead-time and slot rules
- Cancelling bookings and triggering refunds
- Moving bookings through the status lifecycle
- Authorized listing for customers, providers and administrators

Each mutating operation runs in a single transaction. The refund
collaborator is only called after the cancellation has been committed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    NotFoundException,
    SlotConflictException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc, utc_now
from ..models.booking import Booking, BookingStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import ActorPrincipal
from ..repositories.factory import RepositoryFactory
from ..schemas.base import PageRequest
from . import booking_state_machine
from .base import BaseService
from .booking_authorization import BookingAuthorization
from .conflict_checker import ConflictChecker
from .refund_service import LoggingRefundGateway, RefundGateway

if TYPE_CHECKING:
    from ..repositories.booking_repository import BookingRepository
    from ..repositories.service_catalog_repository import ServiceCatalogRepository
    from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

SLOT_INDEX_NAME = "uq_bookings_provider_slot_active"


@dataclass
class BookingPage:
    """One page of bookings plus the total across all pages."""

    items: List[Booking] = field(default_factory=list)
    total: int = 0
    page: int = 1
    size: int = 20

    @property
    def has_next(self) -> bool:
        return self.page * self.size < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Collaborators are injectable so tests can pin the clock and observe
    the refund gateway.
    """

    repository: "BookingRepository"
    user_repository: "UserRepository"
    catalog_repository: "ServiceCatalogRepository"

    def __init__(
        self,
        db: Session,
        repository: Optional["BookingRepository"] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        authorization: Optional[BookingAuthorization] = None,
        refund_gateway: Optional[RefundGateway] = None,
        clock: Optional[Callable[[], datetime]] = None,
        refund_enabled: Optional[bool] = None,
    ):
        """
        Initialize booking service.

        Args:
            db: Database session
            repository: Optional BookingRepository instance
            conflict_checker: Optional ConflictChecker instance
            authorization: Optional BookingAuthorization instance
            refund_gateway: Refund collaborator; defaults to LoggingRefundGateway
            clock: Returns the current UTC time; defaults to utc_now
            refund_enabled: Overrides settings.refund_enabled
        """
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.catalog_repository = RepositoryFactory.create_service_catalog_repository(db)
        self.conflict_checker = conflict_checker or ConflictChecker(db, repository=self.repository)
        self.authorization = authorization or BookingAuthorization()
        self.refund_gateway: RefundGateway = refund_gateway or LoggingRefundGateway()
        self._clock = clock or utc_now
        self.refund_enabled = settings.refund_enabled if refund_enabled is None else refund_enabled

    def now(self) -> datetime:
        return ensure_utc(self._clock())

    # Creation

    @BaseService.measure_operation("book")
    def book(
        self,
        customer_id: str,
        provider_id: str,
        service_id: str,
        scheduled_at: datetime,
    ) -> Booking:
        """
        Create a booking in SCHEDULED status.

        Args:
            customer_id: The customer the booking is for
            provider_id: The provider being booked
            service_id: The service being booked
            scheduled_at: Appointment instant

        Returns:
            The persisted booking

        Raises:
            NotFoundException: Customer, provider or active service not found
            InsufficientLeadTimeException: Appointment too soon
            SlotConflictException: Provider already booked at that instant
            RoleMismatchException: Participant lacks the expected role
            ServiceNotOfferedException: Provider does not offer the service
        """
        scheduled_at = ensure_utc(scheduled_at)
        now = self.now()
        self.log_operation(
            "book",
            customer_id=customer_id,
            provider_id=provider_id,
            service_id=service_id,
            scheduled_at=scheduled_at.isoformat(),
        )

        with self.transaction():
            customer = self.user_repository.get_with_roles(customer_id)
            if not customer:
                raise NotFoundException("Customer not found", details={"customer_id": customer_id})

            provider = self.user_repository.get_with_roles(provider_id)
            if not provider:
                raise NotFoundException("Provider not found", details={"provider_id": provider_id})

            service = self.catalog_repository.get_active_service(service_id)
            if not service:
                raise NotFoundException("Service not found", details={"service_id": service_id})

            self.conflict_checker.validate_create(provider_id, scheduled_at, now)

            self.authorization.check_booking_participants(
                customer,
                provider,
                service_id,
                self.catalog_repository.provider_offers_service(provider_id, service_id),
            )

            try:
                booking = self.repository.create(
                    customer_id=customer_id,
                    provider_id=provider_id,
                    service_id=service_id,
                    scheduled_at=scheduled_at,
                    price=service.price,
                    status=BookingStatus.SCHEDULED.value,
                )
            except IntegrityError as exc:
                if self._is_slot_conflict(exc):
                    raise SlotConflictException(provider_id, scheduled_at) from exc
                raise

        self.logger.info(f"Booking {booking.id} created for provider {provider_id}")
        return booking

    @staticmethod
    def _is_slot_conflict(exc: IntegrityError) -> bool:
        """Whether an integrity error came from the active-slot unique index."""
        text = str(getattr(exc, "orig", exc))
        if SLOT_INDEX_NAME in text:
            return True
        return "bookings.provider_id" in text and "bookings.scheduled_at" in text

    # Cancellation

    @BaseService.measure_operation("cancel")
    def cancel(self, booking_id: str, reason: Optional[str], acting_actor: ActorPrincipal) -> None:
        """
        Cancel a booking and request its refund.

        Args:
            booking_id: ID of booking to cancel
            reason: Cancellation reason (required, non-blank)
            acting_actor: Who is cancelling

        Raises:
            NotFoundException: Booking not found
            AccessDeniedException: Actor may not change this booking
            MissingCancellationReasonException: Reason missing or blank
            CancellationWindowExpiredException: Too late to cancel
            IllegalTransitionException: Booking is already in a terminal status
        """
        self._cancel(booking_id, reason, acting_actor)

    def _cancel(self, booking_id: str, reason: Optional[str], actor: ActorPrincipal) -> Booking:
        now = self.now()

        with self.transaction():
            booking = self._get_booking_or_404(booking_id)
            previous = booking.current_status

            self.authorization.ensure_can_mutate_status(actor, booking, BookingStatus.CANCELLED)
            # Terminal statuses fail here before the reason or the clock is looked at
            booking_state_machine.transition(previous, BookingStatus.CANCELLED, reason)
            self.conflict_checker.validate_cancel(booking.scheduled_at_utc, now, actor, booking)

            booking.cancel(actor.user_id, (reason or "").strip(), at=now)
            self.repository.flush()

        prometheus_metrics.record_status_transition(previous.value, BookingStatus.CANCELLED.value)
        self.log_operation("cancel", booking_id=booking_id, actor_id=actor.user_id)
        self._request_refund(booking.id)
        return booking

    def _request_refund(self, booking_id: str) -> None:
        """Call the refund collaborator for a committed cancellation."""
        if not self.refund_enabled:
            self.logger.info(f"Refunds disabled; skipping refund for booking {booking_id}")
            prometheus_metrics.record_refund("skipped")
            return

        try:
            self.refund_gateway.refund(booking_id)
        except Exception:
            # The cancellation is already committed
            self.logger.exception(f"Refund request failed for booking {booking_id}")
            prometheus_metrics.record_refund("failed")
            return

        prometheus_metrics.record_refund("requested")

    # Status changes

    @BaseService.measure_operation("update_status")
    def update_status(
        self,
        booking_id: str,
        requested_status: Any,
        reason: Optional[str],
        acting_actor: ActorPrincipal,
    ) -> Booking:
        """
        Move a booking to ``requested_status``.

        Cancelling follows the same rules as ``cancel`` and triggers the
        refund. Other targets need authorization and a legal transition.

        Args:
            booking_id: ID of the booking
            requested_status: BookingStatus, or its name, code or label
            reason: Cancellation reason, ignored for other targets
            acting_actor: Who is changing the status

        Raises:
            InvalidStatusException: ``requested_status`` names no status
            NotFoundException: Booking not found
            AccessDeniedException: Actor may not change this booking
            IllegalTransitionException: Target not reachable
        """
        requested = BookingStatus.parse(requested_status)
        if requested == BookingStatus.CANCELLED:
            return self._cancel(booking_id, reason, acting_actor)

        now = self.now()

        with self.transaction():
            booking = self._get_booking_or_404(booking_id)
            previous = booking.current_status

            self.authorization.ensure_can_mutate_status(acting_actor, booking, requested)
            booking_state_machine.transition(previous, requested)

            if requested == BookingStatus.CONFIRMED:
                booking.confirm()
            elif requested == BookingStatus.COMPLETED:
                booking.complete(at=now)
            elif requested == BookingStatus.NO_SHOW:
                booking.mark_no_show()
            self.repository.flush()

        prometheus_metrics.record_status_transition(previous.value, requested.value)
        self.log_operation(
            "update_status",
            booking_id=booking_id,
            actor_id=acting_actor.user_id,
            from_status=previous.value,
            to_status=requested.value,
        )
        return booking

    # Reads

    @BaseService.measure_operation("get_booking")
    def get_booking(self, booking_id: str, actor: ActorPrincipal) -> Booking:
        """Get a booking the actor is allowed to see."""
        booking = self._get_booking_or_404(booking_id)
        self.authorization.ensure_can_view(actor, booking)
        return booking

    @BaseService.measure_operation("list_by_customer")
    def list_by_customer(
        self, customer_id: str, actor: Optional[ActorPrincipal] = None
    ) -> List[Booking]:
        """Bookings for a customer, earliest appointment first."""
        if actor is not None:
            self.authorization.ensure_can_list_customer(actor, customer_id)
        return self.repository.get_customer_bookings(customer_id)

    @BaseService.measure_operation("list_by_provider")
    def list_by_provider(
        self, provider_id: str, actor: Optional[ActorPrincipal] = None
    ) -> List[Booking]:
        """Bookings for a provider, earliest appointment first."""
        if actor is not None:
            self.authorization.ensure_can_list_provider(actor, provider_id)
        return self.repository.get_provider_bookings(provider_id)

    @BaseService.measure_operation("list_by_provider_between")
    def list_by_provider_between(
        self,
        provider_id: str,
        start: datetime,
        end: datetime,
        actor: Optional[ActorPrincipal] = None,
    ) -> List[Booking]:
        """
        A provider's agenda between two instants, both inclusive.

        Raises:
            ValidationException: ``start`` is after ``end``
        """
        if ensure_utc(start) > ensure_utc(end):
            raise ValidationException(
                "Range start must not be after range end",
                code="InvalidRange",
                details={"start": start.isoformat(), "end": end.isoformat()},
            )
        if actor is not None:
            self.authorization.ensure_can_list_provider(actor, provider_id)
        return self.repository.get_provider_bookings_between(provider_id, start, end)

    @BaseService.measure_operation("list_paged")
    def list_paged(
        self, page_request: PageRequest, actor: Optional[ActorPrincipal] = None
    ) -> BookingPage:
        """One page of every booking on the platform."""
        if actor is not None:
            self.authorization.ensure_can_list_all(actor)
        items, total = self.repository.get_page(page_request.page, page_request.size)
        return BookingPage(items=items, total=total, page=page_request.page, size=page_request.size)

    def _get_booking_or_404(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if not booking:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        return booking
