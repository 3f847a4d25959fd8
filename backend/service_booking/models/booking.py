# backend/service_booking/models/booking.py
"""
Booking model for the service booking platform.

A booking reserves a provider's time for one service at one instant.
Bookings reference the customer, provider and service by id only and
snapshot the service price at creation, so later catalog changes never
alter an existing booking.

Status changes go through the entity methods below, which the booking
service calls only after the state machine has accepted the transition.
"""

from datetime import datetime
from enum import Enum
import logging
from typing import Any, Dict, Optional

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Numeric, String, Text, text
from sqlalchemy.sql import func
import ulid

from ..core.exceptions import InvalidStatusException
from ..core.timezone_utils import ensure_utc, utc_now
from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses, each with a stable ordinal code and label."""

    SCHEDULED = "SCHEDULED"  # Initial state at creation
    CONFIRMED = "CONFIRMED"  # Provider confirmed the appointment
    CANCELLED = "CANCELLED"  # Terminal
    COMPLETED = "COMPLETED"  # Terminal
    NO_SHOW = "NO_SHOW"  # Terminal, customer didn't attend

    @property
    def code(self) -> int:
        return _STATUS_CODES[self]

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @classmethod
    def from_code(cls, code: Optional[int]) -> "BookingStatus":
        """Resolve a status from its ordinal code."""
        if code is None:
            raise InvalidStatusException(code)
        for status, status_code in _STATUS_CODES.items():
            if status_code == code:
                return status
        raise InvalidStatusException(code)

    @classmethod
    def from_label(cls, label: Optional[str]) -> "BookingStatus":
        """Resolve a status from its label (case-insensitive, surrounding blanks ignored)."""
        if label is None or not label.strip():
            raise InvalidStatusException(label)
        wanted = label.strip().lower()
        for status, status_label in _STATUS_LABELS.items():
            if status_label.lower() == wanted:
                return status
        raise InvalidStatusException(label)

    @classmethod
    def parse(cls, value: Any) -> "BookingStatus":
        """Accept a member, a member name, an ordinal code or a label."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidStatusException(value)
        if isinstance(value, int):
            return cls.from_code(value)
        if isinstance(value, str):
            candidate = value.strip()
            if candidate.isdigit():
                return cls.from_code(int(candidate))
            normalized = candidate.upper().replace(" ", "_").replace("-", "_")
            if normalized in cls.__members__:
                return cls[normalized]
            return cls.from_label(candidate)
        raise InvalidStatusException(value)


_STATUS_CODES: Dict[BookingStatus, int] = {
    BookingStatus.SCHEDULED: 1,
    BookingStatus.CONFIRMED: 2,
    BookingStatus.CANCELLED: 3,
    BookingStatus.COMPLETED: 4,
    BookingStatus.NO_SHOW: 5,
}

_STATUS_LABELS: Dict[BookingStatus, str] = {
    BookingStatus.SCHEDULED: "Scheduled",
    BookingStatus.CONFIRMED: "Confirmed",
    BookingStatus.CANCELLED: "Cancelled",
    BookingStatus.COMPLETED: "Completed",
    BookingStatus.NO_SHOW: "No Show",
}


class Booking(Base):
    """
    Reservation of a provider's time for a service at a single instant.

    Invariants:
        - price is a snapshot taken at creation and never recalculated
        - cancellation_reason is set if and only if status is CANCELLED
        - at most one non-cancelled booking per (provider_id, scheduled_at)
    """

    __tablename__ = "bookings"

    # Primary key
    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    # References by id; no ORM back-references
    customer_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    provider_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(String(26), ForeignKey("services.id"), nullable=False)

    scheduled_at = Column(DateTime(timezone=True), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.SCHEDULED.value, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Cancellation tracking
    cancelled_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('SCHEDULED', 'CONFIRMED', 'CANCELLED', 'COMPLETED', 'NO_SHOW')",
            name="ck_bookings_status",
        ),
        CheckConstraint("price >= 0", name="check_booking_price_non_negative"),
        # Cancelled bookings free their slot
        Index(
            "uq_bookings_provider_slot_active",
            "provider_id",
            "scheduled_at",
            unique=True,
            sqlite_where=text("status <> 'CANCELLED'"),
            postgresql_where=text("status <> 'CANCELLED'"),
        ),
    )

    def __init__(self, **kwargs: Any) -> None:
        """Initialize as SCHEDULED unless a status is given."""
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.SCHEDULED.value
        logger.info(
            f"Creating booking for customer {self.customer_id} with provider {self.provider_id}"
        )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Booking {self.id}: customer={self.customer_id}, "
            f"provider={self.provider_id}, at={self.scheduled_at}, status={self.status}>"
        )

    @property
    def current_status(self) -> BookingStatus:
        return BookingStatus(self.status)

    @property
    def scheduled_at_utc(self) -> datetime:
        return ensure_utc(self.scheduled_at)

    def is_owned_by(self, user_id: str) -> bool:
        """True when ``user_id`` is this booking's customer or provider."""
        return user_id in (self.customer_id, self.provider_id)

    def confirm(self) -> None:
        """Mark booking as confirmed by the provider."""
        self.status = BookingStatus.CONFIRMED.value
        logger.info(f"Booking {self.id} confirmed")

    def cancel(self, cancelled_by_id: str, reason: str, at: Optional[datetime] = None) -> None:
        """Cancel this booking."""
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_at = at or utc_now()
        self.cancelled_by_id = cancelled_by_id
        self.cancellation_reason = reason
        logger.info(f"Booking {self.id} cancelled by user {cancelled_by_id}")

    def complete(self, at: Optional[datetime] = None) -> None:
        """Mark booking as completed."""
        self.status = BookingStatus.COMPLETED.value
        self.completed_at = at or utc_now()
        logger.info(f"Booking {self.id} marked as completed")

    def mark_no_show(self) -> None:
        """Mark booking as no-show."""
        self.status = BookingStatus.NO_SHOW.value
        logger.info(f"Booking {self.id} marked as no-show")
