# backend/service_booking/schemas/booking.py
"""
Booking schemas for the service booking platform.

Requests carry ids and a single UTC instant; responses expose the status by
name, ordinal code and label so clients never need a lookup table.
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import ConfigDict, Field, field_validator

from ..core.timezone_utils import ensure_utc
from .base import Money, PageRequest, PaginatedResponse, StandardizedModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """
    Book a provider for a service at one instant.

    ``customer_id`` is only honoured for administrators booking on behalf of
    a customer; everyone else books for themselves.
    """

    provider_id: str = Field(..., description="Provider to book")
    service_id: str = Field(..., description="Service being booked")
    scheduled_at: datetime = Field(..., description="Appointment instant (naive values are UTC)")
    customer_id: Optional[str] = Field(None, description="Customer, for administrator bookings")

    @field_validator("scheduled_at")
    @classmethod
    def _normalize_scheduled_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class BookingStatusUpdate(StrictRequestModel):
    """
    Move a booking to a new status.

    ``status`` accepts the member name (``"COMPLETED"``), the ordinal code
    (``4``) or the label (``"No Show"``); it is resolved by the service so an
    unknown value is reported as an invalid status.
    """

    status: Union[int, str] = Field(..., description="Target status: name, code or label")
    reason: Optional[str] = Field(
        None, max_length=1000, description="Required when cancelling"
    )


class BookingCancel(StrictRequestModel):
    """Cancel a booking."""

    reason: Optional[str] = Field(None, max_length=1000, description="Cancellation reason")

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, v: Optional[str]) -> Optional[str]:
        """Clean up the reason."""
        return v.strip() if v else v


class BookingResponse(StandardizedModel):
    """Booking as returned by the API."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=True, populate_by_name=True)

    id: str
    customer_id: str
    provider_id: str
    service_id: str
    scheduled_at: datetime
    price: Money
    status: str
    status_code: int
    status_label: str
    cancellation_reason: Optional[str] = None
    cancelled_by_id: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_booking(cls, booking: Any) -> "BookingResponse":
        """Create BookingResponse from a Booking ORM model."""
        status = booking.current_status
        return cls(
            id=booking.id,
            customer_id=booking.customer_id,
            provider_id=booking.provider_id,
            service_id=booking.service_id,
            scheduled_at=ensure_utc(booking.scheduled_at),
            price=booking.price,
            status=status.value,
            status_code=status.code,
            status_label=status.label,
            cancellation_reason=booking.cancellation_reason,
            cancelled_by_id=booking.cancelled_by_id,
            cancelled_at=ensure_utc(booking.cancelled_at) if booking.cancelled_at else None,
            completed_at=ensure_utc(booking.completed_at) if booking.completed_at else None,
            created_at=booking.created_at,
        )


__all__ = [
    "BookingCancel",
    "BookingCreate",
    "BookingResponse",
    "BookingStatusUpdate",
    "PageRequest",
    "PaginatedResponse",
]
