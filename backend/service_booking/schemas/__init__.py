"""Pydantic request and response schemas."""

from .base import Money, PageRequest, PaginatedResponse, StandardizedModel, StrictRequestModel
from .booking import BookingCancel, BookingCreate, BookingResponse, BookingStatusUpdate

__all__ = [
    "BookingCancel",
    "BookingCreate",
    "BookingResponse",
    "BookingStatusUpdate",
    "Money",
    "PageRequest",
    "PaginatedResponse",
    "StandardizedModel",
    "StrictRequestModel",
]
