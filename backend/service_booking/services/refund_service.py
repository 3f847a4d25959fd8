# backend/service_booking/services/refund_service.py
"""
Refund collaborator abstraction.

The booking service calls ``refund`` once for every committed cancellation.
Payment processing lives outside this system, so the default gateway only
logs the request.
"""
from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class RefundGateway(Protocol):
    """Interface for refund collaborators - enables easy swapping."""

    def refund(self, booking_id: str) -> None:
        """Request a refund for a cancelled booking."""
        ...


class LoggingRefundGateway:
    """Default gateway: logs each refund request and keeps no state."""

    def refund(self, booking_id: str) -> None:
        logger.info(f"Refund requested for booking {booking_id}", extra={"booking_id": booking_id})
