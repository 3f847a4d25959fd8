# backend/service_booking/services/booking_state_machine.py
"""
Booking status state machine.

The transition table is the only place that decides which status changes
are legal. It knows nothing about who is asking; authorization is decided
separately before a transition is attempted.
"""

import logging
from typing import Dict, FrozenSet, Optional

from ..core.exceptions import IllegalTransitionException, MissingCancellationReasonException
from ..models.booking import BookingStatus

logger = logging.getLogger(__name__)

_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.SCHEDULED: frozenset(
        {
            BookingStatus.CONFIRMED,
            BookingStatus.CANCELLED,
            BookingStatus.COMPLETED,
            BookingStatus.NO_SHOW,
        }
    ),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW}
    ),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}


def allowed_transitions(status: BookingStatus) -> FrozenSet[BookingStatus]:
    """Statuses reachable in one step from ``status``."""
    return _TRANSITIONS[status]


def is_terminal(status: BookingStatus) -> bool:
    return not _TRANSITIONS[status]


def transition(
    current: BookingStatus,
    requested: BookingStatus,
    reason: Optional[str] = None,
) -> BookingStatus:
    """
    Validate a status change and return the new status.

    Args:
        current: Status the booking is in now
        requested: Status the caller wants
        reason: Cancellation reason, required when ``requested`` is CANCELLED

    Returns:
        The requested status

    Raises:
        IllegalTransitionException: Not reachable from ``current`` (includes
            leaving a terminal status and requesting the current status)
        MissingCancellationReasonException: Cancelling without a non-blank reason
    """
    if requested not in _TRANSITIONS[current]:
        logger.info(f"Rejected booking transition {current.value} -> {requested.value}")
        raise IllegalTransitionException(current.value, requested.value)

    if requested == BookingStatus.CANCELLED and (reason is None or not reason.strip()):
        raise MissingCancellationReasonException()

    return requested
