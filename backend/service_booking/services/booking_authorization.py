# backend/service_booking/services/booking_authorization.py
"""
Authorization rules for booking reads and mutations.

One function per operation, each deciding from an ``ActorPrincipal`` and the
booking ids alone. Reach beyond a user's own bookings comes from the
VIEW_ALL_BOOKINGS and MANAGE_ALL_BOOKINGS permissions rather than the role.

Participant role checks live here too, but they raise business-rule errors
(422) rather than access errors: a booking request naming the wrong kind of
user is a client mistake, not a forbidden action.
"""

import logging
from typing import Optional

from ..core.config import settings
from ..core.enums import PermissionName, RoleName
from ..core.exceptions import AccessDeniedException, RoleMismatchException, ServiceNotOfferedException
from ..models.booking import Booking, BookingStatus
from ..models.user import User
from ..principal import ActorPrincipal

logger = logging.getLogger(__name__)


class BookingAuthorization:
    """
    Decides which actor may read, list or change which booking.

    ``provider_global_override`` keeps the historical rule that any provider
    may change the status of any booking. Every grant that rests on that
    rule alone is logged at WARNING.
    """

    def __init__(self, provider_global_override: Optional[bool] = None):
        self.provider_global_override = (
            settings.provider_global_override
            if provider_global_override is None
            else provider_global_override
        )

    # Reads

    def can_view(self, actor: ActorPrincipal, booking: Booking) -> bool:
        return booking.is_owned_by(actor.user_id) or actor.has_permission(
            PermissionName.VIEW_ALL_BOOKINGS
        )

    def ensure_can_view(self, actor: ActorPrincipal, booking: Booking) -> None:
        if not self.can_view(actor, booking):
            logger.info(f"Actor {actor.user_id} denied read access to booking {booking.id}")
            raise AccessDeniedException()

    def ensure_can_list_customer(self, actor: ActorPrincipal, customer_id: str) -> None:
        if actor.has_permission(PermissionName.VIEW_ALL_BOOKINGS) or actor.user_id == customer_id:
            return
        raise AccessDeniedException("You can only list your own bookings")

    def ensure_can_list_provider(self, actor: ActorPrincipal, provider_id: str) -> None:
        if actor.has_permission(PermissionName.VIEW_ALL_BOOKINGS) or actor.user_id == provider_id:
            return
        raise AccessDeniedException("You can only list your own bookings")

    def ensure_can_list_all(self, actor: ActorPrincipal) -> None:
        if not actor.has_permission(PermissionName.VIEW_ALL_BOOKINGS):
            raise AccessDeniedException("Only administrators can list all bookings")

    # Mutations

    def can_mutate_status(
        self, actor: ActorPrincipal, booking: Booking, requested_status: BookingStatus
    ) -> bool:
        """
        Whether ``actor`` may move ``booking`` to ``requested_status``.

        Granted to the booking's customer or provider, to holders of
        MANAGE_ALL_BOOKINGS and, while the override is enabled, to any provider.
        """
        if booking.is_owned_by(actor.user_id) or actor.has_permission(
            PermissionName.MANAGE_ALL_BOOKINGS
        ):
            return True

        if actor.is_provider and self.provider_global_override:
            logger.warning(
                f"Provider {actor.user_id} granted {requested_status.value} on booking "
                f"{booking.id} by the global provider override only",
                extra={
                    "booking_id": booking.id,
                    "actor_id": actor.user_id,
                    "requested_status": requested_status.value,
                },
            )
            return True

        return False

    def ensure_can_mutate_status(
        self, actor: ActorPrincipal, booking: Booking, requested_status: BookingStatus
    ) -> None:
        if not self.can_mutate_status(actor, booking, requested_status):
            logger.info(
                f"Actor {actor.user_id} denied {requested_status.value} on booking {booking.id}"
            )
            raise AccessDeniedException()

    # Participants

    def check_booking_participants(
        self, customer: User, provider: User, service_id: str, offers_service: bool
    ) -> None:
        """
        Validate the roles of the booking participants.

        Raises:
            RoleMismatchException: Customer lacks CUSTOMER or provider lacks PROVIDER
            ServiceNotOfferedException: Provider does not offer the service
        """
        if not customer.has_role(RoleName.CUSTOMER):
            raise RoleMismatchException(customer.id, RoleName.CUSTOMER.value)
        if not provider.has_role(RoleName.PROVIDER):
            raise RoleMismatchException(provider.id, RoleName.PROVIDER.value)
        if not offers_service:
            raise ServiceNotOfferedException(provider.id, service_id)
