# backend/service_booking/core/enums.py
"""
Core enums for the service booking platform.

Roles and permissions are closed enumerations. The database stores them by
value so they can be joined to users, but every authorization decision in the
code is made against these members rather than free-form strings.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable


class RoleName(str, Enum):
    """
    Roles an actor can hold.

    Roles are mutually compatible: a single actor may be a customer and a
    provider at the same time.
    """

    CUSTOMER = "customer"
    PROVIDER = "provider"
    ADMINISTRATOR = "administrator"


class PermissionName(str, Enum):
    """Permissions granted through roles."""

    # Administration
    MANAGE_USERS = "manage_users"
    MANAGE_SERVICES = "manage_services"
    VIEW_REPORTS = "view_reports"
    VIEW_ALL_BOOKINGS = "view_all_bookings"
    MANAGE_ALL_BOOKINGS = "manage_all_bookings"

    # Customer
    BOOK_SERVICE = "book_service"
    VIEW_APPOINTMENTS = "view_appointments"
    CANCEL_APPOINTMENT = "cancel_appointment"
    MAKE_PAYMENT = "make_payment"
    VIEW_SERVICES = "view_services"

    # Provider
    CONFIRM_EXECUTION = "confirm_execution"
    DEFINE_AVAILABILITY = "define_availability"


PERMISSION_DESCRIPTIONS: Dict[PermissionName, str] = {
    PermissionName.MANAGE_USERS: "Manage platform users",
    PermissionName.MANAGE_SERVICES: "Manage the service catalog",
    PermissionName.VIEW_REPORTS: "View management reports",
    PermissionName.VIEW_ALL_BOOKINGS: "View every booking on the platform",
    PermissionName.MANAGE_ALL_BOOKINGS: "Change the status of any booking",
    PermissionName.BOOK_SERVICE: "Book a service",
    PermissionName.VIEW_APPOINTMENTS: "View own appointments",
    PermissionName.CANCEL_APPOINTMENT: "Cancel an appointment",
    PermissionName.MAKE_PAYMENT: "Make a payment",
    PermissionName.VIEW_SERVICES: "Browse available services",
    PermissionName.CONFIRM_EXECUTION: "Confirm that a service was delivered",
    PermissionName.DEFINE_AVAILABILITY: "Define provider availability",
}


ROLE_PERMISSIONS: Dict[RoleName, FrozenSet[PermissionName]] = {
    RoleName.ADMINISTRATOR: frozenset(
        {
            PermissionName.MANAGE_USERS,
            PermissionName.MANAGE_SERVICES,
            PermissionName.VIEW_REPORTS,
            PermissionName.VIEW_ALL_BOOKINGS,
            PermissionName.MANAGE_ALL_BOOKINGS,
        }
    ),
    RoleName.CUSTOMER: frozenset(
        {
            PermissionName.BOOK_SERVICE,
            PermissionName.VIEW_APPOINTMENTS,
            PermissionName.CANCEL_APPOINTMENT,
            PermissionName.MAKE_PAYMENT,
            PermissionName.VIEW_SERVICES,
            PermissionName.VIEW_REPORTS,
        }
    ),
    RoleName.PROVIDER: frozenset(
        {
            PermissionName.CONFIRM_EXECUTION,
            PermissionName.DEFINE_AVAILABILITY,
            PermissionName.VIEW_APPOINTMENTS,
        }
    ),
}


def permissions_for_roles(roles: Iterable[RoleName]) -> FrozenSet[PermissionName]:
    """Return the union of the permissions granted by ``roles``."""
    granted: set[PermissionName] = set()
    for role in roles:
        granted |= ROLE_PERMISSIONS.get(role, frozenset())
    return frozenset(granted)
