"""
Tests for PermissionService actor resolution and role management.
"""

import pytest

from service_booking.core.enums import PermissionName, RoleName
from service_booking.services.permission_service import PermissionService


@pytest.fixture
def permission_service(db) -> PermissionService:
    return PermissionService(db)


class TestGetActor:
    def test_actor_carries_roles_and_role_permissions(self, permission_service, customer):
        actor = permission_service.get_actor(customer.id)

        assert actor.user_id == customer.id
        assert actor.is_customer
        assert not actor.is_provider
        assert not actor.is_administrator
        assert actor.has_permission(PermissionName.BOOK_SERVICE)
        assert not actor.has_permission(PermissionName.MANAGE_ALL_BOOKINGS)

    def test_dual_role_actor_gets_union_of_permissions(self, permission_service, user_factory):
        dual = user_factory(RoleName.CUSTOMER, RoleName.PROVIDER, first_name="Dana")

        actor = permission_service.get_actor(dual.id)

        assert actor.is_customer and actor.is_provider
        assert actor.has_permission(PermissionName.CANCEL_APPOINTMENT)
        assert actor.has_permission(PermissionName.CONFIRM_EXECUTION)

    def test_unknown_user_has_no_actor(self, permission_service):
        assert permission_service.get_actor("01HZZZZZZZZZZZZZZZZZZZZZZZ") is None

    def test_inactive_user_has_no_actor(self, permission_service, user_factory):
        inactive = user_factory(RoleName.CUSTOMER, first_name="Ivy", is_active=False)
        assert permission_service.get_actor(inactive.id) is None


class TestRoleManagement:
    def test_assign_and_remove_role(self, permission_service, customer):
        assert permission_service.assign_role(customer.id, RoleName.PROVIDER) is True
        assert permission_service.get_user_roles(customer.id) == ["customer", "provider"]
        assert permission_service.user_has_permission(customer.id, PermissionName.CONFIRM_EXECUTION)

        assert permission_service.remove_role(customer.id, "provider") is True
        assert permission_service.get_user_roles(customer.id) == ["customer"]
        assert not permission_service.user_has_permission(
            customer.id, PermissionName.CONFIRM_EXECUTION
        )

    def test_assigning_held_role_is_a_no_op(self, permission_service, customer):
        assert permission_service.assign_role(customer.id, RoleName.CUSTOMER) is False

    def test_unknown_role_or_user_is_rejected(self, permission_service, customer):
        assert permission_service.assign_role(customer.id, "superuser") is False
        assert permission_service.assign_role("01HZZZZZZZZZZZZZZZZZZZZZZZ", RoleName.CUSTOMER) is False
        assert permission_service.remove_role(customer.id, RoleName.ADMINISTRATOR) is False

    def test_permission_checks_are_cached_until_roles_change(self, permission_service, customer):
        assert not permission_service.user_has_permission(customer.id, "view_all_bookings")
        assert f"{customer.id}:view_all_bookings" in permission_service._cache

        permission_service.assign_role(customer.id, RoleName.ADMINISTRATOR)

        assert f"{customer.id}:view_all_bookings" not in permission_service._cache
        assert permission_service.user_has_permission(customer.id, "view_all_bookings")

    def test_get_user_permissions(self, permission_service, provider):
        assert permission_service.get_user_permissions(provider.id) == {
            "confirm_execution",
            "define_availability",
            "view_appointments",
        }
