"""Principal abstraction for the actor performing a booking operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, FrozenSet, Iterable

from .core.enums import PermissionName, RoleName, permissions_for_roles

if TYPE_CHECKING:
    from .models.user import User


@dataclass(frozen=True)
class ActorPrincipal:
    """
    Immutable view of an authenticated actor.

    Built once per request from the user row and its roles; authorization
    decisions only ever look at this value.
    """

    user_id: str
    roles: FrozenSet[RoleName] = frozenset()
    permissions: FrozenSet[PermissionName] = field(default=frozenset())

    @classmethod
    def from_roles(cls, user_id: str, roles: Iterable[RoleName]) -> ActorPrincipal:
        role_set = frozenset(roles)
        return cls(user_id=user_id, roles=role_set, permissions=permissions_for_roles(role_set))

    @classmethod
    def from_user(cls, user: User) -> ActorPrincipal:
        """Build from a user whose roles and role permissions are loaded."""
        permissions = set()
        for role in user.roles:
            for permission in role.permissions:
                try:
                    permissions.add(PermissionName(permission.name))
                except ValueError:
                    continue
        return cls(user_id=user.id, roles=user.role_names, permissions=frozenset(permissions))

    @property
    def id(self) -> str:
        return self.user_id

    @property
    def is_administrator(self) -> bool:
        return RoleName.ADMINISTRATOR in self.roles

    @property
    def is_provider(self) -> bool:
        return RoleName.PROVIDER in self.roles

    @property
    def is_customer(self) -> bool:
        return RoleName.CUSTOMER in self.roles

    def has_role(self, role: RoleName) -> bool:
        return role in self.roles

    def has_permission(self, permission: PermissionName) -> bool:
        return permission in self.permissions
