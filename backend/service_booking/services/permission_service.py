# backend/service_booking/services/permission_service.py
"""
Permission service for Role-Based Access Control.

Resolves actors into ``ActorPrincipal`` values and manages role
assignment. An actor's permissions are exactly the union of the
permissions of the roles they hold; there are no per-user overrides.
"""

from typing import TYPE_CHECKING, Dict, List, Optional, Set, Union

from sqlalchemy.orm import Session

from ..core.enums import PermissionName, RoleName
from ..principal import ActorPrincipal
from ..repositories.factory import RepositoryFactory
from .base import BaseService

if TYPE_CHECKING:
    from ..repositories.rbac_repository import RBACRepository
    from ..repositories.user_repository import UserRepository


class PermissionService(BaseService):
    """
    Service for resolving actors and managing their roles.

    Includes simple in-memory caching of permission checks for the lifetime
    of the service instance (one request).
    """

    def __init__(self, db: Session):
        """Initialize the service with database session and repositories."""
        super().__init__(db)
        self._cache: Dict[str, bool] = {}
        self.user_repository: "UserRepository" = RepositoryFactory.create_user_repository(db)
        self.rbac_repository: "RBACRepository" = RepositoryFactory.create_rbac_repository(db)

    @BaseService.measure_operation("get_actor")
    def get_actor(self, user_id: str) -> Optional[ActorPrincipal]:
        """
        Build the principal for an active user.

        Args:
            user_id: The ID of the acting user

        Returns:
            ActorPrincipal, or None if the user is unknown or inactive
        """
        user = self.user_repository.get_with_roles_and_permissions(user_id)
        if not user or not user.is_active:
            return None
        return ActorPrincipal.from_user(user)

    @BaseService.measure_operation("user_has_permission")
    def user_has_permission(
        self, user_id: str, permission_name: Union[str, PermissionName]
    ) -> bool:
        """
        Check if a user has a specific permission through any of their roles.

        Args:
            user_id: The ID of the user to check
            permission_name: The name of the permission to check (string or enum)
        """
        permission_str = (
            permission_name.value
            if isinstance(permission_name, PermissionName)
            else permission_name
        )

        cache_key = f"{user_id}:{permission_str}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        granted = permission_str in self.get_user_permissions(user_id)
        self._cache[cache_key] = granted
        return granted

    @BaseService.measure_operation("get_user_permissions")
    def get_user_permissions(self, user_id: str) -> Set[str]:
        """
        Get all permission names a user holds through their roles.

        Args:
            user_id: The ID of the user
        """
        user = self.user_repository.get_with_roles_and_permissions(user_id)

        if not user:
            return set()

        permissions = set()
        for role in user.roles:
            for permission in role.permissions:
                permissions.add(permission.name)

        return permissions

    @BaseService.measure_operation("get_user_roles")
    def get_user_roles(self, user_id: str) -> List[str]:
        """
        Get all role names for a user.

        Args:
            user_id: The ID of the user
        """
        user = self.user_repository.get_with_roles(user_id)

        if not user:
            return []

        return sorted(role.name for role in user.roles)

    @BaseService.measure_operation("assign_role")
    def assign_role(self, user_id: str, role_name: Union[str, RoleName]) -> bool:
        """
        Assign a role to a user.

        Args:
            user_id: The ID of the user
            role_name: The name of the role to assign

        Returns:
            True if successful, False if role doesn't exist or user already has it
        """
        role_str = role_name.value if isinstance(role_name, RoleName) else role_name

        with self.transaction():
            user = self.rbac_repository.get_user_by_id(user_id)
            role = self.rbac_repository.get_role_by_name(role_str)

            if not user or not role:
                return False

            if role in user.roles:
                return False

            user.roles.append(role)

        self._clear_user_cache(user_id)
        self.log_operation("assign_role", user_id=user_id, role=role_str)
        return True

    @BaseService.measure_operation("remove_role")
    def remove_role(self, user_id: str, role_name: Union[str, RoleName]) -> bool:
        """
        Remove a role from a user.

        Args:
            user_id: The ID of the user
            role_name: The name of the role to remove

        Returns:
            True if successful, False if role doesn't exist or user doesn't have it
        """
        role_str = role_name.value if isinstance(role_name, RoleName) else role_name

        with self.transaction():
            user = self.rbac_repository.get_user_by_id(user_id)
            role = self.rbac_repository.get_role_by_name(role_str)

            if not user or not role:
                return False

            if role not in user.roles:
                return False

            user.roles.remove(role)

        self._clear_user_cache(user_id)
        self.log_operation("remove_role", user_id=user_id, role=role_str)
        return True

    def _clear_user_cache(self, user_id: str) -> None:
        """Clear all cached entries for a specific user."""
        keys_to_remove = [k for k in self._cache.keys() if k.startswith(f"{user_id}:")]
        for key in keys_to_remove:
            del self._cache[key]
