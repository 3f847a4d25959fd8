# backend/service_booking/repositories/rbac_repository.py
"""
RBAC Repository for the service booking platform

Handles all Role-Based Access Control data operations including:
- Permission lookups and creation
- Role lookups and creation
- Role-permission grants
- User lookup for role assignment
"""

import logging
from typing import Optional, cast

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.rbac import Permission, Role
from ..models.user import User

logger = logging.getLogger(__name__)


class RBACRepository:
    """
    Repository for RBAC (Role-Based Access Control) data access.

    Unlike other repositories, this doesn't extend BaseRepository because
    it manages multiple related models (Permission, Role, User).
    """

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db
        self.logger = logging.getLogger(__name__)

    # ==========================================
    # Permission Operations
    # ==========================================

    def get_permission_by_name(self, name: str) -> Optional[Permission]:
        """Get a permission by its name."""
        try:
            result = self.db.query(Permission).filter_by(name=name).first()
            return cast(Optional[Permission], result)
        except Exception as e:
            self.logger.error(f"Error getting permission by name {name}: {str(e)}")
            raise RepositoryException(f"Failed to get permission: {str(e)}")

    def create_permission(self, name: str, description: Optional[str] = None) -> Permission:
        """Create a permission row. Does NOT commit."""
        permission = Permission(name=name, description=description)
        self.db.add(permission)
        self.db.flush()
        return permission

    # ==========================================
    # Role Operations
    # ==========================================

    def get_role_by_name(self, name: str) -> Optional[Role]:
        """Get a role by its name."""
        try:
            result = self.db.query(Role).filter_by(name=name).first()
            return cast(Optional[Role], result)
        except Exception as e:
            self.logger.error(f"Error getting role by name {name}: {str(e)}")
            raise RepositoryException(f"Failed to get role: {str(e)}")

    def create_role(self, name: str, description: Optional[str] = None) -> Role:
        """Create a role row. Does NOT commit."""
        role = Role(name=name, description=description)
        self.db.add(role)
        self.db.flush()
        return role

    def grant_permission_to_role(self, role: Role, permission: Permission) -> bool:
        """
        Attach a permission to a role.

        Returns:
            True if the grant was added, False if the role already had it
        """
        if any(existing.id == permission.id for existing in role.permissions):
            return False
        role.permissions.append(permission)
        self.db.flush()
        return True

    # ==========================================
    # User-Role Operations
    # ==========================================

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        """
        Get a user by ID for role operations.

        Note: This could use UserRepository, but included here to keep
        PermissionService simple with one repository dependency
        """
        try:
            result = self.db.query(User).filter_by(id=user_id).first()
            return cast(Optional[User], result)
        except Exception as e:
            self.logger.error(f"Error getting user by ID {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to get user: {str(e)}")
