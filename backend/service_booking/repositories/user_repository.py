# backend/service_booking/repositories/user_repository.py
"""
User Repository for the service booking platform

Handles User data access: basic lookups and eager loading of the
role/permission graph that authorization decisions are built from.
"""

import logging
from typing import List, Optional, Sequence, cast

from sqlalchemy.orm import Session, joinedload

from ..core.enums import RoleName
from ..core.exceptions import RepositoryException
from ..models.rbac import Role
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for User data access.

    Used by:
    - PermissionService (actor resolution with roles)
    - BookingService (customer/provider lookups)
    - Seeding of the administrator account
    """

    def __init__(self, db: Session):
        """Initialize with User model."""
        super().__init__(db, User)
        self.logger = logging.getLogger(__name__)

    # ==========================================
    # Basic Lookups
    # ==========================================

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)."""
        try:
            return cast(
                Optional[User],
                self.db.query(User).filter(User.email == email.strip().lower()).first(),
            )
        except Exception as e:
            self.logger.error(f"Error getting user by email {email}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve user by email: {str(e)}")

    def get_by_ids(self, user_ids: Sequence[str]) -> List[User]:
        """Bulk lookup, ignoring unknown IDs."""
        if not user_ids:
            return []
        try:
            return cast(List[User], self.db.query(User).filter(User.id.in_(list(user_ids))).all())
        except Exception as e:
            self.logger.error(f"Error getting users by IDs: {str(e)}")
            raise RepositoryException(f"Failed to retrieve users: {str(e)}")

    # ==========================================
    # With Relationships
    # ==========================================

    def get_with_roles_and_permissions(self, user_id: str) -> Optional[User]:
        """
        Get user with eager loaded roles and permissions.

        Used by: PermissionService.get_actor()
        """
        try:
            return cast(
                Optional[User],
                (
                    self.db.query(User)
                    .options(joinedload(User.roles).joinedload(Role.permissions))
                    .filter(User.id == user_id)
                    .first()
                ),
            )
        except Exception as e:
            self.logger.error(f"Error getting user with roles/permissions {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve user with permissions: {str(e)}")

    def get_with_roles(self, user_id: str) -> Optional[User]:
        """
        Get user with roles only (lighter query).

        Used by: BookingService participant checks, PermissionService.get_user_roles()
        """
        try:
            return cast(
                Optional[User],
                (
                    self.db.query(User)
                    .options(joinedload(User.roles))
                    .filter(User.id == user_id)
                    .first()
                ),
            )
        except Exception as e:
            self.logger.error(f"Error getting user with roles {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve user with roles: {str(e)}")

    # ==========================================
    # Role-Specific Queries
    # ==========================================

    def list_ids_with_role(self, role: RoleName) -> List[str]:
        """Return IDs of every user holding ``role``."""
        try:
            rows = (
                self.db.query(User.id)
                .join(User.roles)
                .filter(Role.name == role.value)
                .order_by(User.id)
                .all()
            )
            return [row[0] for row in rows]
        except Exception as e:
            self.logger.error(f"Error listing users with role {role.value}: {str(e)}")
            raise RepositoryException(f"Failed to list users by role: {str(e)}")
