# backend/service_booking/init_db.py
"""
Create the schema and seed roles, permissions and the administrator account.

Seeding is idempotent: rows that already exist are left alone and only
missing permissions, roles, grants and the administrator are added.

Usage:
    python -m service_booking.init_db
"""

import logging
from typing import Dict, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from . import models  # noqa: F401  (registers every table on Base.metadata)
from .core.config import settings
from .core.enums import PERMISSION_DESCRIPTIONS, ROLE_PERMISSIONS, PermissionName, RoleName
from .database import Base, SessionLocal, engine as default_engine
from .models.user import User
from .repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)

ROLE_DESCRIPTIONS: Dict[RoleName, str] = {
    RoleName.ADMINISTRATOR: "Platform administrator",
    RoleName.CUSTOMER: "Books services",
    RoleName.PROVIDER: "Delivers booked services",
}


def create_tables(bind: Optional[Engine] = None) -> None:
    """Create every table that does not exist yet."""
    Base.metadata.create_all(bind=bind or default_engine)


def seed_roles_and_permissions(db: Session, with_admin: bool = True) -> Dict[str, int]:
    """
    Ensure every permission and role exists with its configured grants.

    Args:
        db: Database session (committed on success)
        with_admin: Also ensure the administrator account from settings

    Returns:
        Dictionary with statistics: {
            'permissions_created': int,
            'roles_created': int,
            'grants_created': int,
            'admin_created': int
        }
    """
    rbac = RepositoryFactory.create_rbac_repository(db)
    stats = {"permissions_created": 0, "roles_created": 0, "grants_created": 0, "admin_created": 0}

    try:
        permissions = {}
        for permission_name in PermissionName:
            permission = rbac.get_permission_by_name(permission_name.value)
            if permission is None:
                permission = rbac.create_permission(
                    permission_name.value, PERMISSION_DESCRIPTIONS.get(permission_name)
                )
                stats["permissions_created"] += 1
            permissions[permission_name] = permission

        for role_name, granted in ROLE_PERMISSIONS.items():
            role = rbac.get_role_by_name(role_name.value)
            if role is None:
                role = rbac.create_role(role_name.value, ROLE_DESCRIPTIONS.get(role_name))
                stats["roles_created"] += 1
            for permission_name in sorted(granted, key=lambda p: p.value):
                if rbac.grant_permission_to_role(role, permissions[permission_name]):
                    stats["grants_created"] += 1

        if with_admin and ensure_admin_user(db):
            stats["admin_created"] = 1

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Seeded RBAC: %d permissions, %d roles, %d grants created",
        stats["permissions_created"],
        stats["roles_created"],
        stats["grants_created"],
    )
    return stats


def ensure_admin_user(db: Session) -> bool:
    """
    Make sure the configured administrator exists and holds the role.

    Returns:
        True if the user was created. Does NOT commit.
    """
    users = RepositoryFactory.create_user_repository(db)
    rbac = RepositoryFactory.create_rbac_repository(db)
    admin_role = rbac.get_role_by_name(RoleName.ADMINISTRATOR.value)

    email = settings.admin_email.strip().lower()
    admin = users.get_by_email(email)
    created = False
    if admin is None:
        admin = User(
            email=email,
            first_name=settings.admin_first_name,
            last_name=settings.admin_last_name,
            is_active=True,
        )
        db.add(admin)
        db.flush()
        created = True
        logger.info(f"Created administrator account {email}")

    if admin_role is not None and admin_role not in admin.roles:
        admin.roles.append(admin_role)
        db.flush()

    return created


def init_db(bind: Optional[Engine] = None) -> Dict[str, int]:
    """Create tables and seed them in one go."""
    create_tables(bind)
    db = SessionLocal(bind=bind) if bind is not None else SessionLocal()
    try:
        return seed_roles_and_permissions(db)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(
        level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    result = init_db()
    logger.info(f"Database initialised: {result}")
