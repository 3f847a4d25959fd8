# backend/service_booking/models/rbac.py
"""
Role-Based Access Control models for the service booking platform.

Roles group permissions; an actor's permission set is the union of the
permissions of every role it holds.

Classes:
    Role: User roles for grouping permissions
    Permission: Individual permissions that can be granted
    UserRole: Junction table for user-to-role mapping
    RolePermission: Junction table for role-to-permission mapping
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Role(Base):
    """
    User roles for access control.

    Attributes:
        id: Primary key
        name: Unique role name, one of ``RoleName``
        description: Human-readable description of the role
        created_at: Role creation timestamp

    Relationships:
        permissions: Permissions granted by this role
    """

    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # One-directional; permissions are loaded explicitly with joinedload where needed
    permissions: Mapped[List["Permission"]] = relationship(
        secondary="role_permissions",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<Role {self.name}>"


class Permission(Base):
    """
    System permissions for granular access control.

    Attributes:
        id: Primary key
        name: Unique permission name, one of ``PermissionName``
        description: Human-readable description
        created_at: Permission creation timestamp
    """

    __tablename__ = "permissions"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Permission {self.name}>"


class UserRole(Base):
    """
    Junction table for user-to-role mapping.

    Attributes:
        user_id: Foreign key to users table
        role_id: Foreign key to roles table
        assigned_at: Timestamp when the role was assigned
    """

    __tablename__ = "user_roles"

    user_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    role_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class RolePermission(Base):
    """Junction table for role-to-permission mapping."""

    __tablename__ = "role_permissions"

    role_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    )
    permission_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True
    )
