# backend/service_booking/models/user.py
"""
User model for the service booking platform.

A single ``User`` row represents every actor: customers, providers and
administrators are told apart by their roles, not by separate tables.
"""

import logging
from typing import FrozenSet

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import RoleName
from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """
    Authenticated actor.

    Attributes:
        id: Primary key (ULID)
        email: Unique email address
        first_name: User's first name
        last_name: User's last name
        is_active: Whether the user account is active
        created_at: Account creation timestamp
        updated_at: Last update timestamp

    Relationships:
        roles: Many-to-many with Role through the user_roles table
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Bookings are deliberately not mapped here; they are queried by id
    roles = relationship("Role", secondary="user_roles", lazy="select")

    def __repr__(self) -> str:
        return f"<User {self.email}>"

    @property
    def role_names(self) -> FrozenSet[RoleName]:
        """Roles held by this user, ignoring rows that no longer name a known role."""
        names = set()
        for role in self.roles:
            try:
                names.add(RoleName(role.name))
            except ValueError:
                logger.warning("User %s holds unknown role %s", self.id, role.name)
        return frozenset(names)

    def has_role(self, role: RoleName) -> bool:
        return role in self.role_names
