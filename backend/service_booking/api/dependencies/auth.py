# backend/service_booking/api/dependencies/auth.py
"""
Actor resolution dependencies.

Authentication happens upstream; by the time a request reaches this service
the gateway has verified the caller and forwarded their user id in the
``X-Actor-Id`` header. These dependencies turn that id into an
``ActorPrincipal`` with roles and permissions loaded from the database.
"""

import asyncio
import logging
from typing import Optional

from fastapi import Depends, Header

from ...core.exceptions import UnauthorizedException
from ...principal import ActorPrincipal
from ...services.permission_service import PermissionService
from .services import get_permission_service

logger = logging.getLogger(__name__)

ACTOR_HEADER = "X-Actor-Id"


async def get_current_actor(
    actor_id: Optional[str] = Header(None, alias=ACTOR_HEADER),
    permission_service: PermissionService = Depends(get_permission_service),
) -> ActorPrincipal:
    """
    Resolve the acting user.

    Raises:
        UnauthorizedException: The header is missing or names no active user
    """
    if not actor_id or not actor_id.strip():
        raise UnauthorizedException("Not authenticated", code="Unauthenticated")

    actor = await asyncio.to_thread(permission_service.get_actor, actor_id.strip())
    if actor is None:
        logger.info(f"Rejected request for unknown or inactive actor {actor_id}")
        raise UnauthorizedException("Unknown actor", code="UnknownActor")
    return actor

