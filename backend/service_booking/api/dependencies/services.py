# backend/service_booking/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.booking_service import BookingService
from ...services.permission_service import PermissionService
from ...services.refund_service import LoggingRefundGateway, RefundGateway
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_refund_gateway() -> RefundGateway:
    """Get the process-wide refund collaborator."""
    return LoggingRefundGateway()


def get_permission_service(db: Session = Depends(get_db)) -> PermissionService:
    """Get PermissionService instance."""
    return PermissionService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    refund_gateway: RefundGateway = Depends(get_refund_gateway),
) -> BookingService:
    """
    Get booking service instance with all dependencies.

    Args:
        db: Database session
        refund_gateway: Refund collaborator called after cancellations
    """
    return BookingService(db, refund_gateway=refund_gateway)
