# backend/service_booking/routes/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    POST /                          → Book a service
    GET /                           → All bookings, paged (administrator)
    GET /customer/{customer_id}     → A customer's bookings
    GET /provider/{provider_id}     → A provider's bookings, optionally within a range
    GET /{booking_id}               → One booking
    PUT /{booking_id}/status        → Change a booking's status
    POST /{booking_id}/cancel       → Cancel a booking
"""

import asyncio
from datetime import datetime
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from ..api.dependencies.auth import get_current_actor
from ..api.dependencies.services import get_booking_service
from ..core.enums import PermissionName
from ..core.exceptions import AccessDeniedException, DomainException
from ..principal import ActorPrincipal
from ..schemas.base import PageRequest, PaginatedResponse
from ..schemas.booking import BookingCancel, BookingCreate, BookingResponse, BookingStatusUpdate
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _resolve_customer_id(actor: ActorPrincipal, requested: Optional[str]) -> str:
    """Administrators may book on behalf of a customer; everyone else books for themselves."""
    if requested is None or requested == actor.user_id:
        return actor.user_id
    if actor.has_permission(PermissionName.MANAGE_ALL_BOOKINGS):
        return requested
    raise AccessDeniedException("You can only book for yourself")


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    booking_data: BookingCreate = Body(...),
    actor: ActorPrincipal = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Book a provider for a service.

    The booking is created in SCHEDULED status with the service price
    copied at this moment.
    """
    try:
        customer_id = _resolve_customer_id(actor, booking_data.customer_id)
        booking = await asyncio.to_thread(
            booking_service.book,
            customer_id,
            booking_data.provider_id,
            booking_data.service_id,
            booking_data.scheduled_at,
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=PaginatedResponse[BookingResponse])
async def list_bookings(
    page: int = Query(1, ge=1),
    size: Optional[int] = Query(None, ge=1),
    actor: ActorPrincipal = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[BookingResponse]:
    """
    List every booking on the platform.

    Requires: administrator role
    """
    try:
        page_request = PageRequest(page=page) if size is None else PageRequest(page=page, size=size)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        result = await asyncio.to_thread(booking_service.list_paged, page_request, actor)
        return PaginatedResponse[BookingResponse](
            items=[BookingResponse.from_booking(b) for b in result.items],
            total=result.total,
            page=result.page,
            per_page=result.size,
            has_next=result.has_next,
            has_prev=result.has_prev,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/customer/{customer_id}", response_model=List[BookingResponse])
async def list_customer_bookings(
    customer_id: str,
    actor: ActorPrincipal = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    """List a customer's bookings, earliest appointment first."""
    try:
        bookings = await asyncio.to_thread(booking_service.list_by_customer, customer_id, actor)
        return [BookingResponse.from_booking(b) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/provider/{provider_id}", response_model=List[BookingResponse])
async def list_provider_bookings(
    provider_id: str,
    start: Optional[datetime] = Query(None, description="Range start (inclusive)"),
    end: Optional[datetime] = Query(None, description="Range end (inclusive)"),
    actor: ActorPrincipal = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    """
    List a provider's bookings.

    Pass both ``start`` and ``end`` to get the agenda within that range.
    """
    if (start is None) != (end is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start and end must be given together",
        )
    try:
        if start is not None and end is not None:
            bookings = await asyncio.to_thread(
                booking_service.list_by_provider_between, provider_id, start, end, actor
            )
        else:
            bookings = await asyncio.to_thread(booking_service.list_by_provider, provider_id, actor)
        return [BookingResponse.from_booking(b) for b in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    actor: ActorPrincipal = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Get a booking the caller takes part in (administrators see all)."""
    try:
        booking = await asyncio.to_thread(booking_service.get_booking, booking_id, actor)
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    update_data: BookingStatusUpdate = Body(...),
    actor: ActorPrincipal = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Move a booking to a new status.

    Cancelling through this endpoint requires a reason and triggers the refund.
    """
    try:
        booking = await asyncio.to_thread(
            booking_service.update_status,
            booking_id,
            update_data.status,
            update_data.reason,
            actor,
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/cancel", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_booking(
    booking_id: str,
    cancel_data: BookingCancel = Body(...),
    actor: ActorPrincipal = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> Response:
    """Cancel a booking."""
    try:
        await asyncio.to_thread(booking_service.cancel, booking_id, cancel_data.reason, actor)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)
