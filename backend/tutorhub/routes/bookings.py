# backend/tutorhub/routes/bookings.py
"""
Booking routes.

All business logic delegated to BookingService.

Endpoints:
    POST /bookings - Reserve a slot (authoritative conflict gate)
    POST /bookings/check-availability - Advisory slot probe, never writes
    GET /bookings/{booking_id} - Booking details
"""

import logging

from fastapi import APIRouter, Body, Depends, status

from ..api.dependencies import get_booking_service
from ..core.exceptions import DomainException
from ..schemas.booking import (
    BookingCreate,
    BookingCreateResponse,
    BookingResponse,
    SlotProbeRequest,
    SlotProbeResponse,
)
from ..services.booking_service import BookingService
from . import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post(
    "/check-availability",
    response_model=SlotProbeResponse,
)
async def check_availability(
    probe: SlotProbeRequest = Body(...),
    booking_service: BookingService = Depends(get_booking_service),
) -> SlotProbeResponse:
    """
    Check whether a slot still looks free.

    The answer is advisory. Only ``POST /bookings`` decides.
    """
    try:
        return booking_service.probe_slot(probe)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "",
    response_model=BookingCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    booking_data: BookingCreate = Body(...),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingCreateResponse:
    try:
        booking = booking_service.create_booking(booking_data)
        return BookingCreateResponse(
            booking_id=booking.id,
            status=booking.status,
            teacher_id=booking.teacher_id,
            start_time=booking.start_time,
            end_time=booking.end_time,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        return BookingResponse.model_validate(booking_service.get_booking(booking_id))
    except DomainException as e:
        handle_domain_exception(e)
