# backend/tutorhub/routes/availability.py
"""
Teacher availability routes.

Endpoints:
    GET /teachers/{teacher_id}/availability - Weekly windows for a teacher
    PUT /teachers/{teacher_id}/availability - Replace a teacher's windows
"""

import logging
from typing import List

from fastapi import APIRouter, Body, Depends, status

from ..api.dependencies import get_availability_service
from ..core.exceptions import DomainException
from ..schemas.availability import AvailabilityReplaceRequest, AvailabilityWindowOut
from ..services.availability_service import AvailabilityService
from . import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability"])


@router.get(
    "/teachers/{teacher_id}/availability",
    response_model=List[AvailabilityWindowOut],
)
async def get_teacher_availability(
    teacher_id: str,
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[AvailabilityWindowOut]:
    try:
        windows = availability_service.get_teacher_availability(teacher_id)
        return [AvailabilityWindowOut.model_validate(window) for window in windows]
    except DomainException as e:
        handle_domain_exception(e)


@router.put(
    "/teachers/{teacher_id}/availability",
    response_model=List[AvailabilityWindowOut],
    status_code=status.HTTP_200_OK,
)
async def replace_teacher_availability(
    teacher_id: str,
    payload: AvailabilityReplaceRequest = Body(...),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[AvailabilityWindowOut]:
    """Replace every weekly window for the teacher."""
    try:
        windows = availability_service.replace_teacher_availability(teacher_id, payload.windows)
        return [AvailabilityWindowOut.model_validate(window) for window in windows]
    except DomainException as e:
        handle_domain_exception(e)
