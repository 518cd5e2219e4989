# backend/tutorhub/services/booking_service.py
"""
Booking Service for the tutorhub platform.

The store is the only authority on whether a slot is taken. Creation
runs three gates in order: the interval must be in the future and
covered by one of the teacher's windows, no active booking may overlap
it, and the partial unique index on (teacher_id, start_time, end_time)
rejects whichever of two racing inserts commits second.

Lesson times are the teacher's wall-clock times and are stored naive.
"""

from datetime import datetime
import logging
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    BookingConflictException,
    BusinessRuleException,
    NotFoundException,
    OutsideAvailabilityException,
    RepositoryException,
)
from ..core.time_utils import slot_bounds
from ..models.booking import UNIQUE_INTERVAL_INDEX, Booking
from ..repositories.booking_repository import BookingRepository
from ..schemas.booking import BookingCreate, SlotProbeRequest, SlotProbeResponse
from .availability_service import AvailabilityService
from .base import BaseService

logger = logging.getLogger(__name__)

ALREADY_BOOKED_MESSAGE = "This time slot is already booked"
GENERIC_CONFLICT_MESSAGE = "This time slot conflicts with an existing booking"
PAST_SLOT_MESSAGE = "Cannot book a time slot in the past"
NOT_AVAILABLE_ON_DAY_MESSAGE = "Teacher not available on this day"
OUTSIDE_AVAILABILITY_MESSAGE = "Time slot outside teacher's availability"


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None) if value.tzinfo is not None else value


class BookingService(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[BookingRepository] = None,
        availability_service: Optional[AvailabilityService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(db)
        self.repository = repository or BookingRepository(db)
        self.availability_service = availability_service or AvailabilityService(db)
        self._clock = clock or datetime.now

    def _build_conflict_details(
        self, teacher_id: str, start_time: datetime, end_time: datetime
    ) -> Dict[str, Any]:
        return {
            "teacher_id": teacher_id,
            "start_time": start_time.isoformat(),
            "end_time": end_time.isoformat(),
        }

    def _availability_problem(
        self, teacher_id: str, start_time: datetime, end_time: datetime
    ) -> Optional[str]:
        """Reason the interval cannot be offered, or None if a window covers it."""
        windows = self.availability_service.windows_on(teacher_id, start_time)
        if not windows:
            return NOT_AVAILABLE_ON_DAY_MESSAGE
        if not any(w.covers(start_time.time(), end_time.time()) for w in windows):
            return OUTSIDE_AVAILABILITY_MESSAGE
        return None

    def _is_interval_conflict(self, exc: RepositoryException) -> bool:
        cause = str(exc.__cause__ or exc)
        return UNIQUE_INTERVAL_INDEX in cause or "bookings.teacher_id" in cause

    @BaseService.measure_operation("create_booking")
    def create_booking(self, booking_data: BookingCreate) -> Booking:
        """
        Reserve a slot.

        Args:
            booking_data: Teacher, student and concrete interval

        Returns:
            The new booking in RESERVED state

        Raises:
            BusinessRuleException: If the interval starts in the past
            OutsideAvailabilityException: If no window covers the interval
            BookingConflictException: If the slot is already taken
        """
        start_time = _naive(booking_data.start_time)
        end_time = _naive(booking_data.end_time)
        teacher_id = booking_data.teacher_id
        self.log_operation(
            "create_booking",
            teacher_id=teacher_id,
            student_id=booking_data.student_id,
            start_time=start_time.isoformat(),
        )

        if start_time < self._clock():
            raise BusinessRuleException(PAST_SLOT_MESSAGE, code="SLOT_IN_PAST")

        problem = self._availability_problem(teacher_id, start_time, end_time)
        if problem:
            raise OutsideAvailabilityException(
                problem, details=self._build_conflict_details(teacher_id, start_time, end_time)
            )

        details = self._build_conflict_details(teacher_id, start_time, end_time)
        if self.repository.get_overlapping(teacher_id, start_time, end_time):
            raise BookingConflictException(ALREADY_BOOKED_MESSAGE, details=details)

        try:
            with self.transaction():
                booking = self.repository.create(
                    teacher_id=teacher_id,
                    student_id=booking_data.student_id,
                    start_time=start_time,
                    end_time=end_time,
                )
        except RepositoryException as exc:
            if self._is_interval_conflict(exc):
                self.logger.info("Unique interval index rejected booking", extra=details)
                raise BookingConflictException(GENERIC_CONFLICT_MESSAGE, details=details) from exc
            raise

        self.logger.info(f"Booking {booking.id} reserved for teacher {teacher_id}")
        return booking

    @BaseService.measure_operation("probe_slot")
    def probe_slot(self, request: SlotProbeRequest) -> SlotProbeResponse:
        """Advisory answer from the same checks ``create_booking`` runs. Never writes."""
        start_time, end_time = slot_bounds(request.date, request.time_slot)

        if start_time < self._clock():
            return SlotProbeResponse(available=False, reason=PAST_SLOT_MESSAGE)

        problem = self._availability_problem(request.teacher_id, start_time, end_time)
        if problem:
            return SlotProbeResponse(available=False, reason=problem)

        if self.repository.get_overlapping(request.teacher_id, start_time, end_time):
            return SlotProbeResponse(available=False, reason=ALREADY_BOOKED_MESSAGE)

        return SlotProbeResponse(available=True)

    @BaseService.measure_operation("get_booking")
    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
        return booking
