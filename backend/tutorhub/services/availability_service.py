# backend/tutorhub/services/availability_service.py
"""
Availability Service for the tutorhub platform.

Teachers publish weekly recurring windows; each window is one offerable
slot. The booking service asks this service whether a concrete interval
is covered before accepting a reservation.
"""

from datetime import datetime
import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.time_utils import day_of_week
from ..models.availability import TeacherAvailability
from ..repositories.availability_repository import AvailabilityRepository
from ..schemas.availability import AvailabilityWindowIn
from .base import BaseService

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    def __init__(self, db: Session, repository: Optional[AvailabilityRepository] = None):
        super().__init__(db)
        self.repository = repository or AvailabilityRepository(db)

    @BaseService.measure_operation("get_teacher_availability")
    def get_teacher_availability(self, teacher_id: str) -> List[TeacherAvailability]:
        return self.repository.get_for_teacher(teacher_id)

    @BaseService.measure_operation("replace_teacher_availability")
    def replace_teacher_availability(
        self, teacher_id: str, windows: Sequence[AvailabilityWindowIn]
    ) -> List[TeacherAvailability]:
        """Replace every window for ``teacher_id`` in one transaction."""
        self.log_operation(
            "replace_teacher_availability", teacher_id=teacher_id, count=len(windows)
        )
        with self.transaction():
            rows = self.repository.replace_for_teacher(
                teacher_id, [window.model_dump() for window in windows]
            )
        return rows

    def windows_on(self, teacher_id: str, when: datetime) -> List[TeacherAvailability]:
        """Windows published for the weekday of ``when``."""
        return self.repository.get_for_day(teacher_id, day_of_week(when.date()))

    def covers(self, teacher_id: str, start_time: datetime, end_time: datetime) -> bool:
        """Whether a single window contains the whole [start_time, end_time) interval."""
        return any(
            window.covers(start_time.time(), end_time.time())
            for window in self.windows_on(teacher_id, start_time)
        )
