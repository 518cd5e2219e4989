# backend/tutorhub/repositories/availability_repository.py
"""Data access for weekly teacher availability windows."""

import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import TeacherAvailability
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[TeacherAvailability]):
    def __init__(self, db: Session):
        super().__init__(db, TeacherAvailability)

    def get_for_teacher(self, teacher_id: str) -> List[TeacherAvailability]:
        """All windows for a teacher, ordered by weekday then start time."""
        query = (
            self._build_query()
            .filter(TeacherAvailability.teacher_id == teacher_id)
            .order_by(TeacherAvailability.day_of_week, TeacherAvailability.start_time)
        )
        return self._execute_query(query)

    def get_for_day(self, teacher_id: str, day_of_week: int) -> List[TeacherAvailability]:
        query = (
            self._build_query()
            .filter(
                TeacherAvailability.teacher_id == teacher_id,
                TeacherAvailability.day_of_week == day_of_week,
            )
            .order_by(TeacherAvailability.start_time)
        )
        return self._execute_query(query)

    def replace_for_teacher(
        self, teacher_id: str, windows: List[Dict[str, Any]]
    ) -> List[TeacherAvailability]:
        """
        Replace a teacher's windows with ``windows``.

        Does NOT commit; callers wrap this in a transaction.
        """
        try:
            self._build_query().filter(TeacherAvailability.teacher_id == teacher_id).delete(
                synchronize_session=False
            )
            rows = [TeacherAvailability(teacher_id=teacher_id, **window) for window in windows]
            self.db.add_all(rows)
            self.db.flush()
            return rows
        except SQLAlchemyError as e:
            self.logger.error(f"Error replacing availability for {teacher_id}: {str(e)}")
            raise RepositoryException(f"Failed to replace availability: {str(e)}")
