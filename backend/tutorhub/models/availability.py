# backend/tutorhub/models/availability.py
"""
Weekly recurring availability windows.

Each row is one offerable slot on a weekday (Sunday=0 .. Saturday=6).
Windows on the same day may touch or overlap; they are independent slots.
"""

from datetime import time
from typing import Any, cast

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String, Time
from sqlalchemy.sql import func
import ulid

from ..core.time_utils import format_time_slot
from ..database import Base


class TeacherAvailability(Base):
    """A recurring weekly window in which a teacher accepts lessons."""

    __tablename__ = "teacher_availability"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    teacher_id = Column(String(26), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
        Index("ix_availability_teacher_day", "teacher_id", "day_of_week"),
    )

    def __repr__(self) -> str:
        return (
            f"<TeacherAvailability {self.id}: teacher={self.teacher_id}, "
            f"day={self.day_of_week}, {self.start_time}-{self.end_time}>"
        )

    @property
    def time_slot(self) -> str:
        return format_time_slot(cast(time, self.start_time), cast(time, self.end_time))

    def covers(self, start: time, end: time) -> bool:
        """Whether [start, end) lies inside this window."""
        return cast(time, self.start_time) <= start and end <= cast(time, self.end_time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "teacher_id": self.teacher_id,
            "day_of_week": self.day_of_week,
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
        }
