# backend/tutorhub/booking_flow/availability_index.py
"""
Availability Index: which slots does a teacher offer on a date.

Pure lookup over a snapshot of weekly windows. Dates in the past or past
the booking horizon have no slots.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..core.config import settings
from ..core.time_utils import day_of_week
from .models import AvailabilityWindow, Slot


class AvailabilityIndex:
    def __init__(
        self,
        windows: Iterable[AvailabilityWindow] = (),
        *,
        horizon_days: Optional[int] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.horizon_days = (
            horizon_days if horizon_days is not None else settings.booking_horizon_days
        )
        self._today = today or date.today
        self._windows: Dict[str, Tuple[AvailabilityWindow, ...]] = {}
        grouped: Dict[str, List[AvailabilityWindow]] = {}
        for window in windows:
            grouped.setdefault(window.teacher_id, []).append(window)
        for teacher_id, teacher_windows in grouped.items():
            self.load(teacher_id, teacher_windows)

    def load(self, teacher_id: str, windows: Iterable[AvailabilityWindow]) -> None:
        """Replace the snapshot for one teacher."""
        self._windows[teacher_id] = tuple(
            sorted(
                (w for w in windows if w.teacher_id == teacher_id),
                key=lambda w: (w.day_of_week, w.start_time, w.end_time),
            )
        )

    def windows_for(self, teacher_id: str) -> Tuple[AvailabilityWindow, ...]:
        return self._windows.get(teacher_id, ())

    def is_bookable_date(self, on_date: date) -> bool:
        today = self._today()
        return today <= on_date <= today + timedelta(days=self.horizon_days)

    def slots_for(self, teacher_id: str, on_date: date) -> List[Slot]:
        """Concrete slots on ``on_date``, earliest first. Empty when nothing is offered."""
        if not self.is_bookable_date(on_date):
            return []
        weekday = day_of_week(on_date)
        slots: List[Slot] = []
        seen = set()
        for window in self.windows_for(teacher_id):
            if window.day_of_week != weekday:
                continue
            key = (window.start_time, window.end_time)
            if key in seen:
                continue
            seen.add(key)
            slots.append(
                Slot(
                    start=datetime.combine(on_date, window.start_time),
                    end=datetime.combine(on_date, window.end_time),
                )
            )
        return slots

    def offers(self, teacher_id: str, on_date: date, time_slot: str) -> bool:
        return any(slot.label == time_slot for slot in self.slots_for(teacher_id, on_date))

    def bookable_dates(self, teacher_id: str) -> List[date]:
        """Dates within the horizon on which the teacher has at least one slot."""
        days = {w.day_of_week for w in self.windows_for(teacher_id)}
        today = self._today()
        candidates = (today + timedelta(days=offset) for offset in range(self.horizon_days + 1))
        return [d for d in candidates if day_of_week(d) in days]
