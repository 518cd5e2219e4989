# backend/tutorhub/repositories/booking_repository.py
"""
Booking Repository for the tutorhub platform

Conflict queries work on the booking's own start/end datetimes; only
RESERVED and CONFIRMED bookings hold a slot.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.booking import ACTIVE_STATUSES, Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def get_overlapping(
        self,
        teacher_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Active bookings for ``teacher_id`` overlapping [start_time, end_time).

        Args:
            teacher_id: The teacher to check
            start_time: Start of the requested interval
            end_time: End of the requested interval
            exclude_booking_id: Optional booking ID to exclude from results

        Returns:
            Overlapping bookings, earliest first
        """
        query = self._build_query().filter(
            Booking.teacher_id == teacher_id,
            Booking.status.in_(ACTIVE_STATUSES),
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return self._execute_query(query.order_by(Booking.start_time))
