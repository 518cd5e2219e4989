# backend/tutorhub/repositories/payment_repository.py
"""Data access for submitted payment evidence."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.payment import Payment, PaymentReviewStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    def __init__(self, db: Session):
        super().__init__(db, Payment)

    def get_for_booking(self, booking_id: str) -> Optional[Payment]:
        return self.find_one_by(booking_id=booking_id)

    def get_pending(self, limit: int = 100) -> List[Payment]:
        """Payments awaiting admin review, oldest first."""
        query = (
            self._build_query()
            .filter(Payment.status == PaymentReviewStatus.PENDING.value)
            .order_by(Payment.created_at)
            .limit(limit)
        )
        return self._execute_query(query)
