# backend/tutorhub/models/booking.py
"""
Booking model for the tutorhub platform.

A booking is created in RESERVED state the moment the store accepts it;
the slot is held from then on. Admin review of the attached payment moves
it to CONFIRMED or CANCELLED. Bookings are never deleted.

At most one non-cancelled booking may exist per exact
(teacher_id, start_time, end_time). The partial unique index below is the
final arbiter when two students race for the same slot.
"""

from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any, Optional

from sqlalchemy import CheckConstraint, Column, DateTime, Index, String, Text, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)

UNIQUE_INTERVAL_INDEX = "uq_bookings_teacher_interval"


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    RESERVED = "RESERVED"  # Slot held, awaiting payment review
    CONFIRMED = "CONFIRMED"  # Payment approved
    CANCELLED = "CANCELLED"  # Payment rejected or booking withdrawn


class PaymentStatus(str, Enum):
    """Payment evidence state as seen from the booking."""

    NONE = "NONE"
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


ACTIVE_STATUSES = (BookingStatus.RESERVED.value, BookingStatus.CONFIRMED.value)


class Booking(Base):
    """Reservation of a teacher's time by a student."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    teacher_id = Column(String(26), nullable=False, index=True)
    student_id = Column(String(26), nullable=False, index=True)

    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.RESERVED.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.NONE.value)
    cancellation_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    payment = relationship("Payment", back_populates="booking", uselist=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('RESERVED', 'CONFIRMED', 'CANCELLED')",
            name="ck_bookings_status",
        ),
        CheckConstraint(
            "payment_status IN ('NONE', 'PENDING', 'PAID', 'FAILED')",
            name="ck_bookings_payment_status",
        ),
        CheckConstraint("start_time < end_time", name="check_time_order"),
    )

    def __init__(self, **kwargs: Any) -> None:
        """Initialize in RESERVED state by default."""
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.RESERVED.value
        if not self.payment_status:
            self.payment_status = PaymentStatus.NONE.value
        logger.info(
            f"Creating booking for student {self.student_id} with teacher {self.teacher_id}"
        )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: student={self.student_id}, teacher={self.teacher_id}, "
            f"time={self.start_time}-{self.end_time}, status={self.status}>"
        )

    @property
    def is_reserved(self) -> bool:
        return self.status == BookingStatus.RESERVED.value

    def mark_payment_pending(self) -> None:
        self.payment_status = PaymentStatus.PENDING.value

    def confirm(self) -> None:
        """Payment approved: the lesson is on."""
        self.status = BookingStatus.CONFIRMED.value
        self.payment_status = PaymentStatus.PAID.value
        self.confirmed_at = datetime.now(timezone.utc)
        logger.info(f"Booking {self.id} confirmed")

    def cancel(self, reason: Optional[str] = None) -> None:
        """Release the slot."""
        self.status = BookingStatus.CANCELLED.value
        self.payment_status = PaymentStatus.FAILED.value
        self.cancelled_at = datetime.now(timezone.utc)
        self.cancellation_reason = reason
        logger.info(f"Booking {self.id} cancelled: {reason}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "teacher_id": self.teacher_id,
            "student_id": self.student_id,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "status": self.status,
            "payment_status": self.payment_status,
            "cancellation_reason": self.cancellation_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "confirmed_at": self.confirmed_at.isoformat() if self.confirmed_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
        }


Index(
    UNIQUE_INTERVAL_INDEX,
    Booking.teacher_id,
    Booking.start_time,
    Booking.end_time,
    unique=True,
    sqlite_where=text("status != 'CANCELLED'"),
    postgresql_where=text("status != 'CANCELLED'"),
)
