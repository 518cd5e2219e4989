# backend/tutorhub/booking_flow/models.py
"""
Value objects held by the client-side booking flow.

Windows, slots and submissions are immutable. The draft and the payment
form are the two mutable pieces of a session and are owned by it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..core.time_utils import (
    duration_minutes,
    format_time_slot,
    parse_hhmm,
    parse_time_slot,
    slot_bounds,
)
from ..core.ulid_helper import generate_ulid

CENTS = Decimal("0.01")


def lesson_price(hourly_rate: Decimal, minutes: int) -> Decimal:
    """Hourly rate prorated to ``minutes``, rounded to cents."""
    return (Decimal(hourly_rate) * Decimal(minutes) / Decimal(60)).quantize(
        CENTS, rounding=ROUND_HALF_UP
    )


class SessionState(str, Enum):
    IDLE = "IDLE"
    SLOT_SELECTED = "SLOT_SELECTED"
    AWAITING_PAYMENT = "AWAITING_PAYMENT"
    SUBMITTING = "SUBMITTING"
    COMPLETED = "COMPLETED"
    CONFLICT_RETRY = "CONFLICT_RETRY"
    FAILED = "FAILED"


@dataclass(frozen=True)
class AvailabilityWindow:
    """A weekly recurring window; day_of_week is Sunday=0 .. Saturday=6."""

    teacher_id: str
    day_of_week: int
    start_time: time
    end_time: time

    def __post_init__(self) -> None:
        if not 0 <= self.day_of_week <= 6:
            raise ValueError(f"day_of_week must be 0..6, got {self.day_of_week}")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")

    @property
    def time_slot(self) -> str:
        return format_time_slot(self.start_time, self.end_time)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "AvailabilityWindow":
        return cls(
            teacher_id=str(payload["teacher_id"]),
            day_of_week=int(payload["day_of_week"]),
            start_time=parse_hhmm(str(payload["start_time"])[:5]),
            end_time=parse_hhmm(str(payload["end_time"])[:5]),
        )


@dataclass(frozen=True)
class Slot:
    """A concrete interval derived from a window on one date."""

    start: datetime
    end: datetime

    @property
    def date(self) -> date:
        return self.start.date()

    @property
    def label(self) -> str:
        return format_time_slot(self.start.time(), self.end.time())

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


@dataclass(frozen=True)
class TeacherSummary:
    id: str
    name: str
    hourly_rate: Decimal


@dataclass(frozen=True)
class BookingContext:
    """Who is booking. Passed in explicitly; never looked up ambiently."""

    student_id: str
    name: str = ""
    email: Optional[str] = None


@dataclass
class BookingDraft:
    """Booking intent that the store has not accepted yet."""

    teacher_id: str
    teacher_name: str
    hourly_rate: Decimal
    date: date
    time_slot: Optional[str]
    duration_minutes: int
    price: Decimal
    student_id: str

    @classmethod
    def for_slot(
        cls,
        teacher: TeacherSummary,
        on_date: date,
        time_slot: str,
        context: BookingContext,
    ) -> "BookingDraft":
        start, end = parse_time_slot(time_slot)
        minutes = duration_minutes(start, end)
        return cls(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            hourly_rate=Decimal(teacher.hourly_rate),
            date=on_date,
            time_slot=time_slot,
            duration_minutes=minutes,
            price=lesson_price(teacher.hourly_rate, minutes),
            student_id=context.student_id,
        )

    @property
    def has_slot(self) -> bool:
        return bool(self.time_slot)

    def bounds(self) -> Tuple[datetime, datetime]:
        if not self.time_slot:
            raise ValueError("Draft has no time slot")
        return slot_bounds(self.date, self.time_slot)

    def choose_slot(self, on_date: date, time_slot: str) -> None:
        """Point the draft at a new slot and reprice it."""
        start, end = parse_time_slot(time_slot)
        self.date = on_date
        self.time_slot = time_slot
        self.duration_minutes = duration_minutes(start, end)
        self.price = lesson_price(self.hourly_rate, self.duration_minutes)

    def clear_slot(self) -> None:
        self.time_slot = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teacher_id": self.teacher_id,
            "teacher_name": self.teacher_name,
            "date": self.date.isoformat(),
            "time_slot": self.time_slot,
            "duration_minutes": self.duration_minutes,
            "price": str(self.price),
            "student_id": self.student_id,
        }


@dataclass(frozen=True)
class StagedReceipt:
    """A receipt accepted by the form and held in memory until submission."""

    file_name: str
    content_type: str
    data: bytes = field(repr=False)
    preview: Optional[bytes] = field(default=None, repr=False)
    id: str = field(default_factory=generate_ulid)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")


@dataclass
class PaymentForm:
    """Editable payment fields. Raw values; the collector validates them."""

    transaction_id: str = ""
    amount: Optional[Decimal] = None
    payment_date: Optional[date] = None
    bank_name: str = ""
    account_number: str = ""
    notes: str = ""
    receipts: List[StagedReceipt] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transaction_id": self.transaction_id,
            "amount": str(self.amount) if self.amount is not None else None,
            "payment_date": self.payment_date.isoformat() if self.payment_date else None,
            "bank_name": self.bank_name,
            "account_number": self.account_number,
            "notes": self.notes,
            "receipts": [
                {"id": r.id, "file_name": r.file_name, "size": r.size} for r in self.receipts
            ],
        }


@dataclass(frozen=True)
class PaymentSubmission:
    """
    Validated payment evidence.

    Receipt URLs and the booking reference are filled in during submission.
    """

    transaction_id: str
    amount: Decimal
    payment_date: date
    bank_name: str
    account_number: Optional[str] = None
    notes: Optional[str] = None
    receipt_urls: Tuple[str, ...] = ()
    booking_ref: Optional[str] = None

    def attach(self, booking_ref: str, receipt_urls: Tuple[str, ...]) -> "PaymentSubmission":
        return replace(self, booking_ref=booking_ref, receipt_urls=tuple(receipt_urls))

    def to_payload(self) -> Dict[str, Any]:
        return {
            "booking_id": self.booking_ref,
            "transaction_id": self.transaction_id,
            "amount": str(self.amount),
            "payment_date": self.payment_date.isoformat(),
            "bank_name": self.bank_name,
            "account_number": self.account_number,
            "receipt_urls": list(self.receipt_urls),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class SubmissionResult:
    booking_id: str
    payment_id: str
    receipt_urls: Tuple[str, ...] = ()
