# backend/tutorhub/schemas/booking.py
"""
Booking schemas for the tutorhub platform.

Create requests carry concrete start/end datetimes; the probe request
carries the date plus the "HH:MM - HH:MM" label the student picked.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator, model_validator

from ..core.time_utils import parse_time_slot
from ..models.booking import BookingStatus, PaymentStatus
from ._strict_base import StandardizedModel, StrictModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """Reserve a teacher's time for a student."""

    teacher_id: str = Field(..., min_length=1, description="Teacher to book")
    student_id: str = Field(..., min_length=1, description="Student making the booking")
    start_time: datetime = Field(..., description="Lesson start")
    end_time: datetime = Field(..., description="Lesson end")

    @model_validator(mode="after")
    def _check_interval(self) -> "BookingCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.start_time.date() != self.end_time.date():
            raise ValueError("A lesson must start and end on the same day")
        return self


class BookingCreateResponse(StrictModel):
    booking_id: str
    status: BookingStatus
    teacher_id: str
    start_time: datetime
    end_time: datetime


class BookingResponse(StandardizedModel):
    id: str
    teacher_id: str
    student_id: str
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    payment_status: PaymentStatus
    cancellation_reason: Optional[str] = None


class SlotProbeRequest(StrictRequestModel):
    """Advisory check whether a slot still looks free."""

    teacher_id: str = Field(..., min_length=1)
    date: date
    time_slot: str = Field(..., description="HH:MM - HH:MM")

    @field_validator("time_slot")
    @classmethod
    def _valid_slot(cls, value: str) -> str:
        parse_time_slot(value)
        return value


class SlotProbeResponse(StrictModel):
    available: bool
    reason: Optional[str] = None
