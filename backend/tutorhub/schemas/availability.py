# backend/tutorhub/schemas/availability.py
"""Schemas for weekly teacher availability windows."""

from datetime import time
from typing import List

from pydantic import Field, field_serializer, model_validator

from ._strict_base import StandardizedModel, StrictRequestModel


class AvailabilityWindowIn(StrictRequestModel):
    """One weekly window; day_of_week uses Sunday=0 .. Saturday=6."""

    day_of_week: int = Field(..., ge=0, le=6)
    start_time: time = Field(..., description="Window start, HH:MM")
    end_time: time = Field(..., description="Window end, HH:MM")

    @model_validator(mode="after")
    def _check_order(self) -> "AvailabilityWindowIn":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class AvailabilityReplaceRequest(StrictRequestModel):
    windows: List[AvailabilityWindowIn] = Field(default_factory=list, max_length=7 * 24)


class AvailabilityWindowOut(StandardizedModel):
    id: str
    teacher_id: str
    day_of_week: int
    start_time: time
    end_time: time

    @field_serializer("start_time", "end_time")
    def _hhmm(self, value: time) -> str:
        return value.strftime("%H:%M")
