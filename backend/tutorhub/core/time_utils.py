"""
Time helpers shared by the booking store and the booking flow.

Slots are labelled "HH:MM - HH:MM" and weekdays are numbered Sunday=0 ..
Saturday=6, which is how availability windows are stored.
"""

from __future__ import annotations

from datetime import date, datetime, time
import re
from typing import Tuple

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
SLOT_SEPARATOR = " - "


def parse_hhmm(value: str) -> time:
    """Parse an "HH:MM" string into a time."""
    match = _TIME_RE.fullmatch((value or "").strip())
    if not match:
        raise ValueError(f"Invalid time format: {value!r}. Expected HH:MM format.")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return time(hour, minute)


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def parse_time_slot(label: str) -> Tuple[time, time]:
    """
    Split a slot label into its start and end times.

    Raises:
        ValueError: If the label is malformed or the end is not after the start
    """
    if not label or SLOT_SEPARATOR.strip() not in label:
        raise ValueError(f"Invalid time slot: {label!r}. Expected 'HH:MM - HH:MM'.")
    start_raw, _, end_raw = label.partition("-")
    start, end = parse_hhmm(start_raw), parse_hhmm(end_raw)
    if end <= start:
        raise ValueError(f"Invalid time slot: {label!r}. End must be after start.")
    return start, end


def format_time_slot(start: time, end: time) -> str:
    return f"{format_hhmm(start)}{SLOT_SEPARATOR}{format_hhmm(end)}"


def duration_minutes(start: time, end: time) -> int:
    """Minutes between two same-day times."""
    return (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)


def day_of_week(value: date) -> int:
    """Sunday-based weekday number (Sunday=0 .. Saturday=6)."""
    return (value.weekday() + 1) % 7


def slot_bounds(on_date: date, label: str) -> Tuple[datetime, datetime]:
    """Concrete start/end datetimes for a slot label on a date."""
    start, end = parse_time_slot(label)
    return datetime.combine(on_date, start), datetime.combine(on_date, end)
