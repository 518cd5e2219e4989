# backend/tutorhub/booking_flow/gateway.py
"""
The booking store as seen by the booking flow.

Every store failure surfaces as a ``GatewayError`` whose ``kind`` says
how the flow should treat it.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Mapping, Optional, Protocol

from ..core.constants import CONFLICT_PHRASES
from .models import AvailabilityWindow, PaymentSubmission, StagedReceipt

BOOKING_CONFLICT_CODE = "BOOKING_CONFLICT"


class FailureKind(str, Enum):
    CONFLICT = "conflict"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    SERVER = "server"
    NETWORK = "network"


class GatewayError(RuntimeError):
    """Raised when the booking store rejects a call or cannot be reached."""

    def __init__(
        self,
        message: str,
        kind: FailureKind = FailureKind.SERVER,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        payload: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.code = code
        self.payload = payload

    @property
    def is_conflict(self) -> bool:
        return self.kind == FailureKind.CONFLICT or mentions_conflict(self.message)


def mentions_conflict(message: Optional[str]) -> bool:
    """Whether a store message says the slot was taken by someone else."""
    text = (message or "").lower()
    return any(phrase in text for phrase in CONFLICT_PHRASES)


def classify_failure(
    status_code: Optional[int], code: Optional[str] = None, message: Optional[str] = None
) -> FailureKind:
    if status_code == 409 or code == BOOKING_CONFLICT_CODE or mentions_conflict(message):
        return FailureKind.CONFLICT
    if status_code in (400, 413, 422):
        return FailureKind.VALIDATION
    if status_code == 404:
        return FailureKind.NOT_FOUND
    if status_code is None:
        return FailureKind.NETWORK
    return FailureKind.SERVER


class BookingGateway(Protocol):
    async def list_availability(self, teacher_id: str) -> List[AvailabilityWindow]:
        ...

    async def probe_slot(self, teacher_id: str, on_date: date, time_slot: str) -> Mapping[str, Any]:
        """Return ``{"available": bool, "reason": str | None}``."""
        ...

    async def create_booking(
        self, teacher_id: str, student_id: str, start_time: datetime, end_time: datetime
    ) -> str:
        """Return the new booking id."""
        ...

    async def upload_receipt(self, receipt: StagedReceipt) -> str:
        """Return the stored receipt URL."""
        ...

    async def submit_payment(
        self,
        submission: PaymentSubmission,
        *,
        student_id: str,
        student_email: Optional[str] = None,
    ) -> str:
        """Return the payment id."""
        ...
