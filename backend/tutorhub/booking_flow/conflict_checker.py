# backend/tutorhub/booking_flow/conflict_checker.py
"""
Slot Conflict Checker.

An advisory probe that catches obviously taken slots early. It is never
the authority: an AVAILABLE answer can still lose the race at booking
creation, and a failed probe must not block the student.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
import logging
from typing import Optional

from .gateway import BookingGateway, GatewayError

logger = logging.getLogger(__name__)


class ProbeOutcome(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ProbeResult:
    outcome: ProbeOutcome
    reason: Optional[str] = None

    @property
    def is_unavailable(self) -> bool:
        return self.outcome == ProbeOutcome.UNAVAILABLE


class SlotConflictChecker:
    def __init__(self, gateway: BookingGateway) -> None:
        self.gateway = gateway

    async def probe(self, teacher_id: str, on_date: date, time_slot: str) -> ProbeResult:
        try:
            response = await self.gateway.probe_slot(teacher_id, on_date, time_slot)
        except GatewayError as exc:
            logger.warning(
                "Slot probe failed, continuing to booking: %s",
                exc.message,
                extra={"teacher_id": teacher_id, "time_slot": time_slot, "kind": exc.kind.value},
            )
            return ProbeResult(ProbeOutcome.UNKNOWN, exc.message)

        if response.get("available"):
            return ProbeResult(ProbeOutcome.AVAILABLE)
        reason = response.get("reason")
        logger.info(
            "Slot %s on %s reported unavailable: %s",
            time_slot,
            on_date.isoformat(),
            reason,
            extra={"teacher_id": teacher_id},
        )
        return ProbeResult(ProbeOutcome.UNAVAILABLE, reason)
