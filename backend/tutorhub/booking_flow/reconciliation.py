# backend/tutorhub/booking_flow/reconciliation.py
"""
Reconciliation/retry handling around the submission pipeline.

A lost slot race costs the student a re-pick of time only: the draft's
time slot is cleared, every payment field and staged receipt stays as
typed, and submission is blocked until a new slot is chosen.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
from typing import Optional, Sequence

from ..core.exceptions import SlotConflictError
from .models import (
    BookingContext,
    BookingDraft,
    PaymentSubmission,
    StagedReceipt,
    SubmissionResult,
)
from .pipeline import SubmissionPipeline

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = (
    "This time slot was just booked by another student. Please choose another time."
)


@dataclass(frozen=True)
class ConflictNotice:
    """What the slot picker needs to re-open after a lost race."""

    teacher_id: str
    date: date
    lost_time_slot: Optional[str]
    message: str


@dataclass(frozen=True)
class SubmissionOutcome:
    result: Optional[SubmissionResult] = None
    conflict: Optional[ConflictNotice] = None

    @property
    def completed(self) -> bool:
        return self.result is not None


class ReconciliationHandler:
    def __init__(self, pipeline: SubmissionPipeline) -> None:
        self.pipeline = pipeline

    @staticmethod
    def can_resubmit(draft: Optional[BookingDraft]) -> bool:
        return draft is not None and draft.has_slot

    def reconcile(self, draft: BookingDraft, error: SlotConflictError) -> ConflictNotice:
        """Clear only the draft's time slot and describe the conflict."""
        lost = draft.time_slot
        draft.clear_slot()
        message = error.message or CONFLICT_MESSAGE
        logger.info(
            f"Slot {lost} on {draft.date} lost to another booking; awaiting a new slot",
            extra={"teacher_id": draft.teacher_id},
        )
        return ConflictNotice(
            teacher_id=draft.teacher_id, date=draft.date, lost_time_slot=lost, message=message
        )

    async def submit(
        self,
        draft: BookingDraft,
        submission: PaymentSubmission,
        receipts: Sequence[StagedReceipt],
        context: BookingContext,
        *,
        booking_id: Optional[str] = None,
    ) -> SubmissionOutcome:
        """
        Run the pipeline, turning a slot conflict into a ``ConflictNotice``.

        Every other pipeline error propagates unchanged.
        """
        try:
            result = await self.pipeline.submit(
                draft, submission, receipts, context, booking_id=booking_id
            )
        except SlotConflictError as exc:
            return SubmissionOutcome(conflict=self.reconcile(draft, exc))
        return SubmissionOutcome(result=result)
