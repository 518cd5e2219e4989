# backend/tutorhub/booking_flow/session.py
"""
Booking Session: one booking at a time for one student.

    IDLE / COMPLETED --select_slot--> SLOT_SELECTED
    SLOT_SELECTED --open_payment_form--> AWAITING_PAYMENT
    AWAITING_PAYMENT / FAILED --submit--> SUBMITTING
    SUBMITTING --> COMPLETED | CONFLICT_RETRY | FAILED
    CONFLICT_RETRY --select_slot--> SLOT_SELECTED (payment form kept)
    any --cancel--> IDLE

A draft exists from slot selection until completion or cancel, and a
second selection while it exists is rejected without touching it.
Cancelling during SUBMITTING does not abort the network calls; their
outcome is logged but no longer applied.
"""

from __future__ import annotations

from datetime import date
import logging
from typing import Any, Callable, Dict, Optional

from ..core.config import settings
from ..core.exceptions import (
    BookingFlowError,
    InvalidTransitionError,
    PartialSubmissionError,
    PaymentError,
    PaymentValidationError,
    PendingBookingError,
)
from ..core.time_utils import parse_time_slot
from .availability_index import AvailabilityIndex
from .gateway import BookingGateway
from .models import (
    BookingContext,
    BookingDraft,
    PaymentForm,
    SessionState,
    StagedReceipt,
    SubmissionResult,
    TeacherSummary,
)
from .payment_proof import PaymentProofCollector
from .pipeline import SubmissionPipeline
from .reconciliation import ConflictNotice, ReconciliationHandler, SubmissionOutcome

logger = logging.getLogger(__name__)

FORM_EDITABLE_STATES = frozenset(
    {SessionState.AWAITING_PAYMENT, SessionState.FAILED, SessionState.CONFLICT_RETRY}
)
SUBMITTABLE_STATES = frozenset({SessionState.AWAITING_PAYMENT, SessionState.FAILED})


class SlotNotOfferedError(BookingFlowError):
    def __init__(self, time_slot: str, on_date: date):
        super().__init__(
            message="This time slot is not available. Please choose another time.",
            code="SLOT_NOT_OFFERED",
            details={"time_slot": time_slot, "date": on_date.isoformat()},
        )


class BookingSession:
    def __init__(
        self,
        context: BookingContext,
        gateway: BookingGateway,
        *,
        availability: Optional[AvailabilityIndex] = None,
        pipeline: Optional[SubmissionPipeline] = None,
        today: Optional[Callable[[], date]] = None,
        max_file_bytes: Optional[int] = None,
    ) -> None:
        self.context = context
        self.availability = availability
        self.reconciliation = ReconciliationHandler(pipeline or SubmissionPipeline(gateway))
        self._today = today or date.today
        self._max_file_bytes = max_file_bytes or settings.max_receipt_bytes

        self._state = SessionState.IDLE
        self._draft: Optional[BookingDraft] = None
        self._collector = self._new_collector()
        self._form_opened = False
        self._epoch = 0

        self.last_error: Optional[Exception] = None
        self.validation_errors: Dict[str, str] = {}
        self.message: Optional[str] = None
        self.conflict: Optional[ConflictNotice] = None
        self.result: Optional[SubmissionResult] = None
        self.partial_booking_id: Optional[str] = None

    def _new_collector(self) -> PaymentProofCollector:
        return PaymentProofCollector(max_file_bytes=self._max_file_bytes, today=self._today)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def draft(self) -> Optional[BookingDraft]:
        return self._draft

    @property
    def payment_form(self) -> PaymentForm:
        return self._collector.form

    def _transition(self, new_state: SessionState) -> None:
        logger.debug(f"Booking session {self._state.value} -> {new_state.value}")
        self._state = new_state

    def _require(self, operation: str, allowed: frozenset) -> None:
        if self._state not in allowed:
            raise InvalidTransitionError(operation, self._state.value)

    def _require_draft(self, operation: str) -> BookingDraft:
        if self._draft is None:
            raise InvalidTransitionError(operation, self._state.value)
        return self._draft

    def select_slot(self, teacher: TeacherSummary, on_date: date, time_slot: str) -> BookingDraft:
        """
        Start a booking for ``time_slot`` on ``on_date``.

        Raises:
            PendingBookingError: Another booking is still pending in this session
            SlotNotOfferedError: The availability snapshot does not offer the slot
        """
        parse_time_slot(time_slot)

        if self._state == SessionState.CONFLICT_RETRY and self._draft is not None:
            if teacher.id != self._draft.teacher_id:
                raise PendingBookingError(details={"teacher_id": self._draft.teacher_id})
            self._check_offered(teacher.id, on_date, time_slot)
            self._draft.choose_slot(on_date, time_slot)
            self.conflict = None
            self.message = None
            self._transition(SessionState.SLOT_SELECTED)
            return self._draft

        if self._draft is not None or self._state not in (
            SessionState.IDLE,
            SessionState.COMPLETED,
        ):
            raise PendingBookingError(
                details={"state": self._state.value, "time_slot": time_slot}
            )

        self._check_offered(teacher.id, on_date, time_slot)
        self._draft = BookingDraft.for_slot(teacher, on_date, time_slot, self.context)
        self._collector = self._new_collector()
        self._form_opened = False
        self.result = None
        self.message = None
        self.last_error = None
        self.validation_errors = {}
        self._transition(SessionState.SLOT_SELECTED)
        return self._draft

    def _check_offered(self, teacher_id: str, on_date: date, time_slot: str) -> None:
        if self.availability is not None and not self.availability.offers(
            teacher_id, on_date, time_slot
        ):
            raise SlotNotOfferedError(time_slot, on_date)

    def open_payment_form(self) -> PaymentForm:
        """Show the payment form, pre-filled with the price and today's date on first open."""
        if self._state == SessionState.AWAITING_PAYMENT:
            return self._collector.form
        self._require("open the payment form", frozenset({SessionState.SLOT_SELECTED}))
        draft = self._require_draft("open the payment form")
        if not self._form_opened:
            self._collector.prefill(draft.price)
            self._form_opened = True
        self._transition(SessionState.AWAITING_PAYMENT)
        return self._collector.form

    def update_payment_field(self, name: str, value: Any) -> None:
        self._require("edit the payment form", FORM_EDITABLE_STATES)
        self._collector.update_field(name, value)
        self.validation_errors.pop(name, None)

    def add_receipt_file(
        self, file_name: str, data: bytes, content_type: Optional[str] = None
    ) -> StagedReceipt:
        self._require("add a receipt", FORM_EDITABLE_STATES)
        return self._collector.add_receipt(file_name, data, content_type)

    def remove_receipt_file(self, receipt_id: str) -> bool:
        self._require("remove a receipt", FORM_EDITABLE_STATES)
        return self._collector.remove_receipt(receipt_id)

    async def submit(self) -> SubmissionOutcome:
        """
        Validate the form and run the submission.

        A slot conflict is returned as an outcome with ``conflict`` set and
        the session in CONFLICT_RETRY.

        Raises:
            PaymentValidationError: Form is invalid; nothing was sent
            BookingError / PaymentError / PartialSubmissionError: Session is FAILED
        """
        self._require("submit", SUBMITTABLE_STATES)
        draft = self._require_draft("submit")

        try:
            submission = self._collector.build_submission(draft.price)
        except PaymentValidationError as exc:
            self.validation_errors = dict(exc.errors)
            raise
        self.validation_errors = {}

        receipts = self._collector.receipts
        epoch = self._epoch
        self._transition(SessionState.SUBMITTING)
        self.message = None

        try:
            outcome = await self.reconciliation.submit(
                draft,
                submission,
                receipts,
                self.context,
                booking_id=self.partial_booking_id,
            )
        except Exception as exc:
            if epoch != self._epoch:
                logger.warning(f"Submission failed after the session was cancelled: {exc}")
                raise
            self._fail(exc)
            raise

        if epoch != self._epoch:
            logger.warning(
                "Submission finished after the session was cancelled; result not applied",
                extra={"booking_id": outcome.result.booking_id if outcome.result else None},
            )
            return outcome

        if outcome.conflict is not None:
            self.conflict = outcome.conflict
            self.message = outcome.conflict.message
            self._transition(SessionState.CONFLICT_RETRY)
            return outcome

        self.result = outcome.result
        self.message = "Payment submitted. Your booking is awaiting confirmation."
        self._draft = None
        self._collector = self._new_collector()
        self._form_opened = False
        self.partial_booking_id = None
        self.last_error = None
        self._transition(SessionState.COMPLETED)
        return outcome

    def _fail(self, exc: Exception) -> None:
        self.last_error = exc
        if isinstance(exc, PartialSubmissionError):
            self.partial_booking_id = exc.booking_id
        elif isinstance(exc, PaymentError) and exc.booking_id:
            self.partial_booking_id = exc.booking_id
        self.message = (
            exc.message
            if isinstance(exc, BookingFlowError)
            else "Something went wrong while submitting your booking. Please try again."
        )
        self._transition(SessionState.FAILED)

    def cancel(self) -> bool:
        """Drop the draft and return to IDLE. Returns False when there was nothing to cancel."""
        if self._state == SessionState.IDLE and self._draft is None:
            return False
        if self._state == SessionState.SUBMITTING:
            logger.warning("Booking session cancelled while a submission is in flight")
        if self.partial_booking_id:
            logger.warning(
                f"Cancelled with reserved booking {self.partial_booking_id} awaiting payment"
            )

        self._epoch += 1
        self._draft = None
        self._collector = self._new_collector()
        self._form_opened = False
        self.partial_booking_id = None
        self.conflict = None
        self.message = None
        self.last_error = None
        self.validation_errors = {}
        self._transition(SessionState.IDLE)
        return True

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view for rendering."""
        return {
            "state": self._state.value,
            "draft": self._draft.to_dict() if self._draft else None,
            "payment_form": self._collector.form.to_dict(),
            "validation_errors": dict(self.validation_errors),
            "message": self.message,
            "can_submit": self._state in SUBMITTABLE_STATES,
            "partial_booking_id": self.partial_booking_id,
            "result": (
                {"booking_id": self.result.booking_id, "payment_id": self.result.payment_id}
                if self.result
                else None
            ),
        }
