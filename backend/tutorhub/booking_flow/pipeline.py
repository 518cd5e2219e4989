# backend/tutorhub/booking_flow/pipeline.py
"""
Booking + payment submission pipeline.

Phase 1 creates the booking; the store's answer is the only conflict
gate. Phase 2 uploads the staged receipts and attaches the payment to
the new booking. Phase 2 never starts before phase 1 succeeds, and a
phase-2 failure never cancels the booking: the student resubmits the
payment against the same booking id instead.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..core.exceptions import BookingError, PartialSubmissionError, PaymentError, SlotConflictError
from ..monitoring.prometheus_metrics import PrometheusMetrics, prometheus_metrics
from .conflict_checker import SlotConflictChecker
from .gateway import BookingGateway, FailureKind, GatewayError, mentions_conflict
from .models import (
    BookingContext,
    BookingDraft,
    PaymentSubmission,
    StagedReceipt,
    SubmissionResult,
)

logger = logging.getLogger(__name__)


def _describe(exc: Exception) -> str:
    if isinstance(exc, GatewayError):
        return exc.message
    return f"Unexpected {type(exc).__name__} while attaching the payment"


def _failure_kind(exc: Exception) -> FailureKind:
    return exc.kind if isinstance(exc, GatewayError) else FailureKind.SERVER


class SubmissionPipeline:
    def __init__(
        self,
        gateway: BookingGateway,
        conflict_checker: Optional[SlotConflictChecker] = None,
        metrics: PrometheusMetrics = prometheus_metrics,
    ) -> None:
        self.gateway = gateway
        self.conflict_checker = conflict_checker or SlotConflictChecker(gateway)
        self.metrics = metrics

    async def submit(
        self,
        draft: BookingDraft,
        submission: PaymentSubmission,
        receipts: Sequence[StagedReceipt],
        context: BookingContext,
        *,
        booking_id: Optional[str] = None,
    ) -> SubmissionResult:
        """
        Run both phases, or only phase 2 when ``booking_id`` is already known.

        Raises:
            SlotConflictError: The slot is taken; nothing was created
            BookingError: Phase 1 failed for another reason; nothing was created
            PartialSubmissionError: Booking created, payment not attached
            PaymentError: Resumed phase 2 failed again
        """
        if booking_id:
            return await self._resume(booking_id, draft, submission, receipts, context)

        await self._probe(draft)
        new_booking_id = await self._create_booking(draft, context)

        try:
            result = await self._attach_payment(new_booking_id, submission, receipts, context)
        except Exception as exc:
            cause = _describe(exc)
            logger.error(
                f"Booking {new_booking_id} reserved but payment was not attached: {cause}",
                extra=self._context(draft, submission, exc, booking_id=new_booking_id),
            )
            self.metrics.record_submission("partial")
            raise PartialSubmissionError(
                new_booking_id, cause=cause, status_code=getattr(exc, "status_code", None)
            ) from exc

        self.metrics.record_submission("completed")
        logger.info(f"Booking {result.booking_id} submitted with payment {result.payment_id}")
        return result

    async def _probe(self, draft: BookingDraft) -> None:
        probe = await self.conflict_checker.probe(
            draft.teacher_id, draft.date, draft.time_slot or ""
        )
        if probe.is_unavailable:
            self.metrics.record_submission("conflict")
            message = None if mentions_conflict(probe.reason) else probe.reason
            raise SlotConflictError(message, details={"stage": "probe", **draft.to_dict()})

    async def _create_booking(self, draft: BookingDraft, context: BookingContext) -> str:
        start_time, end_time = draft.bounds()
        try:
            return await self.gateway.create_booking(
                draft.teacher_id, context.student_id, start_time, end_time
            )
        except GatewayError as exc:
            if exc.is_conflict:
                logger.info(
                    f"Slot {draft.time_slot} on {draft.date} was taken: {exc.message}",
                    extra={"teacher_id": draft.teacher_id},
                )
                self.metrics.record_submission("conflict")
                raise SlotConflictError(details={"stage": "create", **draft.to_dict()}) from exc

            logger.error(
                f"Booking creation failed: {exc.message}",
                extra=self._context(draft, None, exc),
            )
            self.metrics.record_submission("booking_failed")
            raise BookingError(
                exc.message,
                status_code=exc.status_code,
                details={"kind": exc.kind.value},
            ) from exc

    async def _attach_payment(
        self,
        booking_id: str,
        submission: PaymentSubmission,
        receipts: Sequence[StagedReceipt],
        context: BookingContext,
    ) -> SubmissionResult:
        receipt_urls: List[str] = []
        for receipt in receipts:
            receipt_urls.append(await self.gateway.upload_receipt(receipt))

        attached = submission.attach(booking_id, tuple(receipt_urls))
        payment_id = await self.gateway.submit_payment(
            attached, student_id=context.student_id, student_email=context.email
        )
        return SubmissionResult(
            booking_id=booking_id, payment_id=payment_id, receipt_urls=attached.receipt_urls
        )

    async def _resume(
        self,
        booking_id: str,
        draft: BookingDraft,
        submission: PaymentSubmission,
        receipts: Sequence[StagedReceipt],
        context: BookingContext,
    ) -> SubmissionResult:
        logger.info(f"Resubmitting payment for reserved booking {booking_id}")
        try:
            result = await self._attach_payment(booking_id, submission, receipts, context)
        except Exception as exc:
            cause = _describe(exc)
            logger.error(
                f"Payment resubmission for booking {booking_id} failed: {cause}",
                extra=self._context(draft, submission, exc, booking_id=booking_id),
            )
            self.metrics.record_submission("payment_failed")
            raise PaymentError(
                cause,
                booking_id=booking_id,
                status_code=getattr(exc, "status_code", None),
                details={"kind": _failure_kind(exc).value},
            ) from exc

        self.metrics.record_submission("completed")
        return result

    @staticmethod
    def _context(
        draft: BookingDraft,
        submission: Optional[PaymentSubmission],
        exc: Exception,
        *,
        booking_id: Optional[str] = None,
    ) -> dict:
        return {
            "draft": draft.to_dict(),
            "payment": submission.to_payload() if submission else None,
            "status_code": getattr(exc, "status_code", None),
            "failure_kind": _failure_kind(exc).value,
            "booking_id": booking_id,
        }
