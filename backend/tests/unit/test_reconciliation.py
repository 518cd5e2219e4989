from datetime import date, timedelta
from decimal import Decimal

import pytest

from tests.helpers.builders import STUDENT_A, TEACHER_ID
from tests.helpers.fake_gateway import FakeGateway, conflict_error, server_error
from tutorhub.booking_flow.models import (
    BookingContext,
    BookingDraft,
    PaymentSubmission,
    TeacherSummary,
)
from tutorhub.booking_flow.pipeline import SubmissionPipeline
from tutorhub.booking_flow.reconciliation import CONFLICT_MESSAGE, ReconciliationHandler
from tutorhub.core.exceptions import BookingError

CONTEXT = BookingContext(student_id=STUDENT_A)
LESSON_DATE = date.today() + timedelta(days=2)


def _draft():
    teacher = TeacherSummary(id=TEACHER_ID, name="Sara", hourly_rate=Decimal("120"))
    return BookingDraft.for_slot(teacher, LESSON_DATE, "09:00 - 10:00", CONTEXT)


def _submission():
    return PaymentSubmission(
        transaction_id="TX-9",
        amount=Decimal("120.00"),
        payment_date=date.today(),
        bank_name="Other",
    )


@pytest.mark.asyncio
async def test_conflict_clears_only_time_slot():
    gateway = FakeGateway()
    gateway.fail_next("create_booking", conflict_error())
    handler = ReconciliationHandler(SubmissionPipeline(gateway))
    draft = _draft()

    outcome = await handler.submit(draft, _submission(), [], CONTEXT)

    assert not outcome.completed
    assert outcome.conflict.message == CONFLICT_MESSAGE
    assert outcome.conflict.lost_time_slot == "09:00 - 10:00"
    assert outcome.conflict.teacher_id == TEACHER_ID
    assert draft.time_slot is None
    assert draft.date == LESSON_DATE
    assert draft.price == Decimal("120.00")
    assert not handler.can_resubmit(draft)


@pytest.mark.asyncio
async def test_success_passes_result_through():
    handler = ReconciliationHandler(SubmissionPipeline(FakeGateway()))
    outcome = await handler.submit(_draft(), _submission(), [], CONTEXT)
    assert outcome.completed and outcome.conflict is None


@pytest.mark.asyncio
async def test_other_errors_propagate():
    gateway = FakeGateway()
    gateway.fail_next("create_booking", server_error())
    handler = ReconciliationHandler(SubmissionPipeline(gateway))
    draft = _draft()
    with pytest.raises(BookingError):
        await handler.submit(draft, _submission(), [], CONTEXT)
    assert draft.time_slot == "09:00 - 10:00"
