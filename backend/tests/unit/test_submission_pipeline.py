from datetime import date, timedelta
from decimal import Decimal

import pytest

from tests.helpers.builders import PDF_BYTES, STUDENT_A, TEACHER_ID
from tests.helpers.fake_gateway import FakeGateway, conflict_error, network_error, server_error
from tutorhub.booking_flow.models import (
    BookingContext,
    BookingDraft,
    PaymentSubmission,
    StagedReceipt,
    TeacherSummary,
)
from tutorhub.booking_flow.pipeline import SubmissionPipeline
from tutorhub.core.exceptions import (
    BookingError,
    PartialSubmissionError,
    PaymentError,
    SlotConflictError,
)
from tutorhub.monitoring.prometheus_metrics import booking_submissions_total

LESSON_DATE = date.today() + timedelta(days=3)
CONTEXT = BookingContext(student_id=STUDENT_A, email="omar@example.com")


def _draft(time_slot="09:00 - 10:00"):
    teacher = TeacherSummary(id=TEACHER_ID, name="Sara", hourly_rate=Decimal("120"))
    return BookingDraft.for_slot(teacher, LESSON_DATE, time_slot, CONTEXT)


def _submission():
    return PaymentSubmission(
        transaction_id="TX-001",
        amount=Decimal("120.00"),
        payment_date=date.today(),
        bank_name="Al Rajhi Bank",
    )


def _outcome_count(outcome: str) -> float:
    return booking_submissions_total.labels(outcome=outcome)._value.get()


@pytest.mark.asyncio
async def test_round_trip_calls_create_once_then_submit_once():
    gateway = FakeGateway()
    result = await SubmissionPipeline(gateway).submit(_draft(), _submission(), [], CONTEXT)

    creates = gateway.calls_to("create_booking")
    submits = gateway.calls_to("submit_payment")
    assert len(creates) == 1 and len(submits) == 1
    assert submits[0]["submission"].booking_ref == result.booking_id
    assert submits[0]["student_id"] == STUDENT_A
    assert [name for name, _ in gateway.calls] == ["probe_slot", "create_booking", "submit_payment"]


@pytest.mark.asyncio
async def test_receipts_uploaded_once_each_before_submit():
    gateway = FakeGateway()
    receipts = [
        StagedReceipt(file_name="a.pdf", content_type="application/pdf", data=PDF_BYTES),
        StagedReceipt(file_name="b.pdf", content_type="application/pdf", data=PDF_BYTES),
    ]

    result = await SubmissionPipeline(gateway).submit(_draft(), _submission(), receipts, CONTEXT)

    assert [c["file_name"] for c in gateway.calls_to("upload_receipt")] == ["a.pdf", "b.pdf"]
    assert result.receipt_urls == ("/uploads/receipts/a.pdf", "/uploads/receipts/b.pdf")
    assert gateway.calls_to("submit_payment")[0]["submission"].receipt_urls == result.receipt_urls


@pytest.mark.asyncio
async def test_probe_unavailable_short_circuits_phase_one():
    gateway = FakeGateway()
    gateway.probe_response = {"available": False, "reason": "Time slot already booked"}
    before = _outcome_count("conflict")

    with pytest.raises(SlotConflictError):
        await SubmissionPipeline(gateway).submit(_draft(), _submission(), [], CONTEXT)

    assert gateway.calls_to("create_booking") == []
    assert _outcome_count("conflict") == before + 1


@pytest.mark.asyncio
async def test_probe_failure_still_books():
    gateway = FakeGateway()
    gateway.fail_next("probe_slot", network_error())
    result = await SubmissionPipeline(gateway).submit(_draft(), _submission(), [], CONTEXT)
    assert result.payment_id


@pytest.mark.asyncio
async def test_create_conflict_is_slot_conflict():
    gateway = FakeGateway()
    gateway.fail_next("create_booking", conflict_error())
    with pytest.raises(SlotConflictError):
        await SubmissionPipeline(gateway).submit(_draft(), _submission(), [], CONTEXT)
    assert gateway.calls_to("submit_payment") == []


@pytest.mark.asyncio
async def test_conflict_phrase_without_409_is_still_conflict():
    gateway = FakeGateway()
    gateway.fail_next("create_booking", server_error("Slot is no longer available"))
    with pytest.raises(SlotConflictError):
        await SubmissionPipeline(gateway).submit(_draft(), _submission(), [], CONTEXT)


@pytest.mark.asyncio
async def test_other_create_failure_is_booking_error():
    gateway = FakeGateway()
    gateway.fail_next("create_booking", server_error())
    with pytest.raises(BookingError) as exc_info:
        await SubmissionPipeline(gateway).submit(_draft(), _submission(), [], CONTEXT)
    assert exc_info.value.status_code == 500
    assert gateway.calls_to("submit_payment") == []


@pytest.mark.asyncio
async def test_phase_two_failure_is_partial_with_booking_id():
    gateway = FakeGateway()
    gateway.fail_next("submit_payment", server_error())
    before = _outcome_count("partial")

    with pytest.raises(PartialSubmissionError) as exc_info:
        await SubmissionPipeline(gateway).submit(_draft(), _submission(), [], CONTEXT)

    assert exc_info.value.booking_id == "booking-1"
    assert exc_info.value.code == "PARTIAL_SUBMISSION"
    assert _outcome_count("partial") == before + 1


@pytest.mark.asyncio
async def test_upload_failure_is_partial():
    gateway = FakeGateway()
    gateway.fail_next("upload_receipt", network_error())
    receipts = [StagedReceipt(file_name="a.pdf", content_type="application/pdf", data=PDF_BYTES)]

    with pytest.raises(PartialSubmissionError):
        await SubmissionPipeline(gateway).submit(_draft(), _submission(), receipts, CONTEXT)

    assert gateway.calls_to("submit_payment") == []


@pytest.mark.asyncio
async def test_resume_skips_probe_and_create():
    gateway = FakeGateway()
    result = await SubmissionPipeline(gateway).submit(
        _draft(), _submission(), [], CONTEXT, booking_id="booking-77"
    )
    assert result.booking_id == "booking-77"
    assert gateway.calls_to("probe_slot") == []
    assert gateway.calls_to("create_booking") == []
    assert gateway.calls_to("submit_payment")[0]["submission"].booking_ref == "booking-77"


@pytest.mark.asyncio
async def test_resume_failure_is_payment_error():
    gateway = FakeGateway()
    gateway.fail_next("submit_payment", network_error())
    with pytest.raises(PaymentError) as exc_info:
        await SubmissionPipeline(gateway).submit(
            _draft(), _submission(), [], CONTEXT, booking_id="booking-77"
        )
    assert not isinstance(exc_info.value, PartialSubmissionError)
    assert exc_info.value.booking_id == "booking-77"


@pytest.mark.asyncio
async def test_unexpected_phase_two_error_is_still_partial():
    gateway = FakeGateway()
    gateway.fail_next("submit_payment", KeyError("payment_id"))

    with pytest.raises(PartialSubmissionError) as exc_info:
        await SubmissionPipeline(gateway).submit(_draft(), _submission(), [], CONTEXT)

    assert exc_info.value.booking_id == "booking-1"
    assert isinstance(exc_info.value.__cause__, KeyError)


@pytest.mark.asyncio
async def test_unexpected_resume_error_keeps_booking_id():
    gateway = FakeGateway()
    gateway.fail_next("submit_payment", TypeError("bad payload"))

    with pytest.raises(PaymentError) as exc_info:
        await SubmissionPipeline(gateway).submit(
            _draft(), _submission(), [], CONTEXT, booking_id="booking-77"
        )

    assert exc_info.value.booking_id == "booking-77"
    assert gateway.calls_to("create_booking") == []
