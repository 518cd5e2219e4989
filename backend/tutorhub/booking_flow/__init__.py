"""
Client-side booking core.

Availability lookup, the advisory slot probe, the booking session state
machine, payment proof collection and the two-phase submission pipeline
with conflict reconciliation.
"""

from .availability_index import AvailabilityIndex
from .conflict_checker import ProbeOutcome, ProbeResult, SlotConflictChecker
from .gateway import BookingGateway, FailureKind, GatewayError
from .http_gateway import HttpBookingGateway
from .models import (
    AvailabilityWindow,
    BookingContext,
    BookingDraft,
    PaymentForm,
    PaymentSubmission,
    SessionState,
    Slot,
    StagedReceipt,
    SubmissionResult,
    TeacherSummary,
)
from .payment_proof import PaymentProofCollector
from .pipeline import SubmissionPipeline
from .reconciliation import ConflictNotice, ReconciliationHandler, SubmissionOutcome
from .session import BookingSession, SlotNotOfferedError

__all__ = [
    "AvailabilityIndex",
    "AvailabilityWindow",
    "BookingContext",
    "BookingDraft",
    "BookingGateway",
    "BookingSession",
    "ConflictNotice",
    "FailureKind",
    "GatewayError",
    "HttpBookingGateway",
    "PaymentForm",
    "PaymentProofCollector",
    "PaymentSubmission",
    "ProbeOutcome",
    "ProbeResult",
    "ReconciliationHandler",
    "SessionState",
    "Slot",
    "SlotConflictChecker",
    "SlotNotOfferedError",
    "StagedReceipt",
    "SubmissionOutcome",
    "SubmissionPipeline",
    "SubmissionResult",
    "TeacherSummary",
]
