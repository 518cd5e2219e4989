# backend/tutorhub/schemas/payment.py
"""Schemas for bank-transfer payment evidence and its admin review."""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from ..core.constants import MAX_NOTES_LENGTH
from ..models.payment import PaymentReviewStatus
from ._strict_base import StandardizedModel, StrictModel, StrictRequestModel


class PaymentSubmitRequest(StrictRequestModel):
    booking_id: str = Field(..., min_length=1)
    student_id: str = Field(..., min_length=1)
    transaction_id: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_date: date
    bank_name: str = Field(..., min_length=1, max_length=100)
    account_number: Optional[str] = Field(None, max_length=64)
    receipt_urls: List[str] = Field(default_factory=list)
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)
    student_email: Optional[str] = Field(
        None, max_length=255, description="Receipt confirmation recipient"
    )


class PaymentSubmitResponse(StrictModel):
    payment_id: str
    booking_id: str
    status: PaymentReviewStatus
    message: str = "Payment information submitted successfully"


class PaymentApproveRequest(StrictRequestModel):
    notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)


class PaymentRejectRequest(StrictRequestModel):
    reason: str = Field(..., min_length=1, max_length=MAX_NOTES_LENGTH)


class PaymentResponse(StandardizedModel):
    id: str
    booking_id: str
    student_id: str
    transaction_id: str
    amount: Decimal
    payment_date: date
    bank_name: str
    account_number: Optional[str] = None
    receipt_urls: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    status: PaymentReviewStatus
    rejection_reason: Optional[str] = None
