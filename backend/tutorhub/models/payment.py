# backend/tutorhub/models/payment.py
"""Bank-transfer payment evidence attached to a booking."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class PaymentReviewStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Payment(Base):
    """Transfer details and receipts submitted by a student for one booking."""

    __tablename__ = "payments"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    booking_id = Column(
        String(26),
        ForeignKey("bookings.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )
    student_id = Column(String(26), nullable=False, index=True)

    transaction_id = Column(String(255), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_date = Column(Date, nullable=False)
    bank_name = Column(String(100), nullable=False)
    account_number = Column(String(64), nullable=True)
    receipt_urls = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default=PaymentReviewStatus.PENDING.value)
    review_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    booking = relationship("Booking", back_populates="payment")

    __table_args__ = (
        CheckConstraint("amount > 0", name="check_payment_amount_positive"),
        CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED')",
            name="ck_payments_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<Payment {self.id} booking={self.booking_id} status={self.status}>"

    @property
    def is_pending(self) -> bool:
        return self.status == PaymentReviewStatus.PENDING.value

    def approve(self, notes: Optional[str] = None) -> None:
        self.status = PaymentReviewStatus.APPROVED.value
        self.review_notes = notes
        self.reviewed_at = datetime.now(timezone.utc)

    def reject(self, reason: str) -> None:
        self.status = PaymentReviewStatus.REJECTED.value
        self.rejection_reason = reason
        self.reviewed_at = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "booking_id": self.booking_id,
            "student_id": self.student_id,
            "transaction_id": self.transaction_id,
            "amount": str(self.amount),
            "payment_date": self.payment_date.isoformat() if self.payment_date else None,
            "bank_name": self.bank_name,
            "account_number": self.account_number,
            "receipt_urls": list(self.receipt_urls or []),
            "notes": self.notes,
            "status": self.status,
            "rejection_reason": self.rejection_reason,
        }
