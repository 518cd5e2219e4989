# backend/tutorhub/services/payment_service.py
"""
Payment Service for the tutorhub platform.

Students attach bank-transfer evidence to a RESERVED booking; an admin
later approves it (booking CONFIRMED, payment PAID) or rejects it
(booking CANCELLED, payment FAILED, slot released).
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    BusinessRuleException,
    NotFoundException,
    PaymentAlreadySubmittedException,
)
from ..models.booking import Booking
from ..models.payment import Payment
from ..repositories.booking_repository import BookingRepository
from ..repositories.payment_repository import PaymentRepository
from ..schemas.payment import PaymentSubmitRequest
from .base import BaseService
from .notification_service import (
    PAYMENT_APPROVED,
    PAYMENT_REJECTED,
    PAYMENT_SUBMITTED_ADMIN,
    PAYMENT_SUBMITTED_STUDENT,
    NotificationService,
)

logger = logging.getLogger(__name__)


class PaymentService(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[PaymentRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__(db)
        self.repository = repository or PaymentRepository(db)
        self.booking_repository = booking_repository or BookingRepository(db)
        self.notification_service = notification_service or NotificationService()

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
        return booking

    def _get_payment(self, payment_id: str) -> Payment:
        payment = self.repository.get_by_id(payment_id)
        if payment is None:
            raise NotFoundException("Payment not found", code="PAYMENT_NOT_FOUND")
        return payment

    def _notification_data(self, payment: Payment, booking: Booking) -> Dict[str, Any]:
        return {
            "payment_id": payment.id,
            "booking_id": booking.id,
            "transaction_id": payment.transaction_id,
            "amount": str(payment.amount),
            "bank_name": payment.bank_name,
            "start_time": booking.start_time.isoformat() if booking.start_time else None,
        }

    @BaseService.measure_operation("submit_payment")
    def submit_payment(self, data: PaymentSubmitRequest) -> Payment:
        """
        Attach payment evidence to a reserved booking.

        Resubmitting the same transaction id returns the existing payment.

        Raises:
            NotFoundException: Unknown booking
            BusinessRuleException: Booking is not RESERVED or belongs to someone else
            PaymentAlreadySubmittedException: Different evidence already attached
        """
        self.log_operation(
            "submit_payment", booking_id=data.booking_id, transaction_id=data.transaction_id
        )
        booking = self._get_booking(data.booking_id)
        if booking.student_id != data.student_id:
            raise BusinessRuleException(
                "Booking belongs to a different student", code="BOOKING_OWNER_MISMATCH"
            )

        existing = self.repository.get_for_booking(booking.id)
        if existing is not None:
            if existing.transaction_id == data.transaction_id:
                self.logger.info(f"Duplicate payment submission for booking {booking.id}")
                return existing
            raise PaymentAlreadySubmittedException(booking.id)

        if not booking.is_reserved:
            raise BusinessRuleException(
                f"Cannot attach payment to a {booking.status.lower()} booking",
                code="BOOKING_NOT_RESERVED",
            )

        with self.transaction():
            payment = self.repository.create(
                booking_id=booking.id,
                student_id=data.student_id,
                transaction_id=data.transaction_id,
                amount=data.amount,
                payment_date=data.payment_date,
                bank_name=data.bank_name,
                account_number=data.account_number,
                receipt_urls=list(data.receipt_urls),
                notes=data.notes,
            )
            booking.mark_payment_pending()

        notification_data = self._notification_data(payment, booking)
        self.notification_service.send(
            PAYMENT_SUBMITTED_STUDENT, data.student_email, notification_data
        )
        self.notification_service.notify_admin(PAYMENT_SUBMITTED_ADMIN, notification_data)
        return payment

    @BaseService.measure_operation("list_pending_payments")
    def list_pending_payments(self, limit: int = 100) -> List[Payment]:
        """Payments awaiting admin review, oldest first."""
        return self.repository.get_pending(limit=limit)

    @BaseService.measure_operation("approve_payment")
    def approve_payment(self, payment_id: str, notes: Optional[str] = None) -> Payment:
        payment = self._get_payment(payment_id)
        if not payment.is_pending:
            raise BusinessRuleException(
                f"Payment already {payment.status.lower()}", code="PAYMENT_ALREADY_REVIEWED"
            )
        booking = self._get_booking(payment.booking_id)

        self.log_operation("approve_payment", payment_id=payment_id, booking_id=booking.id)
        with self.transaction():
            payment.approve(notes)
            booking.confirm()

        self.notification_service.notify_admin(
            PAYMENT_APPROVED, self._notification_data(payment, booking)
        )
        return payment

    @BaseService.measure_operation("reject_payment")
    def reject_payment(self, payment_id: str, reason: str) -> Payment:
        if not reason or not reason.strip():
            raise BusinessRuleException("Rejection reason is required", code="REASON_REQUIRED")
        payment = self._get_payment(payment_id)
        if not payment.is_pending:
            raise BusinessRuleException(
                f"Payment already {payment.status.lower()}", code="PAYMENT_ALREADY_REVIEWED"
            )
        booking = self._get_booking(payment.booking_id)

        self.log_operation("reject_payment", payment_id=payment_id, booking_id=booking.id)
        with self.transaction():
            payment.reject(reason.strip())
            booking.cancel(reason.strip())

        self.notification_service.notify_admin(
            PAYMENT_REJECTED, {**self._notification_data(payment, booking), "reason": reason}
        )
        return payment
