"""
Database models for the tutorhub platform.

- TeacherAvailability: weekly recurring windows
- Booking: reserved lesson slots
- Payment: bank-transfer evidence awaiting admin review
"""

from .availability import TeacherAvailability
from .booking import ACTIVE_STATUSES, Booking, BookingStatus, PaymentStatus
from .payment import Payment, PaymentReviewStatus

__all__ = [
    "ACTIVE_STATUSES",
    "Booking",
    "BookingStatus",
    "Payment",
    "PaymentReviewStatus",
    "PaymentStatus",
    "TeacherAvailability",
]
