"""Service layer for the booking store."""

from .availability_service import AvailabilityService
from .base import BaseService
from .booking_service import BookingService
from .notification_service import NotificationService
from .payment_service import PaymentService
from .storage_service import ReceiptStorage, StoredReceipt

__all__ = [
    "AvailabilityService",
    "BaseService",
    "BookingService",
    "NotificationService",
    "PaymentService",
    "ReceiptStorage",
    "StoredReceipt",
]
