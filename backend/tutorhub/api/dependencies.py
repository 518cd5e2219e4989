# backend/tutorhub/api/dependencies.py
"""
Service layer dependencies for dependency injection.

Each factory builds a service bound to the request's database session.
"""

from functools import lru_cache
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db as original_get_db
from ..services.availability_service import AvailabilityService
from ..services.booking_service import BookingService
from ..services.notification_service import NotificationService
from ..services.payment_service import PaymentService
from ..services.storage_service import ReceiptStorage


def get_db() -> Generator[Session, None, None]:
    """Database session that is closed after the request."""
    yield from original_get_db()


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    return NotificationService()


@lru_cache(maxsize=1)
def get_receipt_storage() -> ReceiptStorage:
    return ReceiptStorage()


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> BookingService:
    return BookingService(db, availability_service=availability_service)


def get_payment_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> PaymentService:
    return PaymentService(db, notification_service=notification_service)
