# backend/tutorhub/routes/payments.py
"""
Payment evidence routes.

Endpoints:
    POST /payments - Attach bank-transfer evidence to a reserved booking
    GET /admin/payments/pending - Payments awaiting review, oldest first
    POST /admin/payments/{payment_id}/approve - Confirm the booking
    POST /admin/payments/{payment_id}/reject - Cancel the booking and release the slot
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ..api.dependencies import get_payment_service
from ..core.exceptions import DomainException
from ..schemas.payment import (
    PaymentApproveRequest,
    PaymentRejectRequest,
    PaymentResponse,
    PaymentSubmitRequest,
    PaymentSubmitResponse,
)
from ..services.payment_service import PaymentService
from . import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments"])
admin_router = APIRouter(prefix="/admin/payments", tags=["admin-payments"])


@router.post(
    "/payments",
    response_model=PaymentSubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_payment(
    payload: PaymentSubmitRequest = Body(...),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentSubmitResponse:
    try:
        payment = payment_service.submit_payment(payload)
        return PaymentSubmitResponse(
            payment_id=payment.id, booking_id=payment.booking_id, status=payment.status
        )
    except DomainException as e:
        handle_domain_exception(e)


@admin_router.get("/pending", response_model=List[PaymentResponse])
async def list_pending_payments(
    limit: int = Query(100, ge=1, le=500),
    payment_service: PaymentService = Depends(get_payment_service),
) -> List[PaymentResponse]:
    try:
        return [
            PaymentResponse.model_validate(payment)
            for payment in payment_service.list_pending_payments(limit)
        ]
    except DomainException as e:
        handle_domain_exception(e)


@admin_router.post("/{payment_id}/approve", response_model=PaymentResponse)
async def approve_payment(
    payment_id: str,
    payload: Optional[PaymentApproveRequest] = Body(None),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    try:
        return PaymentResponse.model_validate(
            payment_service.approve_payment(payment_id, payload.notes if payload else None)
        )
    except DomainException as e:
        handle_domain_exception(e)


@admin_router.post("/{payment_id}/reject", response_model=PaymentResponse)
async def reject_payment(
    payment_id: str,
    payload: PaymentRejectRequest = Body(...),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    try:
        return PaymentResponse.model_validate(
            payment_service.reject_payment(payment_id, payload.reason)
        )
    except DomainException as e:
        handle_domain_exception(e)
