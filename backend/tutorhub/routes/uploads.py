# backend/tutorhub/routes/uploads.py
"""
Receipt upload route.

Endpoints:
    POST /uploads/receipt - Store one image or PDF receipt, return its URL
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from ..api.dependencies import get_receipt_storage
from ..core.config import Settings, get_settings
from ..core.exceptions import DomainException
from ..core.receipt_files import ReceiptFileRejected, detect_receipt_kind
from ..schemas.upload import ReceiptUploadResponse
from ..services.storage_service import ReceiptStorage
from . import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post(
    "/receipt",
    response_model=ReceiptUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_receipt(
    file: UploadFile = File(...),
    storage: ReceiptStorage = Depends(get_receipt_storage),
    config: Settings = Depends(get_settings),
) -> ReceiptUploadResponse:
    data = await file.read(config.max_receipt_bytes + 1)
    if len(data) > config.max_receipt_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={"message": "File too large", "code": "RECEIPT_TOO_LARGE"},
        )
    try:
        kind = detect_receipt_kind(data, file.content_type, max_bytes=config.max_receipt_bytes)
    except ReceiptFileRejected as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc), "code": "RECEIPT_REJECTED"},
        ) from exc

    try:
        stored = storage.store(data, kind.content_type, file.filename)
    except DomainException as e:
        handle_domain_exception(e)

    return ReceiptUploadResponse(
        url=stored.url,
        file_name=stored.file_name,
        size=stored.size,
        content_type=stored.content_type,
    )
