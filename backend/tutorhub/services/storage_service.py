# backend/tutorhub/services/storage_service.py
"""
Local receipt storage: ``store(bytes) -> url``.

Files land in ``settings.receipt_upload_dir`` under a generated name and
are served from ``settings.receipt_public_prefix``.
"""

from dataclasses import dataclass
import logging
import mimetypes
from pathlib import Path
import time
from typing import Optional

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import ServiceException
from ..core.ulid_helper import generate_ulid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredReceipt:
    url: str
    file_name: str
    size: int
    content_type: str


class ReceiptStorage:
    def __init__(self, config: Optional[Settings] = None, base_dir: Optional[Path] = None):
        self.config = config or default_settings
        self.base_dir = Path(base_dir or self.config.receipt_upload_dir)

    def _extension(self, original_name: Optional[str], content_type: str) -> str:
        suffix = Path(original_name or "").suffix.lower()
        if suffix and len(suffix) <= 6:
            return suffix
        return mimetypes.guess_extension(content_type) or ".bin"

    def store(
        self, data: bytes, content_type: str, original_name: Optional[str] = None
    ) -> StoredReceipt:
        """Write ``data`` to disk and return its public URL."""
        file_name = (
            f"receipt-{int(time.time() * 1000)}-{generate_ulid().lower()}"
            f"{self._extension(original_name, content_type)}"
        )
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            (self.base_dir / file_name).write_bytes(data)
        except OSError as exc:
            logger.error("Failed to store receipt %s: %s", file_name, exc)
            raise ServiceException("Upload failed", code="UPLOAD_FAILED") from exc

        logger.info("Stored receipt %s (%d bytes)", file_name, len(data))
        return StoredReceipt(
            url=f"{self.config.receipt_public_prefix}/{file_name}",
            file_name=file_name,
            size=len(data),
            content_type=content_type,
        )
