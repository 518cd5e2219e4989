# backend/tutorhub/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_BOOKING_HORIZON_DAYS, MAX_RECEIPT_BYTES


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


_BACKEND_ROOT = Path(__file__).resolve().parents[2]

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = _BACKEND_ROOT / ".env"
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["local", "test", "staging", "production"] = Field(
        default="local", description="Deployment environment"
    )

    # Database
    database_url: str = Field(
        default=f"sqlite:///{_BACKEND_ROOT / 'tutorhub.db'}",
        description="SQLAlchemy URL for the booking store",
    )
    database_echo: bool = Field(default=False, description="Log emitted SQL statements")

    # Booking rules
    booking_horizon_days: int = Field(
        default=DEFAULT_BOOKING_HORIZON_DAYS,
        ge=1,
        le=365,
        description="How many days ahead a student may book",
    )

    # Receipt uploads
    max_receipt_bytes: int = Field(
        default=MAX_RECEIPT_BYTES, gt=0, description="Per-file receipt size limit"
    )
    receipt_upload_dir: str = Field(
        default=str(_BACKEND_ROOT / "uploads" / "receipts"),
        description="Directory receipts are written to",
    )
    receipt_public_prefix: str = Field(
        default="/uploads/receipts", description="Public URL prefix for stored receipts"
    )

    # Client-side gateway
    api_base_url: str = Field(
        default="http://localhost:8000/api/v1", description="Booking store API base URL"
    )
    http_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout for each booking store call; calls are attempted once",
    )

    # Notifications
    notifications_enabled: bool = Field(default=True)
    admin_email: str = Field(default="admin@tutorhub.example", alias="ADMIN_EMAIL")

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("api_base_url", "receipt_public_prefix")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


def get_settings() -> Settings:
    """Return the process-wide settings (FastAPI dependency)."""
    return settings


settings = Settings()
if is_running_tests():
    settings.notifications_enabled = False

logger.info(
    "[CONFIG] environment=%s horizon_days=%s max_receipt_bytes=%s",
    settings.environment,
    settings.booking_horizon_days,
    settings.max_receipt_bytes,
)

__all__ = ["Settings", "get_settings", "is_running_tests", "settings"]