from datetime import time
from pathlib import Path

import pytest

from tests.helpers.builders import TEACHER_ID
from tutorhub.core.config import Settings
from tutorhub.core.exceptions import ServiceException
from tutorhub.schemas.availability import AvailabilityWindowIn
from tutorhub.services.availability_service import AvailabilityService
from tutorhub.services.notification_service import NotificationService
from tutorhub.services.storage_service import ReceiptStorage


class RecordingProvider:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send_template(self, to_email, template_name, context):
        if self.fail:
            raise ConnectionError("smtp down")
        self.sent.append((to_email, template_name, dict(context)))
        return True


def _config(**overrides) -> Settings:
    return Settings(notifications_enabled=True, **overrides)


class TestAvailabilityService:
    def test_replace_swaps_all_windows(self, db):
        service = AvailabilityService(db)
        service.replace_teacher_availability(
            TEACHER_ID,
            [AvailabilityWindowIn(day_of_week=1, start_time=time(9), end_time=time(10))],
        )
        rows = service.replace_teacher_availability(
            TEACHER_ID,
            [
                AvailabilityWindowIn(day_of_week=2, start_time=time(14), end_time=time(15)),
                AvailabilityWindowIn(day_of_week=3, start_time=time(16), end_time=time(17)),
            ],
        )

        assert len(rows) == 2
        stored = service.get_teacher_availability(TEACHER_ID)
        assert sorted(w.day_of_week for w in stored) == [2, 3]

    def test_replace_with_nothing_clears(self, db):
        service = AvailabilityService(db)
        service.replace_teacher_availability(
            TEACHER_ID,
            [AvailabilityWindowIn(day_of_week=1, start_time=time(9), end_time=time(10))],
        )
        service.replace_teacher_availability(TEACHER_ID, [])
        assert service.get_teacher_availability(TEACHER_ID) == []

    def test_window_order_validated(self):
        with pytest.raises(ValueError):
            AvailabilityWindowIn(day_of_week=1, start_time=time(10), end_time=time(9))


class TestNotificationService:
    def test_sends_through_provider(self):
        provider = RecordingProvider()
        service = NotificationService(provider=provider, config=_config())

        assert service.send("payment_approved", "a@example.com", {"booking_id": "b1"})
        assert provider.sent == [("a@example.com", "payment_approved", {"booking_id": "b1"})]

    def test_provider_failure_is_contained(self, caplog):
        service = NotificationService(provider=RecordingProvider(fail=True), config=_config())

        assert service.send("payment_approved", "a@example.com", {}) is False
        assert "smtp down" in caplog.text

    def test_disabled(self):
        provider = RecordingProvider()
        service = NotificationService(
            provider=provider, config=Settings(notifications_enabled=False)
        )
        assert service.send("payment_approved", "a@example.com", {}) is False
        assert provider.sent == []

    def test_missing_recipient(self):
        service = NotificationService(provider=RecordingProvider(), config=_config())
        assert service.send("payment_submitted_student", None, {}) is False

    def test_admin_recipient_from_settings(self):
        provider = RecordingProvider()
        service = NotificationService(
            provider=provider, config=_config(ADMIN_EMAIL="ops@example.com")
        )
        service.notify_admin("payment_submitted_admin", {})
        assert provider.sent[0][0] == "ops@example.com"


class TestReceiptStorage:
    def test_store_writes_file_and_returns_url(self, tmp_path, png_bytes):
        storage = ReceiptStorage(base_dir=tmp_path)

        stored = storage.store(png_bytes, "image/png", "photo.PNG")

        assert stored.url.startswith("/uploads/receipts/receipt-")
        assert stored.file_name.endswith(".png")
        assert (tmp_path / stored.file_name).read_bytes() == png_bytes
        assert stored.size == len(png_bytes)

    def test_names_are_unique(self, tmp_path, pdf_bytes):
        storage = ReceiptStorage(base_dir=tmp_path)
        first = storage.store(pdf_bytes, "application/pdf")
        second = storage.store(pdf_bytes, "application/pdf")
        assert first.file_name != second.file_name
        assert first.file_name.endswith(".pdf")

    def test_write_failure(self, tmp_path, pdf_bytes):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        storage = ReceiptStorage(base_dir=Path(blocker))

        with pytest.raises(ServiceException) as exc_info:
            storage.store(pdf_bytes, "application/pdf")
        assert exc_info.value.code == "UPLOAD_FAILED"
