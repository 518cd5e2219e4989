# backend/tests/conftest.py
"""
Pytest configuration.

Environment is pinned before any tutorhub import so settings pick up an
in-memory database and notifications stay off.
"""

import os

# Set testing mode BEFORE any tutorhub imports
os.environ["CI"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["NOTIFICATIONS_ENABLED"] = "false"

from datetime import date, time, timedelta
from typing import Generator, List

import pytest
from sqlalchemy.orm import Session

from tests.helpers.builders import PDF_BYTES, PRICE, STUDENT_A, TEACHER_ID, make_image_bytes
from tests.helpers.fake_gateway import FakeGateway
from tutorhub.booking_flow.models import BookingContext, TeacherSummary
from tutorhub.core.config import settings
from tutorhub.core.time_utils import day_of_week
from tutorhub.database import Base, SessionLocal, engine
from tutorhub.models.availability import TeacherAvailability


@pytest.fixture(autouse=True)
def _receipt_dir(tmp_path, monkeypatch):
    """Keep uploaded receipts inside the test's tmp dir."""
    monkeypatch.setattr(settings, "receipt_upload_dir", str(tmp_path / "receipts"))
    yield


@pytest.fixture
def db() -> Generator[Session, None, None]:
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def today() -> date:
    return date.today()


@pytest.fixture
def lesson_date(today: date) -> date:
    """A date one week out, always inside the booking horizon."""
    return today + timedelta(days=7)


@pytest.fixture
def teacher_windows(db: Session, lesson_date: date) -> List[TeacherAvailability]:
    """09:00-10:00 and 10:00-11:30 on the lesson weekday."""
    weekday = day_of_week(lesson_date)
    rows = [
        TeacherAvailability(
            teacher_id=TEACHER_ID, day_of_week=weekday, start_time=time(9), end_time=time(10)
        ),
        TeacherAvailability(
            teacher_id=TEACHER_ID,
            day_of_week=weekday,
            start_time=time(10),
            end_time=time(11, 30),
        ),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture
def teacher() -> TeacherSummary:
    return TeacherSummary(id=TEACHER_ID, name="Sara Ahmed", hourly_rate=PRICE)


@pytest.fixture
def context() -> BookingContext:
    return BookingContext(student_id=STUDENT_A, name="Omar", email="omar@example.com")


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def pdf_bytes() -> bytes:
    return PDF_BYTES
