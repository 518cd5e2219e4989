from datetime import datetime, time, timedelta

import pytest

from tests.helpers.builders import STUDENT_A, STUDENT_B, TEACHER_ID, at
from tutorhub.core.exceptions import (
    BookingConflictException,
    BusinessRuleException,
    NotFoundException,
    OutsideAvailabilityException,
)
from tutorhub.models.booking import Booking, BookingStatus
from tutorhub.repositories.booking_repository import BookingRepository
from tutorhub.schemas.booking import BookingCreate, SlotProbeRequest
from tutorhub.services.booking_service import BookingService


def _request(lesson_date, student_id=STUDENT_A, start=(9, 0), end=(10, 0)) -> BookingCreate:
    return BookingCreate(
        teacher_id=TEACHER_ID,
        student_id=student_id,
        start_time=at(lesson_date, *start),
        end_time=at(lesson_date, *end),
    )


class BlindBookingRepository(BookingRepository):
    """Skips the overlap query so only the unique index can catch a duplicate."""

    def get_overlapping(self, *args, **kwargs):
        return []


@pytest.mark.usefixtures("teacher_windows")
class TestCreateBooking:
    def test_creates_reserved_booking(self, db, lesson_date):
        booking = BookingService(db).create_booking(_request(lesson_date))

        assert booking.id
        assert booking.status == BookingStatus.RESERVED.value
        assert booking.start_time == at(lesson_date, 9)
        assert db.query(Booking).count() == 1

    def test_same_interval_twice_conflicts(self, db, lesson_date):
        service = BookingService(db)
        service.create_booking(_request(lesson_date))

        with pytest.raises(BookingConflictException) as exc_info:
            service.create_booking(_request(lesson_date, student_id=STUDENT_B))

        assert exc_info.value.message == "This time slot is already booked"
        assert exc_info.value.code == "BOOKING_CONFLICT"
        assert db.query(Booking).count() == 1

    def test_overlapping_interval_conflicts(self, db, lesson_date):
        service = BookingService(db)
        service.create_booking(_request(lesson_date, start=(10, 0), end=(11, 30)))

        with pytest.raises(BookingConflictException):
            service.create_booking(
                _request(lesson_date, student_id=STUDENT_B, start=(10, 30), end=(11, 30))
            )

    def test_adjacent_intervals_do_not_conflict(self, db, lesson_date):
        service = BookingService(db)
        service.create_booking(_request(lesson_date))
        second = service.create_booking(
            _request(lesson_date, student_id=STUDENT_B, start=(10, 0), end=(11, 30))
        )
        assert second.is_reserved

    def test_unique_index_is_the_final_gate(self, db, lesson_date):
        BookingService(db).create_booking(_request(lesson_date))
        blind = BookingService(db, repository=BlindBookingRepository(db))

        with pytest.raises(BookingConflictException) as exc_info:
            blind.create_booking(_request(lesson_date, student_id=STUDENT_B))

        assert exc_info.value.code == "BOOKING_CONFLICT"
        assert db.query(Booking).count() == 1

    def test_cancelled_booking_releases_the_slot(self, db, lesson_date):
        service = BookingService(db)
        first = service.create_booking(_request(lesson_date))
        first.cancel("payment rejected")
        db.commit()

        again = BookingService(db, repository=BlindBookingRepository(db)).create_booking(
            _request(lesson_date, student_id=STUDENT_B)
        )
        assert again.student_id == STUDENT_B

    def test_past_slot_rejected(self, db, lesson_date):
        service = BookingService(db, clock=lambda: at(lesson_date, 9, 30))

        with pytest.raises(BusinessRuleException) as exc_info:
            service.create_booking(_request(lesson_date))

        assert exc_info.value.code == "SLOT_IN_PAST"

    def test_day_without_windows(self, db, lesson_date):
        with pytest.raises(OutsideAvailabilityException) as exc_info:
            BookingService(db).create_booking(
                BookingCreate(
                    teacher_id=TEACHER_ID,
                    student_id=STUDENT_A,
                    start_time=at(lesson_date + timedelta(days=1), 9),
                    end_time=at(lesson_date + timedelta(days=1), 10),
                )
            )
        assert exc_info.value.message == "Teacher not available on this day"

    def test_interval_spanning_two_windows_rejected(self, db, lesson_date):
        with pytest.raises(OutsideAvailabilityException) as exc_info:
            BookingService(db).create_booking(_request(lesson_date, start=(9, 30), end=(10, 30)))
        assert exc_info.value.message == "Time slot outside teacher's availability"

    def test_aware_datetimes_stored_as_wall_clock(self, db, lesson_date):
        from datetime import timezone

        booking = BookingService(db).create_booking(
            BookingCreate(
                teacher_id=TEACHER_ID,
                student_id=STUDENT_A,
                start_time=datetime.combine(lesson_date, time(9), tzinfo=timezone.utc),
                end_time=datetime.combine(lesson_date, time(10), tzinfo=timezone.utc),
            )
        )
        assert booking.start_time.tzinfo is None
        assert booking.start_time == at(lesson_date, 9)


@pytest.mark.usefixtures("teacher_windows")
class TestProbeSlot:
    def test_free_slot(self, db, lesson_date):
        result = BookingService(db).probe_slot(
            SlotProbeRequest(teacher_id=TEACHER_ID, date=lesson_date, time_slot="09:00 - 10:00")
        )
        assert result.available
        assert result.reason is None

    def test_taken_slot(self, db, lesson_date):
        service = BookingService(db)
        service.create_booking(_request(lesson_date))

        result = service.probe_slot(
            SlotProbeRequest(teacher_id=TEACHER_ID, date=lesson_date, time_slot="09:00 - 10:00")
        )
        assert not result.available
        assert result.reason == "This time slot is already booked"

    def test_probe_never_writes(self, db, lesson_date):
        BookingService(db).probe_slot(
            SlotProbeRequest(teacher_id=TEACHER_ID, date=lesson_date, time_slot="09:00 - 10:00")
        )
        assert db.query(Booking).count() == 0

    def test_outside_availability(self, db, lesson_date):
        result = BookingService(db).probe_slot(
            SlotProbeRequest(teacher_id=TEACHER_ID, date=lesson_date, time_slot="13:00 - 14:00")
        )
        assert not result.available
        assert result.reason == "Time slot outside teacher's availability"


def test_get_booking_not_found(db):
    with pytest.raises(NotFoundException) as exc_info:
        BookingService(db).get_booking("01J0MISSING000000000000000")
    assert exc_info.value.code == "BOOKING_NOT_FOUND"


def test_booking_create_rejects_reversed_interval(lesson_date):
    with pytest.raises(ValueError):
        _request(lesson_date, start=(10, 0), end=(9, 0))
