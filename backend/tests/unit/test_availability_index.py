from datetime import date, time, timedelta

from tutorhub.booking_flow.availability_index import AvailabilityIndex
from tutorhub.booking_flow.models import AvailabilityWindow
from tutorhub.core.time_utils import day_of_week

TEACHER = "teacher-1"
TODAY = date(2024, 6, 3)  # Monday


def _index(*windows, horizon_days=30):
    return AvailabilityIndex(windows, horizon_days=horizon_days, today=lambda: TODAY)


def _window(day, start, end, teacher_id=TEACHER):
    return AvailabilityWindow(
        teacher_id=teacher_id, day_of_week=day, start_time=start, end_time=end
    )


def test_slots_for_matching_weekday_ordered_by_start():
    wednesday = TODAY + timedelta(days=2)
    index = _index(
        _window(3, time(14), time(15)),
        _window(3, time(9), time(10)),
        _window(4, time(9), time(10)),
    )

    slots = index.slots_for(TEACHER, wednesday)

    assert [s.label for s in slots] == ["09:00 - 10:00", "14:00 - 15:00"]
    assert all(s.date == wednesday for s in slots)
    assert slots[0].duration_minutes == 60


def test_overlapping_windows_are_independent_slots():
    index = _index(_window(1, time(9), time(10)), _window(1, time(9, 30), time(10, 30)))
    assert len(index.slots_for(TEACHER, TODAY)) == 2


def test_no_windows_that_day_is_empty_not_error():
    index = _index(_window(3, time(9), time(10)))
    assert index.slots_for(TEACHER, TODAY) == []
    assert index.slots_for("someone-else", TODAY) == []


def test_past_dates_and_dates_beyond_horizon_have_no_slots():
    index = _index(*[_window(d, time(9), time(10)) for d in range(7)], horizon_days=30)

    assert index.slots_for(TEACHER, TODAY - timedelta(days=1)) == []
    assert index.slots_for(TEACHER, TODAY + timedelta(days=31)) == []
    assert len(index.slots_for(TEACHER, TODAY)) == 1
    assert len(index.slots_for(TEACHER, TODAY + timedelta(days=30))) == 1


def test_slots_for_is_idempotent():
    index = _index(_window(1, time(9), time(10)))
    assert index.slots_for(TEACHER, TODAY) == index.slots_for(TEACHER, TODAY)


def test_load_replaces_snapshot_and_offers():
    index = _index(_window(1, time(9), time(10)))
    assert index.offers(TEACHER, TODAY, "09:00 - 10:00")

    index.load(TEACHER, [_window(1, time(16), time(17))])

    assert not index.offers(TEACHER, TODAY, "09:00 - 10:00")
    assert index.offers(TEACHER, TODAY, "16:00 - 17:00")


def test_bookable_dates_follow_weekdays():
    index = _index(_window(5, time(9), time(10)), horizon_days=14)
    dates = index.bookable_dates(TEACHER)
    assert dates and all(day_of_week(d) == 5 for d in dates)
    assert len(dates) == 2
