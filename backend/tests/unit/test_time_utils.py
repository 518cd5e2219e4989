from datetime import date, datetime, time

import pytest

from tutorhub.core.time_utils import (
    day_of_week,
    duration_minutes,
    format_time_slot,
    parse_hhmm,
    parse_time_slot,
    slot_bounds,
)


def test_parse_time_slot_round_trips_label():
    start, end = parse_time_slot("09:00 - 10:30")
    assert (start, end) == (time(9), time(10, 30))
    assert format_time_slot(start, end) == "09:00 - 10:30"


@pytest.mark.parametrize("label", ["", "09:00", "10:00 - 09:00", "09:00 - 09:00", "9am - 10am"])
def test_parse_time_slot_rejects_bad_labels(label):
    with pytest.raises(ValueError):
        parse_time_slot(label)


def test_parse_hhmm_rejects_out_of_range():
    with pytest.raises(ValueError):
        parse_hhmm("24:00")


def test_day_of_week_is_sunday_based():
    # 2024-06-02 was a Sunday, 2024-06-08 a Saturday
    assert day_of_week(date(2024, 6, 2)) == 0
    assert day_of_week(date(2024, 6, 3)) == 1
    assert day_of_week(date(2024, 6, 8)) == 6


def test_slot_bounds_and_duration():
    start, end = slot_bounds(date(2024, 6, 3), "14:00 - 15:30")
    assert start == datetime(2024, 6, 3, 14, 0)
    assert end == datetime(2024, 6, 3, 15, 30)
    assert duration_minutes(start.time(), end.time()) == 90
