from datetime import date

import pytest

from src.teacher_schedule.timeutil import (
    add_minutes,
    day_label,
    day_of_week_for,
    format_12h,
    is_within,
    next_week,
    previous_week,
    time_grid,
    to_minutes,
    week_dates,
    week_start_for,
)


def test_to_minutes_ignores_seconds():
    assert to_minutes("09:30") == 570
    assert to_minutes("09:30:59") == 570
    assert to_minutes("00:00") == 0


@pytest.mark.parametrize("bad", ["", "930", "ab:cd"])
def test_to_minutes_rejects_malformed(bad):
    with pytest.raises(ValueError):
        to_minutes(bad)


@pytest.mark.parametrize(
    "start,end",
    [("09:00", "09:30"), ("08:00", "22:00"), ("13:15:00", "14:45:00"), ("00:00", "00:01")],
)
def test_is_within_is_half_open(start, end):
    assert is_within(start, start, end) is True
    assert is_within(end, start, end) is False


def test_is_within_mixed_formats():
    assert is_within("10:15", "10:00:00", "10:30:00")
    assert not is_within("09:59", "10:00:00", "10:30:00")


def test_is_within_malformed_never_matches():
    assert is_within("nonsense", "09:00", "10:00") is False
    assert is_within("09:30", "09:00", "") is False
    assert is_within(None, "09:00", "10:00") is False


def test_add_minutes_wraps_midnight():
    assert add_minutes("09:30", 60) == "10:30"
    assert add_minutes("23:30", 60) == "00:30"
    assert add_minutes("09:30:00", 45) == "10:15"


def test_format_12h():
    assert format_12h("00:05") == "12:05 AM"
    assert format_12h("09:30:00") == "9:30 AM"
    assert format_12h("12:00") == "12:00 PM"
    assert format_12h("22:00") == "10:00 PM"


def test_default_time_grid_covers_8_to_22_inclusive():
    grid = time_grid()
    assert grid[0] == "08:00"
    assert grid[1] == "08:30"
    assert grid[-1] == "22:00"
    assert len(grid) == 29


def test_time_grid_rejects_non_positive_step():
    with pytest.raises(ValueError):
        time_grid("08:00", "09:00", 0)


def test_week_starts_on_sunday():
    sunday = date(2025, 3, 2)
    assert week_start_for(sunday) == sunday
    assert week_start_for(date(2025, 3, 5)) == sunday
    assert week_start_for(date(2025, 3, 8)) == sunday
    assert week_start_for(date(2025, 3, 9)) == date(2025, 3, 9)


def test_week_navigation():
    sunday = date(2025, 3, 2)
    assert next_week(sunday) == date(2025, 3, 9)
    assert previous_week(sunday) == date(2025, 2, 23)


def test_week_dates_numbering():
    dates = week_dates(date(2025, 3, 2))
    assert dates[0] == (1, date(2025, 3, 2))
    assert dates[-1] == (7, date(2025, 3, 8))
    assert [day_of_week_for(d) for _, d in dates] == [1, 2, 3, 4, 5, 6, 7]


def test_day_labels():
    assert day_label(1) == "Sunday"
    assert day_label(7, short=True) == "Sat"
