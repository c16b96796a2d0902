"""Tests for ireminder.core.dates — pure date helpers."""

from datetime import date, datetime, timedelta

import pytest

from ireminder.core.dates import (
    datetime_from_time_string,
    day_end,
    day_start,
    days_until,
    format_date,
    format_datetime,
    format_time,
    is_overdue,
    is_today,
    is_tomorrow,
    is_yesterday,
    same_day,
    time_until,
)

NOW = datetime(2026, 3, 4, 11, 0)


class TestCalendarDay:
    def test_same_day_mixed_types(self):
        assert same_day(datetime(2026, 3, 4, 0, 0), date(2026, 3, 4))
        assert same_day(datetime(2026, 3, 4, 23, 59), datetime(2026, 3, 4, 0, 1))
        assert not same_day(datetime(2026, 3, 4, 23, 59), datetime(2026, 3, 5, 0, 1))

    def test_today_tomorrow_yesterday(self):
        assert is_today(datetime(2026, 3, 4, 23, 0), NOW)
        assert is_tomorrow(date(2026, 3, 5), NOW)
        assert is_yesterday(datetime(2026, 3, 3, 1, 0), NOW)
        assert not is_tomorrow(date(2026, 3, 6), NOW)

    def test_is_overdue_is_strict(self):
        assert is_overdue(NOW - timedelta(seconds=1), NOW)
        assert not is_overdue(NOW, NOW)

    def test_day_bounds(self):
        assert day_start(NOW) == datetime(2026, 3, 4)
        assert day_end(NOW) == datetime(2026, 3, 4, 23, 59, 59, 999999)

    def test_days_until(self):
        assert days_until(date(2026, 3, 7), NOW) == 3
        assert days_until(datetime(2026, 3, 3, 23, 0), NOW) == -1


class TestFormatting:
    def test_format_date_relative(self):
        assert format_date(NOW, NOW) == "Today"
        assert format_date(NOW + timedelta(days=1), NOW) == "Tomorrow"
        assert format_date(NOW - timedelta(days=1), NOW) == "Yesterday"

    def test_format_date_absolute(self):
        assert format_date(date(2026, 12, 25), NOW) == "Dec 25, 2026"

    def test_format_time(self):
        assert format_time(datetime(2026, 3, 4, 15, 7)) == "3:07 PM"
        assert format_time(datetime(2026, 3, 4, 0, 30)) == "12:30 AM"
        assert format_time(datetime(2026, 3, 4, 12, 0)) == "12:00 PM"

    def test_format_datetime(self):
        assert format_datetime(datetime(2026, 3, 5, 9, 15), NOW) == "Tomorrow at 9:15 AM"


class TestTimeUntil:
    @pytest.mark.parametrize("delta,expected", [
        (timedelta(seconds=-1), "Overdue"),
        (timedelta(seconds=30), "Now"),
        (timedelta(minutes=1), "1 minute"),
        (timedelta(minutes=59), "59 minutes"),
        (timedelta(hours=1), "1 hour"),
        (timedelta(hours=5, minutes=59), "5 hours"),
        (timedelta(days=1), "1 day"),
        (timedelta(days=3, hours=2), "3 days"),
    ])
    def test_units(self, delta, expected):
        assert time_until(NOW + delta, NOW) == expected


class TestTimeString:
    def test_combines_with_base(self):
        assert datetime_from_time_string("14:30", date(2026, 3, 4)) == datetime(2026, 3, 4, 14, 30)

    def test_base_datetime_uses_its_day(self):
        assert datetime_from_time_string("07:05", NOW) == datetime(2026, 3, 4, 7, 5)

    def test_malformed_raises(self):
        with pytest.raises(ValueError):
            datetime_from_time_string("quarter past")
