"""Date helpers — pure functions answering "is this today / overdue / how far away".

Every function takes an optional `now` so callers (and tests) can pin the
clock. Values may be `date` or `datetime`; calendar comparisons use the day only.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta


def _day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now()


def same_day(a: date | datetime, b: date | datetime) -> bool:
    """True when both values fall on the same calendar day."""
    return _day(a) == _day(b)


def is_today(value: date | datetime, now: datetime | None = None) -> bool:
    return same_day(value, _now(now))


def is_tomorrow(value: date | datetime, now: datetime | None = None) -> bool:
    return _day(value) == _now(now).date() + timedelta(days=1)


def is_yesterday(value: date | datetime, now: datetime | None = None) -> bool:
    return _day(value) == _now(now).date() - timedelta(days=1)


def is_overdue(value: datetime, now: datetime | None = None) -> bool:
    """Strictly before now."""
    return value < _now(now)


def day_start(value: date | datetime) -> datetime:
    return datetime.combine(_day(value), time.min)


def day_end(value: date | datetime) -> datetime:
    return datetime.combine(_day(value), time.max)


def days_until(value: date | datetime, now: datetime | None = None) -> int:
    """Signed number of calendar days from today to value."""
    return (_day(value) - _now(now).date()).days


def format_date(value: date | datetime, now: datetime | None = None) -> str:
    """'Today', 'Tomorrow', 'Yesterday', or e.g. 'Mar 5, 2026'."""
    if is_today(value, now):
        return "Today"
    if is_tomorrow(value, now):
        return "Tomorrow"
    if is_yesterday(value, now):
        return "Yesterday"
    day = _day(value)
    return f"{day.strftime('%b')} {day.day}, {day.year}"


def format_time(value: datetime) -> str:
    """12-hour clock without a leading zero, e.g. '3:07 PM'."""
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {'AM' if value.hour < 12 else 'PM'}"


def format_datetime(value: datetime, now: datetime | None = None) -> str:
    return f"{format_date(value, now)} at {format_time(value)}"


def time_until(value: datetime, now: datetime | None = None) -> str:
    """Human-readable distance to value, largest whole unit only."""
    diff = value - _now(now)
    if diff < timedelta(0):
        return "Overdue"

    minutes = int(diff.total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days} day{'s' if days > 1 else ''}"
    if hours > 0:
        return f"{hours} hour{'s' if hours > 1 else ''}"
    if minutes > 0:
        return f"{minutes} minute{'s' if minutes > 1 else ''}"
    return "Now"


def datetime_from_time_string(time_str: str, base: date | datetime | None = None) -> datetime:
    """Combine an 'HH:MM' string with a base day (today by default).

    Raises ValueError on malformed input.
    """
    parsed = datetime.strptime(time_str.strip(), "%H:%M").time()
    day = _day(base) if base is not None else date.today()
    return datetime.combine(day, parsed)
