"""Time window arithmetic for period reports."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

END_OF_DAY = time(23, 59, 59)
ONE_SECOND = timedelta(seconds=1)


def day_window(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """Expand calendar dates to an inclusive ``[start 00:00:00, end 23:59:59]`` window."""

    return datetime.combine(start_date, time.min), datetime.combine(end_date, END_OF_DAY)


def inclusive_day_count(from_at: datetime, to_at: datetime) -> int:
    # timedelta.days floors, so an inverted window gives zero or fewer days.
    return (to_at - from_at).days + 1


def previous_window(from_at: datetime, to_at: datetime) -> tuple[datetime, datetime]:
    """Return the window of equal inclusive day count ending one second before ``from_at``.

    An inverted input window produces ``prev_to < prev_from``, which matches
    nothing when used as a range filter.
    """

    days = inclusive_day_count(from_at, to_at)
    return from_at - timedelta(days=days), from_at - ONE_SECOND
