"""
Date Alignment Helpers

Pure calendar arithmetic shared by the models, the stores and the
reconciliation engine.

WEEKDAY CONVENTION: The persisted settings use 0=Sunday ... 6=Saturday.
Python's date.weekday() uses 0=Monday ... 6=Sunday. Every conversion
between the two goes through weekday_index().

WEEK CONVENTION: A week starts on Monday. Two dates are in the same
week iff they share the same Monday. This holds even when the payment
weekday is not Monday (a Saturday and the following Monday are in
different weeks).

All values are naive calendar dates, so there is no time-of-day or
timezone component that could shift a date by one.
"""

import re
from datetime import date, timedelta

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

SUNDAY = 0
SATURDAY = 6


def weekday_index(day: date) -> int:
    """Weekday of `day` using 0=Sunday ... 6=Saturday."""
    return (day.weekday() + 1) % 7


def start_of_week(day: date) -> date:
    """Return the Monday on or before `day`."""
    return day - timedelta(days=day.weekday())


def same_week(a: date, b: date) -> bool:
    """True iff both dates fall in the same Monday-start week."""
    return start_of_week(a) == start_of_week(b)


def align_to_weekday(day: date, target_weekday: int) -> date:
    """
    Return the first date on or after `day` that falls on `target_weekday`.

    The result is always within [day, day + 6]. If `day` is already on
    the target weekday it is returned unchanged.

    Raises:
        ValueError: If target_weekday is outside 0-6
    """
    if not SUNDAY <= target_weekday <= SATURDAY:
        raise ValueError(f"Weekday must be between 0 and 6, got {target_weekday}")
    offset = (target_weekday - weekday_index(day)) % 7
    return day + timedelta(days=offset)


def parse_iso_date(value: str) -> date:
    """
    Parse a strict YYYY-MM-DD string.

    date.fromisoformat() alone also accepts compact and week-date forms,
    which are not valid in the stored data.

    Raises:
        ValueError: If the text is not a real YYYY-MM-DD date
    """
    text = value.strip()
    if not _ISO_DATE.match(text):
        raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}")
    return date.fromisoformat(text)


def to_iso(day: date) -> str:
    return day.isoformat()


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    first = date(year, month, 1)
    if month == 12:
        next_first = date(year + 1, 1, 1)
    else:
        next_first = date(year, month + 1, 1)
    return first, next_first - timedelta(days=1)


def months_touched(start: date, end: date) -> int:
    """Number of calendar months overlapped by [start, end], 0 if end < start."""
    if end < start:
        return 0
    return (end.year - start.year) * 12 + (end.month - start.month) + 1
