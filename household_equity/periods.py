"""
Calendar-month arithmetic.

Month differences ignore the day of month entirely: the 1st and the 28th of
the same month are 0 months apart.
"""

import calendar
from datetime import date


def month_index(value: date) -> int:
    """Absolute month number, so differences are plain subtraction."""
    return value.year * 12 + (value.month - 1)


def months_between(start: date, end: date) -> int:
    """(year diff * 12 + month diff) from start to end. Negative if end is earlier."""
    return month_index(end) - month_index(start)


def add_months(value: date, months: int) -> date:
    """
    Shift a date by whole calendar months.

    The day is clamped to the last day of the target month
    (Jan 31 + 1 month is Feb 28/29).
    """
    index = month_index(value) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def period_of(value: date) -> tuple[int, int]:
    """The (year, month) period a date belongs to."""
    return value.year, value.month
