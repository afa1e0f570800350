"""
Date arithmetic for due-date scheduling.

All values are calendar dates; time of day never enters the calculation.
"""

from datetime import date, datetime, timedelta
from typing import Union

from dateutil.relativedelta import relativedelta

from loanbook.models.ledger import Terms


def as_date(value: Union[date, datetime]) -> date:
    """Drop the time component of a datetime; pass dates through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def next_due_date(origin: Union[date, datetime], terms: Terms) -> date:
    """
    Due date one term after ``origin``.

    Monthly adds one calendar month and clamps to the last day of a
    shorter month (Jan 31 -> Feb 28/29). The other terms add a fixed
    number of days.
    """
    origin = as_date(origin)
    if terms == Terms.MONTHLY:
        return origin + relativedelta(months=1)
    return origin + timedelta(days=terms.period_days)


def days_between(start: Union[date, datetime], end: Union[date, datetime]) -> int:
    """Whole days from ``start`` to ``end``; negative when ``end`` is earlier."""
    return (as_date(end) - as_date(start)).days


def add_days(start: Union[date, datetime], days: int) -> date:
    """Date calculator: ``start`` shifted by ``days``."""
    return as_date(start) + timedelta(days=days)
