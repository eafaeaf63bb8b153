# dates.py
# Day counting and date arithmetic used by the pricing core.
#
# Actual/365 Fixed throughout: one "annual-base unit" is DAY_COUNTER_BASE
# calendar days, so a length-2 maturity is exactly 730 days out.

from __future__ import annotations

import calendar
import datetime as dt

__all__ = ["DAY_COUNTER_BASE", "year_fraction", "add_period", "today"]

DAY_COUNTER_BASE = 365

_UNITS = ("days", "weeks", "months", "years")


def year_fraction(start: dt.date, end: dt.date) -> float:
    """Actual/365 Fixed year fraction; negative when ``end`` precedes ``start``."""
    return (end - start).days / float(DAY_COUNTER_BASE)


def _add_months(d: dt.date, n: int) -> dt.date:
    y = d.year + (d.month - 1 + n) // 12
    m = (d.month - 1 + n) % 12 + 1
    day = min(d.day, calendar.monthrange(y, m)[1])
    return dt.date(y, m, day)


def add_period(d: dt.date, count: int, unit: str) -> dt.date:
    """Shift ``d`` by ``count`` units.

    Month and year shifts keep the day of month, clamped to the end of the
    target month (31 Jan + 1 month -> 28/29 Feb).
    """
    if unit == "days":
        return d + dt.timedelta(days=count)
    if unit == "weeks":
        return d + dt.timedelta(weeks=count)
    if unit == "months":
        return _add_months(d, count)
    if unit == "years":
        return _add_months(d, 12 * count)
    raise ValueError(f"unit must be one of {_UNITS}, got {unit!r}")


def today() -> dt.date:
    return dt.date.today()
