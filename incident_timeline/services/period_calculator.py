#!/usr/bin/env python3
"""
Period Calculator - calendar windows and anchor navigation

Windows are half-open ``[start, end)`` and computed from an anchor truncated
to local midnight.

Month arithmetic uses calendar rollover: the day of month is kept and a day
that does not exist in the target month spills into the following month.
Jan 31 plus one month is Mar 3 (Mar 2 in a leap year), and stepping back
from there gives Feb 3, not Jan 31. Navigation by month, quarter or year is
therefore not reversible for days 29-31 (and Feb 29 for years).
"""

from datetime import date, datetime, timedelta
from typing import Union

from ..models.incident_models import PeriodKind, PeriodWindow

AnchorInput = Union[date, datetime]

ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(days=7)

# Months per step for the calendar kinds
MONTH_STEPS = {
    PeriodKind.MONTH: 1,
    PeriodKind.QUARTER: 3,
    PeriodKind.YEAR: 12,
}


def truncate_to_midnight(anchor: AnchorInput) -> datetime:
    """Local midnight of the anchor's calendar day (naive)"""
    if isinstance(anchor, datetime):
        if anchor.tzinfo is not None:
            anchor = anchor.astimezone().replace(tzinfo=None)
        return anchor.replace(hour=0, minute=0, second=0, microsecond=0)
    if isinstance(anchor, date):
        return datetime(anchor.year, anchor.month, anchor.day)
    raise TypeError(f"Anchor must be a date or datetime, not {type(anchor).__name__}")


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by calendar months, rolling an overflowing day into the next month"""
    month_index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(month_index, 12)
    first_of_month = moment.replace(year=year, month=month + 1, day=1)
    return first_of_month + timedelta(days=moment.day - 1)


def _coerce_kind(kind) -> PeriodKind:
    return kind if isinstance(kind, PeriodKind) else PeriodKind(kind)


def compute_window(kind: Union[PeriodKind, str], anchor: AnchorInput) -> PeriodWindow:
    """
    Compute the period window containing the anchor

    Args:
        kind: day, week, month, quarter or year
        anchor: Any moment inside the wanted period

    Returns:
        Half-open PeriodWindow
    """
    kind = _coerce_kind(kind)
    day = truncate_to_midnight(anchor)

    if kind == PeriodKind.DAY:
        return PeriodWindow(day, day + ONE_DAY)

    if kind == PeriodKind.WEEK:
        # Monday is weekday() == 0; a Sunday anchor starts 6 days earlier
        start = day - timedelta(days=day.weekday())
        return PeriodWindow(start, start + ONE_WEEK)

    if kind == PeriodKind.MONTH:
        start = day.replace(day=1)
        return PeriodWindow(start, add_months(start, 1))

    if kind == PeriodKind.QUARTER:
        quarter = (day.month - 1) // 3
        start = day.replace(month=quarter * 3 + 1, day=1)
        return PeriodWindow(start, add_months(start, 3))

    start = day.replace(month=1, day=1)
    return PeriodWindow(start, start.replace(year=start.year + 1))


def _step(kind: PeriodKind, anchor: AnchorInput, direction: int) -> datetime:
    day = truncate_to_midnight(anchor)
    if kind == PeriodKind.DAY:
        return day + direction * ONE_DAY
    if kind == PeriodKind.WEEK:
        return day + direction * ONE_WEEK
    return add_months(day, direction * MONTH_STEPS[kind])


def next_anchor(kind: Union[PeriodKind, str], anchor: AnchorInput) -> datetime:
    """Anchor moved forward by one period unit"""
    return _step(_coerce_kind(kind), anchor, 1)


def previous_anchor(kind: Union[PeriodKind, str], anchor: AnchorInput) -> datetime:
    """Anchor moved back by one period unit"""
    return _step(_coerce_kind(kind), anchor, -1)


def describe_window(kind: Union[PeriodKind, str], window: PeriodWindow) -> str:
    """Short human label for a period window, e.g. ``Q1 2024`` or ``Mar 2024``"""
    kind = _coerce_kind(kind)
    start = window.start
    if kind == PeriodKind.DAY:
        return start.strftime('%a, %b %d, %Y')
    if kind == PeriodKind.WEEK:
        last_day = window.end - ONE_DAY
        return f"{start.strftime('%b %d')} - {last_day.strftime('%b %d, %Y')}"
    if kind == PeriodKind.MONTH:
        return start.strftime('%b %Y')
    if kind == PeriodKind.QUARTER:
        return f"Q{(start.month - 1) // 3 + 1} {start.year}"
    return str(start.year)
