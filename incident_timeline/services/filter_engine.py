#!/usr/bin/env python3
"""
Filter Engine - record subsets for a filter specification

Every variant except AllRecords drops records with an unknown time. Matches
keep their original relative order.

Window shapes differ by variant:

- RelativeWindow: ``[today - N units, today]``, closed on both ends, where
  ``today`` is local midnight. Records later today than midnight fall
  outside the window. This asymmetry with the half-open period windows is
  kept as observed in the source application.
- CustomDate: ``[day, day + 1 day)``
- ExplicitRange: ``[start, end + 1 day)``
- PeriodFilter: the period calculator's half-open window
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional, Sequence

from dateutil import parser as date_parser

from core.exceptions import InvalidWindowError

from ..models.incident_models import (
    AllRecords, CustomDate, DateInput, ExplicitRange, FilterSpec,
    IncidentRecord, PeriodFilter, PeriodKind, RelativeKind, RelativeWindow
)
from .period_calculator import add_months, compute_window, truncate_to_midnight

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class ResolvedWindow:
    """Concrete bounds for a filter; ``inclusive_end`` marks closed windows"""
    start: datetime
    end: datetime
    inclusive_end: bool = False

    def contains(self, moment: datetime) -> bool:
        if moment < self.start:
            return False
        return moment <= self.end if self.inclusive_end else moment < self.end


def parse_filter_date(value: DateInput) -> datetime:
    """
    Local midnight for a date input

    Raises:
        InvalidWindowError: Missing or unparseable input
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidWindowError("Missing date input")

    if isinstance(value, (date, datetime)):
        return truncate_to_midnight(value)

    text = value.strip()
    try:
        # Date pickers send YYYY-MM-DD; read it as a local calendar day
        parsed = date_parser.isoparse(text)
    except ValueError:
        try:
            parsed = date_parser.parse(text)
        except (ValueError, OverflowError) as e:
            raise InvalidWindowError(f"Unparseable date input {text!r}: {e}")
    return truncate_to_midnight(parsed)


def relative_start(kind: RelativeKind, count: int, today: datetime) -> datetime:
    """First instant of a rolling lookback ending at ``today``"""
    if kind == RelativeKind.DAY:
        return today - timedelta(days=count)
    if kind == RelativeKind.WEEK:
        return today - timedelta(days=7 * count)
    if kind == RelativeKind.MONTH:
        return add_months(today, -count)
    return add_months(today, -12 * count)


def resolve_window(spec: FilterSpec, now: Optional[datetime] = None) -> Optional[ResolvedWindow]:
    """
    Concrete bounds for a filter specification

    Returns:
        None for AllRecords

    Raises:
        InvalidWindowError: The specification cannot produce a window
    """
    if isinstance(spec, AllRecords):
        return None

    if isinstance(spec, RelativeWindow):
        if spec.count < 1:
            raise InvalidWindowError(f"Lookback count must be positive: {spec.count}", spec.name)
        today = truncate_to_midnight(now or datetime.now())
        return ResolvedWindow(relative_start(spec.kind, spec.count, today), today, inclusive_end=True)

    if isinstance(spec, CustomDate):
        day = parse_filter_date(spec.day)
        return ResolvedWindow(day, day + ONE_DAY)

    if isinstance(spec, ExplicitRange):
        start = parse_filter_date(spec.start)
        end = parse_filter_date(spec.end) + ONE_DAY
        if end <= start:
            raise InvalidWindowError(f"Range ends before it starts: {spec.start} - {spec.end}", spec.name)
        return ResolvedWindow(start, end)

    if isinstance(spec, PeriodFilter):
        anchor = parse_filter_date(spec.anchor) if spec.anchor is not None else (now or datetime.now())
        window = compute_window(spec.kind, anchor)
        return ResolvedWindow(window.start, window.end)

    raise InvalidWindowError(f"Unsupported filter: {type(spec).__name__}")


def build_predicate(spec: FilterSpec, now: Optional[datetime] = None) -> Callable[[IncidentRecord], bool]:
    """
    Predicate for a filter specification

    An invalid window yields a predicate that matches nothing.
    """
    if not spec.requires_known_time:
        return lambda record: True

    try:
        window = resolve_window(spec, now)
    except InvalidWindowError as e:
        logger.warning(f"Filter '{spec.name}' matches nothing: {e.message}")
        return lambda record: False

    def predicate(record: IncidentRecord) -> bool:
        moment = record.local_timestamp
        return moment is not None and window.contains(moment)

    return predicate


def apply_filter(
    records: Iterable[IncidentRecord],
    spec: FilterSpec,
    now: Optional[datetime] = None
) -> List[IncidentRecord]:
    """
    Records matching the filter, in their original relative order

    Args:
        records: Full record set
        spec: Active filter specification
        now: Reference time for relative windows (defaults to the current time)
    """
    predicate = build_predicate(spec, now)
    return [record for record in records if predicate(record)]


def order_chronologically(records: Sequence[IncidentRecord]) -> List[IncidentRecord]:
    """
    Stable chronological order for playback and the timeline listing

    Records with an unknown time sort first; ties keep source order.
    """
    return sorted(
        records,
        key=lambda record: (record.local_timestamp is not None, record.local_timestamp or datetime.min)
    )


FILTER_NAMES = {
    'all': lambda **_: AllRecords(),
    'last-day': lambda **_: RelativeWindow(RelativeKind.DAY),
    'last-week': lambda **_: RelativeWindow(RelativeKind.WEEK),
    'last-month': lambda **_: RelativeWindow(RelativeKind.MONTH),
    'last-year': lambda **_: RelativeWindow(RelativeKind.YEAR),
    'custom-date': lambda custom_date=None, **_: CustomDate(custom_date),
    'date-range': lambda start_date=None, end_date=None, **_: ExplicitRange(start_date, end_date),
}


def filter_spec_from_name(
    name: str,
    custom_date: DateInput = None,
    start_date: DateInput = None,
    end_date: DateInput = None,
    anchor: DateInput = None
) -> FilterSpec:
    """
    Map a filter selector name onto a specification

    Period names (day, week, month, quarter, year) use ``anchor``. Unknown
    names fall back to AllRecords.
    """
    key = (name or 'all').strip().lower()

    if key in FILTER_NAMES:
        return FILTER_NAMES[key](custom_date=custom_date, start_date=start_date, end_date=end_date)

    try:
        return PeriodFilter(PeriodKind(key), anchor)
    except ValueError:
        logger.debug(f"Unknown filter name {name!r}; showing all records")
        return AllRecords()
