#!/usr/bin/env python3
"""
Timestamp Normalizer - heterogeneous timestamp text to datetime

Order of attempts:

1. empty text is an unknown time, not a failure
2. text with an explicit UTC marker or offset goes to the ISO parser and
   keeps its offset
3. the spreadsheet export format ``M/D/YYYY H:MM:SS`` is built from local
   calendar fields with no offset conversion
4. anything else goes to the general dateutil parser, which must find a
   full calendar date; missing fields are never filled from a default

Unparseable text never defaults to now or to the epoch.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from dateutil import parser as date_parser

from ..models.incident_models import TimestampStatus

logger = logging.getLogger(__name__)


# Spreadsheet export format, e.g. "3/1/2024 8:05:00" or "12/31/2024 23:59:59"
SHEET_TIMESTAMP = re.compile(
    r'^(?P<month>\d{1,2})/(?P<day>\d{1,2})/(?P<year>\d{4})\s+'
    r'(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})$'
)

# A clock time followed by Z, +HH:MM, +HHMM or +HH, or a UTC/GMT token
OFFSET_MARKER = re.compile(
    r'(?:\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?\s*(?:Z|[+-]\d{2}(?::?\d{2})?)$)'
    r'|(?:\b(?:UTC|GMT)\b)',
    re.IGNORECASE
)

# Defaults differing in year, month and day; weekday names resolve differently too
DEFAULT_PROBES = (datetime(1901, 1, 1), datetime(1902, 2, 2))


@dataclass(frozen=True)
class TimestampParse:
    """Normalization outcome"""
    status: TimestampStatus
    value: Optional[datetime] = None
    raw: str = ""

    @property
    def is_known(self) -> bool:
        return self.status == TimestampStatus.PARSED


def parse_sheet_timestamp(text: str) -> Optional[datetime]:
    """Match the spreadsheet grammar and build a naive local datetime

    Returns None when the text does not match the grammar or names an
    impossible calendar date.
    """
    match = SHEET_TIMESTAMP.match(text)
    if not match:
        return None
    fields = {name: int(value) for name, value in match.groupdict().items()}
    try:
        return datetime(**fields)
    except ValueError:
        logger.debug(f"Sheet timestamp out of range: {text}")
        return None


def has_offset_marker(text: str) -> bool:
    return OFFSET_MARKER.search(text) is not None


def _parse_complete(text: str) -> Optional[datetime]:
    """dateutil parse that rejects text missing a year, month or day

    dateutil fills missing fields from its default date, so the text is
    parsed against two defaults that differ in every date field. Any
    difference between the results means a field came from a default.
    """
    try:
        first = date_parser.parse(text, default=DEFAULT_PROBES[0])
        second = date_parser.parse(text, default=DEFAULT_PROBES[1])
    except (ValueError, OverflowError):
        return None
    if first != second:
        logger.debug(f"Partial timestamp rejected: {text}")
        return None
    return first


def _parse_with_offset(text: str) -> Optional[datetime]:
    try:
        return date_parser.isoparse(text)
    except (ValueError, OverflowError):
        return _parse_complete(text)


def _parse_general(text: str) -> Optional[datetime]:
    # A bare number would otherwise be read as a day of the current month
    if text.replace('.', '', 1).isdigit():
        return None
    return _parse_complete(text)


def normalize_timestamp(text: Optional[str]) -> TimestampParse:
    """
    Normalize a timestamp string

    Args:
        text: Raw timestamp field

    Returns:
        TimestampParse with PARSED and a datetime, EMPTY for blank input,
        or UNPARSEABLE when no format matches
    """
    raw = (text or '').strip()
    if not raw:
        return TimestampParse(TimestampStatus.EMPTY, raw=raw)

    if has_offset_marker(raw):
        value = _parse_with_offset(raw)
    else:
        value = parse_sheet_timestamp(raw)
        if value is None:
            value = _parse_general(raw)

    if value is None:
        logger.debug(f"Could not parse timestamp: {raw}")
        return TimestampParse(TimestampStatus.UNPARSEABLE, raw=raw)

    return TimestampParse(TimestampStatus.PARSED, value=value, raw=raw)
