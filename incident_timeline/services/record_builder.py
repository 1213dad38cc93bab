#!/usr/bin/env python3
"""
Record Builder - parsed rows to validated incident records

Column order: timestamp, latitude, longitude, street, city, state, postal
code, occurrence count. Only the coordinates are required; a row whose
coordinates are not finite numbers is excluded permanently and reported with
its 1-based position.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from core.exceptions import MalformedRowError

from ..models.incident_models import IncidentRecord, IngestionResult, TimestampStatus
from .timestamp_normalizer import normalize_timestamp

logger = logging.getLogger(__name__)

# Column positions
TIMESTAMP, LATITUDE, LONGITUDE, STREET, CITY, STATE, POSTAL_CODE, COUNT = range(8)


@dataclass(frozen=True)
class RecordBuildOutcome:
    """A built record, or the error that excluded the row"""
    sequence_index: int
    record: Optional[IncidentRecord] = None
    error: Optional[MalformedRowError] = None
    timestamp_status: TimestampStatus = TimestampStatus.PARSED

    @property
    def is_valid(self) -> bool:
        return self.record is not None


def _field(row: Sequence[str], index: int) -> str:
    if index < len(row) and row[index] is not None:
        return row[index].strip()
    return ''


def parse_coordinate(text: str) -> Optional[float]:
    """Finite float or None"""
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_count(text: str) -> int:
    """Occurrence count; 1 when absent, unparseable or negative"""
    if not text:
        return 1
    try:
        value = float(text)
    except ValueError:
        return 1
    if not math.isfinite(value) or value < 0:
        return 1
    return int(value)


def build_record(row: Sequence[str], sequence_index: int) -> RecordBuildOutcome:
    """
    Build one record from a parsed row

    Args:
        row: Parsed fields (header already removed)
        sequence_index: 1-based position of the row among data rows

    Returns:
        RecordBuildOutcome holding the record or a MalformedRowError
    """
    lat_text = _field(row, LATITUDE)
    lng_text = _field(row, LONGITUDE)
    latitude = parse_coordinate(lat_text)
    longitude = parse_coordinate(lng_text)

    if latitude is None or longitude is None:
        error = MalformedRowError(
            f"Invalid coordinates at row {sequence_index}: lat={lat_text!r} lng={lng_text!r}",
            sequence_index=sequence_index
        )
        return RecordBuildOutcome(sequence_index=sequence_index, error=error)

    parsed = normalize_timestamp(_field(row, TIMESTAMP))

    record = IncidentRecord(
        timestamp=parsed.value,
        latitude=latitude,
        longitude=longitude,
        street=_field(row, STREET),
        city=_field(row, CITY),
        state=_field(row, STATE),
        postal_code=_field(row, POSTAL_CODE),
        occurrence_count=parse_count(_field(row, COUNT)),
        sequence_index=sequence_index,
        raw_timestamp=parsed.raw
    )
    return RecordBuildOutcome(
        sequence_index=sequence_index,
        record=record,
        timestamp_status=parsed.status
    )


def build_records(rows: Iterable[Sequence[str]], header_skipped: bool = False) -> IngestionResult:
    """
    Build the full record set for one ingestion cycle

    Invalid rows are logged and counted, never raised.
    """
    records: List[IncidentRecord] = []
    result = IngestionResult(header_skipped=header_skipped)

    for sequence_index, row in enumerate(rows, start=1):
        result.total_rows += 1
        outcome = build_record(row, sequence_index)

        if not outcome.is_valid:
            logger.warning(outcome.error.message)
            result.invalid_rows.append((sequence_index, outcome.error.message))
            continue

        if outcome.timestamp_status == TimestampStatus.UNPARSEABLE:
            logger.debug(f"Row {sequence_index}: unparseable timestamp {outcome.record.raw_timestamp!r}")
            result.unparseable_timestamps.append(sequence_index)
        elif outcome.timestamp_status == TimestampStatus.EMPTY:
            result.empty_timestamps.append(sequence_index)

        records.append(outcome.record)

    result.records = tuple(records)
    return result
