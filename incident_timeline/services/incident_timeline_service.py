#!/usr/bin/env python3
"""
Incident Timeline Service - ingestion, filtering and timeline building

Wraps the parser, record builder, filter engine and gviz decoder behind one
service with Result-based error handling. The service holds no record set;
callers pass records in and keep the results.
"""

import csv
import io
import logging
from datetime import datetime
from typing import List, Optional, Sequence, Union

from core.services.base_service import BaseService
from core.services.interfaces import IIncidentTimelineService
from core.result_types import Result
from core.exceptions import IncidentTimelineError, UnparseableTimestampError, ValidationError

from ..models.incident_models import (
    AllRecords, FilterSpec, FilterStatus, IncidentRecord, IngestionResult,
    StatusLevel, TimelineEntry, TimelineSettings
)
from .filter_engine import apply_filter, order_chronologically
from .gviz_decoder import GvizDecodeError, decode_gviz_rows
from .record_builder import build_records
from .tabular_parser import decode_payload, parse_rows, strip_header

logger = logging.getLogger(__name__)

EXPORT_HEADER = ['#', 'Timestamp', 'Street', 'City', 'State', 'ZIP', 'Latitude', 'Longitude']


class IncidentTimelineService(BaseService, IIncidentTimelineService):
    """
    Service for incident timeline operations

    Handles delimited text and gviz ingestion, filter application,
    chronological ordering and the listing, status and export views.
    """

    def __init__(self):
        super().__init__()

    def ingest_text(
        self,
        payload: Union[str, bytes],
        settings: Optional[TimelineSettings] = None
    ) -> Result[IngestionResult]:
        """
        Parse delimited text into a record set

        Args:
            payload: Source body; bytes are decoded as UTF-8 with replacement
            settings: Header label and delimiter (defaults when omitted)

        Returns:
            Result containing IngestionResult, with a warning when rows were
            skipped or timestamps were not recognized
        """
        settings = settings or TimelineSettings()
        try:
            text = decode_payload(payload)
            rows = parse_rows(text, settings.delimiter)
        except ValueError as e:
            return Result.error(
                ValidationError(
                    {'delimiter': str(e)},
                    user_message="The configured delimiter is not valid."
                )
            )
        except Exception as e:
            error = IncidentTimelineError(f"Failed to parse source text: {e}")
            self._handle_error(error, {'method': 'ingest_text'})
            return Result.error(error)

        rows, header_skipped = strip_header(rows, settings.header_label)
        return self._build(rows, header_skipped, source="text")

    def ingest_gviz(self, payload: Union[str, bytes]) -> Result[IngestionResult]:
        """
        Parse a Google Visualization JSON response into a record set

        The response has no header row; every table row is data.
        """
        try:
            rows = decode_gviz_rows(decode_payload(payload))
        except GvizDecodeError as e:
            self._handle_error(e, {'method': 'ingest_gviz'})
            return Result.error(e)

        return self._build(rows, header_skipped=False, source="gviz")

    def _build(self, rows, header_skipped: bool, source: str) -> Result[IngestionResult]:
        try:
            ingestion = build_records(rows, header_skipped=header_skipped)
        except Exception as e:
            error = IncidentTimelineError(f"Failed to build records from {source}: {e}")
            self._handle_error(error, {'method': '_build', 'source': source})
            return Result.error(error)

        self._log_operation("ingest", f"{source}: {ingestion.get_summary()}")

        result = Result.success(
            ingestion,
            source=source,
            total_rows=ingestion.total_rows,
            header_skipped=header_skipped
        )
        if ingestion.invalid_rows:
            result.add_warning(f"{ingestion.invalid_count} rows skipped because of invalid coordinates")
        if ingestion.unparseable_timestamps:
            first_row = ingestion.unparseable_timestamps[0]
            sample = ingestion.records_by_row(first_row)
            notice = UnparseableTimestampError(sample.raw_timestamp if sample else "")
            result.add_warning(notice.user_message)
        return result

    def filter_records(
        self,
        records: Sequence[IncidentRecord],
        spec: FilterSpec,
        now: Optional[datetime] = None
    ) -> Result[List[IncidentRecord]]:
        """
        Select the records matching a filter specification

        Records keep their source order. A filter whose window cannot be
        resolved matches nothing rather than failing.
        """
        try:
            matched = apply_filter(records, spec, now)
        except Exception as e:
            error = IncidentTimelineError(f"Filter '{spec.name}' failed: {e}")
            self._handle_error(error, {'method': 'filter_records', 'filter': spec.name})
            return Result.error(error)

        self._log_operation("filter_records", f"{spec.name}: {len(matched)} of {len(records)}", level="debug")
        return Result.success(matched, filter=spec.name)

    def build_playback_subset(
        self,
        records: Sequence[IncidentRecord],
        spec: FilterSpec,
        now: Optional[datetime] = None
    ) -> Result[List[IncidentRecord]]:
        """Filtered records in chronological order"""
        return self.filter_records(records, spec, now).map(order_chronologically)

    def build_timeline(
        self,
        records: Sequence[IncidentRecord],
        settings: Optional[TimelineSettings] = None
    ) -> List[TimelineEntry]:
        """Chronological listing entries: time, location and coordinates"""
        time_format = (settings or TimelineSettings()).timeline_time_format
        entries = []
        for record in order_chronologically(records):
            moment = record.local_timestamp
            entries.append(TimelineEntry(
                time_text=moment.strftime(time_format) if moment else "Unknown",
                location=record.display_name or "Unknown location",
                coordinates_text=f"{record.latitude:.4f}, {record.longitude:.4f}",
                record=record
            ))
        return entries

    def describe_filter_status(self, filtered_count: int, total_count: int, spec: FilterSpec) -> FilterStatus:
        """Status line for the active filter; hidden when nothing is filtered"""
        if isinstance(spec, AllRecords):
            return FilterStatus(StatusLevel.HIDDEN)
        if filtered_count == 0:
            return FilterStatus(StatusLevel.NO_RESULTS, "No records found for the selected date filter.")
        return FilterStatus(StatusLevel.ACTIVE, f"Showing {filtered_count} of {total_count} records")

    def export_csv(self, records: Sequence[IncidentRecord]) -> Result[str]:
        """
        CSV text for the given records

        Every field is quoted. Rows are numbered from 1 in the order given.
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
        writer.writerow(EXPORT_HEADER)
        for position, record in enumerate(records, start=1):
            writer.writerow([
                position,
                record.formatted_timestamp,
                record.street,
                record.city,
                record.state,
                record.postal_code,
                record.latitude,
                record.longitude
            ])

        self._log_operation("export_csv", f"{len(records)} records", level="debug")
        return Result.success(buffer.getvalue(), record_count=len(records))
