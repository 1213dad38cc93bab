#!/usr/bin/env python3
"""
Google Visualization response decoding

Published spreadsheets answer ``/gviz/tq?tqx=out:json`` with JSON wrapped in
a ``google.visualization.Query.setResponse(...);`` call. This module turns an
already-fetched response body into the same rows of string fields that the
tabular parser produces, so both sources share the record builder.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from core.exceptions import IncidentTimelineError

logger = logging.getLogger(__name__)

# Date(2024,2,1,8,5,0) - month is zero-based
GVIZ_DATE = re.compile(r'^Date\((\d+),(\d+),(\d+)(?:,(\d+),(\d+),(\d+))?\)$')


class GvizDecodeError(IncidentTimelineError):
    """The payload is not a Google Visualization JSON response"""

    def _generate_user_message(self) -> str:
        return "Failed to parse sheet data. Is the sheet published to web and using expected columns?"


def _unwrap(text: str) -> Dict[str, Any]:
    start = text.find('{')
    end = text.rfind('}')
    if start < 0 or end <= start:
        raise GvizDecodeError("No JSON object in response")
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise GvizDecodeError(f"Invalid JSON in response: {e}")


def _gviz_date_text(value: str) -> Optional[str]:
    match = GVIZ_DATE.match(value)
    if not match:
        return None
    year, month, day, hour, minute, second = (int(part) if part else 0 for part in match.groups())
    return f"{year:04d}-{month + 1:02d}-{day:02d} {hour:02d}:{minute:02d}:{second:02d}"


def _cell_text(cell: Optional[Dict[str, Any]], prefer_formatted: bool = False) -> str:
    if not cell:
        return ''
    if prefer_formatted and cell.get('f'):
        return str(cell['f'])
    value = cell.get('v')
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value)
    return _gviz_date_text(text) or text


def decode_gviz_rows(text: str) -> List[List[str]]:
    """
    Rows of string fields from a gviz JSON response

    The timestamp column uses the formatted value when present, the other
    columns use the raw value.

    Raises:
        GvizDecodeError: The payload cannot be decoded
    """
    payload = _unwrap(text)

    if payload.get('status') == 'error':
        reasons = '; '.join(e.get('detailed_message') or e.get('message', '') for e in payload.get('errors', []))
        raise GvizDecodeError(f"Sheet query failed: {reasons or 'unknown error'}")

    table = payload.get('table')
    if not isinstance(table, dict):
        raise GvizDecodeError("Response has no table")

    rows = []
    for row in table.get('rows') or []:
        cells = row.get('c') or []
        fields = [
            _cell_text(cell, prefer_formatted=(index == 0))
            for index, cell in enumerate(cells)
        ]
        rows.append(fields)

    logger.debug(f"Decoded {len(rows)} gviz rows")
    return rows
