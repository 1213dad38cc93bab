#!/usr/bin/env python3
"""
Tabular Parser - delimited text to rows of string fields

A single left-to-right scan with a quoting flag. A quote opens a quoted
field only as the first character of that field. Inside quotes the delimiter
and line breaks are literal and a doubled quote is one literal quote. Fields
are returned exactly as written; trimming is left to the record builder.
"""

import logging
from typing import List, Tuple, Union

logger = logging.getLogger(__name__)

QUOTE = '"'
BOM = '\ufeff'

Row = List[str]


def decode_payload(data: Union[bytes, bytearray, str], encoding: str = 'utf-8-sig') -> str:
    """Return text for an already-fetched payload

    Bytes are decoded with ``encoding`` (BOM-aware by default); undecodable
    sequences are replaced rather than failing the whole ingestion.
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode(encoding, errors='replace')
    return data


def parse_rows(text: str, delimiter: str = ',') -> List[Row]:
    """
    Split delimited text into rows of fields

    Args:
        text: Raw delimited text
        delimiter: Single-character field separator

    Returns:
        Rows in source order, each a list of untrimmed string fields
    """
    if len(delimiter) != 1 or delimiter in (QUOTE, '\r', '\n'):
        raise ValueError(f"Invalid delimiter: {delimiter!r}")

    if text.startswith(BOM):
        text = text[1:]

    rows: List[Row] = []
    row: Row = []
    current: List[str] = []
    in_quotes = False
    row_started = False
    field_started = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]

        if in_quotes:
            if char == QUOTE:
                if i + 1 < length and text[i + 1] == QUOTE:
                    current.append(QUOTE)
                    i += 2
                    continue
                in_quotes = False
            else:
                current.append(char)
            i += 1
            continue

        if char == '\r' or char == '\n':
            row.append(''.join(current))
            rows.append(row)
            row = []
            current = []
            row_started = False
            field_started = False
            if char == '\r' and i + 1 < length and text[i + 1] == '\n':
                i += 1
            i += 1
            continue

        row_started = True
        if char == QUOTE and not field_started:
            in_quotes = True
            field_started = True
        elif char == delimiter:
            row.append(''.join(current))
            current = []
            field_started = False
        else:
            # A quote inside an unquoted field is literal, e.g. 5" pipe
            current.append(char)
            field_started = True
        i += 1

    if in_quotes:
        logger.debug("Unterminated quote at end of input; closing field")

    # Flush the last row unless the text ended with a line break
    if row_started:
        row.append(''.join(current))
        rows.append(row)

    return rows


def is_header_row(row: Row, header_label: str = 'timestamp') -> bool:
    """True when the first field names the timestamp column"""
    if not row:
        return False
    return row[0].strip().lstrip(BOM).lower() == header_label.strip().lower()


def strip_header(rows: List[Row], header_label: str = 'timestamp') -> Tuple[List[Row], bool]:
    """
    Drop an optional header row

    Returns:
        Tuple of (data rows, whether a header was removed)
    """
    if rows and is_header_row(rows[0], header_label):
        return rows[1:], True
    return rows, False
