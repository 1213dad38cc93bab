#!/usr/bin/env python3
"""
Tests for timestamp normalization
"""
from datetime import datetime, timedelta, timezone

import pytest

from incident_timeline.models.incident_models import TimestampStatus
from incident_timeline.services.timestamp_normalizer import (
    has_offset_marker, normalize_timestamp, parse_sheet_timestamp
)


def test_sheet_format_is_local_calendar_time():
    parsed = normalize_timestamp("3/1/2024 8:05:00")
    assert parsed.status == TimestampStatus.PARSED
    assert parsed.value == datetime(2024, 3, 1, 8, 5, 0)
    assert parsed.value.tzinfo is None


def test_sheet_format_two_digit_fields():
    assert parse_sheet_timestamp("12/31/2024 23:59:59") == datetime(2024, 12, 31, 23, 59, 59)


def test_sheet_format_impossible_date():
    assert parse_sheet_timestamp("2/30/2024 10:00:00") is None


def test_sheet_format_requires_seconds():
    assert parse_sheet_timestamp("3/1/2024 8:05") is None


def test_iso_with_zulu_keeps_offset():
    parsed = normalize_timestamp("2024-03-01T15:05:00Z")
    assert parsed.is_known
    assert parsed.value.utcoffset() == timedelta(0)
    assert parsed.value.astimezone(timezone.utc).hour == 15


def test_iso_with_numeric_offset():
    parsed = normalize_timestamp("2024-03-01T08:05:00-07:00")
    assert parsed.value.utcoffset() == timedelta(hours=-7)


def test_iso_without_offset_is_naive():
    parsed = normalize_timestamp("2024-03-01 08:05:00")
    assert parsed.value == datetime(2024, 3, 1, 8, 5, 0)
    assert parsed.value.tzinfo is None


def test_date_only_is_not_treated_as_offset():
    assert not has_offset_marker("2024-03-01")
    assert normalize_timestamp("2024-03-01").value == datetime(2024, 3, 1)


def test_offset_marker_detection():
    assert has_offset_marker("2024-03-01T08:05:00Z")
    assert has_offset_marker("2024-03-01 08:05:00+0200")
    assert has_offset_marker("Fri, 01 Mar 2024 08:05:00 GMT")
    assert not has_offset_marker("3/1/2024 8:05:00")


@pytest.mark.parametrize("text", ["", "   ", None])
def test_empty_is_unknown_not_error(text):
    parsed = normalize_timestamp(text)
    assert parsed.status == TimestampStatus.EMPTY
    assert parsed.value is None
    assert not parsed.is_known


@pytest.mark.parametrize("text", ["not a time", "42", "??"])
def test_unparseable(text):
    parsed = normalize_timestamp(text)
    assert parsed.status == TimestampStatus.UNPARSEABLE
    assert parsed.value is None
    assert parsed.raw == text


def test_surrounding_whitespace_is_ignored():
    assert normalize_timestamp("  3/1/2024 8:05:00  ").value == datetime(2024, 3, 1, 8, 5)


@pytest.mark.parametrize("text", ["08:00:00", "8:05 PM", "March 5", "Tuesday", "2024-03", "08:00:00Z"])
def test_partial_timestamps_are_not_completed_from_today(text):
    parsed = normalize_timestamp(text)
    assert parsed.status == TimestampStatus.UNPARSEABLE
    assert parsed.value is None


def test_full_date_in_words_still_parses():
    parsed = normalize_timestamp("March 5, 2024 8:05 AM")
    assert parsed.value == datetime(2024, 3, 5, 8, 5)
