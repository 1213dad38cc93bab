#!/usr/bin/env python3
"""
Tests for filter specifications, window resolution and ordering
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from core.exceptions import InvalidWindowError
from incident_timeline.models.incident_models import (
    AllRecords, CustomDate, ExplicitRange, IncidentRecord, PeriodFilter,
    PeriodKind, RelativeKind, RelativeWindow
)
from incident_timeline.services.filter_engine import (
    apply_filter, filter_spec_from_name, order_chronologically,
    parse_filter_date, resolve_window
)
from incident_timeline.services.record_builder import build_records
from incident_timeline.services.tabular_parser import parse_rows

NOW = datetime(2024, 3, 10, 14, 0)


def make_record(timestamp, index=1, count=1):
    return IncidentRecord(
        timestamp=timestamp,
        latitude=38.25,
        longitude=-104.6,
        occurrence_count=count,
        sequence_index=index
    )


def test_all_keeps_unknown_times():
    records = [make_record(None, 1), make_record(datetime(2024, 3, 1), 2)]
    assert apply_filter(records, AllRecords(), NOW) == records


def test_other_filters_drop_unknown_times():
    records = [make_record(None, 1), make_record(datetime(2024, 3, 1, 9), 2)]
    result = apply_filter(records, PeriodFilter(PeriodKind.MONTH, date(2024, 3, 1)), NOW)
    assert [record.sequence_index for record in result] == [2]


def test_single_row_day_period():
    rows = parse_rows("3/1/2024 8:05:00,38.2544,-104.6091,100 Main St,Pueblo,CO,81003,3")
    records = build_records(rows).records
    result = apply_filter(records, PeriodFilter(PeriodKind.DAY, date(2024, 3, 1)), NOW)
    assert len(result) == 1
    assert result[0].occurrence_count == 3
    assert result[0].city == 'Pueblo'


def test_iso_example_row_day_period():
    rows = parse_rows("2024-03-01 08:00:00,38.25,-104.58,100 Main St,Pueblo,CO,81003,3")
    records = build_records(rows).records
    result = apply_filter(records, PeriodFilter(PeriodKind.DAY, date(2024, 3, 1)), NOW)
    assert len(result) == 1
    assert result[0].timestamp == datetime(2024, 3, 1, 8, 0)
    assert result[0].occurrence_count == 3


def test_time_only_row_does_not_match_today():
    rows = parse_rows("08:00:00,38.25,-104.58,100 Main St,Pueblo,CO,81003,1")
    records = build_records(rows).records
    assert records[0].timestamp is None
    assert apply_filter(records, CustomDate(NOW.date()), NOW) == []


def test_custom_date_matches_whole_day():
    records = [
        make_record(datetime(2024, 3, 1, 0, 0), 1),
        make_record(datetime(2024, 3, 1, 23, 59, 59), 2),
        make_record(datetime(2024, 3, 2, 0, 0), 3),
        make_record(datetime(2024, 2, 29, 23, 59), 4),
    ]
    result = apply_filter(records, CustomDate("2024-03-01"), NOW)
    assert [record.sequence_index for record in result] == [1, 2]


def test_date_range_includes_end_day():
    records = [
        make_record(datetime(2024, 3, 1, 6), 1),
        make_record(datetime(2024, 3, 3, 22), 2),
        make_record(datetime(2024, 3, 4, 0, 0, 1), 3),
    ]
    result = apply_filter(records, ExplicitRange("2024-03-01", "2024-03-03"), NOW)
    assert [record.sequence_index for record in result] == [1, 2]


def test_relative_window_is_closed_at_today_midnight():
    # The lookback ends at today 00:00 inclusive; later today is outside
    spec = RelativeWindow(RelativeKind.WEEK)
    window = resolve_window(spec, NOW)
    assert window.start == datetime(2024, 3, 3)
    assert window.end == datetime(2024, 3, 10)
    assert window.inclusive_end

    records = [
        make_record(datetime(2024, 3, 3), 1),
        make_record(datetime(2024, 3, 10, 0, 0), 2),
        make_record(datetime(2024, 3, 10, 9, 0), 3),
        make_record(datetime(2024, 3, 2, 23, 59), 4),
    ]
    result = apply_filter(records, spec, NOW)
    assert [record.sequence_index for record in result] == [1, 2]


def test_relative_month_and_year():
    assert resolve_window(RelativeWindow(RelativeKind.MONTH), NOW).start == datetime(2024, 2, 10)
    assert resolve_window(RelativeWindow(RelativeKind.YEAR), NOW).start == datetime(2023, 3, 10)
    assert resolve_window(RelativeWindow(RelativeKind.DAY, 3), NOW).start == datetime(2024, 3, 7)


def test_relative_window_names():
    assert RelativeWindow(RelativeKind.WEEK).name == "last-week"
    assert RelativeWindow(RelativeKind.DAY, 3).name == "last-3-days"


def test_missing_custom_date_matches_nothing():
    records = [make_record(datetime(2024, 3, 1), 1)]
    assert apply_filter(records, CustomDate(None), NOW) == []
    with pytest.raises(InvalidWindowError):
        resolve_window(CustomDate(""), NOW)


def test_unparseable_range_matches_nothing():
    records = [make_record(datetime(2024, 3, 1), 1)]
    assert apply_filter(records, ExplicitRange("soon", "2024-03-02"), NOW) == []


def test_reversed_range_is_invalid():
    with pytest.raises(InvalidWindowError):
        resolve_window(ExplicitRange("2024-03-05", "2024-03-01"), NOW)


def test_single_day_range():
    window = resolve_window(ExplicitRange("2024-03-05", "2024-03-05"), NOW)
    assert window.end - window.start == timedelta(days=1)


def test_nonpositive_lookback_is_invalid():
    with pytest.raises(InvalidWindowError):
        resolve_window(RelativeWindow(RelativeKind.DAY, 0), NOW)


def test_period_without_anchor_uses_now():
    window = resolve_window(PeriodFilter(PeriodKind.DAY), NOW)
    assert window.start == datetime(2024, 3, 10)


def test_offset_timestamps_compare_in_local_time():
    moment = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    record = make_record(moment, 1)
    local_day = moment.astimezone().replace(tzinfo=None)
    result = apply_filter([record], CustomDate(local_day.date()), NOW)
    assert result == [record]


def test_filter_preserves_source_order():
    records = [
        make_record(datetime(2024, 3, 1, 9), 1),
        make_record(datetime(2024, 3, 1, 7), 2),
    ]
    result = apply_filter(records, CustomDate(date(2024, 3, 1)), NOW)
    assert [record.sequence_index for record in result] == [1, 2]


def test_order_chronologically_is_stable_with_unknown_first():
    records = [
        make_record(datetime(2024, 3, 1, 9), 1),
        make_record(None, 2),
        make_record(datetime(2024, 3, 1, 7), 3),
        make_record(datetime(2024, 3, 1, 9), 4),
    ]
    ordered = order_chronologically(records)
    assert [record.sequence_index for record in ordered] == [2, 3, 1, 4]


def test_parse_filter_date_inputs():
    assert parse_filter_date("2024-03-01") == datetime(2024, 3, 1)
    assert parse_filter_date("March 1, 2024") == datetime(2024, 3, 1)
    assert parse_filter_date(datetime(2024, 3, 1, 18)) == datetime(2024, 3, 1)
    with pytest.raises(InvalidWindowError):
        parse_filter_date("   ")


@pytest.mark.parametrize("name,expected_type", [
    ("all", AllRecords),
    ("last-week", RelativeWindow),
    ("custom-date", CustomDate),
    ("date-range", ExplicitRange),
    ("quarter", PeriodFilter),
    ("something-else", AllRecords),
    ("", AllRecords),
])
def test_filter_spec_from_name(name, expected_type):
    assert isinstance(filter_spec_from_name(name), expected_type)


def test_filter_spec_from_name_carries_inputs():
    spec = filter_spec_from_name("date-range", start_date="2024-03-01", end_date="2024-03-03")
    assert spec == ExplicitRange("2024-03-01", "2024-03-03")
    period = filter_spec_from_name("Month", anchor=date(2024, 3, 1))
    assert period == PeriodFilter(PeriodKind.MONTH, date(2024, 3, 1))


def test_only_all_records_keeps_unknown_times():
    assert not AllRecords().requires_known_time
    assert CustomDate("2024-03-01").requires_known_time
    assert PeriodFilter(PeriodKind.WEEK, NOW).requires_known_time
    assert RelativeWindow(RelativeKind.DAY, 3).requires_known_time
