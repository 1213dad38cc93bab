#!/usr/bin/env python3
"""
Tests for Google Visualization response decoding
"""
import pytest

from incident_timeline.services.gviz_decoder import GvizDecodeError, decode_gviz_rows

RESPONSE = (
    '/*O_o*/\n'
    'google.visualization.Query.setResponse({"version":"0.6","status":"ok","table":{'
    '"cols":[{"id":"A"},{"id":"B"},{"id":"C"}],'
    '"rows":[{"c":[{"v":"Date(2024,0,5,7,3,9)","f":"1/5/2024 7:03:09"},{"v":38.5},{"v":-104}]},'
    '{"c":[{"v":"Date(2024,11,31)"},{"v":null},null]}]}});'
)


def test_formatted_timestamp_is_preferred():
    rows = decode_gviz_rows(RESPONSE)
    assert rows[0] == ['1/5/2024 7:03:09', '38.5', '-104']


def test_date_literal_months_are_zero_based():
    rows = decode_gviz_rows(RESPONSE)
    assert rows[1][0] == '2024-12-31 00:00:00'


def test_null_cells_become_empty_fields():
    rows = decode_gviz_rows(RESPONSE)
    assert rows[1][1:] == ['', '']


def test_empty_table():
    assert decode_gviz_rows('setResponse({"status":"ok","table":{"cols":[],"rows":[]}});') == []


@pytest.mark.parametrize("payload", [
    "",
    "<html></html>",
    "setResponse({not json});",
    'setResponse({"status":"ok"});',
])
def test_invalid_payloads(payload):
    with pytest.raises(GvizDecodeError):
        decode_gviz_rows(payload)
