#!/usr/bin/env python3
"""
Tests for the delimited text parser and header detection
"""
import pytest

from incident_timeline.services.tabular_parser import (
    decode_payload, is_header_row, parse_rows, strip_header
)


def test_simple_rows():
    rows = parse_rows("a,b,c\n1,2,3")
    assert rows == [['a', 'b', 'c'], ['1', '2', '3']]


def test_quoted_field_keeps_delimiter_and_escaped_quotes():
    rows = parse_rows('x,"123 Main, Apt ""B""",y')
    assert rows == [['x', '123 Main, Apt "B"', 'y']]


def test_quoted_field_keeps_line_break():
    rows = parse_rows('"line one\nline two",2\n3,4')
    assert rows == [['line one\nline two', '2'], ['3', '4']]


def test_crlf_and_lone_cr_end_rows():
    assert parse_rows("a,b\r\nc,d\re,f") == [['a', 'b'], ['c', 'd'], ['e', 'f']]


def test_trailing_newline_adds_no_row():
    assert parse_rows("a,b\n") == [['a', 'b']]
    assert parse_rows("a,b\r\n") == [['a', 'b']]


def test_row_count_matches_line_count():
    text = "\n".join(f"{i},x,y" for i in range(25))
    assert len(parse_rows(text)) == 25


def test_empty_line_is_single_empty_field():
    assert parse_rows("a\n\nb") == [['a'], [''], ['b']]


def test_empty_input():
    assert parse_rows("") == []


def test_trailing_empty_quoted_field():
    assert parse_rows('a,""') == [['a', '']]


def test_unterminated_quote_closes_field():
    rows = parse_rows('a,"never closed\nstill inside')
    assert rows == [['a', 'never closed\nstill inside']]


def test_quote_inside_unquoted_field_is_literal():
    rows = parse_rows('a,5" pipe,c\nd,e,f\ng,h,i\n')
    assert rows == [['a', '5" pipe', 'c'], ['d', 'e', 'f'], ['g', 'h', 'i']]


def test_fields_are_not_trimmed():
    assert parse_rows(" a , b ") == [[' a ', ' b ']]


def test_leading_bom_is_dropped():
    assert parse_rows("\ufefftimestamp,lat") == [['timestamp', 'lat']]


def test_other_delimiters():
    assert parse_rows("a\tb\tc", delimiter="\t") == [['a', 'b', 'c']]
    assert parse_rows("a;b", delimiter=";") == [['a', 'b']]


@pytest.mark.parametrize("delimiter", ["", ",,", '"', "\n"])
def test_invalid_delimiter(delimiter):
    with pytest.raises(ValueError):
        parse_rows("a,b", delimiter=delimiter)


def test_decode_payload_bytes_with_bom():
    assert decode_payload("\ufeffa,b".encode('utf-8')) == "a,b"


def test_decode_payload_replaces_bad_bytes():
    text = decode_payload(b"a,\xff")
    assert text.startswith("a,")
    assert "\ufffd" in text


def test_decode_payload_passes_text_through():
    assert decode_payload("already text") == "already text"


def test_header_detection_is_case_insensitive():
    assert is_header_row([' Timestamp ', 'Latitude'])
    assert not is_header_row(['3/1/2024 8:05:00', '38.25'])
    assert not is_header_row([])


def test_strip_header():
    rows = [['timestamp', 'lat'], ['1', '2']]
    data, skipped = strip_header(rows)
    assert data == [['1', '2']]
    assert skipped is True

    data, skipped = strip_header([['1', '2']])
    assert data == [['1', '2']]
    assert skipped is False


def test_strip_header_custom_label():
    data, skipped = strip_header([['when', 'lat'], ['1', '2']], header_label='When')
    assert skipped
    assert len(data) == 1
