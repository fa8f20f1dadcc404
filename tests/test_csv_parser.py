"""Unit tests for CSV parser."""

from datetime import datetime, timezone

import pytest

from bp_importer.infrastructure.parsers.csv_parser import CSVParser, tokenize_line
from bp_importer.utils.exceptions import ParseError, ParseErrorKind
from bp_importer.utils.parameters import ParserConfig


def make_parser() -> CSVParser:
    return CSVParser(ParserConfig(timezone="UTC"))


def test_tokenize_quoted_comma() -> None:
    """Test that a quoted comma stays inside one field."""
    fields = tokenize_line('2025-07-28,08:15,"1,234", Omron ')

    if fields != ["2025-07-28", "08:15", "1,234", "Omron"]:
        raise AssertionError(f"Unexpected fields: {fields}")


def test_tokenize_trailing_empty_field() -> None:
    """Test that a trailing comma yields an empty final field."""
    fields = tokenize_line("a,b,")

    if fields != ["a", "b", ""]:
        raise AssertionError(f"Unexpected fields: {fields}")


def test_parse_sorted_newest_first() -> None:
    """Test that readings come back sorted by timestamp, descending."""
    data = (
        b"Date,Time,Sys,Dia,Pulse\n"
        b"2025-07-01,08:00,120,80,60\n"
        b"2025-07-03,08:00,130,85,70\n"
        b"2025-07-02,21:30,125,82,65\n"
    )

    readings = make_parser().parse(data)

    timestamps = [r.timestamp for r in readings]
    if timestamps != sorted(timestamps, reverse=True):
        raise AssertionError(f"Readings not sorted descending: {timestamps}")
    if readings[0].timestamp != datetime(2025, 7, 3, 8, 0, tzinfo=timezone.utc):
        raise AssertionError(f"Unexpected newest reading: {readings[0]}")
    if any(r.systolic is None or r.diastolic is None for r in readings):
        raise AssertionError("Every reading must carry both pressures")


def test_parse_header_order_independent() -> None:
    """Test that columns may appear in any order."""
    data = b"Sys,Date,Dia,Time\n118,2025-07-28,76,07:45\n"

    readings = make_parser().parse(data)

    if len(readings) != 1:
        raise AssertionError(f"Expected 1 reading, got {len(readings)}")
    reading = readings[0]
    if (reading.systolic, reading.diastolic) != (118, 76):
        raise AssertionError(f"Unexpected pressures: {reading.blood_pressure}")
    if reading.timestamp != datetime(2025, 7, 28, 7, 45, tzinfo=timezone.utc):
        raise AssertionError(f"Unexpected timestamp: {reading.timestamp}")


def test_parse_skips_row_missing_systolic() -> None:
    """Test that a bad row is dropped while its neighbours survive."""
    data = (
        b"Date,Time,Sys,Dia,Pulse\n"
        b"2025-07-01,08:00,120,80,60\n"
        b"2025-07-02,08:00,,80,61\n"
        b"2025-07-03,08:00,122,81,62\n"
    )

    readings = make_parser().parse(data)

    if [r.pulse for r in readings] != [62, 60]:
        raise AssertionError(f"Unexpected readings: {readings}")


def test_parse_skips_short_rows_and_missing_date() -> None:
    """Test that short rows and rows without date or time are skipped."""
    data = (
        b"Date,Time,Sys,Dia\n"
        b"2025-07-01,08:00,120\n"
        b",08:00,120,80\n"
        b"2025-07-01,,120,80\n"
        b"2025-07-01,09:00,119,79\n"
    )

    readings = make_parser().parse(data)

    if len(readings) != 1 or readings[0].systolic != 119:
        raise AssertionError(f"Unexpected readings: {readings}")


def test_parse_skips_invalid_date() -> None:
    """Test that a malformed timestamp only drops its row."""
    data = b"Date,Time,Sys,Dia\n28/07/2025,08:00,120,80\n2025-07-28,08:00,121,80\n"

    readings = make_parser().parse(data)

    if len(readings) != 1 or readings[0].systolic != 121:
        raise AssertionError(f"Unexpected readings: {readings}")


def test_parse_tolerates_crlf_blank_lines_and_bom() -> None:
    """Test Windows line endings, blank lines and a UTF-8 byte order mark."""
    data = b"\xef\xbb\xbfDate,Time,Sys,Dia\r\n\r\n2025-07-28,08:00,120,80\r\n\r\n"

    readings = make_parser().parse(data)

    if len(readings) != 1:
        raise AssertionError(f"Expected 1 reading, got {len(readings)}")


def test_parse_header_only_is_empty_file() -> None:
    """Test that a header without data rows fails with EMPTY_FILE."""
    with pytest.raises(ParseError) as exc_info:
        make_parser().parse(b"Date,Time,Sys,Dia\n")

    if exc_info.value.kind != ParseErrorKind.EMPTY_FILE:
        raise AssertionError(f"Unexpected kind: {exc_info.value.kind}")


def test_parse_undecodable_bytes() -> None:
    """Test that invalid UTF-8 fails with DECODE_FAILURE."""
    with pytest.raises(ParseError) as exc_info:
        make_parser().parse(b"\xff\xfe\xfa\x00\x81")

    if exc_info.value.kind != ParseErrorKind.DECODE_FAILURE:
        raise AssertionError(f"Unexpected kind: {exc_info.value.kind}")


def test_parse_missing_required_columns() -> None:
    """Test that a header without Dia fails and names the column."""
    with pytest.raises(ParseError) as exc_info:
        make_parser().parse(b"Date,Time,Sys,Pulse\n2025-07-28,08:00,120,60\n")

    if exc_info.value.kind != ParseErrorKind.MISSING_REQUIRED_COLUMNS:
        raise AssertionError(f"Unexpected kind: {exc_info.value.kind}")
    if exc_info.value.missing_columns != ["Dia"]:
        raise AssertionError(f"Unexpected missing columns: {exc_info.value.missing_columns}")


def test_parse_is_deterministic() -> None:
    """Test that parsing the same bytes twice yields identical reading ids."""
    data = b"Date,Time,Sys,Dia,Source\n2025-07-28,08:00,120,80,Omron M7\n"

    first = make_parser().parse(data)
    second = make_parser().parse(data)

    if [r.reading_id for r in first] != [r.reading_id for r in second]:
        raise AssertionError("Reading ids differ between parses")
