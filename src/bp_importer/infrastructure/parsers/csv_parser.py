"""
CSV parser for blood pressure monitor exports.

Tolerates quoted fields, extra columns in any order and individual bad
rows; only a file that is unusable as a whole raises.
"""

import logging

from bp_importer.domain.reading import Reading
from bp_importer.infrastructure.parsers.reading_factory import (
    DATE_COLUMN,
    REQUIRED_COLUMNS,
    TIME_COLUMN,
    ReadingFactory,
)
from bp_importer.utils.exceptions import ParseError, ParseErrorKind, RowError
from bp_importer.utils.parameters import ParserConfig

logger = logging.getLogger(__name__)


def tokenize_line(line: str) -> list[str]:
    """
    Split one CSV line into trimmed fields.

    A double quote toggles quoted mode, in which commas are literal. Quote
    characters themselves are dropped.

    Args:
        line: Raw line without its terminator.

    Returns:
        List of fields.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


class CSVParser:
    """
    Parser for blood pressure CSV exports.

    Handles decoding, header validation, row mapping and ordering of the
    resulting batch.
    """

    def __init__(self, config: ParserConfig) -> None:
        """
        Initialize CSV parser.

        Args:
            config: CSV parsing configuration.
        """
        self.config = config
        self.factory = ReadingFactory(config)

    def _decode(self, data: bytes) -> list[str]:
        """
        Decode raw bytes and return the non-empty lines.

        Raises:
            ParseError: If the bytes are not valid text or hold no data rows.
        """
        try:
            text = data.decode(self.config.encoding)
        except (UnicodeDecodeError, LookupError) as e:
            raise ParseError(ParseErrorKind.DECODE_FAILURE, encoding=self.config.encoding) from e

        lines = [line for line in text.splitlines() if line]
        if len(lines) < 2:
            raise ParseError(ParseErrorKind.EMPTY_FILE)
        return lines

    @staticmethod
    def _check_headers(headers: list[str]) -> None:
        missing = [column for column in REQUIRED_COLUMNS if column not in headers]
        if missing:
            raise ParseError(ParseErrorKind.MISSING_REQUIRED_COLUMNS, missing_columns=missing)

    def parse(self, data: bytes) -> list[Reading]:
        """
        Parse CSV bytes into readings, most recent first.

        Args:
            data: Raw file contents.

        Returns:
            Readings sorted by timestamp, descending.

        Raises:
            ParseError: If the file is undecodable, empty or lacks required columns.
        """
        lines = self._decode(data)

        headers = tokenize_line(lines[0])
        self._check_headers(headers)

        readings: list[Reading] = []

        for line_number, line in enumerate(lines[1:], start=2):
            values = tokenize_line(line)
            if len(values) < len(headers):
                logger.debug(
                    f"Line {line_number}: expected {len(headers)} fields, got {len(values)}, skipping"
                )
                continue

            row = dict(zip(headers, values))
            date_field = row.get(DATE_COLUMN, "")
            time_field = row.get(TIME_COLUMN, "")
            if not date_field or not time_field:
                logger.debug(f"Line {line_number}: missing date or time, skipping")
                continue

            try:
                readings.append(self.factory.build(row, date_field, time_field))
            except RowError as e:
                logger.warning(f"Failed to parse line {line_number}: {e}")
                continue

        readings.sort(key=lambda r: r.timestamp, reverse=True)

        logger.info(f"Parsed {len(readings)} readings from {len(lines) - 1} data lines")
        return readings
