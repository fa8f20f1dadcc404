"""
Reading factory: one named-field CSV row to one validated Reading.
"""

import re

from bp_importer.domain.reading import Reading
from bp_importer.utils.exceptions import RowError, RowErrorKind
from bp_importer.utils.parameters import ParserConfig
from bp_importer.utils.timezone_utils import parse_local_datetime

DATE_COLUMN = "Date"
TIME_COLUMN = "Time"
SYSTOLIC_COLUMN = "Sys"
DIASTOLIC_COLUMN = "Dia"
PULSE_COLUMN = "Pulse"
IRREGULAR_PULSE_COLUMN = "Irregular pulse"
SOURCE_COLUMN = "Source"

REQUIRED_COLUMNS = (DATE_COLUMN, TIME_COLUMN, SYSTOLIC_COLUMN, DIASTOLIC_COLUMN)

_WHOLE_NUMBER = re.compile(r"[+-]?\d+")


def parse_whole_number(value: str | None) -> int | None:
    """Return the integer value of a whole-number string, else None."""
    if value is None or not _WHOLE_NUMBER.fullmatch(value):
        return None
    return int(value)


class ReadingFactory:
    """Builds readings from rows keyed by header name."""

    def __init__(self, config: ParserConfig) -> None:
        self.config = config

    def build(self, row: dict[str, str], date_field: str, time_field: str) -> Reading:
        """
        Build a reading from a CSV row.

        Args:
            row: Mapping of header name to trimmed field value.
            date_field: Value of the Date column.
            time_field: Value of the Time column.

        Returns:
            Validated reading.

        Raises:
            RowError: If the timestamp or either pressure value is unusable.
        """
        try:
            timestamp = parse_local_datetime(
                date_field, time_field, self.config.datetime_format, self.config.timezone
            )
        except ValueError as e:
            raise RowError(
                RowErrorKind.INVALID_DATE_FORMAT, f"{date_field} {time_field}"
            ) from e

        systolic = parse_whole_number(row.get(SYSTOLIC_COLUMN))
        diastolic = parse_whole_number(row.get(DIASTOLIC_COLUMN))
        if systolic is None or diastolic is None:
            raise RowError(
                RowErrorKind.INVALID_BLOOD_PRESSURE_VALUES,
                f"{row.get(SYSTOLIC_COLUMN)}/{row.get(DIASTOLIC_COLUMN)}",
            )

        source = row.get(SOURCE_COLUMN) or self.config.default_source

        return Reading.create(
            timestamp=timestamp,
            systolic=systolic,
            diastolic=diastolic,
            pulse=parse_whole_number(row.get(PULSE_COLUMN)),
            irregular_pulse=row.get(IRREGULAR_PULSE_COLUMN) == self.config.irregular_pulse_marker,
            source=source,
        )
