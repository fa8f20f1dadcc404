"""
Output service for exporting the import history.

Writes the audit trail and individual batch snapshots as CSV files.
Snapshots use the monitor's own column layout so they can be imported
again.
"""

import logging
from pathlib import Path

import pandas as pd

from bp_importer.domain.import_record import ImportRecord
from bp_importer.infrastructure.parsers.reading_factory import (
    DATE_COLUMN,
    DIASTOLIC_COLUMN,
    IRREGULAR_PULSE_COLUMN,
    PULSE_COLUMN,
    SOURCE_COLUMN,
    SYSTOLIC_COLUMN,
    TIME_COLUMN,
)
from bp_importer.utils.exceptions import ValidationError
from bp_importer.utils.parameters import OutputConfig, ParserConfig

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = [
    "record_id",
    "file_name",
    "import_timestamp",
    "reading_count",
    "date_range_label",
    "success",
    "error_message",
]

SNAPSHOT_COLUMNS = [
    DATE_COLUMN,
    TIME_COLUMN,
    SYSTOLIC_COLUMN,
    DIASTOLIC_COLUMN,
    PULSE_COLUMN,
    IRREGULAR_PULSE_COLUMN,
    SOURCE_COLUMN,
]


class OutputService:
    """
    Service for writing history exports.

    Handles serialization of records to flat CSV rows.
    """

    def __init__(self, config: OutputConfig, parser_config: ParserConfig | None = None) -> None:
        """
        Initialize output service.

        Args:
            config: Output configuration.
            parser_config: Parser configuration, used for the snapshot irregular-pulse marker.
        """
        self.config = config
        self.parser_config = parser_config or ParserConfig()
        self.output_dir = Path(config.dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write_history(self, records: list[ImportRecord]) -> Path:
        """
        Write one CSV row per import record, without batch snapshots.

        Args:
            records: History records, newest first.

        Returns:
            Path of the written file.
        """
        history_path = self.output_dir / self.config.files.history_csv

        data = [r.model_dump(mode="json", include=set(HISTORY_COLUMNS)) for r in records]
        df = pd.DataFrame(data, columns=HISTORY_COLUMNS)

        df.to_csv(history_path, index=False, encoding="utf-8")
        logger.info(f"Wrote {len(records)} history records to {history_path}")
        return history_path

    def write_snapshot(self, record: ImportRecord, index: int) -> Path:
        """
        Write the readings of a successful import as a monitor-style CSV.

        Args:
            record: Successful import record.
            index: Position of the record in the history, used in the file name.

        Returns:
            Path of the written file.

        Raises:
            ValidationError: If the record has no snapshot.
        """
        if not record.success or record.readings is None:
            raise ValidationError(f"Import of {record.file_name} has no readings snapshot")

        snapshot_path = self.output_dir / self.config.files.snapshot_csv.format(index=index)
        marker = self.parser_config.irregular_pulse_marker

        rows = [
            {
                DATE_COLUMN: r.timestamp.strftime("%Y-%m-%d"),
                TIME_COLUMN: r.timestamp.strftime("%H:%M"),
                SYSTOLIC_COLUMN: r.systolic,
                DIASTOLIC_COLUMN: r.diastolic,
                PULSE_COLUMN: r.pulse,
                IRREGULAR_PULSE_COLUMN: marker if r.irregular_pulse else "",
                SOURCE_COLUMN: r.source,
            }
            for r in record.readings
        ]
        df = pd.DataFrame(rows, columns=SNAPSHOT_COLUMNS)
        df[PULSE_COLUMN] = df[PULSE_COLUMN].astype("Int64")

        df.to_csv(snapshot_path, index=False, encoding="utf-8")
        logger.info(f"Wrote {len(rows)} readings from {record.file_name} to {snapshot_path}")
        return snapshot_path
