"""
Import workflow.

Drives one import attempt from raw file contents to a history entry:
parse, reconcile and write through the orchestrator, then record the
outcome. Every attempt is recorded; failures are re-raised after
recording so the caller can show the message to the user.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from bp_importer.domain.import_record import ImportRecord, ImportTally
from bp_importer.domain.reading import Reading
from bp_importer.infrastructure.health_store.base import HealthStore
from bp_importer.infrastructure.parsers.csv_parser import CSVParser
from bp_importer.services.history import ImportHistoryLog
from bp_importer.services.importer import ImportOrchestrator, ProgressCallback
from bp_importer.utils.exceptions import BPImporterError, ParseError
from bp_importer.utils.hashing import compute_bytes_hash

logger = logging.getLogger(__name__)


class ImportOutcome(BaseModel):
    """Result of a completed import attempt."""

    file_name: str
    readings: list[Reading]
    tally: ImportTally
    record: ImportRecord

    model_config = ConfigDict(frozen=True)

    @property
    def message(self) -> str:
        return (
            f"Imported {self.tally.imported} of {len(self.readings)} readings "
            f"({self.tally.skipped} duplicates skipped)"
        )


class ImportWorkflow:
    """Caller of the orchestrator; owns history recording."""

    def __init__(
        self,
        parser: CSVParser,
        orchestrator: ImportOrchestrator,
        history: ImportHistoryLog,
        store: HealthStore,
    ) -> None:
        self.parser = parser
        self.orchestrator = orchestrator
        self.history = history
        self.store = store

    def _parse(self, file_name: str, data: bytes) -> list[Reading]:
        logger.info(f"Parsing {file_name} ({len(data)} bytes, md5 {compute_bytes_hash(data)})")
        try:
            return self.parser.parse(data)
        except ParseError as e:
            self.history.append(file_name, [], success=False, error_message=f"Failed to parse CSV: {e}")
            raise

    async def _import(
        self,
        file_name: str,
        readings: Sequence[Reading],
        on_progress: ProgressCallback | None,
    ) -> ImportOutcome:
        try:
            tally = await self.orchestrator.import_batch(
                readings, self.store.write, self.store.query, on_progress
            )
        except BPImporterError as e:
            logger.error(f"Import of {file_name} failed: {e}")
            self.history.append(file_name, readings, success=False, error_message=f"Import failed: {e}")
            raise

        record = self.history.append(file_name, readings, success=True)
        return ImportOutcome(file_name=file_name, readings=list(readings), tally=tally, record=record)

    async def run_bytes(
        self, file_name: str, data: bytes, on_progress: ProgressCallback | None = None
    ) -> ImportOutcome:
        """
        Import a file selected by the user.

        Args:
            file_name: Display name recorded in the history.
            data: Raw file contents.
            on_progress: Progress callback forwarded to the orchestrator.

        Returns:
            Outcome of the import.

        Raises:
            ParseError: If the file is unusable.
            HealthStoreError: If the store rejects a query or write.
        """
        readings = self._parse(file_name, data)
        return await self._import(file_name, readings, on_progress)

    async def run_file(
        self,
        path: Path,
        delete_after: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> ImportOutcome:
        """
        Import a local file, typically a copy handed off by a share action.

        When ``delete_after`` is set the local copy is removed once parsing
        has finished, whether it succeeded or not.

        Raises:
            OSError: If the file cannot be read.
            ParseError: If the file is unusable.
            HealthStoreError: If the store rejects a query or write.
        """
        try:
            data = path.read_bytes()
            readings = self._parse(path.name, data)
        finally:
            if delete_after:
                path.unlink(missing_ok=True)
                logger.debug(f"Removed local copy {path}")

        return await self._import(path.name, readings, on_progress)
