"""
Import orchestrator.

Writes a parsed batch to the external health store, skipping readings the
store already holds, and reports progress after every reading.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence

from bp_importer.domain.import_record import ImportTally
from bp_importer.domain.reading import Reading, ReadingKey
from bp_importer.services.duplicates import DuplicateDetector, RangeQuery
from bp_importer.utils.exceptions import BPImporterError, HealthStoreError, HealthStoreErrorKind

logger = logging.getLogger(__name__)

Writer = Callable[[Reading], Awaitable[None]]
ProgressCallback = Callable[[float], None]


class ImportOrchestrator:
    """
    Sequences duplicate detection and per-reading writes for one batch.

    Writes are strictly sequential and there is no rollback: readings
    written before a failure stay written.
    """

    def __init__(self, detector: DuplicateDetector) -> None:
        self.detector = detector

    async def _existing_keys(
        self, readings: Sequence[Reading], range_query: RangeQuery
    ) -> set[ReadingKey]:
        try:
            return await self.detector.find_duplicates(readings, range_query)
        except BPImporterError:
            raise
        except Exception as e:
            raise HealthStoreError(HealthStoreErrorKind.QUERY_FAILED, detail=str(e)) from e

    async def _write(self, writer: Writer, reading: Reading) -> None:
        try:
            await writer(reading)
        except BPImporterError:
            raise
        except Exception as e:
            raise HealthStoreError(HealthStoreErrorKind.WRITE_FAILED, detail=str(e)) from e

    async def import_batch(
        self,
        readings: Sequence[Reading],
        writer: Writer,
        range_query: RangeQuery,
        on_progress: ProgressCallback | None = None,
    ) -> ImportTally:
        """
        Import a batch of readings.

        Args:
            readings: Batch in the order it should be written.
            writer: Coroutine function persisting one reading.
            range_query: Coroutine function returning stored entries in a time range.
            on_progress: Called with completed/total after each reading.

        Returns:
            Tally of imported and skipped readings.

        Raises:
            HealthStoreError: On the first query or write failure.
        """
        if not readings:
            return ImportTally(imported=0, skipped=0)

        existing = await self._existing_keys(readings, range_query)

        total = len(readings)
        imported = 0
        skipped = 0

        for completed, reading in enumerate(readings, start=1):
            if reading.key in existing:
                skipped += 1
                logger.debug(
                    f"Skipping duplicate {reading.blood_pressure} at {reading.timestamp.isoformat()}"
                )
            else:
                await self._write(writer, reading)
                imported += 1

            if on_progress is not None:
                on_progress(completed / total)

        logger.info(f"Imported {imported} readings, skipped {skipped} duplicates")
        return ImportTally(imported=imported, skipped=skipped)
