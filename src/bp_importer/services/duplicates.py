"""
Duplicate detection against the external health store.

A batch reading is a duplicate only when the store already holds an entry
with the identical timestamp and both identical pressures.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from datetime import datetime, timedelta

from bp_importer.domain.reading import Reading, ReadingKey, StoredBloodPressure
from bp_importer.utils.parameters import DuplicatesConfig

logger = logging.getLogger(__name__)

RangeQuery = Callable[[datetime, datetime], Awaitable[Iterable[StoredBloodPressure]]]


class DuplicateDetector:
    """Finds which readings of a batch already exist in the external store."""

    def __init__(self, config: DuplicatesConfig) -> None:
        """
        Initialize duplicate detector.

        Args:
            config: Duplicate reconciliation configuration.
        """
        self.config = config

    def query_window(self, batch: Sequence[Reading]) -> tuple[datetime, datetime]:
        """
        Compute the padded time window covering a non-empty batch.

        Args:
            batch: Readings to cover.

        Returns:
            Tuple of (start, end).
        """
        padding = timedelta(seconds=self.config.window_padding_seconds)
        min_date = min(r.timestamp for r in batch)
        max_date = max(r.timestamp for r in batch)
        return min_date - padding, max_date + padding

    async def find_duplicates(
        self, batch: Sequence[Reading], range_query: RangeQuery
    ) -> set[ReadingKey]:
        """
        Return the keys of existing store entries within the batch's window.

        Issues a single range query. An empty batch returns an empty set
        without querying.

        Args:
            batch: Readings about to be imported.
            range_query: Coroutine function returning stored entries in [start, end].

        Returns:
            Set of (timestamp, systolic, diastolic) keys present in the store.
        """
        if not batch:
            return set()

        start, end = self.query_window(batch)
        existing = await range_query(start, end)
        keys = {entry.key for entry in existing}

        logger.info(
            f"Found {len(keys)} existing entries between {start.isoformat()} and {end.isoformat()}"
        )
        return keys
