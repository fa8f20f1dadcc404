"""
Import history log.

Keeps a newest-first, size-bounded audit trail of import attempts and
persists it under a single key. Persistence problems never surface to
callers: an unreadable history loads as empty and a failed save only
affects durability across restarts.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError

from bp_importer.domain.import_record import NO_DATE_RANGE, ImportRecord
from bp_importer.domain.reading import Reading
from bp_importer.infrastructure.persistence.kv_store import KeyValueStore
from bp_importer.utils.exceptions import PersistenceError
from bp_importer.utils.parameters import HistoryConfig
from bp_importer.utils.timezone_utils import format_date_range

logger = logging.getLogger(__name__)

HistoryListener = Callable[[tuple[ImportRecord, ...]], None]

_RECORDS_ADAPTER = TypeAdapter(list[ImportRecord])


class ImportHistoryLog:
    """
    Bounded, newest-first log of ImportRecord entries.

    Presentation layers observe changes through ``subscribe``; the log
    never holds references into their state.
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: HistoryConfig,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the history log. Call ``load`` to restore persisted entries.

        Args:
            store: Key-value facility holding the serialized log.
            config: History configuration.
            clock: Source of import timestamps; defaults to the current UTC time.
        """
        self.store = store
        self.config = config
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._records: list[ImportRecord] = []
        self._listeners: list[HistoryListener] = []

    @property
    def records(self) -> tuple[ImportRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def subscribe(self, listener: HistoryListener) -> Callable[[], None]:
        """
        Register a listener called with the records after every change.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.records
        for listener in list(self._listeners):
            listener(snapshot)

    def _date_range_label(self, readings: Sequence[Reading]) -> str:
        if not readings:
            return NO_DATE_RANGE
        start = min(r.timestamp for r in readings)
        end = max(r.timestamp for r in readings)
        return format_date_range(start, end, self.config.date_format)

    def append(
        self,
        file_name: str,
        readings: Sequence[Reading],
        success: bool,
        error_message: str | None = None,
    ) -> ImportRecord:
        """
        Record one import attempt at the front of the log.

        Args:
            file_name: Name of the imported file.
            readings: Batch that was imported (or attempted).
            success: Whether the import completed.
            error_message: Failure description; ignored for successful imports.

        Returns:
            The new record.
        """
        record = ImportRecord(
            file_name=file_name,
            import_timestamp=self._clock(),
            reading_count=len(readings),
            date_range_label=self._date_range_label(readings),
            success=success,
            error_message=None if success else error_message,
            readings=list(readings) if success else None,
        )

        self._records.insert(0, record)
        del self._records[self.config.max_records:]

        self.persist()
        self._notify()
        return record

    def clear(self) -> None:
        """Remove every record from memory and from persisted storage."""
        self._records.clear()
        try:
            self.store.delete(self.config.storage_key)
        except PersistenceError as e:
            logger.warning(f"Failed to clear persisted history: {e}")
        self._notify()

    def load(self) -> None:
        """
        Restore the log from persisted storage.

        Missing, unreadable or corrupt data yields an empty log.
        """
        try:
            payload = self.store.get(self.config.storage_key)
            records = _RECORDS_ADAPTER.validate_json(payload) if payload else []
        except (PersistenceError, PydanticValidationError) as e:
            logger.warning(f"Discarding unreadable import history: {e}")
            records = []

        self._records = records[: self.config.max_records]
        logger.debug(f"Loaded {len(self._records)} import records")
        self._notify()

    def persist(self) -> None:
        """Serialize the full log; failures are logged and otherwise ignored."""
        try:
            payload = _RECORDS_ADAPTER.dump_json(self._records[: self.config.max_records])
            self.store.set(self.config.storage_key, payload.decode("utf-8"))
        except (PydanticSerializationError, PersistenceError) as e:
            logger.warning(f"Failed to persist import history: {e}")
