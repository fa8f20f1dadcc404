"""
JSON-file health store.

A local stand-in for a device health store: every saved entry is flushed
to a single JSON document so imports are visible across runs.
"""

import asyncio
import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from bp_importer.domain.reading import StoredBloodPressure, StoredHeartRate
from bp_importer.infrastructure.health_store.memory import InMemoryHealthStore
from bp_importer.utils.exceptions import HealthStoreError, HealthStoreErrorKind
from bp_importer.utils.parameters import HealthStoreConfig

logger = logging.getLogger(__name__)


class _StoreDocument(BaseModel):
    blood_pressure: list[StoredBloodPressure] = Field(default_factory=list)
    heart_rate: list[StoredHeartRate] = Field(default_factory=list)


class JsonFileHealthStore(InMemoryHealthStore):
    """
    Health store persisted to a JSON file.

    The document is loaded once at construction. A file that exists but
    cannot be read makes the store unavailable rather than silently empty.
    """

    def __init__(self, config: HealthStoreConfig) -> None:
        """
        Initialize the store.

        Args:
            config: Health store configuration.

        Raises:
            HealthStoreError: If an existing store file is unreadable.
        """
        self.path = Path(config.path)
        document = self._load()
        super().__init__(document.blood_pressure, document.heart_rate)
        logger.debug(
            f"Loaded {len(self.blood_pressure)} blood pressure entries from {self.path}"
        )

    def _load(self) -> _StoreDocument:
        if not self.path.exists():
            return _StoreDocument()

        try:
            return _StoreDocument.model_validate_json(self.path.read_bytes())
        except (OSError, PydanticValidationError) as e:
            raise HealthStoreError(
                HealthStoreErrorKind.UNAVAILABLE, detail=f"cannot read {self.path}: {e}"
            ) from e

    def _flush(self) -> None:
        document = _StoreDocument(blood_pressure=self.blood_pressure, heart_rate=self.heart_rate)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(
            json.dumps(document.model_dump(mode="json"), indent=2), encoding="utf-8"
        )
        tmp_path.replace(self.path)

    async def _save_blood_pressure(self, entry: StoredBloodPressure) -> None:
        await super()._save_blood_pressure(entry)
        await self._flush_async()

    async def _save_heart_rate(self, entry: StoredHeartRate) -> None:
        await super()._save_heart_rate(entry)
        await self._flush_async()

    async def _flush_async(self) -> None:
        try:
            await asyncio.to_thread(self._flush)
        except OSError as e:
            raise HealthStoreError(HealthStoreErrorKind.WRITE_FAILED, detail=str(e)) from e
