"""In-memory health store."""

from datetime import datetime

from bp_importer.domain.reading import StoredBloodPressure, StoredHeartRate
from bp_importer.infrastructure.health_store.base import ALL_SAMPLE_TYPES, HealthStore, SampleType


class InMemoryHealthStore(HealthStore):
    """Health store that keeps entries in lists, in insertion order."""

    def __init__(
        self,
        blood_pressure: list[StoredBloodPressure] | None = None,
        heart_rate: list[StoredHeartRate] | None = None,
        supported_types: frozenset[SampleType] = ALL_SAMPLE_TYPES,
        authorized_types: frozenset[SampleType] = ALL_SAMPLE_TYPES,
    ) -> None:
        super().__init__(supported_types, authorized_types)
        self.blood_pressure: list[StoredBloodPressure] = list(blood_pressure or [])
        self.heart_rate: list[StoredHeartRate] = list(heart_rate or [])
        self.query_count = 0

    async def _save_blood_pressure(self, entry: StoredBloodPressure) -> None:
        self.blood_pressure.append(entry)

    async def _save_heart_rate(self, entry: StoredHeartRate) -> None:
        self.heart_rate.append(entry)

    async def _fetch_blood_pressure(self, start: datetime, end: datetime) -> list[StoredBloodPressure]:
        self.query_count += 1
        return [entry for entry in self.blood_pressure if start <= entry.timestamp <= end]
