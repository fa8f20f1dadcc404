"""
External health store port.

The store is the system of record for physiological samples. The import
pipeline depends only on ``write`` and ``query``; both check that the
store supports and is authorized for the sample types involved before
touching it, and fail closed with a typed error otherwise.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum

from bp_importer.domain.reading import Reading, StoredBloodPressure, StoredHeartRate
from bp_importer.utils.exceptions import HealthStoreError, HealthStoreErrorKind

logger = logging.getLogger(__name__)


class SampleType(str, Enum):
    """Sample types the importer writes."""

    BLOOD_PRESSURE = "blood_pressure"
    HEART_RATE = "heart_rate"


ALL_SAMPLE_TYPES = frozenset(SampleType)


class HealthStore(ABC):
    """
    Capability-checked client for an external health store.

    Subclasses declare which sample types they support and which the user
    has authorized, and implement the raw save/fetch primitives.
    """

    def __init__(
        self,
        supported_types: frozenset[SampleType] = ALL_SAMPLE_TYPES,
        authorized_types: frozenset[SampleType] = ALL_SAMPLE_TYPES,
    ) -> None:
        self.supported_types = frozenset(supported_types)
        self.authorized_types = frozenset(authorized_types)

    def is_available(self, sample_type: SampleType) -> bool:
        return sample_type in self.supported_types

    def is_authorized(self, sample_type: SampleType) -> bool:
        return sample_type in self.authorized_types

    def require(self, sample_type: SampleType) -> None:
        """
        Ensure a sample type can be used.

        Raises:
            HealthStoreError: UNAVAILABLE or AUTHORIZATION_DENIED.
        """
        if not self.is_available(sample_type):
            raise HealthStoreError(HealthStoreErrorKind.UNAVAILABLE, sample_type=sample_type.value)
        if not self.is_authorized(sample_type):
            raise HealthStoreError(
                HealthStoreErrorKind.AUTHORIZATION_DENIED, sample_type=sample_type.value
            )

    async def write(self, reading: Reading) -> None:
        """
        Persist one reading.

        Saves a paired systolic/diastolic entry and, when the reading has a
        pulse, a separate heart rate entry. Both carry the reading's source.

        Raises:
            HealthStoreError: If the store is unavailable, unauthorized or the save fails.
        """
        self.require(SampleType.BLOOD_PRESSURE)
        if reading.pulse is not None:
            self.require(SampleType.HEART_RATE)

        await self._save_blood_pressure(StoredBloodPressure.from_reading(reading))

        if reading.pulse is not None:
            await self._save_heart_rate(
                StoredHeartRate(timestamp=reading.timestamp, bpm=reading.pulse, source=reading.source)
            )

    async def query(self, start: datetime, end: datetime) -> list[StoredBloodPressure]:
        """
        Return blood pressure entries whose timestamp lies in [start, end].

        Raises:
            HealthStoreError: If the store is unavailable, unauthorized or the query fails.
        """
        self.require(SampleType.BLOOD_PRESSURE)
        entries = await self._fetch_blood_pressure(start, end)
        logger.debug(f"Query {start.isoformat()} .. {end.isoformat()} returned {len(entries)} entries")
        return entries

    @abstractmethod
    async def _save_blood_pressure(self, entry: StoredBloodPressure) -> None:
        """Save one blood pressure entry."""

    @abstractmethod
    async def _save_heart_rate(self, entry: StoredHeartRate) -> None:
        """Save one heart rate entry."""

    @abstractmethod
    async def _fetch_blood_pressure(self, start: datetime, end: datetime) -> list[StoredBloodPressure]:
        """Fetch blood pressure entries in the closed range."""
