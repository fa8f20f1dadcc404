"""
Blood pressure reading domain models.

This module defines the validated reading produced by the parser and the
entries the external health store exposes, both of which reduce to the
same duplicate key.
"""

from datetime import datetime
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from bp_importer.utils.hashing import generate_reading_id

DEFAULT_SOURCE = "Unknown"


class ReadingKey(NamedTuple):
    """Exact-match identity used for duplicate reconciliation."""

    timestamp: datetime
    systolic: int
    diastolic: int


class Reading(BaseModel):
    """
    One blood pressure observation from a monitor export.

    Timestamps are timezone-aware. Instances are immutable.
    """

    reading_id: str = Field(description="Deterministic identifier derived from the fields")
    timestamp: datetime = Field(description="Measurement timestamp (timezone-aware)")
    systolic: int = Field(description="Systolic pressure in mmHg")
    diastolic: int = Field(description="Diastolic pressure in mmHg")
    pulse: int | None = Field(None, description="Pulse in beats per minute")
    irregular_pulse: bool = Field(False, description="Irregular pulse detected by the monitor")
    source: str = Field(DEFAULT_SOURCE, description="Device or source label")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def create(
        cls,
        timestamp: datetime,
        systolic: int,
        diastolic: int,
        pulse: int | None = None,
        irregular_pulse: bool = False,
        source: str = DEFAULT_SOURCE,
    ) -> "Reading":
        """Build a reading, deriving its identifier from the given fields."""
        return cls(
            reading_id=generate_reading_id(
                timestamp, systolic, diastolic, pulse, irregular_pulse, source
            ),
            timestamp=timestamp,
            systolic=systolic,
            diastolic=diastolic,
            pulse=pulse,
            irregular_pulse=irregular_pulse,
            source=source,
        )

    @property
    def key(self) -> ReadingKey:
        return ReadingKey(self.timestamp, self.systolic, self.diastolic)

    @property
    def blood_pressure(self) -> str:
        return f"{self.systolic}/{self.diastolic}"


class StoredBloodPressure(BaseModel):
    """Paired systolic/diastolic entry held by the external health store."""

    timestamp: datetime
    systolic: int
    diastolic: int
    source: str = DEFAULT_SOURCE
    user_entered: bool = True

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_reading(cls, reading: Reading) -> "StoredBloodPressure":
        return cls(
            timestamp=reading.timestamp,
            systolic=reading.systolic,
            diastolic=reading.diastolic,
            source=reading.source,
        )

    @property
    def key(self) -> ReadingKey:
        return ReadingKey(self.timestamp, self.systolic, self.diastolic)


class StoredHeartRate(BaseModel):
    """Heart rate entry written alongside a reading that carries a pulse."""

    timestamp: datetime
    bpm: int
    source: str = DEFAULT_SOURCE
    user_entered: bool = True

    model_config = ConfigDict(frozen=True)
