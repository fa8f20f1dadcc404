"""Shared builders for tests."""

from datetime import datetime, timedelta, timezone

from bp_importer.domain.reading import Reading

BASE_TS = datetime(2025, 7, 28, 8, 0, tzinfo=timezone.utc)


def make_reading(
    minutes: int = 0, systolic: int = 120, diastolic: int = 80, pulse: int | None = 65
) -> Reading:
    return Reading.create(
        timestamp=BASE_TS + timedelta(minutes=minutes),
        systolic=systolic,
        diastolic=diastolic,
        pulse=pulse,
        source="Test Monitor",
    )
