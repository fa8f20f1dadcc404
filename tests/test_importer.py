"""Unit tests for the import orchestrator."""

import asyncio

import pytest
from helpers import make_reading

from bp_importer.domain.reading import Reading, StoredBloodPressure
from bp_importer.infrastructure.health_store.memory import InMemoryHealthStore
from bp_importer.services.duplicates import DuplicateDetector
from bp_importer.services.importer import ImportOrchestrator
from bp_importer.utils.exceptions import HealthStoreError, HealthStoreErrorKind
from bp_importer.utils.parameters import DuplicatesConfig


def make_orchestrator() -> ImportOrchestrator:
    return ImportOrchestrator(DuplicateDetector(DuplicatesConfig()))


def test_empty_batch_returns_zero_tally() -> None:
    """Test that an empty batch never touches the store."""
    store = InMemoryHealthStore()

    tally = asyncio.run(make_orchestrator().import_batch([], store.write, store.query))

    if tally != (0, 0):
        raise AssertionError(f"Unexpected tally: {tally}")
    if store.query_count != 0:
        raise AssertionError("Store must not be queried")


def test_skips_duplicates_and_writes_the_rest() -> None:
    """Test tally, writes and progress for a mixed batch."""
    existing = make_reading(minutes=10)
    store = InMemoryHealthStore(blood_pressure=[StoredBloodPressure.from_reading(existing)])
    batch = [
        make_reading(minutes=20, pulse=70),
        make_reading(minutes=10),
        make_reading(minutes=0, pulse=None),
    ]
    progress: list[float] = []

    tally = asyncio.run(
        make_orchestrator().import_batch(batch, store.write, store.query, progress.append)
    )

    if (tally.imported, tally.skipped) != (2, 1):
        raise AssertionError(f"Unexpected tally: {tally}")
    if tally.total != len(batch):
        raise AssertionError("imported + skipped must equal batch size")
    if len(store.blood_pressure) != 3:
        raise AssertionError(f"Expected 3 stored entries, got {len(store.blood_pressure)}")
    if [hr.bpm for hr in store.heart_rate] != [70]:
        raise AssertionError(f"Unexpected heart rate entries: {store.heart_rate}")
    if progress != sorted(progress) or progress[-1] != 1.0 or len(progress) != 3:
        raise AssertionError(f"Unexpected progress: {progress}")
    if store.query_count != 1:
        raise AssertionError("Expected exactly one duplicate query")


def test_all_duplicates_still_reach_full_progress() -> None:
    """Test that progress reaches 1.0 when everything is skipped."""
    batch = [make_reading(minutes=0), make_reading(minutes=5)]
    store = InMemoryHealthStore(
        blood_pressure=[StoredBloodPressure.from_reading(r) for r in batch]
    )
    progress: list[float] = []

    tally = asyncio.run(
        make_orchestrator().import_batch(batch, store.write, store.query, progress.append)
    )

    if tally != (0, 2):
        raise AssertionError(f"Unexpected tally: {tally}")
    if progress != [0.5, 1.0]:
        raise AssertionError(f"Unexpected progress: {progress}")


def test_write_failure_stops_without_rollback() -> None:
    """Test that the first failed write propagates and earlier writes remain."""
    written: list[Reading] = []

    async def writer(reading: Reading) -> None:
        if len(written) == 1:
            raise RuntimeError("disk full")
        written.append(reading)

    async def range_query(start, end) -> list[StoredBloodPressure]:
        return []

    batch = [make_reading(minutes=2), make_reading(minutes=1), make_reading(minutes=0)]
    progress: list[float] = []

    with pytest.raises(HealthStoreError) as exc_info:
        asyncio.run(make_orchestrator().import_batch(batch, writer, range_query, progress.append))

    if exc_info.value.kind != HealthStoreErrorKind.WRITE_FAILED:
        raise AssertionError(f"Unexpected kind: {exc_info.value.kind}")
    if not isinstance(exc_info.value.__cause__, RuntimeError):
        raise AssertionError("Original error should be chained")
    if written != batch[:1]:
        raise AssertionError(f"Unexpected writes: {written}")
    if len(progress) != 1:
        raise AssertionError(f"Unexpected progress after failure: {progress}")


def test_query_failure_propagates() -> None:
    """Test that a failing duplicate query aborts before any write."""
    store = InMemoryHealthStore()

    async def range_query(start, end) -> list[StoredBloodPressure]:
        raise ConnectionError("offline")

    with pytest.raises(HealthStoreError) as exc_info:
        asyncio.run(make_orchestrator().import_batch([make_reading()], store.write, range_query))

    if exc_info.value.kind != HealthStoreErrorKind.QUERY_FAILED:
        raise AssertionError(f"Unexpected kind: {exc_info.value.kind}")
    if store.blood_pressure:
        raise AssertionError("Nothing should have been written")
