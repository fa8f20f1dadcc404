"""End-to-end tests for the import workflow."""

import asyncio
from datetime import datetime, timezone

import pytest

from bp_importer.domain.reading import StoredBloodPressure
from bp_importer.infrastructure.health_store.base import SampleType
from bp_importer.infrastructure.health_store.memory import InMemoryHealthStore
from bp_importer.infrastructure.parsers.csv_parser import CSVParser
from bp_importer.infrastructure.persistence.kv_store import InMemoryKeyValueStore
from bp_importer.services.duplicates import DuplicateDetector
from bp_importer.services.history import ImportHistoryLog
from bp_importer.services.importer import ImportOrchestrator
from bp_importer.services.workflow import ImportWorkflow
from bp_importer.utils.exceptions import HealthStoreError, ParseError
from bp_importer.utils.parameters import DuplicatesConfig, HistoryConfig, ParserConfig

SAMPLE_CSV = (
    b"Date,Time,Sys,Dia,Pulse,Irregular pulse,Source\n"
    b"2025-07-27,21:10,131,86,74,,OxiPro BP2\n"
    b"2025-07-28,07:45,124,79,68,detected,OxiPro BP2\n"
    b"2025-07-28,12:00,,80,70,,OxiPro BP2\n"
)


def make_workflow(store: InMemoryHealthStore) -> ImportWorkflow:
    history = ImportHistoryLog(InMemoryKeyValueStore(), HistoryConfig())
    return ImportWorkflow(
        CSVParser(ParserConfig(timezone="UTC")),
        ImportOrchestrator(DuplicateDetector(DuplicatesConfig())),
        history,
        store,
    )


def test_end_to_end_with_existing_reading() -> None:
    """Test parse, duplicate skip, write and history for a three-row file."""
    store = InMemoryHealthStore(
        blood_pressure=[
            StoredBloodPressure(
                timestamp=datetime(2025, 7, 27, 21, 10, tzinfo=timezone.utc),
                systolic=131,
                diastolic=86,
            )
        ]
    )
    workflow = make_workflow(store)
    progress: list[float] = []

    outcome = asyncio.run(workflow.run_bytes("export.csv", SAMPLE_CSV, progress.append))

    if len(outcome.readings) != 2:
        raise AssertionError(f"Expected 2 readings, got {len(outcome.readings)}")
    if outcome.readings[0].timestamp < outcome.readings[1].timestamp:
        raise AssertionError("Readings should be newest first")
    if (outcome.tally.imported, outcome.tally.skipped) != (1, 1):
        raise AssertionError(f"Unexpected tally: {outcome.tally}")
    if progress[-1] != 1.0:
        raise AssertionError(f"Unexpected progress: {progress}")
    if [hr.bpm for hr in store.heart_rate] != [68]:
        raise AssertionError(f"Unexpected heart rate entries: {store.heart_rate}")

    record = workflow.history.records[0]
    if not record.success or record.reading_count != 2 or len(record.readings) != 2:
        raise AssertionError(f"Unexpected history record: {record}")
    if record.date_range_label != "2025-07-27 - 2025-07-28":
        raise AssertionError(f"Unexpected label: {record.date_range_label}")


def test_reimport_skips_everything() -> None:
    """Test that importing the same file twice writes nothing the second time."""
    store = InMemoryHealthStore()
    workflow = make_workflow(store)

    first = asyncio.run(workflow.run_bytes("export.csv", SAMPLE_CSV))
    second = asyncio.run(workflow.run_bytes("export.csv", SAMPLE_CSV))

    if first.tally != (2, 0) or second.tally != (0, 2):
        raise AssertionError(f"Unexpected tallies: {first.tally}, {second.tally}")
    if len(store.blood_pressure) != 2:
        raise AssertionError(f"Expected 2 stored entries, got {len(store.blood_pressure)}")


def test_parse_failure_is_recorded() -> None:
    """Test that a file-level failure is raised and logged as a failed attempt."""
    workflow = make_workflow(InMemoryHealthStore())

    with pytest.raises(ParseError):
        asyncio.run(workflow.run_bytes("empty.csv", b"Date,Time,Sys,Dia\n"))

    record = workflow.history.records[0]
    if record.success or record.readings is not None:
        raise AssertionError(f"Unexpected record: {record}")
    if record.error_message != "Failed to parse CSV: CSV file is empty":
        raise AssertionError(f"Unexpected message: {record.error_message}")


def test_store_failure_is_recorded() -> None:
    """Test that an unauthorized store aborts the import and is recorded."""
    store = InMemoryHealthStore(authorized_types=frozenset({SampleType.HEART_RATE}))
    workflow = make_workflow(store)

    with pytest.raises(HealthStoreError):
        asyncio.run(workflow.run_bytes("export.csv", SAMPLE_CSV))

    record = workflow.history.records[0]
    if record.success or record.reading_count != 2:
        raise AssertionError(f"Unexpected record: {record}")
    if not record.error_message.startswith("Import failed: Health store authorization was denied"):
        raise AssertionError(f"Unexpected message: {record.error_message}")


def test_run_file_deletes_local_copy(tmp_path) -> None:
    """Test that a handed-off copy is removed after parsing, even on failure."""
    good = tmp_path / "shared.csv"
    good.write_bytes(SAMPLE_CSV)
    bad = tmp_path / "broken.csv"
    bad.write_bytes(b"Date,Time\n2025-07-28,08:00\n")
    workflow = make_workflow(InMemoryHealthStore())

    outcome = asyncio.run(workflow.run_file(good, delete_after=True))
    with pytest.raises(ParseError):
        asyncio.run(workflow.run_file(bad, delete_after=True))

    if outcome.file_name != "shared.csv" or outcome.tally.imported != 2:
        raise AssertionError(f"Unexpected outcome: {outcome}")
    if good.exists() or bad.exists():
        raise AssertionError("Local copies should be deleted")
