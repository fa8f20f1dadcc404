"""
Command-line interface for the blood pressure importer.

Provides commands for previewing, importing and auditing monitor exports.
"""

import asyncio
from pathlib import Path

import typer

from bp_importer.infrastructure.health_store.json_store import JsonFileHealthStore
from bp_importer.infrastructure.parsers.csv_parser import CSVParser
from bp_importer.infrastructure.persistence.kv_store import FileKeyValueStore
from bp_importer.services.duplicates import DuplicateDetector
from bp_importer.services.history import ImportHistoryLog
from bp_importer.services.importer import ImportOrchestrator
from bp_importer.services.output import OutputService
from bp_importer.services.workflow import ImportWorkflow
from bp_importer.utils.exceptions import BPImporterError
from bp_importer.utils.logging_config import get_logger, setup_logging
from bp_importer.utils.parameters import ParameterLoader

app = typer.Typer(help="BP Importer - Blood pressure monitor export importer")

logger = get_logger(__name__)


def init_config(config_path: str = "config/config.yaml") -> ParameterLoader:
    """
    Initialize configuration and logging.

    Args:
        config_path: Path to configuration file.

    Returns:
        Parameter loader instance.
    """
    param_loader = ParameterLoader(config_path)
    setup_logging(param_loader.get_logging_config(), "bp_importer")
    return param_loader


def load_history(param_loader: ParameterLoader) -> ImportHistoryLog:
    history_config = param_loader.get_history_config()
    history = ImportHistoryLog(FileKeyValueStore(history_config.storage_dir), history_config)
    history.load()
    return history


def fail(action: str, error: Exception) -> None:
    logger.error(f"{action} failed: {error}")
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1) from error


@app.command("import")
def import_file(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV export to import"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    shared: bool = typer.Option(
        False, help="Treat FILE as a handed-off local copy and delete it after parsing"
    ),
) -> None:
    """
    Import a monitor export into the health store.

    Readings already present in the store are skipped.
    """
    try:
        param_loader = init_config(config_path)
        history = load_history(param_loader)
        store = JsonFileHealthStore(param_loader.get_health_store_config())

        workflow = ImportWorkflow(
            CSVParser(param_loader.get_parser_config()),
            ImportOrchestrator(DuplicateDetector(param_loader.get_duplicates_config())),
            history,
            store,
        )

        with typer.progressbar(length=100, label="Importing") as progress:
            reported = 0

            def on_progress(fraction: float) -> None:
                nonlocal reported
                target = int(fraction * 100)
                progress.update(target - reported)
                reported = target

            outcome = asyncio.run(workflow.run_file(file, delete_after=shared, on_progress=on_progress))

        typer.echo(outcome.message)
        typer.echo(f"Date range: {outcome.record.date_range_label}")

    except (BPImporterError, OSError) as e:
        fail("Import", e)


@app.command()
def preview(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV export to parse"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Parse a monitor export and list its readings without importing."""
    try:
        param_loader = init_config(config_path)
        readings = CSVParser(param_loader.get_parser_config()).parse(file.read_bytes())

        typer.echo(f"{len(readings)} readings in {file.name}")
        for reading in readings:
            pulse = f"{reading.pulse} bpm" if reading.pulse is not None else "N/A"
            flag = " irregular" if reading.irregular_pulse else ""
            typer.echo(
                f"  {reading.timestamp:%Y-%m-%d %H:%M}  {reading.blood_pressure:>7}  "
                f"{pulse:>8}{flag}  [{reading.source}]"
            )

    except (BPImporterError, OSError) as e:
        fail("Preview", e)


@app.command()
def history(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    export: bool = typer.Option(False, help="Also export the history as CSV"),
) -> None:
    """List previous import attempts, newest first."""
    try:
        param_loader = init_config(config_path)
        log = load_history(param_loader)

        if not log.records:
            typer.echo("No imports recorded")
        for index, record in enumerate(log.records):
            status = "ok" if record.success else "failed"
            typer.echo(
                f"[{index}] {record.import_timestamp:%Y-%m-%d %H:%M} {record.file_name} "
                f"{status} {record.reading_count} readings ({record.date_range_label})"
            )
            if record.error_message:
                typer.echo(f"      {record.error_message}")

        if export:
            output_service = OutputService(
                param_loader.get_output_config(), param_loader.get_parser_config()
            )
            path = output_service.write_history(list(log.records))
            typer.echo(f"History written to {path}")

    except (BPImporterError, OSError) as e:
        fail("History", e)


@app.command("export-snapshot")
def export_snapshot(
    index: int = typer.Argument(..., min=0, help="History position as shown by 'history'"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Write the readings of a successful import back out as CSV."""
    try:
        param_loader = init_config(config_path)
        log = load_history(param_loader)

        if index >= len(log):
            raise BPImporterError(f"No import record at position {index}")

        output_service = OutputService(
            param_loader.get_output_config(), param_loader.get_parser_config()
        )
        path = output_service.write_snapshot(log.records[index], index)
        typer.echo(f"Snapshot written to {path}")

    except (BPImporterError, OSError) as e:
        fail("Export", e)


@app.command("clear-history")
def clear_history(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    yes: bool = typer.Option(False, "--yes", help="Do not ask for confirmation"),
) -> None:
    """Delete every recorded import attempt."""
    try:
        param_loader = init_config(config_path)
        log = load_history(param_loader)

        if not yes:
            typer.confirm(f"Delete {len(log)} import records?", abort=True)

        log.clear()
        typer.echo("Import history cleared")

    except (BPImporterError, OSError) as e:
        fail("Clear", e)


if __name__ == "__main__":
    app()
