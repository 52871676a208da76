"""CLI entry point for book-catalog-tool.

Command Structure:
    book-catalog-tool
    ├── run CATALOG OPERATION...   load, ingest, execute operations, report
    ├── list CATALOG               print the catalog
    └── completion generate SHELL  shell completion scripts
"""

import atexit
import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer

from book_catalog_tool import __version__
from book_catalog_tool.completion import completion_app
from book_catalog_tool.errors import CatalogError
from book_catalog_tool.logging_config import get_logger, setup_logging
from book_catalog_tool.metrics import MetricsSnapshot
from book_catalog_tool.models import ROW_FORMAT, Book
from book_catalog_tool.session import CatalogSession
from book_catalog_tool.settings import load_settings
from book_catalog_tool.storage import CatalogStore, check_catalog_name, ensure_catalog_file
from book_catalog_tool.tasks import OperationKind, TaskOutcome
from book_catalog_tool.telemetry import TelemetryConfig, TelemetryService

logger = get_logger(__name__)

app = typer.Typer(invoke_without_command=True, no_args_is_help=False)
app.add_typer(completion_app, name="completion")

FAREWELL = "Thank you for using the Library Book Tracker."


class OutputFormat(str, Enum):
    """Output format options."""

    HUMAN = "human"
    JSON = "json"


# =============================================================================
# Callbacks
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"book-catalog-tool version {__version__}")
        raise typer.Exit()


def _shutdown_telemetry() -> None:
    TelemetryService.get_instance().shutdown()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Verbosity level: -v=INFO, -vv=DEBUG, -vvv=TRACE (includes OpenTelemetry internals)",
        ),
    ] = 0,
    _version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
    telemetry: Annotated[
        bool,
        typer.Option(
            "--telemetry",
            envvar="OTEL_ENABLED",
            help="Enable OpenTelemetry tracing and metrics (or set OTEL_ENABLED=true)",
        ),
    ] = False,
) -> None:
    """Book catalog stored as Title:Author:ISBN:Copies lines.

    \b
    OPERATIONS (classified in this order):
        13 digits               search by ISBN
        Title:Author:ISBN:N     add a book
        anything else           case-insensitive title search

    \b
    QUICK START:
        book-catalog-tool run library/catalog.txt "hobbit"
        book-catalog-tool run library/catalog.txt 9780261103573
        book-catalog-tool run library/catalog.txt "Dune:Frank Herbert:9780441013593:3"
        book-catalog-tool run library/catalog.txt hobbit --ingest new_arrivals.txt

    \b
    FILES:
        <catalog dir>/errors.log                  - Rejected lines and failed operations
        ~/.config/book-catalog-tool/settings.json - Persisted settings
    """
    setup_logging(verbose)

    config = TelemetryConfig.from_env()
    config.enabled = telemetry or config.enabled
    TelemetryService.get_instance().initialize(config)
    atexit.register(_shutdown_telemetry)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


# =============================================================================
# Output Helpers
# =============================================================================


def _book_to_dict(book: Book) -> dict[str, Any]:
    return book.model_dump(mode="json")


def _outcome_to_dict(outcome: TaskOutcome) -> dict[str, Any]:
    data: dict[str, Any] = {
        "task": outcome.task,
        "status": outcome.status.value,
    }
    if outcome.operation is not None:
        data["operation"] = outcome.operation.value
        data["books"] = [_book_to_dict(b) for b in outcome.books]
    else:
        data["accepted"] = len(outcome.accepted)
        data["rejected"] = [
            {"line": r.line_number, "raw": r.raw, "error": type(r.error).__name__}
            for r in outcome.rejected
        ]
    if not outcome.ok:
        data["error"] = {"kind": outcome.error_kind, "message": outcome.message}
    return data


def _print_header() -> None:
    typer.echo(ROW_FORMAT % ("Title", "Author", "ISBN", "Copies"))


def _print_books(books: tuple[Book, ...]) -> None:
    _print_header()
    for book in books:
        typer.echo(book.to_row())


def _print_ingestion(outcome: TaskOutcome) -> None:
    if outcome.ok:
        typer.echo(
            f"File reading completed: {outcome.task.removeprefix('ingest ')} "
            f"({len(outcome.accepted)} accepted, {len(outcome.rejected)} rejected)"
        )
    else:
        typer.echo(f"Error reading file: {outcome.message}", err=True)


def _print_operation(outcome: TaskOutcome) -> None:
    if not outcome.ok:
        typer.echo(f"Operation error: {outcome.message}", err=True)
        return
    if not outcome.books and outcome.operation != OperationKind.ADD_BOOK:
        typer.echo("No matching books found.")
        return
    _print_books(outcome.books)


def _print_statistics(stats: MetricsSnapshot) -> None:
    typer.echo("\n--- Session Statistics ---")
    typer.echo(f"Valid records processed: {stats.valid_records}")
    typer.echo(f"Search results found:    {stats.search_results}")
    typer.echo(f"Books added:             {stats.books_added}")
    typer.echo(f"Errors encountered:      {stats.errors}")


def _print_report(
    ingest_outcomes: list[TaskOutcome],
    outcomes: list[TaskOutcome],
    stats: MetricsSnapshot,
    output_format: OutputFormat,
) -> None:
    if output_format == OutputFormat.JSON:
        report = {
            "ingest": [_outcome_to_dict(o) for o in ingest_outcomes],
            "operations": [_outcome_to_dict(o) for o in outcomes],
            "statistics": stats.as_dict(),
        }
        typer.echo(json.dumps(report, indent=2))
        return

    for outcome in ingest_outcomes:
        _print_ingestion(outcome)
    for outcome in outcomes:
        _print_operation(outcome)
    _print_statistics(stats)
    typer.echo(FAREWELL)


# =============================================================================
# Commands
# =============================================================================


@app.command(name="run")
def run_command(
    catalog: Annotated[Path, typer.Argument(help="Catalog file (must end with .txt)")],
    operations: Annotated[
        list[str],
        typer.Argument(help="ISBN (13 digits), Title:Author:ISBN:Copies to add, or title keyword"),
    ],
    ingest: Annotated[
        list[Path] | None,
        typer.Option("--ingest", "-i", help="Extra catalog file to ingest before operations"),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", "-w", min=1, max=64, help="Worker threads for tasks"),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.HUMAN,
) -> None:
    """Load a catalog, ingest extra files, execute operations and report statistics.

    The catalog file and its directory are created when missing. Errors are
    written to errors.log next to the catalog; statistics are always printed.

    \b
    Examples:
        book-catalog-tool run catalog.txt hobbit
        book-catalog-tool run catalog.txt 9780261103573 "lord" --format json
    """
    settings = load_settings()
    if workers is not None:
        settings = settings.model_copy(update={"max_workers": workers})

    try:
        check_catalog_name(catalog)
        if ensure_catalog_file(catalog):
            logger.info("Created catalog file %s", catalog)
    except CatalogError as e:
        typer.echo(f"Error: {e}", err=True)
        _print_report([], [], MetricsSnapshot(errors=1), output_format)
        raise typer.Exit(1)

    session = CatalogSession(catalog, settings)
    session.open()
    ingest_outcomes = session.ingest(ingest or [])
    outcomes = session.execute(operations)
    _print_report(ingest_outcomes, outcomes, session.statistics(), output_format)


@app.command(name="list")
def list_command(
    catalog: Annotated[Path, typer.Argument(help="Catalog file (must end with .txt)")],
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.HUMAN,
) -> None:
    """List the valid records of a catalog in file order."""
    try:
        check_catalog_name(catalog)
        result = CatalogStore(catalog).load()
    except CatalogError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if output_format == OutputFormat.JSON:
        typer.echo(json.dumps([_book_to_dict(b) for b in result.books], indent=2))
    elif not result.books:
        typer.echo("No books in catalog.")
    else:
        _print_books(result.books)

    if result.rejected:
        typer.echo(f"Skipped {len(result.rejected)} invalid line(s).", err=True)


if __name__ == "__main__":
    app()
