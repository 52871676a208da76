"""Catalog session orchestration.

A CatalogSession wires one CatalogStore, one SessionMetrics and one ErrorLog
(colocated with the catalog file) for a single run: load the catalog, ingest
extra source files, execute operations, then report the final catalog and
the session statistics.

Classes:
    CatalogSession: One run against one catalog file.
"""

from collections.abc import Iterable
from pathlib import Path

from book_catalog_tool.errors import CatalogIOError
from book_catalog_tool.logging_config import get_logger
from book_catalog_tool.metrics import MetricsSnapshot, SessionMetrics
from book_catalog_tool.models import Book, Settings
from book_catalog_tool.storage import (
    CatalogStore,
    ErrorCategory,
    ErrorLog,
    ErrorLogEntry,
    LoadResult,
    get_error_log_path,
)
from book_catalog_tool.tasks import IngestionTask, OperationTask, TaskOutcome, run_tasks
from book_catalog_tool.telemetry import traced

logger = get_logger(__name__)


class CatalogSession:
    """One run against one catalog file.

    Attributes:
        store: The catalog store shared by all tasks.
        metrics: Session counters shared by all tasks.
        error_log: Error log next to the catalog file.

    Example:
        >>> session = CatalogSession(Path("library/catalog.txt"))
        >>> session.open()
        >>> session.ingest([Path("library/new_arrivals.txt")])
        >>> outcomes = session.execute(["hobbit", "9780261103573"])
        >>> session.statistics().search_results
        2
    """

    def __init__(self, catalog_path: Path, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.store = CatalogStore(
            catalog_path,
            reject_duplicate_isbn=self.settings.reject_duplicate_isbn,
        )
        self.metrics = SessionMetrics()
        self.error_log = ErrorLog(get_error_log_path(catalog_path, self.settings.error_log_name))

    @traced("catalog.open")
    def open(self) -> LoadResult:
        """Load the catalog file, counting valid records and logging rejects.

        An unreadable catalog is logged and counted as an error and leaves
        the catalog empty; it does not raise. Adds then fail with a FILE
        ERROR instead of overwriting the file. Lines with invalid UTF-8
        are rejected one by one like any other invalid line.

        Returns:
            LoadResult of the initial load (empty if the file was unreadable).
        """
        try:
            result = self.store.load()
        except CatalogIOError as e:
            self._report(ErrorCategory.FILE_ERROR, str(self.store.path), e)
            return LoadResult(books=())

        self.metrics.record_valid_record(len(result.books))
        for rejected in result.rejected:
            self._report(ErrorCategory.INVALID_LINE, rejected.raw, rejected.error)

        logger.info(
            "Opened %s: %d valid, %d rejected",
            self.store.path,
            len(result.books),
            len(result.rejected),
        )
        return result

    def ingest(self, sources: Iterable[Path]) -> list[TaskOutcome]:
        """Ingest source files concurrently into the catalog."""
        tasks = [IngestionTask(source, self.store, self.metrics, self.error_log) for source in sources]
        return run_tasks(tasks, self.settings.max_workers)

    def execute(self, arguments: Iterable[str]) -> list[TaskOutcome]:
        """Execute operation arguments concurrently against the catalog."""
        tasks = [
            OperationTask(argument, self.store, self.metrics, self.error_log)
            for argument in arguments
        ]
        return run_tasks(tasks, self.settings.max_workers)

    def books(self) -> tuple[Book, ...]:
        """Get the current catalog contents."""
        return self.store.snapshot()

    def statistics(self) -> MetricsSnapshot:
        """Get the session counters."""
        return self.metrics.snapshot()

    def errors(self) -> list[ErrorLogEntry]:
        """Get the error log entries recorded during this session."""
        return self.error_log.entries()

    def _report(self, category: ErrorCategory, raw_input: str, error: Exception) -> None:
        self.metrics.record_error()
        try:
            self.error_log.record(category, raw_input, error)
        except CatalogIOError as log_error:
            logger.warning("Error log unavailable, entry not persisted: %s", log_error)
