"""Ingestion and operation tasks for book-catalog-tool.

Tasks are callables meant to run on worker threads against one shared
CatalogStore, SessionMetrics and ErrorLog. A task never raises to its
scheduler: every failure becomes an error log entry, an error count and a
FAILURE outcome that the caller can inspect.

Enums:
    OperationKind: ISBN search, add book or title search.
    TaskStatus: SUCCESS or FAILURE.

Classes:
    TaskOutcome: Result reported by every task.
    CatalogTask: Base class handling failure conversion and tracing.
    IngestionTask: Validate a source file and add its records to the store.
    OperationTask: Classify and execute one operation argument.

Functions:
    classify_operation: Decide which operation an argument requests.
    run_tasks: Run tasks on a thread pool and collect their outcomes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from book_catalog_tool.errors import CatalogError, CatalogIOError, DuplicateISBNError
from book_catalog_tool.logging_config import get_logger
from book_catalog_tool.metrics import SessionMetrics
from book_catalog_tool.models import FIELD_COUNT, Book
from book_catalog_tool.search import search_by_isbn, search_by_title
from book_catalog_tool.storage import (
    CatalogStore,
    ErrorCategory,
    ErrorLog,
    RejectedLine,
    read_catalog_lines,
)
from book_catalog_tool.telemetry import trace_span
from book_catalog_tool.validation import is_isbn, parse_book_line, split_fields, validate_line

logger = get_logger(__name__)


# =============================================================================
# Operation Dispatch
# =============================================================================


class OperationKind(str, Enum):
    """Operation requested by a single argument."""

    ISBN_SEARCH = "isbn-search"
    ADD_BOOK = "add-book"
    TITLE_SEARCH = "title-search"


def classify_operation(argument: str) -> OperationKind:
    """Classify an operation argument.

    The checks run in a fixed order: a 13-digit argument is always an ISBN
    search; otherwise four colon-separated fields mean add; anything else is
    a title search with the whole argument as keyword.

    Example:
        >>> classify_operation("1234567890123")
        <OperationKind.ISBN_SEARCH: 'isbn-search'>
        >>> classify_operation("A:B:1234567890123:3")
        <OperationKind.ADD_BOOK: 'add-book'>
        >>> classify_operation("The Hobbit")
        <OperationKind.TITLE_SEARCH: 'title-search'>
    """
    if is_isbn(argument):
        return OperationKind.ISBN_SEARCH
    if len(split_fields(argument)) == FIELD_COUNT:
        return OperationKind.ADD_BOOK
    return OperationKind.TITLE_SEARCH


# =============================================================================
# Task Outcome
# =============================================================================


class TaskStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class TaskOutcome:
    """Result reported by a task.

    Attributes:
        task: Short description of the task (e.g. "ingest extra.txt").
        status: SUCCESS or FAILURE.
        operation: Operation kind for operation tasks, None for ingestion.
        books: Books found by a search or inserted by an add.
        accepted: Books added by an ingestion task.
        rejected: Lines rejected by an ingestion task.
        error_kind: Exception class name on failure.
        message: Error message on failure.
    """

    task: str
    status: TaskStatus
    operation: OperationKind | None = None
    books: tuple[Book, ...] = ()
    accepted: tuple[Book, ...] = ()
    rejected: tuple[RejectedLine, ...] = ()
    error_kind: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == TaskStatus.SUCCESS


# =============================================================================
# Tasks
# =============================================================================


class CatalogTask(ABC):
    """Base class for tasks run against a shared catalog session.

    Subclasses implement _execute(). run() traces the execution and turns
    any exception into a FAILURE outcome, an error log entry and an error
    count, so the executor always sees the task complete.
    """

    failure_category: ErrorCategory = ErrorCategory.OPERATION_FAILED

    def __init__(self, store: CatalogStore, metrics: SessionMetrics, error_log: ErrorLog) -> None:
        self._store = store
        self._metrics = metrics
        self._error_log = error_log

    @property
    @abstractmethod
    def description(self) -> str:
        """Short task description used in outcomes and spans."""
        ...

    @property
    @abstractmethod
    def raw_input(self) -> str:
        """Input recorded in the error log when the task fails."""
        ...

    @abstractmethod
    def _execute(self) -> TaskOutcome: ...

    def run(self) -> TaskOutcome:
        """Execute the task and report its outcome. Never raises."""
        with trace_span("catalog.task", {"catalog.task": self.description}):
            try:
                outcome = self._execute()
            except CatalogError as e:
                outcome = self._fail(self._category_for(e), e)
            except Exception as e:
                logger.exception("Unexpected error in task %s", self.description)
                outcome = self._fail(self.failure_category, e)
        logger.debug("Task %s finished: %s", self.description, outcome.status.value)
        return outcome

    def __call__(self) -> TaskOutcome:
        return self.run()

    def _category_for(self, error: CatalogError) -> ErrorCategory:
        if isinstance(error, CatalogIOError):
            return ErrorCategory.FILE_ERROR
        return self.failure_category

    def _log_error(self, category: ErrorCategory, raw_input: str, error: Exception) -> None:
        """Count an error and append it to the error log."""
        self._metrics.record_error()
        try:
            self._error_log.record(category, raw_input, error)
        except CatalogIOError as log_error:
            # The entry is kept in memory; the task still completes
            logger.warning("Error log unavailable, entry not persisted: %s", log_error)

    def _fail(self, category: ErrorCategory, error: Exception, **fields: object) -> TaskOutcome:
        self._log_error(category, self.raw_input, error)
        message = error.message if isinstance(error, CatalogError) else str(error)
        return TaskOutcome(
            task=self.description,
            status=TaskStatus.FAILURE,
            error_kind=type(error).__name__,
            message=message,
            **fields,  # type: ignore[arg-type]
        )


class IngestionTask(CatalogTask):
    """Read one source file and add every valid record to the store.

    Each accepted record is one store.add() call; rejected lines, including
    duplicates refused by a strict store, are logged and counted without
    stopping the task. A source that cannot be read, or
    a catalog rewrite that fails, ends the task with a FAILURE outcome.

    Example:
        >>> outcome = IngestionTask(Path("extra.txt"), store, metrics, error_log).run()
        >>> len(outcome.accepted), len(outcome.rejected)
        (12, 1)
    """

    failure_category = ErrorCategory.FILE_ERROR

    def __init__(
        self,
        source: Path,
        store: CatalogStore,
        metrics: SessionMetrics,
        error_log: ErrorLog,
    ) -> None:
        super().__init__(store, metrics, error_log)
        self.source = source

    @property
    def description(self) -> str:
        return f"ingest {self.source}"

    @property
    def raw_input(self) -> str:
        return str(self.source)

    def _execute(self) -> TaskOutcome:
        lines = read_catalog_lines(self.source, missing_ok=False)
        accepted: list[Book] = []
        rejected: list[RejectedLine] = []

        for line_number, line in enumerate(lines, start=1):
            result = validate_line(line)
            if not isinstance(result, Book):
                raw = result.line or line
                rejected.append(RejectedLine(line_number, raw, result))
                self._log_error(ErrorCategory.INVALID_LINE, raw, result)
                continue
            try:
                self._store.add(result)
            except DuplicateISBNError as e:
                rejected.append(RejectedLine(line_number, line, e))
                self._log_error(ErrorCategory.INVALID_LINE, line, e)
                continue
            except CatalogIOError as e:
                return self._fail(
                    ErrorCategory.FILE_ERROR,
                    e,
                    accepted=tuple(accepted),
                    rejected=tuple(rejected),
                )
            self._metrics.record_valid_record()
            accepted.append(result)

        logger.info(
            "Ingested %s: %d accepted, %d rejected",
            self.source,
            len(accepted),
            len(rejected),
        )
        return TaskOutcome(
            task=self.description,
            status=TaskStatus.SUCCESS,
            accepted=tuple(accepted),
            rejected=tuple(rejected),
        )


class OperationTask(CatalogTask):
    """Classify one operation argument and execute it against the store.

    ISBN and title searches add their match count to the search counter;
    an add increments the books-added counter. A not-found ISBN search is a
    SUCCESS with no books and is not logged.

    Example:
        >>> outcome = OperationTask("hobbit", store, metrics, error_log).run()
        >>> [book.title for book in outcome.books]
        ['The Hobbit']
    """

    def __init__(
        self,
        argument: str,
        store: CatalogStore,
        metrics: SessionMetrics,
        error_log: ErrorLog,
    ) -> None:
        super().__init__(store, metrics, error_log)
        self.argument = argument
        self.operation = classify_operation(argument)

    @property
    def description(self) -> str:
        return f"{self.operation.value} {self.argument!r}"

    @property
    def raw_input(self) -> str:
        return self.argument

    def _execute(self) -> TaskOutcome:
        if self.operation == OperationKind.ISBN_SEARCH:
            book = search_by_isbn(self._store.snapshot(), self.argument)
            books: tuple[Book, ...] = (book,) if book is not None else ()
            self._metrics.record_search_results(len(books))
        elif self.operation == OperationKind.ADD_BOOK:
            result = self._store.add(parse_book_line(self.argument))
            self._metrics.record_book_added()
            books = (result.book,)
        else:
            books = search_by_title(self._store.snapshot(), self.argument)
            self._metrics.record_search_results(len(books))

        return TaskOutcome(
            task=self.description,
            status=TaskStatus.SUCCESS,
            operation=self.operation,
            books=books,
        )

    def _fail(self, category: ErrorCategory, error: Exception, **fields: object) -> TaskOutcome:
        return super()._fail(category, error, operation=self.operation, **fields)


# =============================================================================
# Execution
# =============================================================================


def run_tasks(tasks: Sequence[CatalogTask], max_workers: int = 4) -> list[TaskOutcome]:
    """Run tasks on a thread pool.

    Args:
        tasks: Tasks to run; they may share one store, metrics and error log.
        max_workers: Number of worker threads.

    Returns:
        Outcomes in the same order as tasks.
    """
    if not tasks:
        return []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="catalog-task") as executor:
        futures = [executor.submit(task) for task in tasks]
        return [future.result() for future in futures]
