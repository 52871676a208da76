"""Session metrics for book-catalog-tool.

SessionMetrics holds the four run-scoped counters reported at the end of a
session. One instance is created per session and passed to every task;
there is no module-level counter state. Increments are lock-protected so
concurrent tasks never lose updates. Each increment is also added to an
OpenTelemetry counter, which is a no-op unless telemetry is enabled.

Classes:
    MetricsSnapshot: Immutable copy of the counters for reporting.
    SessionMetrics: Thread-safe counters shared by all tasks of a session.
"""

import threading
from dataclasses import asdict, dataclass

from book_catalog_tool.telemetry import TelemetryService


@dataclass(frozen=True)
class MetricsSnapshot:
    """Point-in-time copy of the session counters."""

    valid_records: int = 0
    search_results: int = 0
    books_added: int = 0
    errors: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class SessionMetrics:
    """Thread-safe, increment-only session counters.

    Example:
        >>> metrics = SessionMetrics()
        >>> metrics.record_valid_record()
        >>> metrics.record_search_results(3)
        >>> metrics.snapshot().search_results
        3
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._valid_records = 0
        self._search_results = 0
        self._books_added = 0
        self._errors = 0

        meter = TelemetryService.get_instance().meter
        self._otel_valid_records = meter.create_counter(
            "catalog.valid_records", description="Valid catalog records processed"
        )
        self._otel_search_results = meter.create_counter(
            "catalog.search_results", description="Books returned by searches"
        )
        self._otel_books_added = meter.create_counter(
            "catalog.books_added", description="Books added by operations"
        )
        self._otel_errors = meter.create_counter(
            "catalog.errors", description="Errors encountered"
        )

    def record_valid_record(self, count: int = 1) -> None:
        self._check(count)
        with self._lock:
            self._valid_records += count
        self._otel_valid_records.add(count)

    def record_search_results(self, count: int) -> None:
        self._check(count)
        with self._lock:
            self._search_results += count
        self._otel_search_results.add(count)

    def record_book_added(self, count: int = 1) -> None:
        self._check(count)
        with self._lock:
            self._books_added += count
        self._otel_books_added.add(count)

    def record_error(self, count: int = 1) -> None:
        self._check(count)
        with self._lock:
            self._errors += count
        self._otel_errors.add(count)

    def snapshot(self) -> MetricsSnapshot:
        """Get a consistent copy of all four counters."""
        with self._lock:
            return MetricsSnapshot(
                valid_records=self._valid_records,
                search_results=self._search_results,
                books_added=self._books_added,
                errors=self._errors,
            )

    @staticmethod
    def _check(count: int) -> None:
        # Counters only ever increase
        if count < 0:
            raise ValueError(f"Counter increment must be non-negative, got {count}")
