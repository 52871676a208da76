"""Append-only error log for book-catalog-tool.

Every rejected line and failed task is recorded as one line in a side file
next to the catalog:

    [2026-10-18T14:03:12.481022] INVALID LINE: "Dune:Herbert:123:1" - InvalidISBNError: ISBN must be exactly 13 digits.

Entries from concurrent tasks never interleave: each entry is formatted in
full and written with a single write() while the log lock is held.

Classes:
    ErrorCategory: Category label printed at the start of each entry.
    ErrorLogEntry: One formatted log entry.
    ErrorLog: Thread-safe appender bound to one log file.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from book_catalog_tool.errors import CatalogError, CatalogIOError
from book_catalog_tool.logging_config import get_logger
from book_catalog_tool.models import LINE_BREAK_PATTERN

logger = get_logger(__name__)


def _escape_line_breaks(text: str) -> str:
    return LINE_BREAK_PATTERN.sub(lambda match: repr(match.group())[1:-1], text)


class ErrorCategory(str, Enum):
    """Category of an error log entry.

    Values:
        INVALID_LINE: A catalog or source line failed validation.
        OPERATION_FAILED: An operation (search or add) failed.
        FILE_ERROR: A catalog or source file could not be read or written.
    """

    INVALID_LINE = "INVALID LINE"
    OPERATION_FAILED = "OPERATION FAILED"
    FILE_ERROR = "FILE ERROR"


@dataclass(frozen=True)
class ErrorLogEntry:
    """One error log entry.

    Attributes:
        timestamp: Local time the error was recorded.
        category: Category label.
        raw_input: Raw line, operation argument or file path that failed.
        cause_kind: Exception class name.
        cause_message: Exception message.
    """

    timestamp: datetime
    category: ErrorCategory
    raw_input: str
    cause_kind: str
    cause_message: str

    @classmethod
    def from_error(cls, category: ErrorCategory, raw_input: str, error: Exception) -> "ErrorLogEntry":
        """Build an entry from an exception, stamped with the current local time."""
        message = error.message if isinstance(error, CatalogError) else str(error)
        return cls(
            timestamp=datetime.now(),
            category=category,
            raw_input=raw_input,
            cause_kind=type(error).__name__,
            cause_message=message,
        )

    def format(self) -> str:
        """Format the entry as a single log line (without newline).

        Line breaks inside the input or message are written as escapes.
        """
        return (
            f"[{self.timestamp.isoformat()}] {self.category.value}: "
            f'"{_escape_line_breaks(self.raw_input)}" - {self.cause_kind}: '
            f"{_escape_line_breaks(self.cause_message)}"
        )


class ErrorLog:
    """Thread-safe, append-only error log bound to one file.

    Entries are also kept in memory so a session can report them without
    re-reading the file.

    Example:
        >>> error_log = ErrorLog(Path("/data/library/errors.log"))
        >>> error_log.record(ErrorCategory.INVALID_LINE, "bad line", error)
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._entries: list[ErrorLogEntry] = []

    @property
    def path(self) -> Path:
        return self._path

    def record(self, category: ErrorCategory, raw_input: str, error: Exception) -> ErrorLogEntry:
        """Record an error and append it to the log file.

        Args:
            category: Category label.
            raw_input: Input that caused the error.
            error: The exception raised while processing raw_input.

        Returns:
            The appended entry.

        Raises:
            CatalogIOError: If the log file cannot be written. The entry is
                still kept in memory.
        """
        entry = ErrorLogEntry.from_error(category, raw_input, error)
        self.append(entry)
        return entry

    def append(self, entry: ErrorLogEntry) -> None:
        """Append one entry as a single atomic write.

        Raises:
            CatalogIOError: If the log file cannot be written.
        """
        line = entry.format() + "\n"
        with self._lock:
            self._entries.append(entry)
            try:
                # Undecodable bytes from command-line input are written escaped
                with open(self._path, "a", encoding="utf-8", errors="backslashreplace") as f:
                    f.write(line)
            except OSError as e:
                logger.error("Failed to write error log %s: %s", self._path, e)
                raise CatalogIOError(self._path, e) from e
        logger.debug("Logged %s for input %r", entry.category.value, entry.raw_input)

    def entries(self) -> list[ErrorLogEntry]:
        """Get a copy of all entries recorded by this log instance."""
        with self._lock:
            return list(self._entries)
