"""Tests for the append-only error log."""

import re
import threading
from datetime import datetime
from pathlib import Path

import pytest

from book_catalog_tool.errors import CatalogIOError, InvalidISBNError, MalformedEntryError
from book_catalog_tool.storage import ErrorCategory, ErrorLog, ErrorLogEntry

ENTRY_PATTERN = re.compile(
    r'^\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?\] '
    r'(INVALID LINE|OPERATION FAILED|FILE ERROR): ".*" - \w+: .+$'
)


class TestErrorLogEntry:
    """Tests for entry formatting."""

    def test_format(self) -> None:
        entry = ErrorLogEntry(
            timestamp=datetime(2026, 1, 2, 3, 4, 5),
            category=ErrorCategory.INVALID_LINE,
            raw_input="Dune:Frank Herbert:123:3",
            cause_kind="InvalidISBNError",
            cause_message="ISBN must be exactly 13 digits.",
        )
        assert entry.format() == (
            '[2026-01-02T03:04:05] INVALID LINE: "Dune:Frank Herbert:123:3" - '
            "InvalidISBNError: ISBN must be exactly 13 digits."
        )

    def test_format_escapes_line_breaks(self) -> None:
        """An input with line breaks still produces one log line."""
        entry = ErrorLogEntry(
            timestamp=datetime(2026, 1, 2, 3, 4, 5),
            category=ErrorCategory.OPERATION_FAILED,
            raw_input="Bad\rTitle:A:9780000000001:1\n",
            cause_kind="MalformedEntryError",
            cause_message="Field contains a line break.",
        )
        formatted = entry.format()
        assert '"Bad\\rTitle:A:9780000000001:1\\n"' in formatted
        assert len(formatted.splitlines()) == 1

    def test_from_error_uses_class_name_and_message(self) -> None:
        entry = ErrorLogEntry.from_error(
            ErrorCategory.OPERATION_FAILED, "x:y", MalformedEntryError("Invalid field count.")
        )
        assert entry.cause_kind == "MalformedEntryError"
        assert entry.cause_message == "Invalid field count."


class TestErrorLog:
    """Tests for ErrorLog appends."""

    def test_record_appends_one_line(self, tmp_path: Path) -> None:
        log_path = tmp_path / "errors.log"
        error_log = ErrorLog(log_path)

        error_log.record(ErrorCategory.INVALID_LINE, "bad", InvalidISBNError("ISBN must be exactly 13 digits."))
        error_log.record(ErrorCategory.FILE_ERROR, "extra.txt", OSError("boom"))

        lines = log_path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert all(ENTRY_PATTERN.match(line) for line in lines)
        assert lines[1].endswith('FILE ERROR: "extra.txt" - OSError: boom')
        assert len(error_log.entries()) == 2

    def test_concurrent_appends_never_interleave(self, tmp_path: Path) -> None:
        log_path = tmp_path / "errors.log"
        error_log = ErrorLog(log_path)
        threads, per_thread = 8, 50

        def append_many(worker: int) -> None:
            for i in range(per_thread):
                error_log.record(
                    ErrorCategory.INVALID_LINE,
                    f"worker-{worker}-line-{i}" * 20,
                    MalformedEntryError("Invalid field count."),
                )

        workers = [threading.Thread(target=append_many, args=(w,)) for w in range(threads)]
        for t in workers:
            t.start()
        for t in workers:
            t.join()

        lines = log_path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == threads * per_thread
        assert all(ENTRY_PATTERN.match(line) for line in lines)

    def test_undecodable_input_is_written_escaped(self, tmp_path: Path) -> None:
        log_path = tmp_path / "errors.log"
        raw = b"Caf\xe9:A:1:1".decode("utf-8", errors="surrogateescape")

        ErrorLog(log_path).record(
            ErrorCategory.OPERATION_FAILED, raw, InvalidISBNError("ISBN must be exactly 13 digits.")
        )

        assert '"Caf\\udce9:A:1:1"' in log_path.read_text(encoding="utf-8")

    def test_unwritable_log_raises_but_keeps_entry(self, tmp_path: Path) -> None:
        error_log = ErrorLog(tmp_path / "missing" / "errors.log")
        with pytest.raises(CatalogIOError):
            error_log.record(ErrorCategory.FILE_ERROR, "x", OSError("boom"))
        assert len(error_log.entries()) == 1
