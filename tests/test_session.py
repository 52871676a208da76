"""Tests for CatalogSession orchestration."""

from pathlib import Path
from unittest.mock import patch

from conftest import DUNE, HOBBIT, LOTR, write_lines

from book_catalog_tool.errors import CatalogIOError
from book_catalog_tool.models import Settings
from book_catalog_tool.session import CatalogSession
from book_catalog_tool.storage import ErrorCategory
from book_catalog_tool.tasks import TaskStatus


class TestCatalogSession:
    """End-to-end behaviour of a catalog session."""

    def test_open_counts_valid_records_and_logs_rejects(self, catalog_path: Path) -> None:
        write_lines(catalog_path, HOBBIT, "Broken:Line:12:1", DUNE)
        session = CatalogSession(catalog_path)

        result = session.open()

        assert len(result.books) == 2
        stats = session.statistics()
        assert (stats.valid_records, stats.errors) == (2, 1)
        (entry,) = session.errors()
        assert entry.category is ErrorCategory.INVALID_LINE
        assert entry.raw_input == "Broken:Line:12:1"
        assert (catalog_path.parent / "errors.log").exists()

    def test_open_unreadable_catalog_does_not_raise(self, tmp_path: Path) -> None:
        catalog_dir = tmp_path / "catalog.txt"
        catalog_dir.mkdir()
        session = CatalogSession(catalog_dir)

        result = session.open()

        assert result.books == ()
        assert session.statistics().errors == 1
        assert session.errors()[0].category is ErrorCategory.FILE_ERROR

    def test_ingest_then_execute(self, tmp_path: Path, catalog_path: Path) -> None:
        write_lines(catalog_path, HOBBIT)
        extra = write_lines(tmp_path / "extra.txt", LOTR, DUNE)
        session = CatalogSession(catalog_path, Settings(max_workers=2))
        session.open()

        ingest = session.ingest([extra])
        outcomes = session.execute(["lord", "9780441013593", "Emma:Jane Austen:9780141439587:5"])

        assert ingest[0].ok
        assert all(o.ok for o in outcomes)
        assert [b.title for b in session.books()] == [
            "Dune",
            "Emma",
            "The Hobbit",
            "The Lord of the Rings",
        ]
        stats = session.statistics()
        assert stats.valid_records == 3
        assert stats.search_results == 2
        assert stats.books_added == 1
        assert stats.errors == 0

    def test_undecodable_line_does_not_cost_other_records(self, catalog_path: Path) -> None:
        """One line of invalid UTF-8 is rejected; an add keeps every valid record."""
        catalog_path.write_bytes(
            f"{HOBBIT}\n".encode() + b"Caf\xe9:Someone:9780000000009:1\n" + f"{DUNE}\n".encode()
        )
        session = CatalogSession(catalog_path)

        result = session.open()
        (outcome,) = session.execute(["Emma:Jane Austen:9780141439587:5"])

        assert len(result.books) == 2
        assert outcome.ok
        assert catalog_path.read_text(encoding="utf-8").splitlines() == [
            DUNE,
            "Emma:Jane Austen:9780141439587:5",
            HOBBIT,
        ]
        assert session.statistics().errors == 1

    def test_add_after_failed_open_leaves_file_untouched(self, catalog_path: Path) -> None:
        write_lines(catalog_path, HOBBIT, DUNE)
        original = catalog_path.read_bytes()
        session = CatalogSession(catalog_path)
        failure = CatalogIOError(catalog_path, PermissionError("denied"))

        with patch("book_catalog_tool.storage.catalog.read_catalog_lines", side_effect=failure):
            session.open()
        (outcome,) = session.execute(["Emma:Jane Austen:9780141439587:5"])

        assert outcome.status is TaskStatus.FAILURE
        assert outcome.error_kind == "CatalogIOError"
        assert catalog_path.read_bytes() == original
        assert [e.category for e in session.errors()] == [
            ErrorCategory.FILE_ERROR,
            ErrorCategory.FILE_ERROR,
        ]

    def test_custom_error_log_name(self, catalog_path: Path) -> None:
        session = CatalogSession(catalog_path, Settings(error_log_name="rejects.log"))
        assert session.error_log.path == catalog_path.parent / "rejects.log"
