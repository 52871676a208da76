"""Shared fixtures for book-catalog-tool tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from book_catalog_tool.metrics import SessionMetrics
from book_catalog_tool.storage import CatalogStore, ErrorLog

HOBBIT = "The Hobbit:J.R.R. Tolkien:9780261102217:4"
LOTR = "The Lord of the Rings:J.R.R. Tolkien:9780261103573:2"
LORD_JIM = "lord jim:Joseph Conrad:9780141441610:1"
DUNE = "Dune:Frank Herbert:9780441013593:3"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path]:
    """Point settings at a temporary file and clear overriding env vars."""
    monkeypatch.delenv("BOOK_CATALOG_MAX_WORKERS", raising=False)
    monkeypatch.delenv("BOOK_CATALOG_REJECT_DUPLICATE_ISBN", raising=False)
    monkeypatch.delenv("OTEL_ENABLED", raising=False)
    monkeypatch.delenv("LOG_FILE", raising=False)
    settings_path = tmp_path / "config" / "settings.json"
    with patch("book_catalog_tool.settings.get_settings_path", return_value=settings_path):
        yield settings_path


@pytest.fixture
def catalog_path(tmp_path: Path) -> Path:
    """Path to a catalog file inside a library directory (not created)."""
    library = tmp_path / "library"
    library.mkdir()
    return library / "catalog.txt"


@pytest.fixture
def store(catalog_path: Path) -> CatalogStore:
    return CatalogStore(catalog_path)


@pytest.fixture
def metrics() -> SessionMetrics:
    return SessionMetrics()


@pytest.fixture
def error_log(catalog_path: Path) -> ErrorLog:
    return ErrorLog(catalog_path.parent / "errors.log")


def write_lines(path: Path, *lines: str) -> Path:
    """Write catalog lines to path, one per line."""
    path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
    return path
