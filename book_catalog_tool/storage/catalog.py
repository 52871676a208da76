"""Catalog store for book-catalog-tool.

The CatalogStore owns the in-memory sequence of Book records and the backing
text file (one Title:Author:ISBN:Copies line per record). All mutation goes
through add(), which appends, re-sorts and rewrites the file as one unit while
holding the store lock. Callers only ever see immutable snapshots.

Classes:
    RejectedLine: A line of the backing file that failed validation.
    LoadResult: Books and rejects produced by CatalogStore.load().
    AddResult: Inserted book and new catalog size returned by add().
    CatalogStore: Thread-safe owner of one catalog and its file.
"""

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path

from book_catalog_tool.errors import (
    CatalogError,
    CatalogIOError,
    DuplicateISBNError,
)
from book_catalog_tool.logging_config import get_logger
from book_catalog_tool.models import Book
from book_catalog_tool.validation import validate_line

logger = get_logger(__name__)


@dataclass(frozen=True)
class RejectedLine:
    """A raw line that was not added to the catalog.

    Attributes:
        line_number: 1-based line number in the source file.
        raw: The raw line without its terminator.
        error: The validation error for the first violated rule, or the
            DuplicateISBNError of a store that rejects duplicates.
    """

    line_number: int
    raw: str
    error: CatalogError


@dataclass(frozen=True)
class LoadResult:
    """Outcome of loading a catalog file."""

    books: tuple[Book, ...]
    rejected: list[RejectedLine] = field(default_factory=list)


@dataclass(frozen=True)
class AddResult:
    """Outcome of a successful add.

    Attributes:
        book: The inserted record.
        count: Number of records in the catalog after the insert.
    """

    book: Book
    count: int


def read_catalog_lines(path: Path, missing_ok: bool = True) -> list[str]:
    """Read all lines of a catalog or source file.

    Args:
        path: File to read.
        missing_ok: If True, a missing file reads as empty.

    Lines end at \\n, \\r or \\r\\n. Each line is decoded as UTF-8 on its
    own; invalid bytes are kept as surrogate escapes so that only the lines
    holding them fail validation.

    Returns:
        Lines without their line terminators.

    Raises:
        CatalogIOError: If the file cannot be read, or is missing and
            missing_ok is False.
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except FileNotFoundError as e:
        if not missing_ok:
            logger.error("File %s not found", path)
            raise CatalogIOError(path, e) from e
        logger.debug("Catalog file %s not found, treating as empty", path)
        return []
    except OSError as e:
        logger.error("Failed to read %s: %s", path, e)
        raise CatalogIOError(path, e) from e
    return [line.decode("utf-8", errors="surrogateescape") for line in data.splitlines()]


def validate_lines(lines: list[str]) -> LoadResult:
    """Validate raw lines into accepted books and rejected lines.

    Invalid lines are collected and never abort validation of the rest.
    """
    books: list[Book] = []
    rejected: list[RejectedLine] = []
    for line_number, line in enumerate(lines, start=1):
        result = validate_line(line)
        if isinstance(result, Book):
            books.append(result)
        else:
            rejected.append(RejectedLine(line_number, result.line or line, result))
    return LoadResult(tuple(books), rejected)


class CatalogStore:
    """Owner of one catalog and its backing file.

    A single lock serializes load() and add(). add() builds the new sorted
    sequence, rewrites the file through a temporary sibling and os.replace(),
    and only then swaps the in-memory sequence, so a reader never observes a
    partially sorted catalog or a partially written file.

    Duplicate ISBNs are accepted by default and only detected when searched
    (see search.search_by_isbn). Pass reject_duplicate_isbn=True to refuse
    them at add time instead.

    A store whose last load() failed refuses to add, so a catalog that could
    not be read is never overwritten with a partial one.

    Example:
        >>> store = CatalogStore(Path("catalog.txt"))
        >>> result = store.load()
        >>> store.add(Book(title="Dune", author="Frank Herbert", isbn="9780441013593", copies=3))
        AddResult(book=..., count=1)
    """

    def __init__(self, path: Path, reject_duplicate_isbn: bool = False) -> None:
        self._path = path
        self._reject_duplicate_isbn = reject_duplicate_isbn
        self._lock = threading.Lock()
        self._books: list[Book] = []
        self._load_failed = False

    @property
    def path(self) -> Path:
        """Path to the backing catalog file."""
        return self._path

    def load(self) -> LoadResult:
        """Load the backing file into memory.

        Each line is validated; invalid lines are returned as rejects and do
        not abort the load. A missing or empty file yields an empty catalog.
        The loaded records keep file order.

        Returns:
            LoadResult with the accepted books and the rejected lines.

        Raises:
            CatalogIOError: If the file exists but cannot be read. The
                in-memory catalog is left unchanged and add() is refused
                until a later load() succeeds.
        """
        with self._lock:
            try:
                lines = read_catalog_lines(self._path)
            except CatalogIOError:
                self._load_failed = True
                raise
            result = validate_lines(lines)
            self._books = list(result.books)
            self._load_failed = False
        logger.debug(
            "Loaded %d books from %s (%d rejected)",
            len(result.books),
            self._path,
            len(result.rejected),
        )
        return result

    def add(self, book: Book) -> AddResult:
        """Insert a book, keep the catalog sorted and rewrite the file.

        The catalog is sorted by title, case-insensitive, ascending; equal
        titles keep their relative order.

        Args:
            book: Validated record to insert.

        Returns:
            AddResult with the inserted record and the new catalog size.

        Raises:
            DuplicateISBNError: If rejecting duplicates and the ISBN exists.
            CatalogIOError: If the last load failed, or the file rewrite
                fails. The in-memory catalog is left unchanged.
        """
        with self._lock:
            if self._load_failed:
                logger.error("Refusing to rewrite %s: catalog was not loaded", self._path)
                raise CatalogIOError(
                    self._path, RuntimeError("catalog could not be loaded, refusing to overwrite it")
                )
            if self._reject_duplicate_isbn:
                existing = sum(1 for b in self._books if b.isbn == book.isbn)
                if existing:
                    raise DuplicateISBNError(book.isbn, existing + 1)
            books = sorted([*self._books, book], key=Book.sort_key)
            self._write(books)
            self._books = books
            count = len(books)
        logger.info("Added '%s' (%s) to catalog, %d books", book.title, book.isbn, count)
        return AddResult(book, count)

    def snapshot(self) -> tuple[Book, ...]:
        """Get a consistent point-in-time copy of the catalog."""
        with self._lock:
            return tuple(self._books)

    def count(self) -> int:
        """Get the number of records in the catalog."""
        with self._lock:
            return len(self._books)

    def _write(self, books: list[Book]) -> None:
        """Rewrite the backing file with one record per line.

        Writes to a .tmp sibling and renames it over the catalog, so the file
        on disk is always either the old or the new complete catalog.
        Caller must hold the store lock.
        """
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                f.writelines(book.to_line() + "\n" for book in books)
            os.replace(tmp, self._path)
        except OSError as e:
            logger.error("Failed to rewrite catalog %s: %s", self._path, e)
            tmp.unlink(missing_ok=True)
            raise CatalogIOError(self._path, e) from e
        logger.debug("Rewrote catalog %s with %d books", self._path, len(books))
