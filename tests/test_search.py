"""Tests for title and ISBN search."""

from pathlib import Path

import pytest
from conftest import DUNE, HOBBIT, LORD_JIM, LOTR

from book_catalog_tool.errors import DuplicateISBNError
from book_catalog_tool.models import Book
from book_catalog_tool.search import CatalogSearcher, search_by_isbn, search_by_title
from book_catalog_tool.storage import CatalogStore
from book_catalog_tool.validation import parse_book_line


@pytest.fixture
def catalog() -> tuple[Book, ...]:
    """Title-sorted catalog: Dune, lord jim, The Hobbit, The Lord of the Rings."""
    books = [parse_book_line(line) for line in (LOTR, LORD_JIM, DUNE, HOBBIT)]
    return tuple(sorted(books, key=Book.sort_key))


class TestSearchByTitle:
    """Tests for search_by_title."""

    def test_case_insensitive_substring_in_catalog_order(self, catalog: tuple[Book, ...]) -> None:
        matches = search_by_title(catalog, "lord")
        assert [b.title for b in matches] == ["lord jim", "The Lord of the Rings"]

    def test_uppercase_keyword(self, catalog: tuple[Book, ...]) -> None:
        assert [b.title for b in search_by_title(catalog, "HOBBIT")] == ["The Hobbit"]

    def test_no_match_is_empty_result(self, catalog: tuple[Book, ...]) -> None:
        assert search_by_title(catalog, "Silmarillion") == ()

    def test_empty_keyword_matches_everything(self, catalog: tuple[Book, ...]) -> None:
        assert search_by_title(catalog, "") == catalog


class TestSearchByIsbn:
    """Tests for search_by_isbn."""

    def test_single_match_returns_record(self, catalog: tuple[Book, ...]) -> None:
        book = search_by_isbn(catalog, "9780441013593")
        assert book is not None
        assert book.title == "Dune"

    def test_no_match_returns_none(self, catalog: tuple[Book, ...]) -> None:
        assert search_by_isbn(catalog, "9999999999999") is None

    def test_duplicate_isbn_fails_instead_of_returning(self, catalog: tuple[Book, ...]) -> None:
        """Two records with one ISBN is a data-integrity fault."""
        duplicate = Book(title="Dune Messiah", author="Frank Herbert", isbn="9780441013593", copies=1)
        with pytest.raises(DuplicateISBNError) as exc_info:
            search_by_isbn((*catalog, duplicate), "9780441013593")
        assert exc_info.value.isbn == "9780441013593"
        assert exc_info.value.matches == 2


class TestCatalogSearcher:
    """CatalogSearcher queries the store's current snapshot."""

    def test_sees_records_added_after_construction(self, catalog_path: Path) -> None:
        store = CatalogStore(catalog_path)
        searcher = CatalogSearcher(store)
        assert searcher.by_isbn("9780261102217") is None

        store.add(parse_book_line(HOBBIT))

        found = searcher.by_isbn("9780261102217")
        assert found is not None and found.title == "The Hobbit"
        assert [b.title for b in searcher.by_title("hob")] == ["The Hobbit"]
