"""Catalog search for book-catalog-tool.

Read-only queries over a catalog snapshot. Both searches preserve catalog
order, which after any add is title order (case-insensitive).

Functions:
    search_by_title: Case-insensitive substring match on title.
    search_by_isbn: Exact ISBN match with lazy uniqueness enforcement.

Classes:
    CatalogSearcher: Runs searches over fresh snapshots of a CatalogStore.
"""

from collections.abc import Sequence

from book_catalog_tool.errors import DuplicateISBNError
from book_catalog_tool.logging_config import get_logger
from book_catalog_tool.models import Book
from book_catalog_tool.storage import CatalogStore

logger = get_logger(__name__)


def search_by_title(catalog: Sequence[Book], keyword: str) -> tuple[Book, ...]:
    """Find books whose title contains keyword, ignoring case.

    An empty result is a normal outcome, not an error.

    Args:
        catalog: Catalog snapshot to search.
        keyword: Substring to look for.

    Returns:
        Matching books in catalog order.

    Example:
        >>> [b.title for b in search_by_title(catalog, "lord")]
        ['lord jim', 'The Lord of the Rings']
    """
    needle = keyword.lower()
    matches = tuple(book for book in catalog if needle in book.title.lower())
    logger.debug("Title search %r matched %d books", keyword, len(matches))
    return matches


def search_by_isbn(catalog: Sequence[Book], isbn: str) -> Book | None:
    """Find the single book with the given ISBN.

    ISBN uniqueness is enforced here rather than at insert time: when more
    than one record carries the ISBN the search fails instead of picking one.

    Args:
        catalog: Catalog snapshot to search.
        isbn: Exact ISBN to match.

    Returns:
        The matching book, or None when no record has the ISBN.

    Raises:
        DuplicateISBNError: If two or more records share the ISBN.
    """
    matches = [book for book in catalog if book.isbn == isbn]
    if len(matches) > 1:
        logger.warning("ISBN %s is shared by %d records", isbn, len(matches))
        raise DuplicateISBNError(isbn, len(matches))
    if not matches:
        logger.debug("ISBN %s not found", isbn)
        return None
    return matches[0]


class CatalogSearcher:
    """Search a CatalogStore through point-in-time snapshots.

    Every query takes a fresh snapshot, so results reflect all adds that
    completed before the query started.

    Example:
        >>> searcher = CatalogSearcher(store)
        >>> searcher.by_title("hobbit")
    """

    def __init__(self, store: CatalogStore) -> None:
        self._store = store

    def by_title(self, keyword: str) -> tuple[Book, ...]:
        return search_by_title(self._store.snapshot(), keyword)

    def by_isbn(self, isbn: str) -> Book | None:
        return search_by_isbn(self._store.snapshot(), isbn)
