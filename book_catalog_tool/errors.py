"""Error classes for book-catalog-tool.

This module defines the exception taxonomy shared by the validator, the
catalog store, the search engine and the CLI. Messages carry enough context
to act on without reading the source.

Exceptions:
    CatalogError: Base exception for all catalog operations.
    CatalogValidationError: Base for line/record validation failures.
    MalformedEntryError: Structural or field violation in a catalog line.
    InvalidISBNError: ISBN is not exactly 13 decimal digits.
    DuplicateISBNError: More than one record shares an ISBN.
    CatalogIOError: Catalog or source file unavailable or unwritable.
    InvalidFileNameError: Catalog file name does not end with .txt.
"""

from pathlib import Path


class CatalogError(Exception):
    """Base exception for catalog operations.

    All catalog related exceptions inherit from this class, allowing
    broad handling at task and CLI boundaries.

    Attributes:
        message: Short error description (used in the error log).

    Example:
        >>> try:
        ...     store.add(book)
        ... except CatalogError as e:
        ...     print(f"Add failed: {e}")
    """

    def __init__(self, message: str) -> None:
        """Initialize CatalogError.

        Args:
            message: Error description.
        """
        self.message = message
        super().__init__(message)


class CatalogValidationError(CatalogError):
    """Base exception for a raw line that is not a valid book record.

    Attributes:
        line: The raw line that failed validation (if known).
    """

    def __init__(self, message: str, line: str | None = None) -> None:
        """Initialize CatalogValidationError.

        Args:
            message: Description of the violated rule.
            line: Raw line that failed validation.
        """
        self.line = line
        super().__init__(message)


class MalformedEntryError(CatalogValidationError):
    """Raised when a line has the wrong field count or an invalid field.

    Covers field count, empty title, empty author and non-positive or
    non-integer copies.

    Example:
        >>> raise MalformedEntryError("Title is empty.", "  :Tolkien:9780261103573:2")
    """


class InvalidISBNError(CatalogValidationError):
    """Raised when the ISBN field is not exactly 13 decimal digits.

    Example:
        >>> raise InvalidISBNError("ISBN must be exactly 13 digits.", "Dune:Herbert:123:1")
    """


class DuplicateISBNError(CatalogError):
    """Raised when more than one catalog record shares the requested ISBN.

    This is a data-integrity fault in the catalog file, not a user input error.

    Attributes:
        isbn: The ISBN that matched more than one record.
        matches: Number of records sharing the ISBN.

    Example:
        >>> raise DuplicateISBNError("9780261103573", 2)
    """

    def __init__(self, isbn: str, matches: int) -> None:
        """Initialize DuplicateISBNError.

        Args:
            isbn: ISBN shared by several records.
            matches: Number of records found with that ISBN.
        """
        self.isbn = isbn
        self.matches = matches
        super().__init__(f"Duplicate ISBN found: {isbn} matches {matches} records.")


class CatalogIOError(CatalogError):
    """Raised when a catalog or source file cannot be read or written.

    Attributes:
        path: File that could not be accessed.
        original_error: Underlying OSError.

    Example:
        >>> raise CatalogIOError(Path("catalog.txt"), PermissionError("denied"))
    """

    def __init__(self, path: Path, original_error: Exception) -> None:
        """Initialize CatalogIOError.

        Args:
            path: File that could not be accessed.
            original_error: Exception raised by the file operation.
        """
        self.path = path
        self.original_error = original_error
        super().__init__(f"Cannot access file {path}: {original_error}")


class InvalidFileNameError(CatalogError):
    """Raised when the catalog file name does not end with .txt.

    Example:
        >>> raise InvalidFileNameError("catalog.csv")
    """

    def __init__(self, file_name: str) -> None:
        """Initialize InvalidFileNameError.

        Args:
            file_name: The rejected catalog file name.
        """
        self.file_name = file_name
        super().__init__(f"Catalog file must end with .txt: '{file_name}'")
