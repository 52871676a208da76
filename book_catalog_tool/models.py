"""Data models for book-catalog-tool.

This module provides Pydantic v2 models for catalog records and persisted
settings. Records are immutable; an edit is modeled as remove plus insert.

Models:
    Book: One validated catalog record (title, author, isbn, copies).
    Settings: Persisted user preferences for catalog sessions.

Constants:
    ISBN_PATTERN: Compiled regex for a 13-digit ISBN.
    FIELD_SEPARATOR: Separator between fields of a catalog line.
    FIELD_COUNT: Number of fields in a catalog line.
    TRIM_CHARACTERS: Characters trimmed from both ends of a field.
    LINE_BREAK_PATTERN: Compiled regex for characters that end a line.
    UNDECODABLE_PATTERN: Compiled regex for bytes that were not valid UTF-8.
    MAX_COPIES: Largest accepted copies value.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

ISBN_PATTERN = re.compile(r"[0-9]{13}")
FIELD_SEPARATOR = ":"
FIELD_COUNT = 4

# Space and ASCII control characters; other Unicode whitespace is kept
TRIM_CHARACTERS = "".join(chr(c) for c in range(0x21))

# Everything str.splitlines() treats as a line boundary
LINE_BREAK_PATTERN = re.compile(r"[\n\r\v\f\x1c-\x1e\x85\u2028\u2029]")

# Lone surrogates left by surrogateescape decoding of invalid bytes
UNDECODABLE_PATTERN = re.compile(r"[\ud800-\udfff]")

MAX_COPIES = 2**31 - 1

# Console table layout shared by Book.to_row() and the CLI header
ROW_FORMAT = "%-30s %-20s %-15s %s"


# =============================================================================
# Reusable Validator Functions
# =============================================================================


def validate_field_text(value: str, field_name: str) -> str:
    """Validate a text field can be stored on a single catalog line.

    Args:
        value: The string to validate.
        field_name: Name of the field for error messages.

    Returns:
        The trimmed string.

    Raises:
        ValueError: If the trimmed value is empty or contains a line break.
    """
    stripped = value.strip(TRIM_CHARACTERS)
    if not stripped:
        raise ValueError(f"Field '{field_name}' must not be empty.")
    if LINE_BREAK_PATTERN.search(stripped):
        raise ValueError(f"Field '{field_name}' must not contain a line break.")
    return stripped


def validate_isbn_format(value: str) -> str:
    """Validate ISBN is exactly 13 decimal digits.

    Args:
        value: The ISBN string to validate.

    Returns:
        The validated ISBN.

    Raises:
        ValueError: If ISBN is not 13 digits.

    Example:
        >>> validate_isbn_format("9780261103573")
        '9780261103573'
    """
    if not ISBN_PATTERN.fullmatch(value):
        raise ValueError(
            f"Invalid ISBN: '{value}'. ISBN must be exactly 13 digits, e.g., '9780261103573'."
        )
    return value


# =============================================================================
# Book Model
# =============================================================================


class Book(BaseModel):
    """One catalog record.

    Instances are frozen: once validated they never change. The catalog
    store replaces records, it never edits them.

    Attributes:
        title: Book title, trimmed and non-empty.
        author: Author name, trimmed and non-empty.
        isbn: Exactly 13 decimal digits.
        copies: Number of copies, strictly positive.

    Example:
        >>> book = Book(title="Dune", author="Frank Herbert", isbn="9780441013593", copies=3)
        >>> book.to_line()
        'Dune:Frank Herbert:9780441013593:3'
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Book title (no colons)")
    author: str = Field(description="Author name (no colons)")
    isbn: str = Field(description="13-digit ISBN")
    copies: int = Field(gt=0, le=MAX_COPIES, description="Number of copies held (> 0)")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return validate_field_text(v, "title")

    @field_validator("author")
    @classmethod
    def validate_author(cls, v: str) -> str:
        return validate_field_text(v, "author")

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str) -> str:
        return validate_isbn_format(v)

    def to_line(self) -> str:
        """Serialize the record as a catalog file line.

        Returns:
            Line in the form Title:Author:ISBN:Copies (no trailing newline).
        """
        return FIELD_SEPARATOR.join((self.title, self.author, self.isbn, str(self.copies)))

    def to_row(self) -> str:
        """Format the record as a console table row."""
        return ROW_FORMAT % (self.title, self.author, self.isbn, self.copies)

    def sort_key(self) -> str:
        """Case-insensitive title key used to order the catalog."""
        return self.title.lower()


# =============================================================================
# Settings Model
# =============================================================================


class Settings(BaseModel):
    """Global settings for book-catalog-tool.

    Stores user preferences that persist across CLI sessions.

    Attributes:
        error_log_name: File name of the error log, colocated with the catalog.
        max_workers: Worker threads used to run ingestion and operation tasks.
        reject_duplicate_isbn: Reject an add whose ISBN is already cataloged,
            instead of detecting duplicates only when searched.

    Example:
        >>> settings = Settings(max_workers=8)
    """

    error_log_name: str = Field(default="errors.log", description="Error log file name")
    max_workers: int = Field(default=4, ge=1, le=64, description="Task worker threads")
    reject_duplicate_isbn: bool = Field(
        default=False, description="Reject duplicate ISBNs at add time"
    )
