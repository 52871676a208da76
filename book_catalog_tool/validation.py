"""Line validation for book-catalog-tool.

Turns one raw catalog line into a Book or a typed validation failure.
Rules are checked in a fixed order and the first violated rule wins:
encoding, field count, line breaks, title, author, ISBN, copies.

Fields are trimmed of spaces and ASCII control characters only, so
non-breaking and other Unicode spaces stay part of the value.

Functions:
    parse_book_line: Validate a line and return a Book, raising on failure.
    validate_line: Validate a line and return a Book or the failure.
    split_fields: Split a line on ':' keeping trailing empty fields.
    is_isbn: Check whether text is exactly 13 decimal digits.
"""

import re

from book_catalog_tool.errors import (
    CatalogValidationError,
    InvalidISBNError,
    MalformedEntryError,
)
from book_catalog_tool.models import (
    FIELD_COUNT,
    FIELD_SEPARATOR,
    ISBN_PATTERN,
    LINE_BREAK_PATTERN,
    MAX_COPIES,
    TRIM_CHARACTERS,
    UNDECODABLE_PATTERN,
    Book,
)

# Base-10 integer with optional sign, no underscores or non-ASCII digits
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

# Range of a signed 32-bit copies count
_MIN_COPIES_VALUE = -MAX_COPIES - 1


def split_fields(line: str) -> list[str]:
    """Split a catalog line into its raw fields.

    Trailing empty fields are kept, so "a:b:c:d:" yields five fields.

    Args:
        line: Raw catalog line (without line terminator).

    Returns:
        List of untrimmed field strings.
    """
    return line.split(FIELD_SEPARATOR)


def is_isbn(text: str) -> bool:
    """Check whether text is exactly 13 decimal digits.

    Example:
        >>> is_isbn("9780261103573")
        True
        >>> is_isbn("978-0261103573")
        False
    """
    return ISBN_PATTERN.fullmatch(text) is not None


def parse_book_line(line: str) -> Book:
    """Validate a raw catalog line and build a Book.

    Args:
        line: Raw line in the form Title:Author:ISBN:Copies.

    Returns:
        Book with trimmed field values.

    Raises:
        MalformedEntryError: Undecodable bytes, wrong field count, a line
            break inside a field, empty title or author, or copies that are
            not a positive 32-bit integer.
        InvalidISBNError: ISBN is not exactly 13 digits.

    Example:
        >>> parse_book_line(" Dune : Frank Herbert :9780441013593: 3")
        Book(title='Dune', author='Frank Herbert', isbn='9780441013593', copies=3)
    """
    if UNDECODABLE_PATTERN.search(line):
        # Reported with replacement characters so the line can be logged
        printable = UNDECODABLE_PATTERN.sub("\ufffd", line)
        raise MalformedEntryError("Line is not valid UTF-8.", printable)

    parts = split_fields(line)
    if len(parts) != FIELD_COUNT:
        raise MalformedEntryError("Invalid field count.", line)

    title, author, isbn, copies_text = (part.strip(TRIM_CHARACTERS) for part in parts)

    if any(LINE_BREAK_PATTERN.search(part) for part in (title, author, isbn, copies_text)):
        raise MalformedEntryError("Field contains a line break.", line)
    if not title:
        raise MalformedEntryError("Title is empty.", line)
    if not author:
        raise MalformedEntryError("Author is empty.", line)
    if not is_isbn(isbn):
        raise InvalidISBNError("ISBN must be exactly 13 digits.", line)
    if not _INTEGER_PATTERN.fullmatch(copies_text):
        raise MalformedEntryError("Copies must be an integer.", line)

    copies = int(copies_text)
    if not _MIN_COPIES_VALUE <= copies <= MAX_COPIES:
        raise MalformedEntryError("Copies must be an integer.", line)
    if copies <= 0:
        raise MalformedEntryError("Copies must be positive.", line)

    return Book(title=title, author=author, isbn=isbn, copies=copies)


def validate_line(line: str) -> Book | CatalogValidationError:
    """Validate a raw catalog line without raising.

    Args:
        line: Raw catalog line.

    Returns:
        The Book on success, otherwise the validation error describing the
        first violated rule.
    """
    try:
        return parse_book_line(line)
    except CatalogValidationError as e:
        return e
