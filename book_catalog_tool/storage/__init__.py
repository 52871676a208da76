"""Storage module for book-catalog-tool.

This module provides the catalog store, the append-only error log and path
management utilities.

Classes:
    CatalogStore: Thread-safe owner of a catalog and its backing text file.
    LoadResult: Books and rejected lines produced by a load.
    AddResult: Inserted book and new catalog size.
    RejectedLine: A line that failed validation.
    ErrorLog: Thread-safe append-only error log.
    ErrorLogEntry: One formatted error log entry.
    ErrorCategory: Category label of an error log entry.

Functions:
    read_catalog_lines: Read a catalog or source file into raw lines.
    validate_lines: Split raw lines into books and rejects.
    get_config_dir: Get the main configuration directory.
    get_settings_path: Get the path to settings.json.
    get_error_log_path: Get the error log path next to a catalog file.
    check_catalog_name: Reject catalog names not ending with .txt.
    ensure_catalog_file: Create a catalog file and its parent directories.
"""

from book_catalog_tool.storage.catalog import (
    AddResult,
    CatalogStore,
    LoadResult,
    RejectedLine,
    read_catalog_lines,
    validate_lines,
)
from book_catalog_tool.storage.error_log import ErrorCategory, ErrorLog, ErrorLogEntry
from book_catalog_tool.storage.paths import (
    check_catalog_name,
    ensure_catalog_file,
    get_config_dir,
    get_error_log_path,
    get_settings_path,
)

__all__ = [
    # Catalog
    "AddResult",
    "CatalogStore",
    "LoadResult",
    "RejectedLine",
    "read_catalog_lines",
    "validate_lines",
    # Error log
    "ErrorCategory",
    "ErrorLog",
    "ErrorLogEntry",
    # Path functions
    "check_catalog_name",
    "ensure_catalog_file",
    "get_config_dir",
    "get_error_log_path",
    "get_settings_path",
]
