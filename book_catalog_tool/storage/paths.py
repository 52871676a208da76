"""Path management for book-catalog-tool.

Settings live under ~/.config/book-catalog-tool/. Catalog files live wherever
the user points the CLI; the error log is colocated with the catalog file.

Functions:
    get_config_dir: Get the main configuration directory.
    get_settings_path: Get the path to settings.json.
    get_error_log_path: Get the error log path next to a catalog file.
    check_catalog_name: Reject catalog names that do not end with .txt.
    ensure_catalog_file: Create a catalog file and its parent directories.
"""

from pathlib import Path

from book_catalog_tool.errors import CatalogIOError, InvalidFileNameError

CATALOG_SUFFIX = ".txt"


def get_config_dir() -> Path:
    """Get the configuration directory for book-catalog-tool.

    Returns:
        Path to ~/.config/book-catalog-tool/

    Example:
        >>> str(get_config_dir()).endswith(".config/book-catalog-tool")
        True
    """
    return Path.home() / ".config" / "book-catalog-tool"


def get_settings_path() -> Path:
    """Get the path to the global settings file.

    Returns:
        Path to ~/.config/book-catalog-tool/settings.json
    """
    return get_config_dir() / "settings.json"


def get_error_log_path(catalog_path: Path, log_name: str = "errors.log") -> Path:
    """Get the error log path colocated with a catalog file.

    Args:
        catalog_path: Path to the catalog file (may be relative).
        log_name: File name of the error log.

    Returns:
        Path to <catalog directory>/<log_name>.

    Example:
        >>> get_error_log_path(Path("/data/library/catalog.txt")).as_posix()
        '/data/library/errors.log'
    """
    return catalog_path.absolute().parent / log_name


def check_catalog_name(catalog_path: Path) -> None:
    """Check the catalog file name ends with .txt.

    Raises:
        InvalidFileNameError: If the suffix is not .txt.
    """
    if not catalog_path.name.endswith(CATALOG_SUFFIX):
        raise InvalidFileNameError(str(catalog_path))


def ensure_catalog_file(catalog_path: Path) -> bool:
    """Create the catalog file and its parent directories if missing.

    This function is idempotent: an existing file is left untouched.

    Args:
        catalog_path: Path to the catalog file.

    Returns:
        True if the file was created, False if it already existed.

    Raises:
        CatalogIOError: If the directory or file cannot be created.
    """
    try:
        catalog_path.absolute().parent.mkdir(parents=True, exist_ok=True)
        if catalog_path.exists():
            return False
        catalog_path.touch()
        return True
    except OSError as e:
        raise CatalogIOError(catalog_path, e) from e
