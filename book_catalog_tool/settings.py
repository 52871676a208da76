"""Settings management for book-catalog-tool.

This module provides functions for managing application settings that
persist across CLI sessions, with environment variable overrides.

Functions:
    load_settings: Load settings from disk and apply environment overrides.
    save_settings: Save settings to disk.

Environment Variables:
    BOOK_CATALOG_MAX_WORKERS: Override Settings.max_workers.
    BOOK_CATALOG_REJECT_DUPLICATE_ISBN: Override Settings.reject_duplicate_isbn.
"""

from __future__ import annotations

import json
import os

from pydantic import ValidationError

from book_catalog_tool.logging_config import get_logger
from book_catalog_tool.models import Settings
from book_catalog_tool.storage.paths import get_settings_path

logger = get_logger(__name__)

_TRUE_VALUES = ("true", "1", "yes")


def load_settings() -> Settings:
    """Load settings from disk.

    Returns:
        Settings object. Returns default settings (plus environment
        overrides) if the file doesn't exist or can't be parsed.

    Example:
        >>> settings = load_settings()
        >>> print(settings.max_workers)
    """
    settings_path = get_settings_path()
    data: dict[str, object] = {}

    if settings_path.exists():
        try:
            with open(settings_path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load settings: %s", e)
            data = {}

    workers = os.environ.get("BOOK_CATALOG_MAX_WORKERS")
    if workers:
        data["max_workers"] = workers

    reject = os.environ.get("BOOK_CATALOG_REJECT_DUPLICATE_ISBN")
    if reject:
        data["reject_duplicate_isbn"] = reject.lower() in _TRUE_VALUES

    try:
        return Settings(**data)
    except ValidationError as e:
        logger.warning("Invalid settings, using defaults: %s", e)
        return Settings()


def save_settings(settings: Settings) -> None:
    """Save settings to disk.

    Args:
        settings: Settings object to save.

    Example:
        >>> save_settings(Settings(max_workers=8))
    """
    settings_path = get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    with open(settings_path, "w") as f:
        json.dump(settings.model_dump(), f, indent=2)

    logger.debug("Saved settings to %s", settings_path)
