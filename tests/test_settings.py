"""Tests for settings persistence and environment overrides."""

import json
from pathlib import Path

import pytest

from book_catalog_tool.models import Settings
from book_catalog_tool.settings import load_settings, save_settings


class TestSettings:
    """Tests for load_settings / save_settings."""

    def test_defaults_without_file(self) -> None:
        assert load_settings() == Settings()

    def test_save_then_load(self, isolated_settings: Path) -> None:
        save_settings(Settings(max_workers=8, reject_duplicate_isbn=True))
        assert json.loads(isolated_settings.read_text())["max_workers"] == 8
        assert load_settings() == Settings(max_workers=8, reject_duplicate_isbn=True)

    def test_environment_overrides_file(
        self, isolated_settings: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        save_settings(Settings(max_workers=8))
        monkeypatch.setenv("BOOK_CATALOG_MAX_WORKERS", "2")
        monkeypatch.setenv("BOOK_CATALOG_REJECT_DUPLICATE_ISBN", "yes")

        settings = load_settings()

        assert settings.max_workers == 2
        assert settings.reject_duplicate_isbn is True

    def test_corrupted_file_falls_back_to_defaults(self, isolated_settings: Path) -> None:
        isolated_settings.parent.mkdir(parents=True)
        isolated_settings.write_text("{not json")
        assert load_settings() == Settings()

    def test_invalid_values_fall_back_to_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BOOK_CATALOG_MAX_WORKERS", "0")
        assert load_settings() == Settings()
