"""Tests for the book-catalog-tool CLI."""

import json
from pathlib import Path

from conftest import DUNE, HOBBIT, LORD_JIM, LOTR, write_lines
from typer.testing import CliRunner

from book_catalog_tool import __version__
from book_catalog_tool.cli import FAREWELL, app

runner = CliRunner()


class TestRunCommand:
    """Tests for the run command."""

    def test_title_search_prints_rows_and_statistics(self, catalog_path: Path) -> None:
        write_lines(catalog_path, LOTR, LORD_JIM, DUNE)

        result = runner.invoke(app, ["run", str(catalog_path), "lord"])

        assert result.exit_code == 0, result.output
        assert "The Lord of the Rings" in result.output
        assert "lord jim" in result.output
        assert "Dune" not in result.output
        assert "--- Session Statistics ---" in result.output
        assert "Valid records processed: 3" in result.output
        assert "Search results found:    2" in result.output
        assert result.output.rstrip().endswith(FAREWELL)

    def test_rejects_non_txt_catalog(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", str(tmp_path / "catalog.csv"), "lord"])

        assert result.exit_code == 1
        assert "Catalog file must end with .txt" in result.output
        assert "Errors encountered:      1" in result.output
        assert not (tmp_path / "catalog.csv").exists()

    def test_creates_missing_catalog_and_directories(self, tmp_path: Path) -> None:
        catalog = tmp_path / "new" / "nested" / "catalog.txt"

        result = runner.invoke(app, ["run", str(catalog), "Dune:Frank Herbert:9780441013593:3"])

        assert result.exit_code == 0, result.output
        assert catalog.read_text(encoding="utf-8") == f"{DUNE}\n"
        assert "Books added:             1" in result.output

    def test_failed_operation_is_reported_and_logged(self, catalog_path: Path) -> None:
        write_lines(catalog_path, HOBBIT)

        result = runner.invoke(app, ["run", str(catalog_path), "Emma:Jane Austen:123:5"])

        assert result.exit_code == 0
        assert "Operation error: ISBN must be exactly 13 digits." in result.output
        assert "Errors encountered:      1" in result.output
        log = (catalog_path.parent / "errors.log").read_text(encoding="utf-8")
        assert 'OPERATION FAILED: "Emma:Jane Austen:123:5" - InvalidISBNError' in log

    def test_json_report_with_ingestion(self, tmp_path: Path, catalog_path: Path) -> None:
        write_lines(catalog_path, HOBBIT)
        extra = write_lines(tmp_path / "extra.txt", DUNE, "broken")

        result = runner.invoke(
            app,
            [
                "run",
                str(catalog_path),
                "9780441013593",
                "--ingest",
                str(extra),
                "--format",
                "json",
            ],
        )

        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        assert report["ingest"][0]["accepted"] == 1
        assert report["ingest"][0]["rejected"][0]["error"] == "MalformedEntryError"
        assert report["operations"][0]["books"][0]["title"] == "Dune"
        assert report["statistics"] == {
            "valid_records": 2,
            "search_results": 1,
            "books_added": 0,
            "errors": 1,
        }


class TestListCommand:
    """Tests for the list command."""

    def test_lists_catalog(self, catalog_path: Path) -> None:
        write_lines(catalog_path, DUNE, "bad")

        result = runner.invoke(app, ["list", str(catalog_path), "--format", "json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == [
            {"title": "Dune", "author": "Frank Herbert", "isbn": "9780441013593", "copies": 3}
        ]

    def test_empty_catalog(self, catalog_path: Path) -> None:
        result = runner.invoke(app, ["list", str(catalog_path)])
        assert "No books in catalog." in result.output


class TestGlobalOptions:
    """Tests for global options and subcommands."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_completion_generate(self) -> None:
        result = runner.invoke(app, ["completion", "generate", "zsh"])
        assert result.exit_code == 0
        assert "_BOOK_CATALOG_TOOL_COMPLETE" in result.output
