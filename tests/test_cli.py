"""Tests for CLI module.

Tests the command-line interface for configuration management and
dataset previews.
"""

from __future__ import annotations

import argparse
import json

from io import StringIO
from pathlib import Path
from unittest.mock import patch

import pytest

from tablestate.cli import (
    build_preview_engine,
    format_config_show,
    format_page,
    handle_config,
    handle_init,
    main,
    show_config_sources,
)
from tablestate.config import TableStateSettings


@pytest.fixture
def people_file(people, tmp_path) -> Path:
    path = tmp_path / "people.json"
    path.write_text(json.dumps(people), encoding="utf-8")
    return path


def config_args(**overrides):
    values = {"show": False, "toml": False, "env": False, "sources": False, "output": None}
    values.update(overrides)
    return argparse.Namespace(**values)


class TestMainEntryPoint:
    """Tests for CLI main entry point."""

    def test_no_args_prints_help_text(self):
        """Running with no args prints help text with usage info."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            result = main([])

        output = mock_stdout.getvalue()
        assert result == 0
        assert "usage:" in output.lower()
        assert "config" in output
        assert "preview" in output

    def test_config_command_dispatches_to_handler(self):
        """config --show prints the sections."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            result = main(["config", "--show"])

        assert result == 0
        assert "[pagination]" in mock_stdout.getvalue()

    def test_init_command_dispatches_to_handler(self, tmp_path):
        """init creates the configuration file."""
        config_path = tmp_path / "custom.toml"
        with patch("sys.stdout", new_callable=StringIO):
            result = main(["init", "--path", str(config_path)])

        assert result == 0
        assert config_path.exists()


# =============================================================================
# config / init
# =============================================================================


class TestHandleConfig:
    """Tests for the config command."""

    def test_show_outputs_all_sections(self):
        """--show lists every section."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            result = handle_config(config_args(show=True))

        output = mock_stdout.getvalue()
        assert result == 0
        for section in ("[pagination]", "[sort]", "[selection]", "[log]"):
            assert section in output

    def test_toml_to_file(self, tmp_path):
        """--toml with --output writes a file."""
        target = tmp_path / "out.toml"
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            result = handle_config(config_args(toml=True, output=str(target)))

        assert result == 0
        assert "[sort]" in target.read_text(encoding="utf-8")
        assert "written" in mock_stdout.getvalue()

    def test_env_export(self):
        """--env prints export lines."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            handle_config(config_args(env=True))

        assert "export TABLESTATE_SORT__NULLS" in mock_stdout.getvalue()

    def test_sources(self, monkeypatch):
        """--sources lists files and env vars."""
        monkeypatch.setenv("TABLESTATE_SORT__NULLS", "first")
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            result = show_config_sources()

        output = mock_stdout.getvalue()
        assert result == 0
        assert "tablestate.toml" in output
        assert "1 vars" in output

    def test_format_config_show(self):
        """format_config_show renders field values."""
        output = format_config_show(TableStateSettings())
        assert "nulls = 'last'" in output


class TestHandleInit:
    """Tests for the init command."""

    def test_creates_file(self):
        """init writes a commented TOML file that loads back."""
        with patch("sys.stdout", new_callable=StringIO):
            result = handle_init(argparse.Namespace(path="tablestate.toml", force=False))

        assert result == 0
        content = Path("tablestate.toml").read_text(encoding="utf-8")
        assert content.startswith("# tablestate configuration file")
        assert TableStateSettings() == TableStateSettings(sort={"nulls": "last"})

    def test_refuses_overwrite(self):
        """An existing file is kept without --force."""
        Path("tablestate.toml").write_text("# mine\n", encoding="utf-8")
        with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
            result = handle_init(argparse.Namespace(path="tablestate.toml", force=False))

        assert result == 1
        assert "already exists" in mock_stderr.getvalue()
        assert Path("tablestate.toml").read_text(encoding="utf-8") == "# mine\n"

    def test_force_overwrites(self):
        """--force replaces an existing file."""
        Path("tablestate.toml").write_text("# mine\n", encoding="utf-8")
        with patch("sys.stdout", new_callable=StringIO):
            result = handle_init(argparse.Namespace(path="tablestate.toml", force=True))

        assert result == 0
        assert "[pagination]" in Path("tablestate.toml").read_text(encoding="utf-8")


# =============================================================================
# preview
# =============================================================================


class TestPreview:
    """Tests for the preview command."""

    def test_sorted_page(self, people_file):
        """Sorting by name puts Alice first and marks the header."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            result = main(["preview", str(people_file), "--key", "id", "--sort", "name"])

        lines = mock_stdout.getvalue().splitlines()
        assert result == 0
        assert "name ^" in lines[0]
        assert lines[2].split()[:2] == ["2", "Alice"]
        assert lines[-1] == "1 - 5 of 5"

    def test_sort_twice_descends(self, people_file):
        """A repeated --sort advances the cycle."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            main(["preview", str(people_file), "-s", "name", "-s", "name"])

        lines = mock_stdout.getvalue().splitlines()
        assert "name v" in lines[0]
        assert lines[2].split()[:2] == ["3", "Eve"]

    def test_page_and_size(self, people_file):
        """--page and --page-size pick the page."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            result = main(["preview", str(people_file), "--page-size", "5", "--page", "2"])

        assert result == 0
        assert mock_stdout.getvalue().splitlines()[-1] == "1 - 5 of 5"

    def test_disallowed_page_size(self, people_file):
        """A page size outside the options is an error."""
        with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
            result = main(["preview", str(people_file), "--page-size", "7"])

        assert result == 1
        assert "page size 7" in mock_stderr.getvalue()

    def test_missing_file(self, tmp_path):
        """An unreadable file is an error."""
        with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
            result = main(["preview", str(tmp_path / "nope.json")])

        assert result == 1
        assert "cannot read" in mock_stderr.getvalue()

    def test_not_an_array(self, tmp_path):
        """The file must hold an array of objects."""
        path = tmp_path / "obj.json"
        path.write_text('{"a": 1}', encoding="utf-8")
        with patch("sys.stderr", new_callable=StringIO) as mock_stderr:
            result = main(["preview", str(path)])

        assert result == 1
        assert "array of objects" in mock_stderr.getvalue()


class TestPreviewHelpers:
    """Tests for build_preview_engine() and format_page()."""

    def test_columns_from_all_records(self):
        """Columns are the union of fields, in first-seen order."""
        engine = build_preview_engine([{"a": 1}, {"b": 2, "a": 3}])
        assert [c.key for c in engine.columns] == ["a", "b"]
        assert all(c.sortable for c in engine.columns)

    def test_key_field(self):
        """--key picks the row key field."""
        engine = build_preview_engine([{"id": "x"}, {"id": "y"}], key_field="id")
        assert engine.get_row_keys() == ["x", "y"]

    def test_missing_values_render_empty(self):
        """None cells render as blanks."""
        engine = build_preview_engine([{"a": 1, "b": None}])
        lines = format_page(engine).splitlines()
        assert lines[0].split() == ["a", "b"]
        assert lines[2].split() == ["1"]
