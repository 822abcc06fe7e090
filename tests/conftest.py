"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys

from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator


# Add tablestate to path for imports
package_path = Path(__file__).parent.parent / "tablestate"
if str(package_path) not in sys.path:
    sys.path.insert(0, str(package_path.parent))


from tablestate.config import clear_settings  # noqa: E402
from tablestate.engine import GridEngine  # noqa: E402
from tablestate.models import Column  # noqa: E402


# =============================================================================
# Settings isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Run every test without config files or TABLESTATE_ variables."""
    for name in list(os.environ):
        if name.startswith("TABLESTATE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    clear_settings()
    yield
    clear_settings()


# =============================================================================
# Datasets
# =============================================================================


@pytest.fixture
def people() -> list[dict[str, Any]]:
    """Five people keyed 1..5, names out of alphabetical order."""
    return [
        {"id": 1, "name": "Bob", "age": 34, "email": "bob@example.com"},
        {"id": 2, "name": "Alice", "age": 29, "email": "alice@example.com"},
        {"id": 3, "name": "Eve", "age": 41, "email": "eve@example.com"},
        {"id": 4, "name": "Dan", "age": 29, "email": None},
        {"id": 5, "name": "Carol", "age": 38, "email": "carol@example.com"},
    ]


@pytest.fixture
def columns() -> list[Column]:
    """A schema with a locked selection column and three data columns."""
    return [
        Column(key="select", header="", is_visible="locked", fixed_position="start"),
        Column(key="name", header="Name", sortable=True),
        Column(key="age", header="Age", sortable=True, start_with_descending=True),
        Column(key="email", header="Email"),
    ]


@pytest.fixture
def engine(people: list[dict[str, Any]], columns: list[Column]) -> GridEngine:
    """Engine over the people dataset keyed by ``id``."""
    return GridEngine(people, columns, lambda row, index: row["id"])
