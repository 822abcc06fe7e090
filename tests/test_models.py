"""Tests for the table value objects.

Tests:
- TableModel camelCase serialization
- Column validation, capabilities and cell rendering
- SortState consistency
- AggregateSelection classification
- PaginationView display helpers
"""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest

from pydantic import ValidationError

from tablestate.models import (
    AggregateSelection,
    Column,
    ColumnControlSaveData,
    OverlayEntry,
    PaginationView,
    SortDirection,
    SortState,
    is_null,
    read_field,
)


# =============================================================================
# Serialization
# =============================================================================


class TestToDict:
    """Tests for camelCase serialization."""

    def test_uses_aliases(self):
        """to_dict() emits camelCase keys."""
        col = Column(key="name", header="Name", header_tooltip="Full name")
        result = col.to_dict()
        assert result["headerTooltip"] == "Full name"
        assert result["isVisible"] is True
        assert "header_tooltip" not in result

    def test_excludes_none_and_callables(self):
        """None values and callables stay out of the output."""
        col = Column(key="name", sort_value=len, cell=str)
        result = col.to_dict()
        assert "sortValue" not in result
        assert "cell" not in result
        assert "width" not in result

    def test_nested_models_and_enums(self):
        """Nested models and enums become plain values."""
        data = ColumnControlSaveData(
            columns=(Column(key="a"),),
            overlay=(OverlayEntry(key="a", order=0),),
            visibility_changes={"a": False},
        )
        result = data.to_dict()
        assert result["overlay"] == [{"key": "a", "order": 0, "isVisible": True}]
        assert result["visibilityChanges"] == {"a": False}
        assert SortState(column_key="a", direction="ascending").to_dict() == {
            "columnKey": "a",
            "direction": "ascending",
        }

    def test_accepts_camel_case_input(self):
        """Models can be built from camelCase keys."""
        col = Column.model_validate({"key": "age", "startWithDescending": True, "isVisible": False})
        assert col.start_with_descending is True
        assert col.is_visible is False


# =============================================================================
# Column
# =============================================================================


class TestColumn:
    """Tests for the Column model."""

    def test_defaults(self):
        """A bare column is visible, unsorted and start-aligned."""
        col = Column(key="x")
        assert col.is_visible is True
        assert col.sortable is False
        assert col.alignment == "start"
        assert col.start_direction is SortDirection.ASCENDING

    def test_empty_key_rejected(self):
        """Column keys cannot be empty."""
        with pytest.raises(ValidationError):
            Column(key="")

    def test_negative_width_rejected(self):
        """Numeric widths must not be negative."""
        with pytest.raises(ValidationError, match="non-negative"):
            Column(key="x", width=-1)

    def test_css_width_accepted(self):
        """String widths pass through untouched."""
        assert Column(key="x", width="20%").width == "20%"

    def test_locked(self):
        """'locked' visibility marks the column as locked."""
        assert Column(key="x", is_visible="locked").is_locked
        assert not Column(key="x", is_visible=False).is_locked

    def test_header_text_falls_back_to_key(self):
        """Non-text headers use the key as text."""
        assert Column(key="x", header="Ex").header_text == "Ex"
        assert Column(key="x", header=object()).header_text == "x"
        assert Column(key="x").header_text == "x"

    def test_frozen(self):
        """Columns are immutable values."""
        col = Column(key="x")
        with pytest.raises(ValidationError):
            col.key = "y"

    def test_value_reads_mappings_and_objects(self):
        """Raw values come from mapping keys or attributes."""
        col = Column(key="name")
        assert col.value({"name": "Ada"}) == "Ada"
        assert col.value(SimpleNamespace(name="Ada")) == "Ada"
        assert col.value({}) is None

    def test_sort_key_value_prefers_sort_value(self):
        """sort_value overrides the raw field for ordering."""
        col = Column(key="name", sort_value=lambda row: row["name"].lower())
        assert col.sort_key_value({"name": "ADA"}) == "ada"

    def test_render_cell_dispatch(self):
        """cell wins over render, which wins over the raw value."""
        row = {"name": "Ada"}
        both = Column(key="name", cell=lambda r: "cell", render=lambda v, r, i: "render")
        render_only = Column(key="name", render=lambda v, r, i: f"{v}#{i}")
        plain = Column(key="name")
        assert both.render_cell(row, 0) == "cell"
        assert render_only.render_cell(row, 3) == "Ada#3"
        assert plain.render_cell(row, 0) == "Ada"


class TestHelpers:
    """Tests for read_field and is_null."""

    def test_read_field_missing_attribute(self):
        """Missing attributes read as None."""
        assert read_field(SimpleNamespace(), "nope") is None

    def test_is_null(self):
        """None and NaN are null; falsy values are not."""
        assert is_null(None)
        assert is_null(float("nan"))
        assert is_null(Decimal("NaN"))
        assert not is_null(0)
        assert not is_null("")


# =============================================================================
# SortState / AggregateSelection / PaginationView
# =============================================================================


class TestSortState:
    """Tests for SortState."""

    def test_unsorted(self):
        """The unsorted state has neither key nor direction."""
        state = SortState.unsorted()
        assert state.column_key is None
        assert state.direction is None
        assert not state.is_active

    def test_half_set_rejected(self):
        """Key and direction are set together."""
        with pytest.raises(ValidationError):
            SortState(column_key="a")
        with pytest.raises(ValidationError):
            SortState(direction="descending")

    def test_opposite(self):
        """Directions know their opposite."""
        assert SortDirection.ASCENDING.opposite is SortDirection.DESCENDING
        assert SortDirection.DESCENDING.opposite is SortDirection.ASCENDING


class TestAggregateSelection:
    """Tests for the aggregate classification."""

    @pytest.mark.parametrize(
        ("all_selected", "indeterminate", "expected"),
        [(True, False, "all"), (False, True, "some"), (False, False, "none")],
    )
    def test_state(self, all_selected, indeterminate, expected):
        """state classifies the checkbox."""
        agg = AggregateSelection(all_selected=all_selected, indeterminate=indeterminate)
        assert agg.state == expected


class TestPaginationView:
    """Tests for PaginationView helpers."""

    def test_item_numbers(self):
        """start_item is 1-based, end_item inclusive."""
        view = PaginationView(
            page=2, page_size=10, total_items=15, total_pages=2, start_index=10, end_index=15
        )
        assert view.start_item == 11
        assert view.end_item == 15
        assert view.can_go_previous
        assert not view.can_go_next

    def test_empty(self):
        """An empty dataset shows item 0."""
        view = PaginationView(
            page=1, page_size=10, total_items=0, total_pages=1, start_index=0, end_index=0
        )
        assert view.start_item == 0
        assert not view.can_go_previous
        assert not view.can_go_next
