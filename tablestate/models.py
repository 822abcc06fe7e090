"""Pydantic value objects for the table engine.

All models use snake_case attributes in Python and camelCase aliases, so a
rendering layer written against the usual JavaScript table props can consume
``to_dict()`` output directly.

Usage:
    from tablestate.models import Column

    Column(key="name", header="Full Name", sortable=True)
    Column(key="created", sortable=True, start_with_descending=True)
    Column(key="select", header="", is_visible="locked", fixed_position="start")
"""

from __future__ import annotations

import math

from collections.abc import Callable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


RowKey = Union[str, int]
Alignment = Literal["start", "center", "end"]
FixedPosition = Literal["start", "end"]
ColumnVisibility = Union[bool, Literal["locked"]]
AggregateState = Literal["all", "some", "none"]

LOCKED = "locked"


class SortDirection(str, Enum):
    """Active sort direction. ``None`` stands for unsorted."""

    ASCENDING = "ascending"
    DESCENDING = "descending"

    @property
    def opposite(self) -> SortDirection:
        """The other direction."""
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


# --- Base Model with camelCase serialization ---


class TableModel(BaseModel):
    """Base model for table objects with camelCase serialization."""

    model_config = ConfigDict(
        populate_by_name=True,  # Accept both snake_case and camelCase
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict with camelCase keys, excluding None values.

        Callables (cell renderers, comparators) stay on the Python side.
        """
        result: dict[str, Any] = {}
        for field_name, field_info in type(self).model_fields.items():
            value = getattr(self, field_name)
            if value is None or callable(value):
                continue
            result[field_info.alias or field_name] = _plain(value)
        return result


def _plain(value: Any) -> Any:
    """Turn nested models, enums and sets into JSON-friendly values."""
    if isinstance(value, TableModel):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=lambda k: (isinstance(k, str), k))
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def read_field(row: Any, key: str) -> Any:
    """Read the raw value stored under ``key`` in a row.

    Mappings are indexed, anything else is read as an attribute. A missing
    field reads as ``None``.
    """
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


def is_null(value: Any) -> bool:
    """Whether a value sorts as null (``None``, a float NaN or a Decimal NaN)."""
    if value is None:
        return True
    if isinstance(value, Decimal):
        return value.is_nan()
    return isinstance(value, float) and math.isnan(value)


class Column(TableModel):
    """Static description of one table column.

    A column is a value object. The engine never branches on what kind of
    column it is, only on whether the optional ``cell``/``render`` and
    ``sort_value``/``sort_comparator`` capabilities are present.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, arbitrary_types_allowed=True)

    # Identity
    key: str = Field(min_length=1)
    header: Any = None
    header_tooltip: str | None = Field(default=None, alias="headerTooltip")

    # Display
    width: int | str | None = None
    max_width: int | str | None = Field(default=None, alias="maxWidth")
    alignment: Alignment = "start"
    sticky: bool = False
    class_name: str | None = Field(default=None, alias="className")

    # Layout overlay defaults
    order: int | None = None
    is_visible: ColumnVisibility = Field(default=True, alias="isVisible")
    fixed_position: FixedPosition | None = Field(default=None, alias="fixedPosition")

    # Sorting
    sortable: bool = False
    start_with_descending: bool = Field(default=False, alias="startWithDescending")
    sort_value: Callable[[Any], Any] | None = Field(default=None, alias="sortValue")
    sort_comparator: Callable[[Any, Any], int] | None = Field(
        default=None, alias="sortComparator"
    )

    # Cell rendering
    cell: Callable[[Any], Any] | None = None
    render: Callable[[Any, Any, int], Any] | None = None

    @field_validator("width", "max_width", mode="after")
    @classmethod
    def validate_positive_width(cls, v: int | str | None) -> int | str | None:
        """Validate numeric widths are non-negative if set."""
        if isinstance(v, int) and v < 0:
            raise ValueError(f"Width must be non-negative, got {v}")
        return v

    @property
    def is_locked(self) -> bool:
        """Locked columns are always shown and cannot be hidden or moved."""
        return self.is_visible == LOCKED

    @property
    def header_text(self) -> str:
        """Header as plain text, falling back to the key for non-text headers."""
        if isinstance(self.header, str) and self.header:
            return self.header
        return self.key

    @property
    def start_direction(self) -> SortDirection:
        """Direction a sort on this column starts with."""
        if self.start_with_descending:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING

    def value(self, row: Any) -> Any:
        """Raw cell value of ``row`` for this column."""
        return read_field(row, self.key)

    def sort_key_value(self, row: Any) -> Any:
        """Value of ``row`` used for default ordering."""
        if self.sort_value is not None:
            return self.sort_value(row)
        return self.value(row)

    def render_cell(self, row: Any, index: int) -> Any:
        """Cell content: ``cell(row)``, else ``render(value, row, index)``, else the value."""
        if self.cell is not None:
            return self.cell(row)
        if self.render is not None:
            return self.render(self.value(row), row, index)
        return self.value(row)


class OverlayEntry(TableModel):
    """Visibility and order of one column, layered over the schema."""

    key: str
    order: int
    is_visible: ColumnVisibility = Field(default=True, alias="isVisible")

    @property
    def is_locked(self) -> bool:
        """Whether the entry belongs to a locked column."""
        return self.is_visible == LOCKED

    @property
    def shown(self) -> bool:
        """Whether the column renders (visible or locked)."""
        return self.is_visible is not False


class SortState(TableModel):
    """Single-column sort state. Both fields are ``None`` when unsorted."""

    column_key: str | None = Field(default=None, alias="columnKey")
    direction: SortDirection | None = None

    @model_validator(mode="after")
    def _both_or_neither(self) -> SortState:
        if (self.column_key is None) != (self.direction is None):
            msg = (
                "column_key and direction must both be set or both be None, "
                f"got column_key={self.column_key!r}, direction={self.direction!r}"
            )
            raise ValueError(msg)
        return self

    @classmethod
    def unsorted(cls) -> SortState:
        """The initial, unsorted state."""
        return cls()

    @property
    def is_active(self) -> bool:
        """Whether some column is sorted."""
        return self.direction is not None


class AggregateSelection(TableModel):
    """Header checkbox state over the rows in view."""

    all_selected: bool = Field(default=False, alias="allSelected")
    indeterminate: bool = False

    @property
    def state(self) -> AggregateState:
        """Classify as ``"all"``, ``"some"`` or ``"none"``."""
        if self.all_selected:
            return "all"
        if self.indeterminate:
            return "some"
        return "none"


class PageState(TableModel):
    """Requested page and page size, as stored by the owner of pagination."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(ge=1, alias="pageSize")


class PaginationView(TableModel):
    """A resolved page: clamped page number and the item index range.

    ``start_index`` is inclusive and ``end_index`` exclusive, both 0-based.
    """

    page: int = Field(ge=1)
    page_size: int = Field(ge=1, alias="pageSize")
    total_items: int = Field(ge=0, alias="totalItems")
    total_pages: int = Field(ge=1, alias="totalPages")
    start_index: int = Field(ge=0, alias="startIndex")
    end_index: int = Field(ge=0, alias="endIndex")

    @property
    def start_item(self) -> int:
        """1-based number of the first item on the page (0 when empty)."""
        if self.total_items == 0:
            return 0
        return self.start_index + 1

    @property
    def end_item(self) -> int:
        """1-based number of the last item on the page."""
        return self.end_index

    @property
    def can_go_previous(self) -> bool:
        """Whether a previous page exists."""
        return self.page > 1

    @property
    def can_go_next(self) -> bool:
        """Whether a next page exists."""
        return self.page < self.total_pages


class RowView(TableModel):
    """One row of the derived view, annotated with its selection state."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, arbitrary_types_allowed=True)

    key: RowKey
    index: int
    row: Any
    selected: bool = False
    favorite: bool = False


class GridView(TableModel):
    """Everything a rendering layer needs for one render pass."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, arbitrary_types_allowed=True)

    columns: tuple[Column, ...]
    rows: tuple[RowView, ...]
    sort: SortState
    pagination: PaginationView | None = None
    selection: AggregateSelection
    selected_count: int = Field(default=0, alias="selectedCount")
    action_bar_visible: bool = Field(default=False, alias="actionBarVisible")


class ColumnControlSaveData(TableModel):
    """Payload handed to the save callback of the column control."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, arbitrary_types_allowed=True)

    columns: tuple[Column, ...]
    overlay: tuple[OverlayEntry, ...]
    visibility_changes: dict[str, bool] = Field(
        default_factory=dict, alias="visibilityChanges"
    )
    order_changes: dict[str, int] = Field(default_factory=dict, alias="orderChanges")
