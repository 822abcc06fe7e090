"""tablestate - rendering-agnostic state engine for data tables.

This package keeps the state behind a data table (column layout, tri-state
sorting, row selection, pagination and column visibility/order control)
and computes the derived view a rendering layer draws after each request.
"""

from .column_control import ColumnControlSession, DragReorder
from .config import (
    LogSettings,
    PaginationSettings,
    SelectionSettings,
    SortSettings,
    TableStateSettings,
    get_settings,
)
from .engine import GridEngine, index_row_key
from .exceptions import OwnershipError, PaginationError, SchemaError, TableStateException
from .layout import resolve, seed_overlay
from .log import enable_debug
from .models import (
    AggregateSelection,
    Column,
    ColumnControlSaveData,
    GridView,
    OverlayEntry,
    PageState,
    PaginationView,
    RowView,
    SortDirection,
    SortState,
)
from .ownership import External, Owned, StateSlot
from .pagination import paginate
from .sorting import apply_sort, next_sort_state


__version__ = "0.1.0"

__all__ = [
    "AggregateSelection",
    "Column",
    "ColumnControlSaveData",
    "ColumnControlSession",
    "DragReorder",
    "External",
    "GridEngine",
    "GridView",
    "LogSettings",
    "OverlayEntry",
    "Owned",
    "OwnershipError",
    "PageState",
    "PaginationError",
    "PaginationSettings",
    "PaginationView",
    "RowView",
    "SchemaError",
    "SelectionSettings",
    "SortDirection",
    "SortSettings",
    "SortState",
    "StateSlot",
    "TableStateException",
    "TableStateSettings",
    "apply_sort",
    "enable_debug",
    "get_settings",
    "index_row_key",
    "next_sort_state",
    "paginate",
    "resolve",
    "seed_overlay",
]
