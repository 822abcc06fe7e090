"""Tri-state, single-column sorting.

The sort state of a table cycles per column through the column's start
direction, the opposite direction and back to unsorted. Applying a sort
never destroys the original order: an unsorted state returns the rows
as given, and ties keep their original relative order in both
directions.
"""

from __future__ import annotations

import functools

from collections.abc import Callable, Sequence
from decimal import Decimal
from typing import Any, Literal

from .log import debug
from .models import Column, SortDirection, SortState, is_null


NullPlacement = Literal["first", "last"]


def find_column(schema: Sequence[Column], key: str | None) -> Column | None:
    """Look up a column by key."""
    if key is None:
        return None
    for column in schema:
        if column.key == key:
            return column
    return None


def next_sort_state(state: SortState, column: Column) -> SortState:
    """Advance the sort cycle for a request on ``column``.

    A column that is not the active one enters at its start direction
    (skipping unsorted). The active column moves from its start direction
    to the opposite one, and from there back to unsorted.

    Parameters
    ----------
    state : SortState
        The current sort state.
    column : Column
        The column the user asked to sort by.

    Returns
    -------
    SortState
        The new sort state.
    """
    start = column.start_direction
    if state.column_key != column.key or state.direction is None:
        return SortState(column_key=column.key, direction=start)
    if state.direction is start:
        return SortState(column_key=column.key, direction=start.opposite)
    return SortState.unsorted()


def request_sort(state: SortState, schema: Sequence[Column], key: str) -> SortState:
    """Apply a sort request, ignoring unknown and non-sortable columns."""
    column = find_column(schema, key)
    if column is None:
        debug(f"Ignoring sort request for unknown column '{key}'")
        return state
    if not column.sortable:
        debug(f"Ignoring sort request for non-sortable column '{key}'")
        return state
    new_state = next_sort_state(state, column)
    debug(f"Sort on '{key}': {state.direction} -> {new_state.direction}")
    return new_state


def sort_indicator(state: SortState, key: str) -> Literal["ascending", "descending", "none"]:
    """Header indicator for the column ``key``."""
    if state.column_key == key and state.direction is not None:
        return state.direction.value
    return "none"


@functools.total_ordering
class _DefaultOrder:
    """Sort key giving a total order over mixed values.

    Numbers sort before strings, and strings before everything else.
    Values of the same group compare natively; when that fails they
    compare by type name and then by their string form.
    """

    __slots__ = ("group", "value")

    def __init__(self, value: Any) -> None:
        if isinstance(value, (bool, int, float, Decimal)):
            self.group = 0
        elif isinstance(value, str):
            self.group = 1
        else:
            self.group = 2
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _DefaultOrder):
            return NotImplemented
        return self.group == other.group and not self < other and not other < self

    def __lt__(self, other: _DefaultOrder) -> bool:
        if self.group != other.group:
            return self.group < other.group
        try:
            return bool(self.value < other.value)
        except TypeError:
            mine = (type(self.value).__name__, str(self.value))
            theirs = (type(other.value).__name__, str(other.value))
            return mine < theirs

    __hash__ = None  # type: ignore[assignment]


def _identity(item: Any) -> Any:
    return item


def apply_sort(
    rows: Sequence[Any],
    state: SortState,
    schema: Sequence[Column],
    nulls: NullPlacement = "last",
    row_of: Callable[[Any], Any] = _identity,
) -> list[Any]:
    """Return the rows ordered by the sort state.

    Parameters
    ----------
    rows : sequence
        The dataset snapshot, in original order.
    state : SortState
        The sort state to apply.
    schema : sequence of Column
        The column schema.
    nulls : {"first", "last"}
        Where null sort values go, whatever the direction. Only applies
        to columns without a ``sort_comparator``.
    row_of : callable, optional
        Extracts the row from each item, for callers sorting wrapped rows
        such as ``(index, row)`` pairs.

    Returns
    -------
    list
        A new list. Original order when unsorted or when the sort column
        is unknown or not sortable.
    """
    if state.direction is None:
        return list(rows)

    column = find_column(schema, state.column_key)
    if column is None or not column.sortable:
        debug(f"Sort column '{state.column_key}' cannot be sorted; keeping original order")
        return list(rows)

    descending = state.direction is SortDirection.DESCENDING

    # Python's sort is stable with reverse=True as well
    if column.sort_comparator is not None:
        compare = column.sort_comparator
        return sorted(
            rows,
            key=functools.cmp_to_key(lambda a, b: compare(row_of(a), row_of(b))),
            reverse=descending,
        )

    keyed = [(column.sort_key_value(row_of(item)), item) for item in rows]
    present = [(value, row) for value, row in keyed if not is_null(value)]
    missing = [row for value, row in keyed if is_null(value)]

    present.sort(key=lambda pair: _DefaultOrder(pair[0]), reverse=descending)
    ordered = [row for _, row in present]

    if nulls == "first":
        return missing + ordered
    return ordered + missing
