"""Row selection as immutable key sets.

Every function returns a new ``frozenset`` and never mutates its input, so
an external owner comparing references always sees a change. Keys that no
longer belong to the dataset are not purged automatically; the aggregate
state only ever looks at the keys in view.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import AggregateSelection, RowKey


def as_selection(keys: Iterable[RowKey] | None) -> frozenset[RowKey]:
    """Coerce any iterable of keys (or None) into a selection set."""
    if keys is None:
        return frozenset()
    return frozenset(keys)


def toggle_row(selection: frozenset[RowKey], key: RowKey) -> frozenset[RowKey]:
    """Add ``key`` if absent, remove it if present."""
    return selection ^ {key}


def toggle_select_all(
    selection: frozenset[RowKey], view_keys: Iterable[RowKey]
) -> frozenset[RowKey]:
    """Select or deselect every key in view.

    If every key in view is already selected they are all deselected,
    otherwise they are all added. Keys outside the view keep their state.
    An empty view leaves the selection unchanged.
    """
    view = frozenset(view_keys)
    if not view:
        return selection
    if view <= selection:
        return selection - view
    return selection | view


def select_keys(selection: frozenset[RowKey], keys: Iterable[RowKey]) -> frozenset[RowKey]:
    """Add ``keys`` to the selection."""
    return selection | frozenset(keys)


def deselect_keys(selection: frozenset[RowKey], keys: Iterable[RowKey]) -> frozenset[RowKey]:
    """Remove ``keys`` from the selection."""
    return selection - frozenset(keys)


def prune(selection: frozenset[RowKey], live_keys: Iterable[RowKey]) -> frozenset[RowKey]:
    """Drop stale keys that are not in ``live_keys``."""
    return selection & frozenset(live_keys)


def count_selected(selection: frozenset[RowKey], view_keys: Iterable[RowKey]) -> int:
    """Number of keys in view that are selected."""
    return len(selection & frozenset(view_keys))


def compute_aggregate_state(
    selection: frozenset[RowKey], view_keys: Iterable[RowKey]
) -> AggregateSelection:
    """Header checkbox state for the keys in view.

    ``all_selected`` requires a non-empty view whose keys are all selected.
    ``indeterminate`` means some, but not all, keys in view are selected.
    """
    view = frozenset(view_keys)
    hit = len(selection & view)
    all_selected = bool(view) and hit == len(view)
    return AggregateSelection(all_selected=all_selected, indeterminate=0 < hit < len(view))
