"""Column visibility and order control.

The pure functions in this module transform an overlay (a tuple of
``OverlayEntry``) and never mutate it. ``ColumnControlSession`` holds the
working copy, the baseline and the search query for as long as a column
control dialog is open, and ``DragReorder`` turns drag-and-drop gestures
over the listed entries into a single reorder request.

Locked columns are structural (a selection checkbox column, for example):
requests to hide or move them are ignored.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from .layout import apply_overlay, normalize_overlay, ordered_entries
from .log import debug
from .models import Column, ColumnControlSaveData, OverlayEntry


Overlay = tuple[OverlayEntry, ...]


# =============================================================================
# Pure overlay transforms
# =============================================================================


def _find(overlay: Sequence[OverlayEntry], key: str) -> OverlayEntry | None:
    for entry in overlay:
        if entry.key == key:
            return entry
    return None


def set_visibility(overlay: Sequence[OverlayEntry], key: str, visible: bool) -> Overlay:
    """Show or hide one column.

    Unknown and locked columns are left alone.
    """
    entry = _find(overlay, key)
    if entry is None:
        debug(f"Ignoring visibility change for unknown column '{key}'")
        return tuple(overlay)
    if entry.is_locked:
        debug(f"Ignoring visibility change for locked column '{key}'")
        return tuple(overlay)
    return tuple(
        e.model_copy(update={"is_visible": bool(visible)}) if e.key == key else e
        for e in overlay
    )


def reorder(overlay: Sequence[OverlayEntry], source_key: str, target_key: str) -> Overlay:
    """Exchange the ``order`` of two columns.

    This is a two-element swap, not an insert: every other entry keeps its
    ``order``. Unknown keys, locked columns and ``source_key == target_key``
    leave the overlay unchanged.
    """
    if source_key == target_key:
        return tuple(overlay)
    source = _find(overlay, source_key)
    target = _find(overlay, target_key)
    if source is None or target is None:
        debug(f"Ignoring reorder of unknown column(s) '{source_key}', '{target_key}'")
        return tuple(overlay)
    if source.is_locked or target.is_locked:
        debug(f"Ignoring reorder involving locked column(s) '{source_key}', '{target_key}'")
        return tuple(overlay)

    swapped = {source_key: target.order, target_key: source.order}
    return tuple(
        e.model_copy(update={"order": swapped[e.key]}) if e.key in swapped else e
        for e in overlay
    )


def has_changes(
    overlay: Sequence[OverlayEntry],
    baseline: Sequence[OverlayEntry],
    schema: Sequence[Column] | None = None,
) -> bool:
    """Whether the working overlay differs from the baseline.

    When a schema is given both sides are normalized against it first, so a
    missing entry and an entry holding the column defaults compare equal.
    """
    if schema is not None:
        return normalize_overlay(schema, overlay) != normalize_overlay(schema, baseline)
    return _by_key(overlay) != _by_key(baseline)


def _by_key(overlay: Iterable[OverlayEntry]) -> dict[str, OverlayEntry]:
    return {entry.key: entry for entry in overlay}


def commit(overlay: Sequence[OverlayEntry]) -> Overlay:
    """Return the working overlay as the new effective overlay."""
    return tuple(overlay)


def reset(baseline: Sequence[OverlayEntry]) -> Overlay:
    """Return a fresh working copy of the baseline."""
    return tuple(entry.model_copy() for entry in baseline)


def diff_overlay(
    overlay: Sequence[OverlayEntry], baseline: Sequence[OverlayEntry]
) -> tuple[dict[str, bool], dict[str, int]]:
    """Split the differences into visibility changes and order changes.

    Returns
    -------
    tuple of dict
        ``(visibility_changes, order_changes)`` keyed by column key and
        holding the new values.
    """
    before = _by_key(baseline)
    visibility_changes: dict[str, bool] = {}
    order_changes: dict[str, int] = {}
    for entry in overlay:
        old = before.get(entry.key)
        if old is None:
            continue
        if entry.is_visible != old.is_visible and not entry.is_locked:
            visibility_changes[entry.key] = bool(entry.is_visible)
        if entry.order != old.order:
            order_changes[entry.key] = entry.order
    return visibility_changes, order_changes


def controllable_columns(
    schema: Sequence[Column], overlay: Sequence[OverlayEntry]
) -> list[Column]:
    """Columns offered in the column control, in current order.

    Columns pinned with ``fixed_position`` are never listed. Hidden columns
    are listed so they can be shown again.
    """
    return [
        column.model_copy(update={"order": entry.order, "is_visible": entry.is_visible})
        for column, entry in ordered_entries(schema, overlay)
        if column.fixed_position is None
    ]


def filter_columns(columns: Sequence[Column], query: str) -> list[Column]:
    """Case-insensitive search over the header text of ``columns``."""
    needle = query.strip().lower()
    if not needle:
        return list(columns)
    return [column for column in columns if needle in column.header_text.lower()]


# =============================================================================
# Session
# =============================================================================


class ColumnControlSession:
    """Working state of an open column control.

    Parameters
    ----------
    schema : sequence of Column
        The column schema.
    committed : sequence of OverlayEntry
        The overlay currently in effect; the working copy starts from it and
        ``cancel`` returns to it.
    baseline : sequence of OverlayEntry, optional
        The "initial" overlay used by ``reset`` and ``has_changes``. Without a
        baseline, reset is unavailable and nothing counts as a change.
    """

    def __init__(
        self,
        schema: Sequence[Column],
        committed: Sequence[OverlayEntry],
        baseline: Sequence[OverlayEntry] | None = None,
    ) -> None:
        self.schema = tuple(schema)
        self.committed: Overlay = normalize_overlay(self.schema, committed)
        self.baseline: Overlay | None = (
            normalize_overlay(self.schema, baseline) if baseline is not None else None
        )
        self.working: Overlay = self.committed
        self.search = ""

    @property
    def is_filtered(self) -> bool:
        """Whether a search query is narrowing the list."""
        return bool(self.search)

    def entries(self) -> list[Column]:
        """Columns currently listed (controllable and matching the search)."""
        return filter_columns(controllable_columns(self.schema, self.working), self.search)

    def set_search(self, query: str) -> None:
        """Set the column name search query."""
        self.search = query

    def set_visibility(self, key: str, visible: bool) -> None:
        """Show or hide a column in the working copy."""
        self.working = set_visibility(self.working, key, visible)

    def can_reorder(self, key: str) -> bool:
        """Whether ``key`` may be dragged right now."""
        if self.is_filtered:
            return False
        listed = {column.key: column for column in self.entries()}
        column = listed.get(key)
        return column is not None and not column.is_locked

    def reorder(self, source_key: str, target_key: str) -> None:
        """Swap two listed, unlocked columns while no search is active."""
        if not (self.can_reorder(source_key) and self.can_reorder(target_key)):
            debug(f"Reorder of '{source_key}' and '{target_key}' is not allowed right now")
            return
        self.working = reorder(self.working, source_key, target_key)

    def has_changes(self) -> bool:
        """Whether the working copy differs from the baseline."""
        if self.baseline is None:
            return False
        return has_changes(self.working, self.baseline, self.schema)

    def reset(self) -> None:
        """Replace the working copy with the baseline, if there is one."""
        if self.baseline is None:
            debug("No baseline overlay; reset ignored")
            return
        self.working = reset(self.baseline)

    def save_data(self) -> ColumnControlSaveData:
        """Describe the working copy relative to the committed overlay."""
        overlay = commit(self.working)
        visibility_changes, order_changes = diff_overlay(overlay, self.committed)
        return ColumnControlSaveData(
            columns=tuple(apply_overlay(self.schema, overlay)),
            overlay=overlay,
            visibility_changes=visibility_changes,
            order_changes=order_changes,
        )


# =============================================================================
# Drag-and-drop adapter
# =============================================================================


class DragReorder:
    """Translate drag gestures over listed entries into reorder requests.

    The adapter only tracks indices into the list returned by
    ``list_entries`` at the time of each gesture; a drop on a different
    index calls ``on_reorder(source_key, target_key)`` once.

    Parameters
    ----------
    list_entries : callable
        Returns the columns currently listed in the control.
    can_drag : callable
        Whether the column with the given key may be dragged.
    on_reorder : callable
        Receives ``(source_key, target_key)`` on a valid drop.
    """

    def __init__(
        self,
        list_entries: Callable[[], Sequence[Column]],
        can_drag: Callable[[str], bool],
        on_reorder: Callable[[str, str], Any],
    ) -> None:
        self._list_entries = list_entries
        self._can_drag = can_drag
        self._on_reorder = on_reorder
        self.dragged_index: int | None = None
        self.drag_over_index: int | None = None

    def _key_at(self, index: int) -> str | None:
        entries = self._list_entries()
        if 0 <= index < len(entries):
            return entries[index].key
        return None

    def drag_start(self, index: int) -> None:
        """Begin dragging the entry at ``index``."""
        key = self._key_at(index)
        if key is None or not self._can_drag(key):
            return
        self.dragged_index = index

    def drag_over(self, index: int) -> None:
        """Pointer moved over the entry at ``index``."""
        if self.dragged_index is not None:
            self.drag_over_index = index

    def drag_leave(self) -> None:
        """Pointer left the hovered entry."""
        self.drag_over_index = None

    def drop(self, index: int) -> bool:
        """Drop on the entry at ``index``; returns whether a reorder was requested."""
        source_index = self.dragged_index
        self.drag_end()
        if source_index is None or source_index == index:
            return False
        source_key = self._key_at(source_index)
        target_key = self._key_at(index)
        if source_key is None or target_key is None or not self._can_drag(target_key):
            return False
        self._on_reorder(source_key, target_key)
        return True

    def drag_end(self) -> None:
        """Clear the drag state."""
        self.dragged_index = None
        self.drag_over_index = None
