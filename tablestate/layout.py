"""Column layout resolution.

Merges the immutable column schema with the mutable visibility/order
overlay and produces the ordered list of columns that render.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .exceptions import SchemaError
from .log import debug
from .models import Column, OverlayEntry


def validate_schema(schema: Sequence[Column]) -> None:
    """Check that column keys are present and unique.

    Parameters
    ----------
    schema : sequence of Column
        The column schema.

    Raises
    ------
    SchemaError
        If a key is empty or two columns share a key.
    """
    seen: set[str] = set()
    for column in schema:
        if not column.key:
            raise SchemaError("Column key must not be empty", key=column.key)
        if column.key in seen:
            raise SchemaError("Duplicate column key in schema", key=column.key)
        seen.add(column.key)


def default_entry(column: Column, index: int) -> OverlayEntry:
    """Overlay entry carrying a column's own defaults.

    ``order`` falls back to the schema index and ``is_visible`` to the
    column's declared visibility.
    """
    order = column.order if column.order is not None else index
    return OverlayEntry(key=column.key, order=order, is_visible=column.is_visible)


def seed_overlay(schema: Sequence[Column]) -> tuple[OverlayEntry, ...]:
    """Build the default overlay for a schema, one entry per column."""
    return tuple(default_entry(column, index) for index, column in enumerate(schema))


def normalize_overlay(
    schema: Sequence[Column], overlay: Iterable[OverlayEntry] | None
) -> tuple[OverlayEntry, ...]:
    """Align an overlay with the schema.

    The result has exactly one entry per schema column, in schema order.
    Entries for unknown keys are dropped and missing entries are filled
    from the column defaults. A locked column stays locked whatever the
    overlay says.

    Parameters
    ----------
    schema : sequence of Column
        The column schema.
    overlay : iterable of OverlayEntry or None
        A possibly partial overlay.

    Returns
    -------
    tuple of OverlayEntry
        The normalized overlay.
    """
    by_key: dict[str, OverlayEntry] = {}
    known = {column.key for column in schema}
    for entry in overlay or ():
        if entry.key not in known:
            debug(f"Ignoring overlay entry for unknown column '{entry.key}'")
            continue
        by_key[entry.key] = entry

    result = []
    for index, column in enumerate(schema):
        entry = by_key.get(column.key)
        if entry is None:
            entry = default_entry(column, index)
        elif column.is_locked and not entry.is_locked:
            entry = entry.model_copy(update={"is_visible": column.is_visible})
        result.append(entry)
    return tuple(result)


def ordered_entries(
    schema: Sequence[Column], overlay: Iterable[OverlayEntry] | None
) -> list[tuple[Column, OverlayEntry]]:
    """Pair each schema column with its overlay entry, in render order.

    Ordering is by ``order``, then schema index, which makes it total.
    ``fixed_position`` does not move a column here; it only keeps the
    column out of the column control.
    """
    entries = normalize_overlay(schema, overlay)
    indexed = list(enumerate(zip(schema, entries)))
    indexed.sort(key=lambda item: (item[1][1].order, item[0]))
    return [pair for _, pair in indexed]


def apply_overlay(
    schema: Sequence[Column], overlay: Iterable[OverlayEntry] | None
) -> list[Column]:
    """Return every column, in render order, carrying its overlay values.

    Hidden columns are included. Inputs are never mutated.
    """
    return [
        column.model_copy(update={"order": entry.order, "is_visible": entry.is_visible})
        for column, entry in ordered_entries(schema, overlay)
    ]


def resolve(schema: Sequence[Column], overlay: Iterable[OverlayEntry] | None) -> list[Column]:
    """Resolve the columns that currently render.

    Hidden columns (``is_visible is False``) are dropped; locked columns
    always render. A new list of new column values is returned on each
    call.

    Parameters
    ----------
    schema : sequence of Column
        The column schema.
    overlay : iterable of OverlayEntry or None
        Visibility/order overlay. Unknown keys are ignored and columns
        without an entry use their own defaults.

    Returns
    -------
    list of Column
        Visible columns in render order.
    """
    return [column for column in apply_overlay(schema, overlay) if column.is_visible is not False]
