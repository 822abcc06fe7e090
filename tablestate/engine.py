"""Grid engine: the composition root of the table state.

The engine owns (or, for externally owned slices, relays) all transient
table state and exposes the derived view a rendering layer draws from.
Every request is applied through the pure functions of the controller
modules; requests that cannot apply are ignored and logged at debug level.

Usage:
    from tablestate import Column, GridEngine

    engine = GridEngine(
        rows,
        [Column(key="name", header="Name", sortable=True), Column(key="email")],
        get_row_key=lambda row, index: row["id"],
    )
    engine.request_sort("name")
    engine.request_page_size(25)
    view = engine.get_view()

Row keys must be unique within one dataset snapshot. Duplicate keys make
selection behave as last-write-wins; ``check_row_keys`` reports them but
the engine never corrects them.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from operator import itemgetter
from typing import Any, Literal

from . import column_control, layout, pagination, selection, sorting
from .config import TableStateSettings, get_settings
from .exceptions import PaginationError, SchemaError
from .log import debug, warn
from .models import (
    AggregateSelection,
    Column,
    ColumnControlSaveData,
    GridView,
    OverlayEntry,
    PageState,
    PaginationView,
    RowKey,
    RowView,
    SortState,
)
from .ownership import StateSlot, as_slot
from .pagination import validate_page_sizes


RowKeyGetter = Callable[[Any, int], RowKey]
SaveCallback = Callable[[ColumnControlSaveData], Any]


def index_row_key(row: Any, index: int) -> RowKey:
    """Row key extractor using the position in the dataset snapshot."""
    return index


class GridEngine:  # pylint: disable=too-many-public-methods,too-many-instance-attributes
    """Table state for one grid instance.

    Parameters
    ----------
    rows : iterable
        The dataset snapshot, in original order.
    columns : sequence of Column
        The column schema. Treated as immutable.
    get_row_key : callable
        ``(row, index) -> key``; ``index`` is the row's position in the
        dataset snapshot, so it is stable across sorting.
    selection : StateSlot or iterable of keys, optional
        Selected keys. A slot chooses the ownership strategy; a plain value
        seeds an engine-owned selection.
    sort : StateSlot or SortState, optional
        Initial sort state or its slot.
    pagination : StateSlot or PageState, optional
        Initial page and page size or their slot.
    favorites : StateSlot or iterable of keys, optional
        Favorited keys, handled like ``selection``.
    page_size_options : sequence of int, optional
        Allowed page sizes. Defaults to the configured options.
    paginate : bool
        When False the page is always every row.
    initial_overlay : sequence of OverlayEntry, optional
        Column overlay in effect at start; defaults to the schema defaults.
    baseline_overlay : sequence of OverlayEntry, optional
        Overlay that "reset" returns to; defaults to the initial overlay.
    save_as_baseline : bool
        Whether saving the column control also moves the baseline.
    on_column_control_save : callable, optional
        Receives a ``ColumnControlSaveData`` after each save.
    select_all_scope : {"page", "all"}, optional
        Rows covered by select-all and the header checkbox state.
    nulls : {"first", "last"}, optional
        Placement of null sort values.
    settings : TableStateSettings, optional
        Settings to draw defaults from instead of the global settings.

    Raises
    ------
    SchemaError
        For duplicate column keys or an initial sort on a column that
        cannot be sorted.
    PaginationError
        For invalid page size options or an initial page size outside them.
    """

    def __init__(  # pylint: disable=too-many-arguments,too-many-locals
        self,
        rows: Iterable[Any],
        columns: Sequence[Column],
        get_row_key: RowKeyGetter = index_row_key,
        *,
        selection: StateSlot[frozenset[RowKey]] | Iterable[RowKey] | None = None,
        sort: StateSlot[SortState] | SortState | None = None,
        pagination: StateSlot[PageState] | PageState | None = None,
        favorites: StateSlot[frozenset[RowKey]] | Iterable[RowKey] | None = None,
        page_size_options: Sequence[int] | None = None,
        paginate: bool = True,
        initial_overlay: Sequence[OverlayEntry] | None = None,
        baseline_overlay: Sequence[OverlayEntry] | None = None,
        save_as_baseline: bool = False,
        on_column_control_save: SaveCallback | None = None,
        select_all_scope: Literal["page", "all"] | None = None,
        nulls: Literal["first", "last"] | None = None,
        settings: TableStateSettings | None = None,
    ) -> None:
        settings = settings or get_settings()

        self._columns: tuple[Column, ...] = tuple(columns)
        layout.validate_schema(self._columns)
        self._get_row_key = get_row_key
        self._rows: list[Any] = list(rows)

        self._page_size_options = validate_page_sizes(
            page_size_options
            if page_size_options is not None
            else settings.pagination.page_size_options
        )
        self._max_page_buttons = settings.pagination.max_page_buttons
        self._paginate = paginate
        self._select_all_scope = select_all_scope or settings.selection.select_all_scope
        self._nulls = nulls or settings.sort.nulls

        self._selection = as_slot(_coerce_keys(selection), frozenset())
        self._favorites = as_slot(_coerce_keys(favorites), frozenset())
        self._sort = as_slot(sort, SortState.unsorted())
        self._pagination = as_slot(
            pagination, PageState(page=1, page_size=self._default_page_size(settings))
        )
        self._check_initial_sort()
        self._check_initial_page_size()

        self._overlay = layout.normalize_overlay(self._columns, initial_overlay)
        self._baseline = (
            layout.normalize_overlay(self._columns, baseline_overlay)
            if baseline_overlay is not None
            else self._overlay
        )
        self._save_as_baseline = save_as_baseline
        self._on_column_control_save = on_column_control_save
        self._session: column_control.ColumnControlSession | None = None

        debug(
            f"GridEngine created with {len(self._rows)} rows and {len(self._columns)} columns"
        )

    # -------------------------------------------------------------------------
    # Construction checks
    # -------------------------------------------------------------------------

    def _default_page_size(self, settings: TableStateSettings) -> int:
        configured = settings.pagination.default_page_size
        if configured in self._page_size_options:
            return configured
        return self._page_size_options[0]

    def _check_initial_sort(self) -> None:
        state = self._sort.get()
        if state.column_key is None:
            return
        column = sorting.find_column(self._columns, state.column_key)
        if column is None or not column.sortable:
            raise SchemaError("Initial sort column is not sortable", key=state.column_key)

    def _check_initial_page_size(self) -> None:
        size = self._pagination.get().page_size
        if not pagination.is_allowed_page_size(size, self._page_size_options):
            raise PaginationError(
                "Initial page size is not allowed",
                page_size=size,
                allowed=self._page_size_options,
            )

    # -------------------------------------------------------------------------
    # Rows and keys
    # -------------------------------------------------------------------------

    @property
    def columns(self) -> tuple[Column, ...]:
        """The column schema."""
        return self._columns

    @property
    def rows(self) -> list[Any]:
        """The current dataset snapshot, in original order."""
        return list(self._rows)

    @property
    def page_size_options(self) -> tuple[int, ...]:
        """Allowed page sizes."""
        return self._page_size_options

    def get_row_key(self, row: Any, index: int) -> RowKey:
        """Key of ``row`` at ``index`` in the dataset snapshot."""
        return self._get_row_key(row, index)

    def get_row_keys(self) -> list[RowKey]:
        """Keys of all rows, in original order."""
        return [self._get_row_key(row, index) for index, row in enumerate(self._rows)]

    def set_rows(self, rows: Iterable[Any]) -> None:
        """Replace the dataset snapshot.

        Sort state and selection are kept. Selected keys missing from the new
        snapshot are ignored until they reappear; the page is re-clamped.
        """
        self._rows = list(rows)
        debug(f"Dataset replaced: {len(self._rows)} rows")
        if not self._paginate:
            return
        state = self._pagination.get()
        view = pagination.paginate(len(self._rows), state.page, state.page_size)
        if view.page != state.page:
            self._pagination.set(PageState(page=view.page, page_size=state.page_size))

    def check_row_keys(self) -> list[RowKey]:
        """Report keys that occur more than once in the snapshot.

        Duplicates are a caller error; they are logged as a warning and
        returned, never corrected.
        """
        counts = Counter(self.get_row_keys())
        duplicates = [key for key, count in counts.items() if count > 1]
        if duplicates:
            warn(f"Duplicate row keys in dataset: {duplicates!r}")
        return duplicates

    # -------------------------------------------------------------------------
    # Columns
    # -------------------------------------------------------------------------

    def get_visible_columns(self) -> list[Column]:
        """Columns that render, in order."""
        return layout.resolve(self._columns, self._overlay)

    def get_overlay(self) -> tuple[OverlayEntry, ...]:
        """The column overlay in effect."""
        return self._overlay

    def get_baseline_overlay(self) -> tuple[OverlayEntry, ...]:
        """The overlay that reset returns to."""
        return self._baseline

    def render_cell(self, column: Column, row: Any, index: int) -> Any:
        """Cell content for ``row`` in ``column``."""
        return column.render_cell(row, index)

    # -------------------------------------------------------------------------
    # Sorting
    # -------------------------------------------------------------------------

    def request_sort(self, column_key: str) -> None:
        """Advance the sort cycle of ``column_key``."""
        current = self._sort.get()
        new_state = sorting.request_sort(current, self._columns, column_key)
        if new_state != current:
            self._sort.set(new_state)

    def clear_sort(self) -> None:
        """Return to the original row order."""
        if self._sort.get().is_active:
            self._sort.set(SortState.unsorted())

    def get_sort_state(self) -> SortState:
        """The current sort state."""
        return self._sort.get()

    def get_sort_indicator(self, column_key: str) -> str:
        """Header sort indicator for ``column_key``."""
        return sorting.sort_indicator(self._sort.get(), column_key)

    def _sorted_entries(self) -> list[tuple[int, Any]]:
        return sorting.apply_sort(
            list(enumerate(self._rows)),
            self._sort.get(),
            self._columns,
            nulls=self._nulls,
            row_of=itemgetter(1),
        )

    def get_sorted_rows(self) -> list[Any]:
        """All rows in sorted order."""
        return [row for _, row in self._sorted_entries()]

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def get_pagination_view(self) -> PaginationView:
        """The clamped current page and its index range.

        Without pagination the single page covers every row.
        """
        total = len(self._rows)
        if not self._paginate:
            return PaginationView(
                page=1,
                page_size=max(total, 1),
                total_items=total,
                total_pages=1,
                start_index=0,
                end_index=total,
            )
        state = self._pagination.get()
        return pagination.paginate(total, state.page, state.page_size)

    def request_page(self, page: int) -> None:
        """Go to ``page``, clamped into the valid range."""
        if not self._paginate:
            debug("Pagination disabled; page request ignored")
            return
        state = self._pagination.get()
        view = pagination.paginate(len(self._rows), page, state.page_size)
        if view.page != state.page:
            self._pagination.set(PageState(page=view.page, page_size=state.page_size))

    def next_page(self) -> None:
        """Go to the next page if there is one."""
        self.request_page(self.get_pagination_view().page + 1)

    def previous_page(self) -> None:
        """Go to the previous page if there is one."""
        self.request_page(self.get_pagination_view().page - 1)

    def request_page_size(self, size: int) -> None:
        """Change the page size and return to page 1.

        Sizes outside the allowed options are ignored.
        """
        if not self._paginate:
            debug("Pagination disabled; page size request ignored")
            return
        if not pagination.is_allowed_page_size(size, self._page_size_options):
            debug(f"Ignoring page size {size}; allowed: {self._page_size_options}")
            return
        self._pagination.set(PageState(page=1, page_size=size))

    def get_page_info(self) -> str:
        """Range text for the current page, e.g. ``"11 - 20 of 247"``."""
        return pagination.page_info(self.get_pagination_view())

    def get_page_buttons(self, max_buttons: int | None = None) -> list[int | str]:
        """Page buttons for the current page, with ellipsis markers."""
        view = self.get_pagination_view()
        limit = max_buttons or self._max_page_buttons
        return pagination.page_buttons(view.page, view.total_pages, limit)

    def _page_entries(self) -> list[tuple[int, Any]]:
        entries = self._sorted_entries()
        view = self.get_pagination_view()
        return entries[view.start_index : view.end_index]

    def get_page_rows(self) -> list[Any]:
        """Rows of the current page, in sorted order."""
        return [row for _, row in self._page_entries()]

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def _view_keys(self) -> list[RowKey]:
        if self._select_all_scope == "all":
            return self.get_row_keys()
        return [self._get_row_key(row, index) for index, row in self._page_entries()]

    def get_selection(self) -> frozenset[RowKey]:
        """Selected keys, including any stale keys the owner kept."""
        return selection.as_selection(self._selection.get())

    def toggle_row_selection(self, key: RowKey) -> None:
        """Select or deselect one row; keys not in the dataset are ignored."""
        if key not in set(self.get_row_keys()):
            debug(f"Ignoring selection toggle for unknown row key {key!r}")
            return
        self._selection.set(selection.toggle_row(self.get_selection(), key))

    def toggle_select_all(self) -> None:
        """Select every row in view, or deselect them if all are selected."""
        current = self.get_selection()
        new_selection = selection.toggle_select_all(current, self._view_keys())
        if new_selection != current:
            self._selection.set(new_selection)

    def clear_selection(self) -> None:
        """Deselect everything."""
        if self.get_selection():
            self._selection.set(frozenset())

    def get_aggregate_selection_state(self) -> AggregateSelection:
        """Header checkbox state over the rows in view."""
        return selection.compute_aggregate_state(self.get_selection(), self._view_keys())

    def get_selected_count(self) -> int:
        """Number of selected rows present in the dataset."""
        return selection.count_selected(self.get_selection(), self.get_row_keys())

    def get_selected_rows(self) -> list[Any]:
        """Selected rows in original order."""
        chosen = self.get_selection()
        return [
            row
            for index, row in enumerate(self._rows)
            if self._get_row_key(row, index) in chosen
        ]

    # -------------------------------------------------------------------------
    # Favorites
    # -------------------------------------------------------------------------

    def get_favorites(self) -> frozenset[RowKey]:
        """Favorited keys."""
        return selection.as_selection(self._favorites.get())

    def toggle_favorite(self, key: RowKey) -> None:
        """Star or unstar one row; keys not in the dataset are ignored."""
        if key not in set(self.get_row_keys()):
            debug(f"Ignoring favorite toggle for unknown row key {key!r}")
            return
        self._favorites.set(selection.toggle_row(self.get_favorites(), key))

    # -------------------------------------------------------------------------
    # Column control
    # -------------------------------------------------------------------------

    def is_column_control_open(self) -> bool:
        """Whether a column control session is in progress."""
        return self._session is not None

    def open_column_control(self) -> None:
        """Start editing a working copy of the column overlay."""
        self._session = column_control.ColumnControlSession(
            self._columns, self._overlay, self._baseline
        )

    def _require_session(self, action: str) -> column_control.ColumnControlSession | None:
        if self._session is None:
            debug(f"Column control is not open; {action} ignored")
        return self._session

    def get_column_control_entries(self) -> list[Column]:
        """Columns listed in the open column control (empty when closed)."""
        if self._session is None:
            return []
        return self._session.entries()

    def set_column_search(self, query: str) -> None:
        """Filter the listed columns by header text."""
        session = self._require_session("search")
        if session is not None:
            session.set_search(query)

    def set_column_visibility(self, key: str, visible: bool) -> None:
        """Show or hide a column in the working copy."""
        session = self._require_session("visibility change")
        if session is not None:
            session.set_visibility(key, visible)

    def reorder_columns(self, source_key: str, target_key: str) -> None:
        """Swap two columns in the working copy."""
        session = self._require_session("reorder")
        if session is not None:
            session.reorder(source_key, target_key)

    def column_control_drag(self) -> column_control.DragReorder | None:
        """Drag-and-drop adapter bound to the open column control."""
        session = self._require_session("drag")
        if session is None:
            return None
        return column_control.DragReorder(
            session.entries, session.can_reorder, self.reorder_columns
        )

    def column_control_has_changes(self) -> bool:
        """Whether the working copy differs from the baseline."""
        if self._session is None:
            return False
        return self._session.has_changes()

    def get_column_control_overlay(self) -> tuple[OverlayEntry, ...] | None:
        """The working copy, or None when the control is closed."""
        if self._session is None:
            return None
        return self._session.working

    def save_column_control(self) -> ColumnControlSaveData | None:
        """Commit the working copy and close the column control."""
        session = self._require_session("save")
        if session is None:
            return None
        data = session.save_data()
        self._overlay = data.overlay
        if self._save_as_baseline:
            self._baseline = data.overlay
        self._session = None
        debug(
            f"Column control saved: {len(data.visibility_changes)} visibility and "
            f"{len(data.order_changes)} order changes"
        )
        if self._on_column_control_save is not None:
            self._on_column_control_save(data)
        return data

    def cancel_column_control(self) -> None:
        """Discard the working copy and close the column control."""
        if self._require_session("cancel") is not None:
            self._session = None

    def reset_column_control(self) -> None:
        """Replace the working copy with the baseline overlay."""
        session = self._require_session("reset")
        if session is not None:
            session.reset()

    # -------------------------------------------------------------------------
    # Derived view
    # -------------------------------------------------------------------------

    def get_view(self) -> GridView:
        """Snapshot of everything a rendering layer draws."""
        chosen = self.get_selection()
        starred = self.get_favorites()
        row_views = []
        for index, row in self._page_entries():
            key = self._get_row_key(row, index)
            row_views.append(
                RowView(
                    key=key,
                    index=index,
                    row=row,
                    selected=key in chosen,
                    favorite=key in starred,
                )
            )
        selected_count = self.get_selected_count()
        return GridView(
            columns=tuple(self.get_visible_columns()),
            rows=tuple(row_views),
            sort=self.get_sort_state(),
            pagination=self.get_pagination_view() if self._paginate else None,
            selection=self.get_aggregate_selection_state(),
            selected_count=selected_count,
            action_bar_visible=selected_count > 0,
        )


def _coerce_keys(value: Any) -> Any:
    """Freeze plain key collections; slots and None pass through."""
    if value is None or isinstance(value, StateSlot):
        return value
    return frozenset(value)
