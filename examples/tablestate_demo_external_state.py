"""Demo: table state owned by the application.

The engine never stores the selection or the sort state here. It reports
each new value to a small store, and the store decides what to keep (it
caps the selection at three rows) before pushing the value back.
"""

from typing import Any

from tablestate import Column, External, GridEngine, SortState


class Store:
    """Application state the table reads from."""

    max_selected = 3

    def __init__(self) -> None:
        self.selection = External(frozenset(), on_change=self.on_selection)
        self.sort = External(SortState.unsorted(), on_change=self.on_sort)

    def on_selection(self, keys: frozenset) -> None:
        if len(keys) > self.max_selected:
            print(f"  store: refusing {len(keys)} selected rows")
            return
        self.selection.update(keys)

    def on_sort(self, state: SortState) -> None:
        print(f"  store: sort -> {state.column_key} {state.direction}")
        self.sort.update(state)


ROWS: list[dict[str, Any]] = [{"sku": f"SKU-{i:03d}", "stock": (i * 37) % 11} for i in range(8)]


def main() -> None:
    """Drive the engine through the store."""
    store = Store()
    engine = GridEngine(
        ROWS,
        [Column(key="sku", header="SKU"), Column(key="stock", header="Stock", sortable=True)],
        lambda row, index: row["sku"],
        selection=store.selection,
        sort=store.sort,
        paginate=False,
    )

    engine.request_sort("stock")
    print([row["sku"] for row in engine.get_sorted_rows()])

    for key in ("SKU-001", "SKU-002", "SKU-003", "SKU-004"):
        engine.toggle_row_selection(key)
    print(f"selected: {sorted(engine.get_selection())}")

    engine.toggle_select_all()
    print(f"after select-all: {engine.get_aggregate_selection_state().state}")


if __name__ == "__main__":
    main()
