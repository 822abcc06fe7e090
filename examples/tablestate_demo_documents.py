"""Demo: a documents table driven from the terminal.

This example builds an engine over a small list of documents and walks
through a typical session: sort by name, page through the results, select
rows, star a favorite and hide a column through the column control.
Each step prints the current page the way a rendering layer would see it.
"""

from typing import Any

from tablestate import Column, GridEngine, enable_debug
from tablestate.cli import format_page


DOCUMENTS: list[dict[str, Any]] = [
    {"id": "d1", "name": "Quarterly report", "status": "Completed", "size": 240, "owner": "ops"},
    {"id": "d2", "name": "NDA - Acme", "status": "Waiting", "size": 18, "owner": "legal"},
    {"id": "d3", "name": "Offer letter", "status": "Draft", "size": 12, "owner": None},
    {"id": "d4", "name": "Lease renewal", "status": "Waiting", "size": 96, "owner": "facilities"},
    {"id": "d5", "name": "Board minutes", "status": "Completed", "size": 33, "owner": "ops"},
    {"id": "d6", "name": "Vendor agreement", "status": "Voided", "size": 51, "owner": "legal"},
    {"id": "d7", "name": "Expense policy", "status": "Draft", "size": 7, "owner": "finance"},
]

STATUS_RANK = {"Draft": 0, "Waiting": 1, "Completed": 2, "Voided": 3}


def status_order(a: dict[str, Any], b: dict[str, Any]) -> int:
    """Order statuses by workflow stage instead of alphabetically."""
    return STATUS_RANK[a["status"]] - STATUS_RANK[b["status"]]


COLUMNS = [
    Column(key="select", header="", is_visible="locked", fixed_position="start"),
    Column(key="name", header="Name", sortable=True, sort_value=lambda row: row["name"].lower()),
    Column(key="status", header="Status", sortable=True, sort_comparator=status_order),
    Column(
        key="size",
        header="Size",
        sortable=True,
        start_with_descending=True,
        alignment="end",
        render=lambda value, row, index: f"{value} KB",
    ),
    Column(key="owner", header="Owner"),
]


def show(title: str, engine: GridEngine) -> None:
    """Print one step of the session."""
    print(f"\n== {title} ==")
    print(format_page(engine))
    view = engine.get_view()
    if view.action_bar_visible:
        print(f"{view.selected_count} selected ({view.selection.state} on this page)")


def main() -> None:
    """Run the demo session."""
    saved = []
    engine = GridEngine(
        DOCUMENTS,
        COLUMNS,
        lambda row, index: row["id"],
        page_size_options=[3, 5, 10],
        on_column_control_save=saved.append,
    )

    engine.request_page_size(3)
    show("Initial", engine)

    engine.request_sort("name")
    show("Sorted by name", engine)

    engine.request_sort("size")
    show("Largest first", engine)

    engine.request_sort("status")
    engine.next_page()
    show(f"By status, {engine.get_page_info()}", engine)

    engine.toggle_select_all()
    engine.toggle_favorite("d2")
    show("Page selected", engine)

    engine.open_column_control()
    engine.set_column_visibility("owner", False)
    engine.reorder_columns("name", "size")
    engine.save_column_control()
    show("Owner hidden, size moved first", engine)
    print(f"\nSaved changes: {saved[-1].to_dict()['visibilityChanges']}")


if __name__ == "__main__":
    enable_debug()
    main()
