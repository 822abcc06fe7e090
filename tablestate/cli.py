"""Command-line interface for tablestate configuration and previews."""

from __future__ import annotations

import argparse
import json
import os
import sys

from pathlib import Path
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from .config import TableStateSettings
    from .engine import GridEngine


def main(argv: list[str] | None = None) -> int:
    """Run the main CLI entry point.

    Returns
    -------
    int
        Exit code.
    """
    parser = argparse.ArgumentParser(
        prog="tablestate",
        description="tablestate configuration and preview tools",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Show or export configuration",
    )
    config_group = config_parser.add_mutually_exclusive_group()
    config_group.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )
    config_group.add_argument(
        "--toml",
        action="store_true",
        help="Export configuration as TOML",
    )
    config_group.add_argument(
        "--env",
        action="store_true",
        help="Export configuration as environment variables",
    )
    config_group.add_argument(
        "--sources",
        action="store_true",
        help="Show configuration file sources",
    )
    config_parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Output file path (default: stdout)",
    )

    # init command
    init_parser = subparsers.add_parser(
        "init",
        help="Initialize a tablestate.toml configuration file",
    )
    init_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Overwrite existing configuration file",
    )
    init_parser.add_argument(
        "--path",
        "-p",
        type=str,
        default="tablestate.toml",
        help="Path for configuration file (default: tablestate.toml)",
    )

    # preview command
    preview_parser = subparsers.add_parser(
        "preview",
        help="Print one page of a JSON dataset",
    )
    preview_parser.add_argument("file", type=str, help="JSON file holding an array of objects")
    preview_parser.add_argument(
        "--key",
        "-k",
        type=str,
        default=None,
        help="Field holding the row key (default: row position)",
    )
    preview_parser.add_argument(
        "--sort",
        "-s",
        action="append",
        default=[],
        metavar="COLUMN",
        help="Request a sort on COLUMN; repeat to advance the sort cycle",
    )
    preview_parser.add_argument("--page", type=int, default=1, help="Page to show")
    preview_parser.add_argument(
        "--page-size",
        type=int,
        default=None,
        help="Items per page (must be one of the configured options)",
    )

    args = parser.parse_args(argv)

    if args.command == "config":
        return handle_config(args)
    if args.command == "init":
        return handle_init(args)
    if args.command == "preview":
        return handle_preview(args)
    parser.print_help()
    return 0


def handle_config(args: argparse.Namespace) -> int:
    """Handle the config command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .config import TableStateSettings

    if args.sources:
        return show_config_sources()

    settings = TableStateSettings()

    if args.toml:
        output = settings.to_toml()
    elif args.env:
        output = settings.to_env()
    else:
        output = format_config_show(settings)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Configuration written to {args.output}")
    else:
        print(output)

    return 0


def handle_init(args: argparse.Namespace) -> int:
    """Handle the init command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .config import TableStateSettings

    path = Path(args.path)

    if path.exists() and not args.force:
        print(f"Error: {path} already exists. Use --force to overwrite.", file=sys.stderr)
        return 1

    header = """# tablestate configuration file
#
# Environment variables can override any setting:
#   TABLESTATE_PAGINATION__DEFAULT_PAGE_SIZE=25
#   TABLESTATE_PAGINATION__PAGE_SIZE_OPTIONS="10,25,50"
#   TABLESTATE_SORT__NULLS=first
#   TABLESTATE_SELECTION__SELECT_ALL_SCOPE=all
#   TABLESTATE_LOG__LEVEL=DEBUG
#
# Use nested keys with __ (double underscore) delimiter.

"""
    path.write_text(header + TableStateSettings().to_toml(), encoding="utf-8")
    print(f"Created {path}")

    return 0


def handle_preview(args: argparse.Namespace) -> int:
    """Handle the preview command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .config import get_settings
    from .log import configure_from_settings

    settings = get_settings()
    configure_from_settings(settings.log)

    try:
        records = json.loads(Path(args.file).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
        return 1
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        print(f"Error: {args.file} must hold a JSON array of objects", file=sys.stderr)
        return 1

    options = settings.pagination.page_size_options
    if args.page_size is not None and args.page_size not in options:
        print(
            f"Error: page size {args.page_size} is not one of {options}",
            file=sys.stderr,
        )
        return 1

    engine = build_preview_engine(records, key_field=args.key)
    for column_key in args.sort:
        engine.request_sort(column_key)
    if args.page_size is not None:
        engine.request_page_size(args.page_size)
    engine.request_page(args.page)

    print(format_page(engine))
    return 0


def build_preview_engine(records: list[dict[str, Any]], key_field: str | None = None) -> GridEngine:
    """Build an engine over JSON records with every field as a sortable column."""
    from .engine import GridEngine, index_row_key
    from .models import Column

    fields: list[str] = []
    for record in records:
        for name in record:
            if name not in fields:
                fields.append(name)
    columns = [Column(key=name, header=name, sortable=True) for name in fields]

    if key_field is None:
        return GridEngine(records, columns, index_row_key)
    return GridEngine(records, columns, lambda row, index: row.get(key_field, index))


def format_page(engine: GridEngine) -> str:
    """Render the current page of an engine as a plain text table."""
    from .pagination import page_info

    columns = engine.get_visible_columns()
    sort = engine.get_sort_state()
    headers = []
    for column in columns:
        marker = ""
        if sort.column_key == column.key and sort.direction is not None:
            marker = " ^" if sort.direction.value == "ascending" else " v"
        headers.append(column.header_text + marker)

    start = engine.get_pagination_view().start_index
    body = [
        [_cell_text(column.render_cell(row, start + i)) for column in columns]
        for i, row in enumerate(engine.get_page_rows())
    ]

    widths = [len(h) for h in headers]
    for cells in body:
        widths = [max(w, len(c)) for w, c in zip(widths, cells)]

    lines = [
        "  ".join(h.ljust(w) for h, w in zip(headers, widths)).rstrip(),
        "  ".join("-" * w for w in widths),
    ]
    lines.extend("  ".join(c.ljust(w) for c, w in zip(cells, widths)).rstrip() for cells in body)
    lines.append("")
    lines.append(page_info(engine.get_pagination_view()))
    return "\n".join(lines)


def _cell_text(value: Any) -> str:
    return "" if value is None else str(value)


def show_config_sources() -> int:
    """Show configuration file sources and their status.

    Returns
    -------
    int
        Exit code.
    """
    from .config import config_file_candidates

    rows = [("Built-in defaults", "Active", "")]
    for name, path in config_file_candidates():
        if path is None:
            rows.append((name, "Not set", ""))
        else:
            rows.append((name, "Found" if path.exists() else "Not found", str(path)))

    env_vars = sorted(
        k for k in os.environ if k.startswith("TABLESTATE_") and k != "TABLESTATE_CONFIG_FILE"
    )
    shown = ", ".join(env_vars[:3]) + ("..." if len(env_vars) > 3 else "")
    rows.append(("Environment variables", f"{len(env_vars)} vars" if env_vars else "No vars", shown))

    print("Configuration Sources (in order of precedence):\n")
    print(f"{'Source':<40} {'Status':<15} {'Path'}")
    print("-" * 80)
    for name, status, path_display in rows:
        print(f"{name:<40} {status:<15} {path_display}".rstrip())

    print("\nNote: Later sources override earlier ones.")
    return 0


def format_config_show(settings: TableStateSettings) -> str:
    """Format configuration for display.

    Parameters
    ----------
    settings : TableStateSettings
        The settings object to format.

    Returns
    -------
    str
        Formatted configuration string.
    """
    lines = ["tablestate configuration\n" + "=" * 40 + "\n"]

    sections = [
        ("pagination", settings.pagination),
        ("sort", settings.sort),
        ("selection", settings.selection),
        ("log", settings.log),
    ]

    for section_name, section in sections:
        if lines[-1] != "":
            lines.append("")
        lines.append(f"[{section_name}]")
        for field, value in section.model_dump().items():
            lines.append(f"  {field} = {value!r}")

    return "\n".join(lines)


if __name__ == "__main__":
    sys.exit(main())
