"""Output formatting for uploadctl.

Provides consistent output in JSON, table, and quiet modes using Rich.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from enum import Enum
from typing import Any

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

# =============================================================================
# Console Instances
# =============================================================================

console = Console()
err_console = Console(stderr=True)


# =============================================================================
# Output Format
# =============================================================================


class OutputFormat(Enum):
    """Output format options."""

    JSON = "json"
    TABLE = "table"

    @classmethod
    def from_string(cls, value: str) -> OutputFormat:
        """Create from string value."""
        return cls(value.lower())


# =============================================================================
# Human Readable Units
# =============================================================================

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
SPEED_UNITS = ("B/s", "KB/s", "MB/s", "GB/s")


def _scale(value: float, units: Sequence[str], decimals: int) -> str:
    if value <= 0:
        return f"0 {units[0]}"
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    text = f"{value:.{decimals}f}".rstrip("0").rstrip(".")
    return f"{text} {units[i]}"


def format_file_size(size: float) -> str:
    """Format a byte count, e.g. ``1.5 MB``."""
    return _scale(size, SIZE_UNITS, 2)


def format_speed(bytes_per_second: float | None) -> str:
    """Format a transfer rate, e.g. ``2.3 MB/s``."""
    return _scale(bytes_per_second or 0, SPEED_UNITS, 1)


# =============================================================================
# Table Output
# =============================================================================


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


def print_table(
    rows: Sequence[dict[str, Any]],
    columns: Sequence[str],
    *,
    title: str | None = None,
    column_labels: dict[str, str] | None = None,
) -> None:
    """Print rows as a Rich table.

    Column headers default to the title-cased key unless ``column_labels``
    names them.
    """
    if not rows:
        console.print("[dim]No files[/dim]")
        return

    labels = column_labels or {}
    table = Table(title=title, header_style="bold")
    for col in columns:
        table.add_column(labels.get(col, col.replace("_", " ").title()))
    for row in rows:
        table.add_row(*(_cell(row.get(col)) for col in columns))

    console.print(table)


def print_key_value(data: dict[str, Any], *, title: str | None = None) -> None:
    """Print an aligned ``Label  value`` listing."""
    if title:
        console.print(f"[bold]{title}[/bold]")

    labels = {key: key.replace("_", " ").title() for key in data}
    width = max((len(label) for label in labels.values()), default=0)
    for key, value in data.items():
        if value is None:
            text = "[dim]-[/dim]"
        elif isinstance(value, bool):
            text = "[green]Yes[/green]" if value else "[red]No[/red]"
        else:
            text = _cell(value)
        console.print(f"  {labels[key]:<{width}}  {text}")


# =============================================================================
# JSON Output
# =============================================================================


def print_json(data: Any, *, indent: int = 2) -> None:
    """Print data as JSON on plain stdout so it can be piped."""
    print(json.dumps(data, indent=indent, default=str))


# =============================================================================
# Unified Output
# =============================================================================


def print_output(
    data: Any,
    *,
    format: OutputFormat = OutputFormat.TABLE,
    columns: Sequence[str] | None = None,
    column_labels: dict[str, str] | None = None,
    title: str | None = None,
    quiet: bool = False,
    id_field: str = "name",
) -> None:
    """Print command results.

    Args:
        data: A list of row dicts, or any JSON-serializable value.
        format: Output format.
        columns: Row keys shown as table columns.
        column_labels: Header overrides for table columns.
        title: Table title.
        quiet: Print only ``id_field`` of each row, one per line.
        id_field: Row key used in quiet mode.
    """
    if quiet:
        for item in data if isinstance(data, list) else [data]:
            print(item.get(id_field, "") if isinstance(item, dict) else item)
        return

    if format == OutputFormat.JSON or not (isinstance(data, list) and columns):
        print_json(data)
        return

    print_table(data, columns, title=title, column_labels=column_labels)


# =============================================================================
# Status Messages
# =============================================================================


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    """Print warning message to stderr."""
    err_console.print(f"[yellow]Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    """Print success message."""
    console.print(f"[green]✓[/green] {message}")


def print_info(message: str) -> None:
    """Print info message."""
    console.print(f"[blue]Info:[/blue] {message}")


# =============================================================================
# Progress
# =============================================================================


def create_progress(*, transient: bool = False) -> Progress:
    """Create a Rich progress display for file transfers.

    Tasks carry a ``detail`` field shown after the percentage.

    Returns:
        Progress instance.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("{task.fields[detail]}"),
        console=console,
        transient=transient,
    )
