"""Rendering of report rows and status messages on the terminal."""

import csv
import io
import json
from collections.abc import Sequence

from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from coinjar.cli.config import OutputFormat
from coinjar.exceptions import LedgerError

console = Console()
error_console = Console(stderr=True)

MONEY_FIELDS = frozenset({"amount", "total", "delta", "balance"})


def print_rows(
    rows: Sequence[BaseModel],
    output_format: OutputFormat,
    *,
    title: str | None = None,
) -> None:
    """Print report rows as a rich table, a JSON array or CSV.

    The field order of the first row decides the column order. An empty
    report prints ``[]`` as JSON, nothing as CSV and a dim note as a table.
    """
    records = [row.model_dump(mode="json") for row in rows]
    fields = list(records[0]) if records else []

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(records))
    elif output_format == OutputFormat.CSV:
        _print_csv(records, fields)
    else:
        _print_table(records, fields, title)


def _print_csv(records: list[dict[str, object]], fields: list[str]) -> None:
    if not records:
        return
    buffer = io.StringIO()
    out = csv.writer(buffer)
    out.writerow(fields)
    for record in records:
        out.writerow([record[name] for name in fields])
    # soft_wrap keeps long descriptions on one line
    console.print(buffer.getvalue(), end="", markup=False, highlight=False, soft_wrap=True)


def column_heading(field_name: str) -> str:
    """``running_total`` -> ``Running Total``."""
    return field_name.replace("_", " ").title()


def _print_table(records: list[dict[str, object]], fields: list[str], title: str | None) -> None:
    if not records:
        console.print("[dim]Nothing to show[/dim]")
        return

    table = Table(title=title, header_style="bold")
    for name in fields:
        table.add_column(column_heading(name), justify="right" if name in MONEY_FIELDS else "left")
    for record in records:
        table.add_row(*(escape(str(record[name])) for name in fields))
    console.print(table)


def print_error(message: str) -> None:
    error_console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)


def print_ledger_error(path: object, error: LedgerError) -> None:
    """Print ``path:line:column: message`` for an error in a ledger file."""
    location = escape(str(path))
    if error.line is not None:
        location += f":{error.line}"
        if error.column is not None:
            location += f":{error.column}"
    error_console.print(f"[red]Error:[/red] {location}: {escape(error.message)}", highlight=False)


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {escape(message)}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def print_info(message: str) -> None:
    console.print(f"[blue]i[/blue] {escape(message)}")
