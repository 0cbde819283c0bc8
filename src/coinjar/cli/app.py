"""Main Typer application."""

import logging
from datetime import date, datetime
from pathlib import Path

import typer
from rich.logging import RichHandler

from coinjar.cli.config import CLIConfig, OutputFormat
from coinjar.cli.formatters import error_console
from coinjar.config import CoinjarConfig

app = typer.Typer(
    name="coinjar",
    help="Plain-text double-entry bookkeeping.",
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=error_console, show_path=False, rich_tracebacks=verbose)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


@app.callback()
def main(
    ctx: typer.Context,
    ledger: Path | None = typer.Option(
        None,
        "--ledger",
        "-f",
        help="Ledger file (default: COINJAR_LEDGER or ledger_path in the config file).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--format",
        "-o",
        help="Output format for tables.",
        case_sensitive=False,
    ),
    today: datetime | None = typer.Option(
        None,
        "--today",
        help="Reference date for relative dates (YYYY-MM-DD).",
        formats=["%Y-%m-%d"],
    ),
) -> None:
    """Plain-text double-entry bookkeeping.

    Reads a ledger of dated bookings, resolves splits and omitted amounts
    and reports balances per account and per contact.
    """
    _configure_logging(verbose)
    reference: date | None = today.date() if today else None
    ctx.obj = CLIConfig(
        ledger=ledger,
        verbose=verbose,
        output_format=output_format,
        today=reference,
        settings=CoinjarConfig.load(),
    )
