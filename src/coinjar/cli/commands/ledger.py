"""Ledger reporting commands."""

from collections.abc import Iterator
from contextlib import contextmanager

import typer

from coinjar.cli.config import CLIConfig
from coinjar.cli.formatters import (
    print_rows,
    print_error,
    print_ledger_error,
    print_info,
    print_success,
)
from coinjar.exceptions import CoinjarError, LedgerError
from coinjar.formatter import format_ledger
from coinjar.ledger import LedgerStore
from coinjar.views import account_views, contact_views, register_views


@contextmanager
def ledger_errors(config: CLIConfig) -> Iterator[None]:
    """Turn engine and file errors into an error message and exit code 1."""
    try:
        yield
    except LedgerError as e:
        print_ledger_error(config.ledger or config.settings.ledger_path, e)
        raise typer.Exit(1) from None
    except (CoinjarError, ValueError, OSError) as e:
        print_error(str(e))
        raise typer.Exit(1) from None


def load_store(config: CLIConfig) -> LedgerStore:
    """Load the configured ledger, exiting with an error message on failure."""
    with ledger_errors(config):
        return config.load_store()


def fmt(
    ctx: typer.Context,
    write: bool = typer.Option(
        False,
        "--write",
        "-w",
        help="Rewrite the ledger file in place instead of printing.",
    ),
) -> None:
    """Print the ledger in canonical form."""
    config: CLIConfig = ctx.obj
    store = load_store(config)
    text = format_ledger(store.snapshot, amount_column=config.settings.amount_column)

    if not write:
        typer.echo(text, nl=False)
        return

    with ledger_errors(config):
        config.writer().write(text)
    print_success(f"Formatted {config.ledger_path}")


def contact(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Contact name, with or without '@'."),
    include_all: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Include movements outside asset and liability accounts.",
    ),
) -> None:
    """Show a contact's ledger with running balances."""
    config: CLIConfig = ctx.obj
    store = load_store(config)
    name = name.removeprefix("@")

    if name not in store.contacts():
        print_error(f"Unknown contact: {name}")
        raise typer.Exit(1)

    rows = store.contact_ledger(name, include_all=include_all)
    if not rows:
        print_info(f"No debt movements for {name}; use --all to see everything.")
        return
    print_rows(contact_views(rows, store.registry), config.output_format, title=f"@{name}")


def accns(ctx: typer.Context) -> None:
    """List accounts with their balances."""
    config: CLIConfig = ctx.obj
    store = load_store(config)
    print_rows(account_views(store), config.output_format, title="Accounts")


def reg(
    ctx: typer.Context,
    matcher: str | None = typer.Argument(None, help="Text to match in accounts or descriptions."),
) -> None:
    """List postings with a running total."""
    config: CLIConfig = ctx.obj
    store = load_store(config)
    rows = store.register(matcher)
    print_rows(register_views(rows, store.registry), config.output_format, title="Register")
