"""Interactive command loop."""

import typer

from coinjar.cli.commands.ledger import load_store, ledger_errors
from coinjar.cli.config import CLIConfig
from coinjar.cli.formatters import (
    console,
    print_rows,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from coinjar.exceptions import CoinjarError
from coinjar.interpreter import CommandResult, Interpreter

QUIT_COMMANDS = {"quit", "q", "exit"}
PROMPT = "coinjar> "


def _show(result: CommandResult, config: CLIConfig) -> None:
    for warning in result.warnings:
        print_warning(warning)
    if result.command in {"save", "open", "del", "undo"} and result.message:
        print_success(result.message)
    elif result.message:
        console.print(result.message, markup=False, highlight=False)
    if result.rows:
        print_rows(result.rows, config.output_format)


def repl(ctx: typer.Context) -> None:
    """Run interpreter commands read line by line.

    Commands: split, reg, date, accns, open, save, del, undo, inspect.
    Leave with quit or end of input.
    """
    config: CLIConfig = ctx.obj
    store = load_store(config)
    with ledger_errors(config):
        writer = config.writer()

    interpreter = Interpreter(
        store,
        today=config.reference_date,
        writer=writer,
        history_limit=config.settings.history_limit,
        amount_column=config.settings.amount_column,
    )

    while True:
        try:
            line = console.input(PROMPT)
        except (EOFError, KeyboardInterrupt):
            break
        line = line.strip()
        if not line:
            continue
        if line in QUIT_COMMANDS:
            break
        try:
            _show(interpreter.execute(line), config)
        except CoinjarError as e:
            print_error(e.message)

    if interpreter.dirty:
        print_info("Unsaved changes discarded.")
