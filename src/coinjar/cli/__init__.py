"""coinjar CLI - command-line interface for plain-text ledgers."""

from coinjar.cli.app import app

# Import command modules to register them with the app
from coinjar.cli.commands import ledger, repl

app.command("fmt")(ledger.fmt)
app.command("contact")(ledger.contact)
app.command("accns")(ledger.accns)
app.command("reg")(ledger.reg)
app.command("repl")(repl.repl)


def main() -> None:
    """Entry point for the CLI."""
    app()


__all__ = ["app", "main"]
