"""CLI configuration passed through the Typer context."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from pathlib import Path

from coinjar.config import CoinjarConfig
from coinjar.ledger import LedgerStore
from coinjar.loader import load_ledger
from coinjar.storage import FileLedgerWriter, read_ledger


class OutputFormat(StrEnum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


@dataclass
class CLIConfig:
    """Configuration passed through Typer context.

    Attributes:
        ledger: Ledger file given on the command line, if any
        verbose: Enable verbose output
        output_format: Format for tabular output
        today: Reference date override (defaults to the current date)
        settings: Engine configuration from the environment or config file
    """

    ledger: Path | None = None
    verbose: bool = False
    output_format: OutputFormat = OutputFormat.TABLE
    today: date | None = None
    settings: CoinjarConfig = field(default_factory=CoinjarConfig)

    @property
    def ledger_path(self) -> Path:
        """Resolve the ledger file from the option or the settings.

        Raises:
            ValueError: If neither names a ledger file
        """
        path = self.ledger or self.settings.ledger_path
        if path is None:
            msg = (
                "No ledger file. Pass --ledger, set COINJAR_LEDGER "
                "or add ledger_path to the config file"
            )
            raise ValueError(msg)
        return path

    @property
    def reference_date(self) -> date:
        """Date used for "today" and relative dates."""
        return self.today or date.today()

    def load_store(self) -> LedgerStore:
        """Read and resolve the configured ledger file."""
        return load_ledger(
            read_ledger(self.ledger_path),
            today=self.reference_date,
            strict_currencies=self.settings.strict_currencies,
        )

    def writer(self) -> FileLedgerWriter:
        return FileLedgerWriter(self.ledger_path)
