"""Configuration management for coinjar."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_config_dir() -> Path:
    """Get XDG-compliant config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "coinjar"
    return Path.home() / ".config" / "coinjar"


@dataclass(frozen=True, slots=True)
class CoinjarConfig:
    """Engine configuration.

    Attributes:
        ledger_path: Default ledger file used by the CLI
        strict_currencies: Reject money in currencies missing from the currency block
        history_limit: Maximum number of undo entries kept by the interpreter
        amount_column: Column at which posting amounts end in canonical output
    """

    ledger_path: Path | None = None
    strict_currencies: bool = False
    history_limit: int = 100
    amount_column: int = 72

    @classmethod
    def from_env(cls) -> CoinjarConfig:
        """Create config from environment variables.

        Expected env vars (all optional, at least one required):
        - COINJAR_LEDGER
        - COINJAR_STRICT_CURRENCIES
        - COINJAR_HISTORY_LIMIT
        - COINJAR_AMOUNT_COLUMN
        """
        ledger = os.environ.get("COINJAR_LEDGER")
        strict = os.environ.get("COINJAR_STRICT_CURRENCIES")
        history = os.environ.get("COINJAR_HISTORY_LIMIT")
        column = os.environ.get("COINJAR_AMOUNT_COLUMN")

        if not any((ledger, strict, history, column)):
            msg = "No COINJAR_* environment variables set"
            raise ValueError(msg)

        defaults = cls()
        return cls(
            ledger_path=Path(ledger) if ledger else None,
            strict_currencies=strict.lower() in _TRUE_VALUES if strict else False,
            history_limit=int(history) if history else defaults.history_limit,
            amount_column=int(column) if column else defaults.amount_column,
        )

    @classmethod
    def from_file(cls, path: Path | None = None) -> CoinjarConfig:
        """Load config from JSON file.

        Default path: ~/.config/coinjar/config.json

        Expected format:
        {
            "ledger_path": "~/books/main.coin",
            "strict_currencies": false,
            "history_limit": 100,
            "amount_column": 72
        }
        """
        if path is None:
            path = _get_config_dir() / "config.json"

        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = json.load(f)

        defaults = cls()
        ledger = data.get("ledger_path")
        return cls(
            ledger_path=Path(ledger).expanduser() if ledger else None,
            strict_currencies=bool(data.get("strict_currencies", False)),
            history_limit=int(data.get("history_limit", defaults.history_limit)),
            amount_column=int(data.get("amount_column", defaults.amount_column)),
        )

    @classmethod
    def load(cls) -> CoinjarConfig:
        """Load config from environment or file (env takes precedence), else defaults."""
        try:
            return cls.from_env()
        except ValueError:
            pass
        try:
            return cls.from_file()
        except FileNotFoundError:
            return cls()
