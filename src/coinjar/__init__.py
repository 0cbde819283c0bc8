"""coinjar: a plain-text double-entry bookkeeping engine.

Example:
    from datetime import date
    from coinjar import Interpreter, load_ledger

    store = load_ledger(text, today=date.today())
    for row in store.contact_ledger("John"):
        print(row.date, row.description, row.delta, row.balance)

    interpreter = Interpreter(store, today=date.today())
    result = interpreter.execute("split $30 on liability/card with @Anna @John")
    print(result.message)
"""

from coinjar.config import CoinjarConfig
from coinjar.exceptions import (
    BalanceError,
    CoinjarError,
    CommandError,
    CurrencyConflictError,
    CurrencyMismatchError,
    InferenceError,
    LedgerError,
    LedgerWriteError,
    MoneyParseError,
    ParseError,
    SplitResolutionError,
)
from coinjar.formatter import format_ledger
from coinjar.interpreter import CommandResult, Interpreter
from coinjar.ledger import LedgerSnapshot, LedgerStore
from coinjar.loader import load_ledger
from coinjar.models import Account, Booking, Chapter, Posting
from coinjar.money import Currency, CurrencyRegistry, Money, format_money, parse_money

__version__ = "0.1.0"

__all__ = [
    # Loading and formatting
    "format_ledger",
    "load_ledger",
    # Store and interpreter
    "CommandResult",
    "Interpreter",
    "LedgerSnapshot",
    "LedgerStore",
    # Models
    "Account",
    "Booking",
    "Chapter",
    "Currency",
    "CurrencyRegistry",
    "Money",
    "Posting",
    "format_money",
    "parse_money",
    # Config
    "CoinjarConfig",
    # Exceptions
    "BalanceError",
    "CoinjarError",
    "CommandError",
    "CurrencyConflictError",
    "CurrencyMismatchError",
    "InferenceError",
    "LedgerError",
    "LedgerWriteError",
    "MoneyParseError",
    "ParseError",
    "SplitResolutionError",
]
