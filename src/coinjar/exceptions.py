"""Typed exceptions for the coinjar bookkeeping engine."""

from decimal import Decimal


class CoinjarError(Exception):
    """Base exception for all coinjar errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class LedgerError(CoinjarError):
    """Error raised while loading a ledger, optionally tied to a source position."""

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.line = line
        self.column = column
        super().__init__(message)

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"{self.message} (line {self.line})"
        return f"{self.message} (line {self.line}, column {self.column})"

    def at(self, line: int, column: int = 1) -> "LedgerError":
        """Attach a source position if the error does not carry one yet."""
        if self.line is None:
            self.line = line
            self.column = column
        return self


class ParseError(LedgerError):
    """Malformed date, account, money or grammar token."""


class MoneyParseError(ParseError):
    """A monetary literal matches none of the accepted surface forms."""

    def __init__(
        self,
        message: str,
        *,
        text: str = "",
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.text = text
        super().__init__(message, line=line, column=column)


class BalanceError(LedgerError):
    """A booking's currency group does not sum to zero and has no blank posting."""

    def __init__(
        self,
        message: str,
        *,
        currency: str | None = None,
        imbalance: Decimal | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.currency = currency
        self.imbalance = imbalance
        super().__init__(message, line=line, column=column)


class InferenceError(LedgerError):
    """An omitted amount cannot be inferred unambiguously."""


class SplitResolutionError(LedgerError):
    """A split annotation cannot be expanded into contact postings."""


class CurrencyConflictError(LedgerError):
    """A currency designator was registered twice with different attributes."""

    def __init__(
        self,
        message: str,
        *,
        designator: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.designator = designator
        super().__init__(message, line=line, column=column)


class CurrencyMismatchError(CoinjarError):
    """Money of two different currencies was combined."""

    def __init__(self, left: str, right: str) -> None:
        self.left = left
        self.right = right
        super().__init__(f"Cannot combine money in {left!r} with money in {right!r}")


class CommandError(CoinjarError):
    """Unrecognized command or malformed command arguments."""

    def __init__(self, message: str, *, command: str | None = None) -> None:
        self.command = command
        super().__init__(message)


class LedgerWriteError(CoinjarError):
    """Writing the canonical ledger to its target failed."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)
