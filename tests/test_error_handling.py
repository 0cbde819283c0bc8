"""Tests for error handling and exception classes."""

from decimal import Decimal

import pytest

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
from coinjar.loader import load_ledger


class TestExceptionHierarchy:
    """Tests for exception class hierarchy."""

    def test_coinjar_error_is_base(self) -> None:
        """All exceptions should inherit from CoinjarError."""
        for cls in (LedgerError, CommandError, CurrencyMismatchError, LedgerWriteError):
            assert issubclass(cls, CoinjarError)

    def test_load_errors_are_ledger_errors(self) -> None:
        """Errors raised while loading should carry a position."""
        for cls in (ParseError, BalanceError, InferenceError, SplitResolutionError, CurrencyConflictError):
            assert issubclass(cls, LedgerError)

    def test_money_parse_error_is_parse_error(self) -> None:
        """MoneyParseError should be a ParseError."""
        assert issubclass(MoneyParseError, ParseError)


class TestLedgerError:
    """Tests for LedgerError positions."""

    def test_stores_message(self) -> None:
        """Should store the error message."""
        error = LedgerError("Something went wrong")

        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_str_with_position(self) -> None:
        """Should append the line and column."""
        assert str(LedgerError("Bad", line=3)) == "Bad (line 3)"
        assert str(LedgerError("Bad", line=3, column=7)) == "Bad (line 3, column 7)"

    def test_at_sets_missing_position(self) -> None:
        """Should attach a position once."""
        error = ParseError("Bad").at(4, 2)

        assert (error.line, error.column) == (4, 2)

    def test_at_keeps_existing_position(self) -> None:
        """Should not overwrite a more precise position."""
        error = ParseError("Bad", line=4, column=9).at(2)

        assert (error.line, error.column) == (4, 9)


class TestDomainErrors:
    """Tests for the attributes of specific errors."""

    def test_balance_error(self) -> None:
        """Should carry the currency and imbalance of an unbalanced booking."""
        with pytest.raises(BalanceError) as exc:
            load_ledger("2024-01-01\nCoffee\n    expense  $3\n    asset/cash  -$2\n")

        assert exc.value.currency == "$"
        assert exc.value.imbalance == Decimal("1")
        assert exc.value.line == 2

    def test_currency_conflict(self) -> None:
        """Should name the conflicting designator."""
        with pytest.raises(CurrencyConflictError) as exc:
            load_ledger("currency\n    $ USD\n    $ CAD\n")

        assert exc.value.designator == "$"
        assert exc.value.line == 3

    def test_currency_mismatch(self) -> None:
        """Should name both currencies."""
        error = CurrencyMismatchError("$", "€")

        assert (error.left, error.right) == ("$", "€")
        assert "'$'" in error.message

    def test_money_parse_error_text(self) -> None:
        """Should keep the offending literal."""
        error = MoneyParseError("Not money", text="12..3")

        assert error.text == "12..3"
        assert error.line is None

    def test_command_error(self) -> None:
        """Should store the command name."""
        error = CommandError("Unknown command 'x'", command="x")

        assert error.command == "x"
        assert str(error) == "Unknown command 'x'"

    def test_write_error(self) -> None:
        """Should store the target path."""
        assert LedgerWriteError("failed", path="/tmp/x").path == "/tmp/x"
