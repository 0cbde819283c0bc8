"""Tests for the command grammar."""

from datetime import date

import pytest

from coinjar.commands import (
    AccountsCommand,
    DateCommand,
    DeleteCommand,
    InspectCommand,
    OpenCommand,
    RegisterCommand,
    SaveCommand,
    SplitCommand,
    UndoCommand,
    parse_command,
)
from coinjar.dates import DateArg
from coinjar.exceptions import CommandError
from coinjar.models import SplitMode


class TestParseCommand:
    """Tests for parsing command lines."""

    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ("accns", AccountsCommand),
            ("save", SaveCommand),
            ("write", SaveCommand),
            ("w", SaveCommand),
            ("del", DeleteCommand),
            ("undo", UndoCommand),
            ("inspect", InspectCommand),
            ("ins", InspectCommand),
            ("reg", RegisterCommand),
            ("register", RegisterCommand),
            ("date", DateCommand),
        ],
    )
    def test_names_and_aliases(self, line: str, expected: type) -> None:
        """Should map every command name and alias to its payload."""
        assert isinstance(parse_command(line), expected)

    def test_register_matcher(self) -> None:
        """Should keep a quoted matcher as one argument."""
        command = parse_command('reg "dine out"')

        assert command == RegisterCommand(matcher="dine out")

    def test_date_argument(self) -> None:
        """Should accept negative offsets."""
        assert parse_command("date -1") == DateCommand(arg="-1")

    def test_invalid_date_argument(self) -> None:
        """Should reject dates that do not parse."""
        with pytest.raises(CommandError, match="Invalid date"):
            parse_command("date 2024-13-40")

    def test_open_account(self) -> None:
        """Should normalize the account path."""
        command = parse_command("open asset/@Bank of America/ checking")

        assert command == OpenCommand(account="asset/@Bank of America/checking")

    def test_open_malformed_account(self) -> None:
        """Should reject malformed account paths."""
        with pytest.raises(CommandError):
            parse_command("open expense//food")

    def test_open_without_account(self) -> None:
        """Should require an account."""
        with pytest.raises(CommandError, match="needs an account"):
            parse_command("open")

    def test_unexpected_arguments(self) -> None:
        """Should reject arguments on commands that take none."""
        with pytest.raises(CommandError, match="takes no arguments"):
            parse_command("undo twice")

    def test_unknown_command(self) -> None:
        """Should reject unknown commands."""
        with pytest.raises(CommandError, match="Unknown command") as exc:
            parse_command("frobnicate")
        assert exc.value.command == "frobnicate"

    def test_empty_line(self) -> None:
        """Should reject empty input."""
        with pytest.raises(CommandError):
            parse_command("   ")


class TestSplitCommand:
    """Tests for the split calculator syntax."""

    def test_full_syntax(self) -> None:
        """Should read money, accounts, description and contacts."""
        command = parse_command(
            "split $30 on liability/card to expense/food for team lunch with @Anna @John"
        )

        assert command == SplitCommand(
            money="$30",
            on="liability/card",
            to="expense/food",
            description="team lunch",
            mode=SplitMode.EVEN,
            contacts=["@Anna", "@John"],
        )
        assert command.contacts == ["Anna", "John"]

    def test_split_by(self) -> None:
        """Should read a single contact after 'by'."""
        command = parse_command("split 20 EUR on liability/card by @Anna")

        assert isinstance(command, SplitCommand)
        assert command.money == "20 EUR"
        assert command.mode == SplitMode.BY
        assert command.to == "expense"
        assert command.contacts == ["Anna"]

    def test_quoted_contact(self) -> None:
        """Should accept quoted contacts with spaces."""
        command = parse_command('split $10 on asset/cash with "@Bank of America"')

        assert command.contacts == ["Bank of America"]

    def test_with_and_by(self) -> None:
        """Should reject both modes at once."""
        with pytest.raises(CommandError, match="either"):
            parse_command("split $10 on asset/cash with @A by @B")

    def test_without_contacts(self) -> None:
        """Should require at least one contact."""
        with pytest.raises(CommandError):
            parse_command("split $10 on asset/cash")

    def test_without_account(self) -> None:
        """Should require the paying account."""
        with pytest.raises(CommandError):
            parse_command("split $10 with @A")

    def test_contact_without_marker(self) -> None:
        """Should require the '@' marker on contacts."""
        with pytest.raises(CommandError, match="must start with"):
            parse_command("split $10 on asset/cash with John")


class TestDateArg:
    """Tests for fuzzy date arguments."""

    def test_offsets(self) -> None:
        """Should move the current date by signed offsets."""
        current = date(2024, 1, 31)

        assert DateArg.parse("+1").apply(current, date(2000, 1, 1)) == date(2024, 2, 1)
        assert DateArg.parse("-31").apply(current, date(2000, 1, 1)) == date(2023, 12, 31)
        assert DateArg.parse("2").apply(current, date(2000, 1, 1)) == date(2024, 2, 2)

    def test_absolute_dates(self) -> None:
        """Should accept dashes and slashes."""
        assert DateArg.parse("2024-02-03").day == date(2024, 2, 3)
        assert DateArg.parse("2024/02/03").day == date(2024, 2, 3)

    def test_relative_words(self) -> None:
        """Should resolve relative words against the reference date."""
        today = date(2024, 3, 1)

        assert DateArg.parse("yesterday").apply(date(2020, 1, 1), today) == date(2024, 2, 29)
        assert DateArg.parse("tomorrow").apply(date(2020, 1, 1), today) == date(2024, 3, 2)

    def test_invalid(self) -> None:
        """Should reject anything else."""
        with pytest.raises(ValueError):
            DateArg.parse("soon")
