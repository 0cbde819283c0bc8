"""Tests for canonical ledger output."""

from decimal import Decimal

from coinjar.formatter import format_currency, format_ledger, format_posting
from coinjar.ledger import LedgerSnapshot, LedgerStore
from coinjar.loader import load_ledger
from coinjar.models import Account, Posting
from coinjar.money import Currency, CurrencyRegistry, CurrencyStyle, Money


def posting_line(account: str, money: str, column: int = 72) -> str:
    return f"    {account}".ljust(column - len(money)) + money


JOHN_CANONICAL = "\n".join(
    [
        "currency",
        "    $ USD ; US Dollar",
        "    € EUR ; Euro",
        "",
        "2024-01-05",
        "Dinner with John",
        posting_line("liability/@John/payable", "-€10.00"),
        posting_line("expense/food/dine out", "€10.00"),
        "",
        "2024-01-06",
        "Lunch with John",
        posting_line("liability/@Bank of America/credits", "-$10.00"),
        posting_line("expense/food/dine out", "$5.00"),
        posting_line("asset/@John/receivable", "$5.00"),
    ]
) + "\n"


class TestFormatLedger:
    """Tests for format_ledger."""

    def test_john_ledger(self, john_store: LedgerStore) -> None:
        """Should print resolved bookings with aligned amounts."""
        assert format_ledger(john_store.snapshot) == JOHN_CANONICAL

    def test_amount_column(self, john_store: LedgerStore) -> None:
        """Should end every amount at the configured column."""
        text = format_ledger(john_store.snapshot, amount_column=60)

        postings = [line for line in text.splitlines() if line.startswith("    ") and "/" in line]
        assert postings
        assert all(len(line) == 60 for line in postings)

    def test_round_trip(self, john_text: str) -> None:
        """Formatting the parsed output again should not change it."""
        once = format_ledger(load_ledger(john_text).snapshot)
        twice = format_ledger(load_ledger(once).snapshot)

        assert once == twice

    def test_round_trip_resolves_date_tags(self) -> None:
        """Should move bookings with date offsets to their effective date."""
        text = (
            "2024-02-01\n"
            "Taxi #[date(-1)]\n"
            "    expense/transport  12 EUR\n"
            "    asset/cash\n"
        )

        once = format_ledger(load_ledger(text).snapshot)

        assert once.startswith("currency\n    EUR\n\n2024-01-31\nTaxi\n")
        assert format_ledger(load_ledger(once).snapshot) == once

    def test_empty_ledger(self) -> None:
        """Should render an empty ledger as empty text."""
        assert format_ledger(LedgerSnapshot()) == ""

    def test_closed_currency_block(self) -> None:
        """Should keep the closed marker."""
        text = "currency closed\n    $ USD\n\n2024-01-01\nCoffee\n    expense  $3\n    asset/cash\n"

        once = format_ledger(load_ledger(text).snapshot)

        assert once.startswith("currency closed\n    $ USD\n\n")
        assert load_ledger(once).registry.closed

    def test_round_trip_declared_precision(self) -> None:
        """Should keep every decimal a declared precision allows."""
        text = "currency\n    $ USD 3\n\n2024-01-05\nFee\n    expense/fees  $1.005\n    asset/cash\n"

        once = format_ledger(load_ledger(text).snapshot)

        assert posting_line("expense/fees", "$1.005") in once.splitlines()
        assert posting_line("asset/cash", "-$1.005") in once.splitlines()
        assert format_ledger(load_ledger(once).snapshot) == once

    def test_round_trip_late_declaration_and_header_words(self) -> None:
        """Should move a late currency block to the top and keep look-alike descriptions."""
        text = (
            "2024-01-05\n"
            "currency\n"
            "    expense/fees  $1\n"
            "    asset/cash\n"
            "today\n"
            "    expense/fees  $2\n"
            "    asset/cash\n"
            "\n"
            "currency\n"
            "    $ USD ; US Dollar\n"
        )

        once = format_ledger(load_ledger(text).snapshot)

        assert once.startswith("currency\n    $ USD ; US Dollar\n\n2024-01-05\ncurrency\n")
        assert "\ntoday\n" in once
        assert format_ledger(load_ledger(once).snapshot) == once


class TestFormatParts:
    """Tests for posting and currency lines."""

    def test_long_account_keeps_minimum_gap(self) -> None:
        """Should keep two spaces when the account reaches the amount column."""
        registry = CurrencyRegistry()
        registry.declare("$", code="USD")
        posting = Posting(Account("expense/" + "x" * 70), Money("$", Decimal("1")))

        line = format_posting(posting, registry)

        assert line.endswith("x  $1.00")

    def test_blank_posting(self) -> None:
        """Should print only the account."""
        assert format_posting(Posting(Account("asset/cash")), CurrencyRegistry()) == "    asset/cash"

    def test_currency_entry(self) -> None:
        """Should print code, precision, style and name."""
        currency = Currency("£", code="GBP", precision=0, style=CurrencyStyle.SUFFIX, name="Pound")

        assert format_currency(currency) == "    £ GBP 0 suffix ; Pound"

    def test_default_precision_omitted(self) -> None:
        """Should omit the default precision."""
        assert format_currency(Currency("JPY", precision=2)) == "    JPY"
