"""Canonical text rendering of a resolved ledger.

Formatting a ledger, parsing the output and formatting again gives the same
text byte for byte.
"""

from coinjar.grammar import CLOSED_KEYWORD, COMMENT, CURRENCY_HEADER, SUFFIX_KEYWORD
from coinjar.ledger import LedgerSnapshot
from coinjar.models import Booking, Posting
from coinjar.money import DEFAULT_PRECISION, Currency, CurrencyRegistry, CurrencyStyle, format_money

INDENT = "    "
MIN_GAP = 2
DEFAULT_AMOUNT_COLUMN = 72


def format_currency(currency: Currency) -> str:
    """Render one currency block entry."""
    parts = [currency.designator]
    if currency.code:
        parts.append(currency.code)
    if currency.precision != DEFAULT_PRECISION:
        parts.append(str(currency.precision))
    if currency.is_symbol and currency.style is CurrencyStyle.SUFFIX:
        parts.append(SUFFIX_KEYWORD)
    line = INDENT + " ".join(parts)
    if currency.name:
        line += f" {COMMENT} {currency.name}"
    return line


def format_currencies(registry: CurrencyRegistry) -> list[str]:
    """Render the currency block, sorted by designator (empty when no currency is known)."""
    if not len(registry):
        return []
    header = f"{CURRENCY_HEADER} {CLOSED_KEYWORD}" if registry.closed else CURRENCY_HEADER
    return [header, *(format_currency(c) for c in registry)]


def format_posting(
    posting: Posting, registry: CurrencyRegistry, amount_column: int = DEFAULT_AMOUNT_COLUMN
) -> str:
    """Render a posting with its money right aligned to ``amount_column``."""
    account = INDENT + posting.account.name
    if posting.money is None:
        return account
    money = format_money(posting.money, registry)
    gap = max(MIN_GAP, amount_column - len(account) - len(money))
    return account + " " * gap + money


def format_booking(
    booking: Booking, registry: CurrencyRegistry, amount_column: int = DEFAULT_AMOUNT_COLUMN
) -> list[str]:
    return [
        booking.description,
        *(format_posting(p, registry, amount_column) for p in booking.postings),
    ]


def format_ledger(snapshot: LedgerSnapshot, *, amount_column: int = DEFAULT_AMOUNT_COLUMN) -> str:
    """Render a resolved ledger in canonical form.

    Args:
        snapshot: The ledger to render
        amount_column: Column at which posting amounts end

    Returns:
        The canonical text, ending with a newline (empty for an empty ledger)
    """
    registry = snapshot.registry
    blocks: list[list[str]] = []

    currencies = format_currencies(registry)
    if currencies:
        blocks.append(currencies)

    for chapter in snapshot.chapters:
        lines = [chapter.date.isoformat()]
        for booking in chapter.bookings:
            lines.extend(format_booking(booking, registry, amount_column))
        blocks.append(lines)

    if not blocks:
        return ""
    return "\n\n".join("\n".join(block) for block in blocks) + "\n"
