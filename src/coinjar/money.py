"""Money model: currencies, exact decimal amounts and monetary literals.

A monetary literal is accepted in four surface forms::

    $10.00     $-10.00     (symbol, optional sign, number)
    -$10.00                (sign, symbol, number)
    -10.00£                (sign, number, symbol)
    -10.00 GBP             (sign, number, whitespace, code)

Every form is normalized to a ``Money(designator, amount)`` pair. The surface
form is only remembered as the display style of a currency bound on first use.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_EVEN, Decimal, InvalidOperation
from enum import StrEnum

from coinjar.exceptions import CurrencyConflictError, CurrencyMismatchError, MoneyParseError

logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 2

_NUMBER = r"\d[\d.]*"
# Not whitespace, not a word character, not the sign, the decimal point or the comment marker
_SYMBOL = r"[^\w\s.;\-]"
_CODE = r"[^\W\d_]+"

_PREFIX_RE = re.compile(
    rf"^(?P<lead>-)?(?P<symbol>{_SYMBOL})(?P<inner>-)?(?P<number>{_NUMBER})$"
)
_SUFFIX_RE = re.compile(rf"^(?P<sign>-)?(?P<number>{_NUMBER})(?P<symbol>{_SYMBOL})$")
_CODE_RE = re.compile(rf"^(?P<sign>-)?(?P<number>{_NUMBER})\s+(?P<code>{_CODE})$")
_SYMBOL_RE = re.compile(rf"^{_SYMBOL}$")
_CODE_ONLY_RE = re.compile(rf"^{_CODE}$")


class CurrencyStyle(StrEnum):
    """How a currency is rendered next to its amount.

    PREFIX: -$3.50
    SUFFIX: -3.50£
    CODE:   -3.50 CJM
    """

    PREFIX = "prefix"
    SUFFIX = "suffix"
    CODE = "code"


def is_symbol(designator: str) -> bool:
    """Return True if the designator is a single-character symbol."""
    return bool(_SYMBOL_RE.match(designator))


def is_code(designator: str) -> bool:
    """Return True if the designator is an alphabetic code."""
    return bool(_CODE_ONLY_RE.match(designator))


@dataclass(frozen=True)
class Currency:
    """A registered currency.

    Attributes:
        designator: Unique key, a symbol (e.g., "$") or a code (e.g., "CJM")
        code: Optional alphabetic alias for a symbol designator (e.g., "USD")
        precision: Number of decimal digits used for display
        name: Optional human-readable name
        style: Display style of the designator
    """

    designator: str
    code: str | None = None
    precision: int = DEFAULT_PRECISION
    name: str | None = None
    style: CurrencyStyle | None = None

    def __post_init__(self) -> None:
        if self.style is None:
            default = CurrencyStyle.PREFIX if is_symbol(self.designator) else CurrencyStyle.CODE
            object.__setattr__(self, "style", default)

    @property
    def is_symbol(self) -> bool:
        """Return True if the designator is a symbol rather than a code."""
        return is_symbol(self.designator)

    @property
    def quantum(self) -> Decimal:
        """Smallest displayable unit (0.01 for a precision of 2)."""
        return Decimal(1).scaleb(-self.precision)

    def conflicts_with(self, other: Currency) -> bool:
        """Check if two declarations of the same designator disagree."""
        return (self.code, self.precision, self.name, self.style) != (
            other.code,
            other.precision,
            other.name,
            other.style,
        )


@dataclass(frozen=True)
class Money:
    """A signed, exact decimal amount in one currency.

    Money of different currencies is never summed or compared.
    """

    currency: str
    amount: Decimal

    @classmethod
    def zero(cls, currency: str) -> Money:
        """Return zero in the given currency."""
        return cls(currency=currency, amount=Decimal(0))

    def _check(self, other: Money) -> None:
        if other.currency != self.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def __add__(self, other: Money) -> Money:
        self._check(other)
        return Money(self.currency, self.amount + other.amount)

    def __sub__(self, other: Money) -> Money:
        self._check(other)
        return Money(self.currency, self.amount - other.amount)

    def __neg__(self) -> Money:
        return Money(self.currency, -self.amount)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def split_even(self, parts: int, precision: int = DEFAULT_PRECISION) -> list[Money]:
        """Divide the amount into ``parts`` shares that sum exactly to it.

        Each share is the quotient truncated toward zero at ``precision``.
        The leftover whole units are handed out one per share starting from
        the last share, so shares differ by at most one unit. A residue finer
        than the precision (an over-precise amount) goes to the last share.

        Args:
            parts: Number of shares (at least 1)
            precision: Decimal digits of the smallest unit

        Returns:
            The shares, in party order
        """
        if parts < 1:
            raise ValueError(f"Cannot split into {parts} parts")

        unit = Decimal(1).scaleb(-precision)
        base = (self.amount / parts).quantize(unit, rounding=ROUND_DOWN)
        shares = [base] * parts

        remainder = self.amount - base * parts
        step = unit if remainder > 0 else -unit
        units = int(abs(remainder) // unit)
        for i in range(parts - units, parts):
            shares[i] += step

        shares[-1] += self.amount - sum(shares, Decimal(0))
        return [Money(self.currency, share) for share in shares]


class CurrencyRegistry:
    """Currencies known to a ledger, keyed by designator.

    The registry is open by default: a designator seen for the first time in a
    money literal is bound automatically. A closed registry rejects unknown
    designators instead.
    """

    def __init__(self, *, closed: bool = False) -> None:
        self.closed = closed
        self._currencies: dict[str, Currency] = {}
        self._codes: dict[str, str] = {}
        self._bound: set[str] = set()

    def __contains__(self, designator: object) -> bool:
        return designator in self._currencies

    def __iter__(self) -> Iterator[Currency]:
        return iter(sorted(self._currencies.values(), key=lambda c: c.designator))

    def __len__(self) -> int:
        return len(self._currencies)

    def copy(self) -> CurrencyRegistry:
        """Return an independent copy of the registry."""
        clone = CurrencyRegistry(closed=self.closed)
        clone._currencies = dict(self._currencies)
        clone._codes = dict(self._codes)
        clone._bound = set(self._bound)
        return clone

    def declare(
        self,
        designator: str,
        *,
        code: str | None = None,
        precision: int = DEFAULT_PRECISION,
        name: str | None = None,
        style: CurrencyStyle | None = None,
    ) -> Currency:
        """Register a currency from a currency block entry.

        Re-declaring an identical currency is a no-op. A currency bound on
        first use is replaced by its declaration.

        Raises:
            CurrencyConflictError: If the designator or code is already bound
                to a currency with different attributes
        """
        if code is not None:
            code = code.upper()
        if is_code(designator):
            designator = designator.upper()

        currency = Currency(
            designator=designator,
            code=code,
            precision=precision,
            name=name,
            style=style,
        )

        existing = self._currencies.get(designator)
        if existing is not None and designator in self._bound:
            self._bound.discard(designator)
            del self._currencies[designator]
            existing = None
        if existing is not None:
            if existing.conflicts_with(currency):
                raise CurrencyConflictError(
                    f"Currency {designator!r} already declared with different attributes",
                    designator=designator,
                )
            return existing

        if is_code(designator) and designator in self._codes:
            raise CurrencyConflictError(
                f"Currency code {designator!r} already used by {self._codes[designator]!r}",
                designator=designator,
            )
        if code is not None:
            owner = self._codes.get(code) or (code if code in self._currencies else None)
            if owner is not None:
                raise CurrencyConflictError(
                    f"Currency code {code!r} already used by {owner!r}",
                    designator=designator,
                )
            self._codes[code] = designator

        self._currencies[designator] = currency
        logger.debug("Declared currency %s", designator)
        return currency

    def lookup(self, token: str) -> Currency | None:
        """Find a currency by designator or code (codes are case-insensitive)."""
        if token in self._currencies:
            return self._currencies[token]
        if is_code(token):
            upper = token.upper()
            if upper in self._currencies:
                return self._currencies[upper]
            if upper in self._codes:
                return self._currencies[self._codes[upper]]
        return None

    def resolve(self, token: str, style: CurrencyStyle) -> Currency:
        """Find a currency, binding it on first use when the registry is open.

        Raises:
            MoneyParseError: If the registry is closed and the token is unknown
        """
        currency = self.lookup(token)
        if currency is not None:
            return currency
        if self.closed:
            raise MoneyParseError(f"Unknown currency {token!r}", text=token)

        designator = token.upper() if is_code(token) else token
        currency = Currency(designator=designator, style=style)
        self._currencies[designator] = currency
        self._bound.add(designator)
        logger.debug("Bound currency %s on first use (%s)", designator, style)
        return currency

    def currency_for(self, designator: str) -> Currency:
        """Return the registered currency, or a default one for unknown designators."""
        return self._currencies.get(designator) or Currency(designator=designator)


def _parse_number(number: str, text: str) -> Decimal:
    if number.count(".") > 1:
        raise MoneyParseError(f"Multiple decimal separators in {text!r}", text=text)
    if number.endswith("."):
        raise MoneyParseError(f"Missing fractional digits in {text!r}", text=text)
    try:
        return Decimal(number)
    except InvalidOperation as e:
        raise MoneyParseError(f"Invalid number in {text!r}", text=text) from e


def parse_money(text: str, registry: CurrencyRegistry) -> Money:
    """Parse a monetary literal into a Money value.

    Args:
        text: The literal (e.g., "-$10.00", "10£", "10.50 GBP")
        registry: Currency registry used to resolve (and bind) designators

    Returns:
        The normalized Money

    Raises:
        MoneyParseError: If no surface form matches, the number is malformed
            or the currency is unknown to a closed registry
    """
    text = text.strip()

    if match := _PREFIX_RE.match(text):
        if match["lead"] and match["inner"]:
            raise MoneyParseError(f"Sign given twice in {text!r}", text=text)
        amount = _parse_number(match["number"], text)
        negative = bool(match["lead"] or match["inner"])
        currency = registry.resolve(match["symbol"], CurrencyStyle.PREFIX)
    elif match := _SUFFIX_RE.match(text):
        amount = _parse_number(match["number"], text)
        negative = bool(match["sign"])
        currency = registry.resolve(match["symbol"], CurrencyStyle.SUFFIX)
    elif match := _CODE_RE.match(text):
        amount = _parse_number(match["number"], text)
        negative = bool(match["sign"])
        currency = registry.resolve(match["code"], CurrencyStyle.CODE)
    else:
        raise MoneyParseError(f"Not a money literal: {text!r}", text=text)

    return Money(currency=currency.designator, amount=-amount if negative else amount)


def check_precision(money: Money, registry: CurrencyRegistry) -> Money:
    """Reject an amount with more decimals than its currency displays.

    Raises:
        MoneyParseError: If rounding to the currency precision would change the amount
    """
    currency = registry.currency_for(money.currency)
    if money.amount != money.amount.quantize(currency.quantum):
        raise MoneyParseError(
            f"Amount {money.amount} has more than {currency.precision} decimals "
            f"for currency {currency.designator!r}",
            text=str(money.amount),
        )
    return money


def format_amount(amount: Decimal, precision: int) -> str:
    """Format an absolute amount with exactly ``precision`` decimals (round half even)."""
    quantum = Decimal(1).scaleb(-precision)
    return f"{abs(amount).quantize(quantum, rounding=ROUND_HALF_EVEN):f}"


def format_money(money: Money, registry: CurrencyRegistry) -> str:
    """Render money in its currency's registered style and precision."""
    currency = registry.currency_for(money.currency)
    quantum = currency.quantum
    rounded = money.amount.quantize(quantum, rounding=ROUND_HALF_EVEN)
    sign = "-" if rounded < 0 else ""
    number = format_amount(rounded, currency.precision)

    match currency.style:
        case CurrencyStyle.PREFIX:
            return f"{sign}{currency.designator}{number}"
        case CurrencyStyle.SUFFIX:
            return f"{sign}{number}{currency.designator}"
        case _:
            return f"{sign}{number} {currency.designator}"
