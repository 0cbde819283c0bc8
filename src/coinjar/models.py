"""Double-entry bookkeeping models."""

from __future__ import annotations

import re
import uuid
from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import StrEnum

from coinjar.exceptions import BalanceError, ParseError
from coinjar.money import Money

PATH_DELIMITER = "/"
CONTACT_MARKER = "@"

_SEGMENT_RE = re.compile(r"^@?[\w-]+(?: [\w-]+)*$")


class AccountType(StrEnum):
    """Classification of accounts by their root segment.

    Informational only: roots outside this list are accepted as-is.
    """

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"


_ROOT_TYPES = {
    "asset": AccountType.ASSET,
    "assets": AccountType.ASSET,
    "liability": AccountType.LIABILITY,
    "liabilities": AccountType.LIABILITY,
    "equity": AccountType.EQUITY,
    "income": AccountType.INCOME,
    "expense": AccountType.EXPENSE,
    "expenses": AccountType.EXPENSE,
}


@dataclass(frozen=True, order=True)
class Account:
    """A ledger account identified by its hierarchical path.

    Attributes:
        name: Full path with "/"-separated segments (e.g., "expense/food/drinks")

    A segment starting with "@" references a contact:
        liability/@John/payable
        asset/@Bank of America/receivable
    """

    name: str

    @classmethod
    def parse(cls, text: str, *, line: int | None = None, column: int = 1) -> Account:
        """Parse and normalize an account path.

        Segments are trimmed; inner runs of spaces collapse to one space.

        Raises:
            ParseError: If the path or one of its segments is empty or malformed
        """
        segments: list[str] = []
        offset = 0
        for raw in text.split(PATH_DELIMITER):
            segment = " ".join(raw.split())
            if not segment or not _SEGMENT_RE.match(segment):
                leading = len(raw) - len(raw.lstrip())
                raise ParseError(
                    f"Malformed account segment {raw.strip()!r} in {text.strip()!r}",
                    line=line,
                    column=column + offset + leading,
                )
            segments.append(segment)
            offset += len(raw) + len(PATH_DELIMITER)
        return cls(PATH_DELIMITER.join(segments))

    @classmethod
    def for_contact(cls, root: str, contact: str, leaf: str) -> Account:
        """Build a contact account such as "asset/@John/receivable"."""
        return cls(PATH_DELIMITER.join((root, CONTACT_MARKER + contact, leaf)))

    @property
    def segments(self) -> tuple[str, ...]:
        """Return the path segments."""
        return tuple(self.name.split(PATH_DELIMITER))

    @property
    def contact(self) -> str | None:
        """Return the contact named by the first "@" segment, if any."""
        for segment in self.segments:
            if segment.startswith(CONTACT_MARKER):
                return segment[len(CONTACT_MARKER) :]
        return None

    @property
    def account_type(self) -> AccountType | None:
        """Return the type implied by the root segment, if it is a known root."""
        return _ROOT_TYPES.get(self.segments[0].lower())

    @property
    def is_debt(self) -> bool:
        """Return True for asset and liability accounts (money owed either way)."""
        return self.account_type in (AccountType.ASSET, AccountType.LIABILITY)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Posting:
    """A single account-amount line in a booking.

    A posting records a debit or credit to a specific account.
    By convention:
        - Positive amount = Debit
        - Negative amount = Credit
        - No amount = to be inferred from the other postings

    Attributes:
        account: The account being affected
        money: The amount, or None when it is to be inferred
        line: Source line of the posting, if parsed from text
    """

    account: Account
    money: Money | None = None
    line: int | None = field(default=None, compare=False)

    @property
    def is_blank(self) -> bool:
        """Return True if the amount is to be inferred."""
        return self.money is None


class SplitMode(StrEnum):
    """How a split booking distributes its funded amount."""

    EVEN = "even"
    BY = "by"


@dataclass(frozen=True)
class SplitDirective:
    """A split annotation attached to a booking.

    Attributes:
        mode: EVEN splits among the contacts and the payer; BY charges one contact
        contacts: Contact names, without the "@" marker
    """

    mode: SplitMode
    contacts: tuple[str, ...]


def _new_booking_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Booking:
    """One transaction: a description plus its postings.

    A resolved booking has no blank postings, no split directive and sums to
    zero in every currency it touches.

    Attributes:
        description: Free-text description, annotations stripped
        postings: Postings in display order
        split: Split directive awaiting resolution
        date_offset: Days to shift the booking relative to its chapter
        line: Source line of the description
        id: Opaque identifier, stable across snapshots
    """

    description: str
    postings: tuple[Posting, ...] = ()
    split: SplitDirective | None = None
    date_offset: int = 0
    line: int | None = field(default=None, compare=False)
    id: str = field(default_factory=_new_booking_id, compare=False)

    def with_postings(self, postings: list[Posting] | tuple[Posting, ...]) -> Booking:
        """Return a copy with the given postings."""
        return replace(self, postings=tuple(postings))

    @property
    def blank_postings(self) -> list[Posting]:
        """Postings whose amount is to be inferred."""
        return [p for p in self.postings if p.is_blank]

    @property
    def explicit_postings(self) -> list[Posting]:
        """Postings with an amount."""
        return [p for p in self.postings if not p.is_blank]

    @property
    def contacts(self) -> set[str]:
        """Contacts referenced by the posting accounts."""
        return {p.account.contact for p in self.postings if p.account.contact}

    @property
    def imbalance(self) -> dict[str, Decimal]:
        """Signed sum of the explicit postings per currency."""
        totals: dict[str, Decimal] = defaultdict(Decimal)
        for posting in self.explicit_postings:
            totals[posting.money.currency] += posting.money.amount  # type: ignore[union-attr]
        return dict(totals)

    @property
    def is_balanced(self) -> bool:
        """Check if every currency sums to zero and nothing is left to infer."""
        return not self.blank_postings and all(v == 0 for v in self.imbalance.values())

    def validate(self) -> None:
        """Raise BalanceError if the booking is not balanced."""
        for currency, total in self.imbalance.items():
            if total != 0:
                raise BalanceError(
                    f"Booking {self.description!r} does not balance: "
                    f"{total} {currency} left over",
                    currency=currency,
                    imbalance=total,
                    line=self.line,
                )


@dataclass(frozen=True)
class Chapter:
    """All bookings recorded under one calendar date."""

    date: date
    bookings: tuple[Booking, ...] = ()
