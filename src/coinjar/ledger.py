"""Resolved ledger store with account balance and contact ledger indices.

The store holds one immutable ``LedgerSnapshot`` at a time. Every mutation
builds a new snapshot that shares the untouched chapters, bookings and index
entries with the previous one, so old snapshots stay valid for undo.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from datetime import date

from coinjar.models import Account, Booking, Chapter
from coinjar.money import CurrencyRegistry, Money

logger = logging.getLogger(__name__)

Balances = Mapping[Account, Mapping[str, Money]]


@dataclass(frozen=True)
class ContactRow:
    """One movement in a contact's ledger.

    Attributes:
        date: Date of the booking
        description: Booking description
        account: The contact account that moved
        delta: Signed amount of the movement
        balance: Running balance after the movement, one Money per currency
        booking_id: Id of the booking the movement belongs to
    """

    date: date
    description: str
    account: Account
    delta: Money
    balance: tuple[Money, ...]
    booking_id: str


@dataclass(frozen=True)
class RegisterRow:
    """One posting in a register listing, with the running total of the listing."""

    date: date
    description: str
    account: Account
    amount: Money
    total: tuple[Money, ...]
    booking_id: str


@dataclass(frozen=True)
class ContactIndex:
    """Folded contact ledgers: debt movements only, and every movement."""

    debts: tuple[ContactRow, ...] = ()
    everything: tuple[ContactRow, ...] = ()


@dataclass(frozen=True)
class LedgerSnapshot:
    """Immutable state of a resolved ledger and its derived indices.

    Attributes:
        chapters: Chapters sorted by date, one per date
        registry: Currencies known to the ledger
        opened: Accounts opened explicitly, with or without postings
        balances: Account -> currency -> cumulative balance
        usage: (account, currency) -> number of postings referencing it
        contacts: Contact name -> folded contact ledger
    """

    chapters: tuple[Chapter, ...] = ()
    registry: CurrencyRegistry = field(default_factory=CurrencyRegistry, compare=False)
    opened: frozenset[Account] = frozenset()
    balances: Balances = field(default_factory=dict)
    usage: Mapping[tuple[Account, str], int] = field(default_factory=dict)
    contacts: Mapping[str, ContactIndex] = field(default_factory=dict)

    def entries(self) -> Iterator[tuple[date, Booking]]:
        """Iterate bookings with their dates in chronological order."""
        for chapter in self.chapters:
            for booking in chapter.bookings:
                yield chapter.date, booking


def merge_chapters(chapters: Iterable[Chapter]) -> tuple[Chapter, ...]:
    """Merge same-date chapters and sort by date, keeping booking order per date."""
    by_date: dict[date, list[Booking]] = {}
    for chapter in chapters:
        by_date.setdefault(chapter.date, []).extend(chapter.bookings)
    return tuple(
        Chapter(day, tuple(bookings)) for day, bookings in sorted(by_date.items()) if bookings
    )


def _apply_balances(
    balances: dict[Account, Mapping[str, Money]],
    usage: dict[tuple[Account, str], int],
    booking: Booking,
    sign: int,
) -> None:
    """Add (sign=1) or subtract (sign=-1) a booking's postings in place.

    Inner mappings are replaced rather than mutated so that they can be
    shared with earlier snapshots. A currency disappears from an account once
    no posting references it any more.
    """
    for posting in booking.postings:
        if posting.money is None:
            continue
        account = posting.account
        money = posting.money if sign > 0 else -posting.money
        key = (account, money.currency)
        amounts = dict(balances.get(account, {}))
        count = usage.get(key, 0) + sign

        if count > 0:
            current = amounts.get(money.currency, Money.zero(money.currency))
            amounts[money.currency] = current + money
            usage[key] = count
        else:
            amounts.pop(money.currency, None)
            usage.pop(key, None)

        if amounts:
            balances[account] = amounts
        else:
            balances.pop(account, None)


def _fold_contact(
    name: str, chapters: Iterable[Chapter], *, include_all: bool
) -> tuple[ContactRow, ...]:
    running: dict[str, Money] = {}
    rows: list[ContactRow] = []
    for chapter in chapters:
        for booking in chapter.bookings:
            for posting in booking.postings:
                account = posting.account
                if posting.money is None or account.contact != name:
                    continue
                if not include_all and not account.is_debt:
                    continue
                money = posting.money
                running[money.currency] = (
                    running.get(money.currency, Money.zero(money.currency)) + money
                )
                rows.append(
                    ContactRow(
                        date=chapter.date,
                        description=booking.description,
                        account=account,
                        delta=money,
                        balance=tuple(running.values()),
                        booking_id=booking.id,
                    )
                )
    return tuple(rows)


def _index_contacts(
    contacts: dict[str, ContactIndex], names: Iterable[str], chapters: tuple[Chapter, ...]
) -> None:
    """Re-fold the ledgers of the given contacts in place."""
    for name in names:
        index = ContactIndex(
            debts=_fold_contact(name, chapters, include_all=False),
            everything=_fold_contact(name, chapters, include_all=True),
        )
        if index.everything:
            contacts[name] = index
        else:
            contacts.pop(name, None)


def build_snapshot(
    chapters: Iterable[Chapter],
    registry: CurrencyRegistry | None = None,
    opened: Iterable[Account] = (),
) -> LedgerSnapshot:
    """Build a snapshot and its indices from resolved chapters."""
    merged = merge_chapters(chapters)
    balances: dict[Account, Mapping[str, Money]] = {}
    usage: dict[tuple[Account, str], int] = {}
    names: set[str] = set()
    for chapter in merged:
        for booking in chapter.bookings:
            _apply_balances(balances, usage, booking, 1)
            names |= booking.contacts

    contacts: dict[str, ContactIndex] = {}
    _index_contacts(contacts, sorted(names), merged)
    return LedgerSnapshot(
        chapters=merged,
        registry=CurrencyRegistry() if registry is None else registry,
        opened=frozenset(opened),
        balances=balances,
        usage=usage,
        contacts=contacts,
    )


def _matches(matcher: str | None, booking: Booking, account: Account) -> bool:
    if not matcher:
        return True
    needle = matcher.lower()
    return needle in booking.description.lower() or needle in account.name.lower()


class LedgerStore:
    """Current resolved ledger with incremental index maintenance."""

    def __init__(self, snapshot: LedgerSnapshot | None = None) -> None:
        self._snapshot = snapshot or LedgerSnapshot()

    @classmethod
    def from_chapters(
        cls,
        chapters: Iterable[Chapter],
        registry: CurrencyRegistry | None = None,
        opened: Iterable[Account] = (),
    ) -> LedgerStore:
        """Create a store from resolved chapters."""
        return cls(build_snapshot(chapters, registry, opened))

    @property
    def snapshot(self) -> LedgerSnapshot:
        """The current immutable snapshot."""
        return self._snapshot

    @property
    def chapters(self) -> tuple[Chapter, ...]:
        return self._snapshot.chapters

    @property
    def registry(self) -> CurrencyRegistry:
        return self._snapshot.registry

    def bookings(self) -> list[tuple[date, Booking]]:
        """All bookings with their dates, in chronological order."""
        return list(self._snapshot.entries())

    def find_booking(self, booking_id: str) -> tuple[date, Booking] | None:
        """Find a booking by id."""
        for day, booking in self._snapshot.entries():
            if booking.id == booking_id:
                return day, booking
        return None

    def add_booking(self, day: date, booking: Booking) -> Booking:
        """Add a resolved booking at the end of its date's chapter.

        Raises:
            ValueError: If the booking still has blank postings or a split directive
            BalanceError: If the booking does not balance
        """
        if booking.blank_postings or booking.split is not None:
            msg = f"Booking {booking.description!r} must be resolved before it is added"
            raise ValueError(msg)
        booking.validate()

        snap = self._snapshot
        chapters = list(snap.chapters)
        dates = [c.date for c in chapters]
        pos = bisect.bisect_left(dates, day)
        if pos < len(chapters) and chapters[pos].date == day:
            chapter = chapters[pos]
            chapters[pos] = replace(chapter, bookings=chapter.bookings + (booking,))
        else:
            chapters.insert(pos, Chapter(day, (booking,)))

        self._commit(tuple(chapters), booking, 1)
        logger.info("Added booking %r on %s", booking.description, day)
        return booking

    def remove_booking(self, booking_id: str) -> Booking:
        """Remove a booking by id.

        Raises:
            KeyError: If no booking has the id
        """
        snap = self._snapshot
        for pos, chapter in enumerate(snap.chapters):
            for booking in chapter.bookings:
                if booking.id != booking_id:
                    continue
                remaining = tuple(b for b in chapter.bookings if b.id != booking_id)
                chapters = list(snap.chapters)
                if remaining:
                    chapters[pos] = replace(chapter, bookings=remaining)
                else:
                    del chapters[pos]
                self._commit(tuple(chapters), booking, -1)
                logger.info("Removed booking %r from %s", booking.description, chapter.date)
                return booking

        msg = f"No booking with id {booking_id!r}"
        raise KeyError(msg)

    def open_account(self, account: Account) -> bool:
        """Register an account with a zero balance.

        Returns:
            True if the account was not known before
        """
        snap = self._snapshot
        if account in snap.opened or account in snap.balances:
            return False
        self._snapshot = replace(snap, opened=snap.opened | {account})
        logger.info("Opened account %s", account)
        return True

    def restore(self, snapshot: LedgerSnapshot) -> None:
        """Replace the current snapshot (used by undo)."""
        self._snapshot = snapshot

    def _commit(self, chapters: tuple[Chapter, ...], booking: Booking, sign: int) -> None:
        snap = self._snapshot
        balances = dict(snap.balances)
        usage = dict(snap.usage)
        _apply_balances(balances, usage, booking, sign)

        contacts = dict(snap.contacts)
        _index_contacts(contacts, sorted(booking.contacts), chapters)

        self._snapshot = replace(
            snap, chapters=chapters, balances=balances, usage=usage, contacts=contacts
        )

    def accounts(self) -> list[Account]:
        """Accounts with postings or opened explicitly, sorted by path."""
        snap = self._snapshot
        return sorted(set(snap.balances) | snap.opened)

    def balance(self, account: Account) -> dict[str, Money]:
        """Cumulative balance of an account per currency (empty when untouched)."""
        return dict(self._snapshot.balances.get(account, {}))

    def contacts(self) -> list[str]:
        """Contacts referenced by bookings or opened accounts."""
        snap = self._snapshot
        names = set(snap.contacts)
        names |= {a.contact for a in snap.opened if a.contact}
        return sorted(names)

    def contact_ledger(self, name: str, include_all: bool = False) -> list[ContactRow]:
        """Chronological movements of a contact with running balances.

        Args:
            name: Contact name without the "@" marker
            include_all: Also show movements outside asset and liability
                accounts (gifts and similar transfers)
        """
        index = self._snapshot.contacts.get(name.removeprefix("@"))
        if index is None:
            return []
        return list(index.everything if include_all else index.debts)

    def register(self, matcher: str | None = None, on: date | None = None) -> list[RegisterRow]:
        """List postings whose account or booking description contains ``matcher``.

        Args:
            matcher: Case-insensitive text to look for (all postings when empty)
            on: Only list bookings of this date

        Returns:
            Rows in chronological order, each with the running total per currency
        """
        running: dict[str, Money] = {}
        rows: list[RegisterRow] = []
        for day, booking in self._snapshot.entries():
            if on is not None and day != on:
                continue
            for posting in booking.postings:
                if posting.money is None or not _matches(matcher, booking, posting.account):
                    continue
                money = posting.money
                running[money.currency] = (
                    running.get(money.currency, Money.zero(money.currency)) + money
                )
                rows.append(
                    RegisterRow(
                        date=day,
                        description=booking.description,
                        account=posting.account,
                        amount=money,
                        total=tuple(running.values()),
                        booking_id=booking.id,
                    )
                )
        return rows

    def matching_bookings(self, matcher: str | None = None, on: date | None = None) -> list[Booking]:
        """Bookings with at least one register row for the matcher, in order."""
        seen: dict[str, Booking] = {}
        for day, booking in self._snapshot.entries():
            if on is not None and day != on:
                continue
            if any(_matches(matcher, booking, p.account) for p in booking.postings):
                seen.setdefault(booking.id, booking)
        return list(seen.values())
