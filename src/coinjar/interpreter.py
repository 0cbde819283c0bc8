"""Command interpreter: runs parsed commands against a ledger store.

Mutating commands (``del``, ``open`` and ``save``) push an undo entry before
changing anything; ``undo`` pops the latest entry and restores it.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import date

from pydantic import BaseModel

from coinjar.commands import (
    AccountsCommand,
    Command,
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
from coinjar.exceptions import CommandError, LedgerError
from coinjar.formatter import DEFAULT_AMOUNT_COLUMN, format_booking, format_ledger
from coinjar.ledger import LedgerSnapshot, LedgerStore
from coinjar.loader import resolve_booking
from coinjar.models import Account, Booking, Posting, SplitDirective
from coinjar.money import check_precision, parse_money
from coinjar.storage import LedgerWriter
from coinjar.views import account_views, register_views

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


@dataclass(frozen=True)
class QueryContext:
    """The bookings selected by the last ``reg`` or ``date`` command.

    Attributes:
        matcher: Text matcher given to ``reg``
        on: Date selected with ``date``
        booking_ids: Ids of the matched bookings, in chronological order
    """

    matcher: str | None = None
    on: date | None = None
    booking_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class UndoEntry:
    """Interpreter state captured right before a mutating command."""

    snapshot: LedgerSnapshot
    dirty: bool
    context: QueryContext
    current_date: date
    command: str


@dataclass
class CommandResult:
    """Outcome of one command.

    Attributes:
        command: Canonical command name
        message: Human readable summary
        rows: Tabular output, if any
        booking: Booking produced by the command (split calculator)
        warnings: Non-fatal problems
    """

    command: str
    message: str = ""
    rows: list[BaseModel] = field(default_factory=list)
    booking: Booking | None = None
    warnings: list[str] = field(default_factory=list)


class Interpreter:
    """Executes command lines against a ledger store.

    Args:
        store: The ledger store to query and mutate
        today: Reference date; also the initial context date
        writer: Destination for ``save`` (save fails without one)
        history_limit: Maximum number of undo entries
        amount_column: Column for posting amounts when saving
    """

    def __init__(
        self,
        store: LedgerStore,
        *,
        today: date,
        writer: LedgerWriter | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        amount_column: int = DEFAULT_AMOUNT_COLUMN,
    ) -> None:
        self.store = store
        self.today = today
        self.writer = writer
        self.amount_column = amount_column
        self.current_date = today
        self.context = QueryContext()
        self.dirty = False
        self.history: deque[UndoEntry] = deque(maxlen=history_limit)

    def execute(self, line: str) -> CommandResult:
        """Parse and run one command line.

        Raises:
            CommandError: If the command is unknown, malformed or cannot run;
                the store is left unchanged
            LedgerWriteError: If ``save`` cannot write the ledger
        """
        return self.dispatch(parse_command(line))

    def dispatch(self, command: Command) -> CommandResult:
        """Run an already parsed command."""
        logger.debug("Running %s", command.kind)
        match command:
            case SplitCommand():
                return self._split(command)
            case RegisterCommand():
                return self._register(command)
            case DateCommand():
                return self._date(command)
            case AccountsCommand():
                return CommandResult("accns", rows=list(account_views(self.store)))
            case OpenCommand():
                return self._open(command)
            case SaveCommand():
                return self._save()
            case DeleteCommand():
                return self._delete()
            case UndoCommand():
                return self._undo()
            case InspectCommand():
                return self._inspect()
        raise CommandError(f"Unsupported command {command!r}")

    def _push(self, command: str) -> UndoEntry:
        entry = UndoEntry(
            snapshot=self.store.snapshot,
            dirty=self.dirty,
            context=self.context,
            current_date=self.current_date,
            command=command,
        )
        self.history.append(entry)
        return entry

    def _split(self, command: SplitCommand) -> CommandResult:
        registry = self.store.registry.copy()
        try:
            money = check_precision(parse_money(command.money, registry), registry)
            booking = Booking(
                description=command.description or "split",
                postings=(
                    Posting(Account(command.on), -money),
                    Posting(Account(command.to)),
                ),
                split=SplitDirective(command.mode, tuple(command.contacts)),
            )
            resolved = resolve_booking(booking, registry)
        except LedgerError as e:
            raise CommandError(e.message, command="split") from e

        text = "\n".join(format_booking(resolved, registry, self.amount_column))
        return CommandResult("split", message=text, booking=resolved)

    def _register(self, command: RegisterCommand) -> CommandResult:
        rows = self.store.register(command.matcher)
        matched = self.store.matching_bookings(command.matcher)
        self.context = QueryContext(
            matcher=command.matcher, booking_ids=tuple(b.id for b in matched)
        )
        return CommandResult(
            "reg",
            message=f"{len(matched)} bookings matched",
            rows=list(register_views(rows, self.store.registry)),
        )

    def _date(self, command: DateCommand) -> CommandResult:
        if command.arg is not None:
            try:
                self.current_date = DateArg.parse(command.arg).apply(self.current_date, self.today)
            except OverflowError as e:
                raise CommandError(f"Date out of range: {command.arg}", command="date") from e

        day = self.current_date
        matched = self.store.matching_bookings(on=day)
        self.context = QueryContext(on=day, booking_ids=tuple(b.id for b in matched))
        rows = self.store.register(on=day)
        return CommandResult(
            "date",
            message=day.isoformat(),
            rows=list(register_views(rows, self.store.registry)),
        )

    def _open(self, command: OpenCommand) -> CommandResult:
        account = Account(command.account)
        self._push("open")
        if not self.store.open_account(account):
            return CommandResult(
                "open", message=str(account), warnings=[f"Account {account} already exists"]
            )
        self.dirty = True
        return CommandResult("open", message=f"Opened {account}")

    def _save(self) -> CommandResult:
        if self.writer is None:
            raise CommandError("No ledger file to save to", command="save")

        text = format_ledger(self.store.snapshot, amount_column=self.amount_column)
        entry = self._push("save")
        try:
            self.writer.write(text)
        except Exception:
            self.history.remove(entry)
            raise
        self.dirty = False
        return CommandResult("save", message=f"Saved to {self.writer.target}")

    def _delete(self) -> CommandResult:
        if not self.context.booking_ids:
            raise CommandError("No booking selected; use reg or date first", command="del")

        booking_id = self.context.booking_ids[-1]
        found = self.store.find_booking(booking_id)
        if found is None:
            raise CommandError("Selected booking no longer exists", command="del")

        self._push("del")
        day, booking = found
        self.store.remove_booking(booking_id)
        self.context = QueryContext(
            matcher=self.context.matcher,
            on=self.context.on,
            booking_ids=self.context.booking_ids[:-1],
        )
        self.dirty = True
        return CommandResult("del", message=f"Deleted {booking.description!r} on {day}", booking=booking)

    def _undo(self) -> CommandResult:
        if not self.history:
            return CommandResult("undo", warnings=["Nothing to undo"])

        entry = self.history.pop()
        self.store.restore(entry.snapshot)
        self.dirty = entry.dirty
        self.context = entry.context
        self.current_date = entry.current_date
        logger.info("Undid %s", entry.command)
        return CommandResult("undo", message=f"Undid {entry.command}")

    def _inspect(self) -> CommandResult:
        context = self.context
        lines = [
            f"date: {self.current_date}",
            f"file: {self.writer.target if self.writer else '-'}",
            f"dirty: {'yes' if self.dirty else 'no'}",
            f"history: {len(self.history)}/{self.history.maxlen}",
            f"matcher: {context.matcher or '-'}",
            f"on: {context.on or '-'}",
            f"selected: {len(context.booking_ids)} bookings",
        ]
        return CommandResult("inspect", message="\n".join(lines))
