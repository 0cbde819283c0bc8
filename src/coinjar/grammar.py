"""Ledger grammar: raw ledger text to chapters, bookings and postings.

A ledger is line oriented::

    currency
        $ USD ; US Dollar
        € EUR ; Euro

    2024-01-05
    Dinner with John
        liability/@John/payable      -€10.00
        expense/food/dine out

Unindented lines are currency headers, date lines or booking descriptions;
indented lines are currency entries or postings. ``;`` starts a comment and
blank lines close the open booking or currency block.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, timedelta

from coinjar.annotations import scan_description
from coinjar.exceptions import LedgerError, ParseError
from coinjar.models import Account, Booking, Chapter, Posting
from coinjar.money import (
    CurrencyRegistry,
    CurrencyStyle,
    check_precision,
    is_code,
    is_symbol,
    parse_money,
)

logger = logging.getLogger(__name__)

COMMENT = ";"
CURRENCY_HEADER = "currency"
CLOSED_KEYWORD = "closed"
SUFFIX_KEYWORD = "suffix"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# A line that is only a date-shaped token but not a strict YYYY-MM-DD date
_DATE_LIKE_RE = re.compile(r"^\d{1,4}[-/.]\d{1,2}[-/.]\d{1,4}$")
_AMOUNT_TOKEN_RE = re.compile(r"^-?\d[\d.]*$")
_TOKEN_RE = re.compile(r"\S+")

RELATIVE_DAYS = {"yesterday": -1, "today": 0, "tomorrow": 1}


@dataclass
class ParsedLedger:
    """Unresolved parse result: bookings may still carry splits and blanks."""

    registry: CurrencyRegistry
    chapters: list[Chapter] = field(default_factory=list)

    @property
    def bookings(self) -> list[Booking]:
        """All bookings in source order."""
        return [b for chapter in self.chapters for b in chapter.bookings]


def split_posting(body: str) -> tuple[str, str | None, int]:
    """Separate a posting body into its account text and trailing money literal.

    Returns:
        Tuple of (account text, money text or None, offset of the money text)
    """
    tokens = body.split()
    if len(tokens) >= 3 and _AMOUNT_TOKEN_RE.match(tokens[-2]) and is_code(tokens[-1]):
        start = body.rindex(tokens[-2], 0, body.rindex(tokens[-1]))
        return body[:start].rstrip(), body[start:].strip(), start

    if len(tokens) >= 2 and any(ch.isdigit() for ch in tokens[-1]):
        start = body.rindex(tokens[-1])
        return body[:start].rstrip(), tokens[-1], start

    return body, None, 0


class LedgerParser:
    """Parses ledger text into unresolved chapters.

    Args:
        today: Reference date for "today", "yesterday" and "tomorrow" date lines
        registry: Currency registry to extend (a new open one by default)
        strict_currencies: Reject money in currencies that were never declared
    """

    def __init__(
        self,
        *,
        today: date | None = None,
        registry: CurrencyRegistry | None = None,
        strict_currencies: bool = False,
    ) -> None:
        self.today = today
        self.registry = CurrencyRegistry() if registry is None else registry
        if strict_currencies:
            self.registry.closed = True

        self._chapters: list[Chapter] = []
        self._chapter_date: date | None = None
        self._chapter_bookings: list[Booking] = []
        self._booking: Booking | None = None
        self._postings: list[Posting] = []
        self._in_currency_block = False
        self._lines: list[str] = []
        self._after_break = True
        self._money_columns: dict[int, int] = {}

    def parse(self, text: str) -> ParsedLedger:
        """Parse a whole ledger.

        Raises:
            ParseError: On any malformed line, with its line and column, or
                an amount finer than its currency precision
            LedgerError: On currency conflicts or malformed split annotations
        """
        self._lines = text.splitlines()
        for lineno, raw in enumerate(self._lines, start=1):
            self._parse_line(raw, lineno)
        self._close_booking()
        self._close_chapter()
        self._check_precision()

        parsed = ParsedLedger(registry=self.registry, chapters=self._chapters)
        logger.debug(
            "Parsed %d chapters, %d bookings, %d currencies",
            len(parsed.chapters),
            len(parsed.bookings),
            len(self.registry),
        )
        return parsed

    def _parse_line(self, raw: str, lineno: int) -> None:
        content, _, comment = raw.partition(COMMENT)

        if not content.strip():
            if not raw.strip():
                self._close_booking()
                self._in_currency_block = False
                self._after_break = True
            return

        starts_block = self._after_break
        self._after_break = False

        indent = len(content) - len(content.lstrip())
        if indent:
            if self._in_currency_block:
                self._parse_currency_entry(content, comment, lineno)
            elif self._booking is not None:
                self._parse_posting(content, lineno, indent)
            else:
                raise ParseError("Posting outside of a booking", line=lineno, column=indent + 1)
            return

        self._in_currency_block = False
        line = content.rstrip()
        words = line.split()

        if (
            starts_block
            and words[0] == CURRENCY_HEADER
            and all(w == CLOSED_KEYWORD for w in words[1:])
        ):
            if len(words) > 2:
                raise ParseError("Malformed currency header", line=lineno, column=1)
            self._close_booking()
            self._in_currency_block = True
            if len(words) == 2:
                self.registry.closed = True
        elif _DATE_RE.match(line) or _DATE_LIKE_RE.match(line):
            self._close_booking()
            self._open_chapter(self._parse_date(line, lineno))
        elif line in RELATIVE_DAYS and not self._followed_by_posting(lineno):
            if self.today is None:
                raise ParseError(
                    f"Relative date {line!r} needs a reference date", line=lineno, column=1
                )
            self._close_booking()
            self._open_chapter(self.today + timedelta(days=RELATIVE_DAYS[line]))
        else:
            self._open_booking(line, lineno)

    def _parse_date(self, line: str, lineno: int) -> date:
        if not _DATE_RE.match(line):
            raise ParseError(f"Malformed date {line!r}, expected YYYY-MM-DD", line=lineno, column=1)
        try:
            return date.fromisoformat(line)
        except ValueError as e:
            raise ParseError(f"Malformed date {line!r}: {e}", line=lineno, column=1) from e

    def _parse_currency_entry(self, content: str, comment: str, lineno: int) -> None:
        tokens = list(_TOKEN_RE.finditer(content))
        column = tokens[0].start() + 1
        designator = tokens[0].group()
        if not (is_symbol(designator) or is_code(designator)):
            raise ParseError(f"Malformed currency designator {designator!r}", line=lineno, column=column)

        code: str | None = None
        precision: int | None = None
        style: CurrencyStyle | None = None
        for match in tokens[1:]:
            token = match.group()
            if token.isdigit() and precision is None:
                precision = int(token)
            elif token == SUFFIX_KEYWORD and is_symbol(designator) and style is None:
                style = CurrencyStyle.SUFFIX
            elif is_code(token) and is_symbol(designator) and code is None:
                code = token
            else:
                raise ParseError(
                    f"Unexpected token {token!r} in currency entry",
                    line=lineno,
                    column=match.start() + 1,
                )

        try:
            self.registry.declare(
                designator,
                code=code,
                precision=2 if precision is None else precision,
                name=comment.strip() or None,
                style=style,
            )
        except LedgerError as e:
            raise e.at(lineno, column) from None

    def _open_chapter(self, day: date) -> None:
        self._close_chapter()
        self._chapter_date = day

    def _close_chapter(self) -> None:
        if self._chapter_date is not None:
            self._chapters.append(Chapter(self._chapter_date, tuple(self._chapter_bookings)))
        self._chapter_date = None
        self._chapter_bookings = []

    def _open_booking(self, line: str, lineno: int) -> None:
        self._close_booking()
        if self._chapter_date is None:
            raise ParseError("Booking before any date line", line=lineno, column=1)

        annotations = scan_description(line, line=lineno)
        if not annotations.description:
            raise ParseError("Booking has no description", line=lineno, column=1)
        self._booking = Booking(
            description=annotations.description,
            split=annotations.split,
            date_offset=annotations.date_offset,
            line=lineno,
        )
        self._postings = []

    def _close_booking(self) -> None:
        if self._booking is None:
            return
        if not self._postings:
            raise ParseError(
                f"Booking {self._booking.description!r} has no postings",
                line=self._booking.line,
                column=1,
            )
        self._chapter_bookings.append(self._booking.with_postings(self._postings))
        self._booking = None
        self._postings = []

    def _parse_posting(self, content: str, lineno: int, indent: int) -> None:
        account_text, money_text, offset = split_posting(content.strip())
        account = Account.parse(account_text, line=lineno, column=indent + 1)

        money = None
        if money_text is not None:
            try:
                money = parse_money(money_text, self.registry)
            except LedgerError as e:
                raise e.at(lineno, indent + offset + 1) from None
            self._money_columns[lineno] = indent + offset + 1

        self._postings.append(Posting(account=account, money=money, line=lineno))

    def _followed_by_posting(self, lineno: int) -> bool:
        """Check if the next line with content after ``lineno`` is indented."""
        for raw in self._lines[lineno:]:
            if not raw.strip():
                return False
            content = raw.partition(COMMENT)[0]
            if content.strip():
                return content[0].isspace()
        return False

    def _check_precision(self) -> None:
        # Declarations may follow the first use of a currency, so amounts are
        # checked against the final registry
        for chapter in self._chapters:
            for booking in chapter.bookings:
                for posting in booking.postings:
                    if posting.money is None:
                        continue
                    try:
                        check_precision(posting.money, self.registry)
                    except LedgerError as e:
                        if posting.line is not None:
                            e.at(posting.line, self._money_columns.get(posting.line, 1))
                        raise


def parse_ledger(
    text: str,
    *,
    today: date | None = None,
    registry: CurrencyRegistry | None = None,
    strict_currencies: bool = False,
) -> ParsedLedger:
    """Parse ledger text into unresolved chapters (see LedgerParser)."""
    parser = LedgerParser(today=today, registry=registry, strict_currencies=strict_currencies)
    return parser.parse(text)
