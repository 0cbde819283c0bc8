"""Load ledger text into a resolved ledger store.

Loading runs grammar -> split resolution -> balance inference -> store. Any
error aborts the whole load; resolution errors carry the line of the
booking that caused them.
"""

import logging
from dataclasses import replace
from datetime import date, timedelta

from coinjar.exceptions import LedgerError
from coinjar.grammar import parse_ledger
from coinjar.inference import infer_booking
from coinjar.ledger import LedgerStore
from coinjar.models import Booking, Chapter
from coinjar.money import CurrencyRegistry
from coinjar.split import resolve_split

logger = logging.getLogger(__name__)


def resolve_booking(booking: Booking, registry: CurrencyRegistry) -> Booking:
    """Expand a booking's split directive and infer its blank postings.

    Raises:
        SplitResolutionError: If the split directive cannot be expanded
        InferenceError: If a blank posting cannot be inferred
        BalanceError: If the booking does not balance
    """
    try:
        return infer_booking(resolve_split(booking, registry))
    except LedgerError as e:
        if booking.line is not None:
            e.at(booking.line)
        raise


def resolve_chapters(chapters: list[Chapter], registry: CurrencyRegistry) -> list[Chapter]:
    """Resolve every booking, moving shifted bookings to their effective date."""
    resolved: list[Chapter] = []
    for chapter in chapters:
        for booking in chapter.bookings:
            done = resolve_booking(booking, registry)
            day = chapter.date
            if done.date_offset:
                day += timedelta(days=done.date_offset)
                done = replace(done, date_offset=0)
            resolved.append(Chapter(day, (done,)))
    return resolved


def load_ledger(
    text: str,
    *,
    today: date | None = None,
    strict_currencies: bool = False,
) -> LedgerStore:
    """Parse and resolve ledger text.

    Args:
        text: Ledger source
        today: Reference date for relative date lines
        strict_currencies: Reject currencies missing from the currency block

    Returns:
        A store holding the resolved ledger

    Raises:
        LedgerError: On the first parse or resolution error
    """
    parsed = parse_ledger(text, today=today, strict_currencies=strict_currencies)
    chapters = resolve_chapters(parsed.chapters, parsed.registry)
    store = LedgerStore.from_chapters(chapters, parsed.registry)
    logger.debug(
        "Loaded %d bookings in %d chapters", len(store.bookings()), len(store.chapters)
    )
    return store
