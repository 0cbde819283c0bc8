"""Balance inference: fill in omitted posting amounts and check balance."""

import logging
from dataclasses import replace
from decimal import Decimal

from coinjar.exceptions import InferenceError
from coinjar.models import Booking, Posting
from coinjar.money import Money

logger = logging.getLogger(__name__)


def infer_booking(booking: Booking) -> Booking:
    """Resolve a booking into explicit postings that sum to zero per currency.

    A single blank posting takes the negated sum of the other postings when
    exactly one currency is in play. Currency groups without a blank posting
    must already sum to zero.

    Args:
        booking: A booking whose split directive, if any, is already resolved

    Returns:
        The booking with every posting explicit

    Raises:
        InferenceError: If there are several blank postings, or a blank
            posting in a booking with zero or several currencies
        BalanceError: If a currency group does not sum to zero
    """
    blanks = booking.blank_postings
    if not blanks:
        booking.validate()
        return booking

    if len(blanks) > 1:
        raise InferenceError(
            f"Cannot infer amount on {booking.description!r}: "
            f"{len(blanks)} postings are missing a value",
            line=blanks[1].line or booking.line,
        )

    imbalance = booking.imbalance
    if len(imbalance) != 1:
        reason = "no currency" if not imbalance else f"{len(imbalance)} currencies"
        raise InferenceError(
            f"Cannot infer amount on {booking.description!r}: {reason} in play",
            line=blanks[0].line or booking.line,
        )

    ((currency, total),) = imbalance.items()
    inferred = Money(currency, -total if total else Decimal(0))
    postings = tuple(
        Posting(p.account, inferred, line=p.line) if p.is_blank else p for p in booking.postings
    )
    logger.debug("Inferred %s for %s on %r", inferred, blanks[0].account, booking.description)
    return replace(booking, postings=postings)
