"""Split resolution: expand split directives into explicit contact postings."""

import logging
from dataclasses import replace

from coinjar.exceptions import SplitResolutionError
from coinjar.models import Account, Booking, Posting, SplitMode
from coinjar.money import CurrencyRegistry, Money

logger = logging.getLogger(__name__)

RECEIVABLE = ("asset", "receivable")
PAYABLE = ("liability", "payable")


def contact_posting(contact: str, share: Money) -> Posting:
    """Build the posting that records a contact's share.

    A positive share is money the contact owes (asset/@C/receivable);
    otherwise it is money owed to the contact (liability/@C/payable).
    """
    root, leaf = RECEIVABLE if share.amount > 0 else PAYABLE
    return Posting(account=Account.for_contact(root, contact, leaf), money=share)


def resolve_split(booking: Booking, registry: CurrencyRegistry) -> Booking:
    """Replace a booking's split directive with explicit contact postings.

    The funding posting is the single posting with an explicit amount; the
    amount to distribute is its negation.

    - even: the total is divided among the payer and the contacts. Contacts
      get their shares as postings and blank postings stay blank, so that
      inference leaves the payer's share on them.
    - by: the named contact is charged the whole total and blank postings
      are dropped.

    Bookings without a directive are returned unchanged.

    Raises:
        SplitResolutionError: If the directive lists no contacts or the
            booking does not have exactly one funding posting
    """
    directive = booking.split
    if directive is None:
        return booking

    if not directive.contacts:
        raise SplitResolutionError(
            f"Split on {booking.description!r} references no contacts", line=booking.line
        )

    funding = booking.explicit_postings
    if len(funding) != 1:
        raise SplitResolutionError(
            f"Split on {booking.description!r} needs exactly one funding posting, "
            f"found {len(funding)}",
            line=booking.line,
        )

    total = -funding[0].money  # type: ignore[operator]
    precision = registry.currency_for(total.currency).precision

    if directive.mode is SplitMode.EVEN:
        shares = total.split_even(len(directive.contacts) + 1, precision)
        added = [contact_posting(c, s) for c, s in zip(directive.contacts, shares[1:])]
        kept = list(booking.postings)
    else:
        added = [contact_posting(directive.contacts[0], total)]
        kept = booking.explicit_postings

    logger.debug(
        "Resolved %s split of %s on %r across %s",
        directive.mode,
        total,
        booking.description,
        ", ".join(directive.contacts),
    )
    return replace(booking, postings=tuple(kept + added), split=None)
