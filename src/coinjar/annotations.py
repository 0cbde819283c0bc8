"""Inline annotations on booking description lines.

Annotations are ``#[name(args)]`` tags placed at the start or the end of a
description line::

    Lunch with John #[split(@John)]
    #[split(by @Anna)] Concert tickets
    Taxi home #[date(-1)]

They are recognized by a scan of the description text that is separate from
the ledger grammar; tags in the middle of a description are left as text.
"""

import re
from dataclasses import dataclass

from coinjar.exceptions import ParseError, SplitResolutionError
from coinjar.models import CONTACT_MARKER, SplitDirective, SplitMode

_TAG = r"#\[\s*(?P<name>\w+)\s*(?:\((?P<args>[^()]*)\))?\s*\]"
_LEADING_RE = re.compile(rf"^\s*{_TAG}")
_TRAILING_RE = re.compile(rf"{_TAG}\s*$")
_CONTACT_RE = re.compile(r"^@[\w-]+(?: [\w-]+)*$")
_OFFSET_RE = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True)
class Annotations:
    """A description line split into its text and its recognized tags."""

    description: str
    split: SplitDirective | None = None
    date_offset: int = 0


def _parse_contact(item: str, line: int | None) -> str:
    item = " ".join(item.split())
    if not _CONTACT_RE.match(item):
        raise SplitResolutionError(f"Malformed split participant {item!r}", line=line)
    return item[len(CONTACT_MARKER) :]


def parse_split_args(args: str, *, line: int | None = None) -> SplitDirective:
    """Parse the argument list of a split tag.

    "@A, @B" splits evenly among A, B and the payer; "by @A" charges A.

    Raises:
        SplitResolutionError: If the participant list is empty or malformed
    """
    args = args.strip()
    head, _, rest = args.partition(" ")
    if head == "by":
        contacts = [c for c in rest.split(",") if c.strip()]
        if len(contacts) != 1:
            raise SplitResolutionError(
                "split(by ...) needs exactly one contact", line=line
            )
        return SplitDirective(SplitMode.BY, (_parse_contact(contacts[0], line),))

    if not args:
        raise SplitResolutionError("Split references no contacts", line=line)

    contacts = tuple(_parse_contact(item, line) for item in args.split(","))
    if len(set(contacts)) != len(contacts):
        raise SplitResolutionError("Split lists a contact twice", line=line)
    return SplitDirective(SplitMode.EVEN, contacts)


def scan_description(text: str, *, line: int | None = None) -> Annotations:
    """Strip leading and trailing tags from a description line.

    Args:
        text: The raw description line (comments already removed)
        line: Source line number, for error reporting

    Returns:
        The clean description with the parsed split directive and date offset

    Raises:
        ParseError: On unknown, duplicated or malformed tags
        SplitResolutionError: On a malformed split participant list
    """
    split: SplitDirective | None = None
    offset: int | None = None
    remaining = text

    while True:
        match = _LEADING_RE.search(remaining) or _TRAILING_RE.search(remaining)
        if match is None:
            break
        column = text.find(match.group(0).strip()) + 1
        name, args = match["name"], match["args"]
        remaining = remaining[: match.start()] + remaining[match.end() :]

        if name == "split":
            if split is not None:
                raise ParseError("Duplicate split annotation", line=line, column=column)
            split = parse_split_args(args or "", line=line)
        elif name == "date":
            if offset is not None:
                raise ParseError("Duplicate date annotation", line=line, column=column)
            if args is None or not _OFFSET_RE.match(args.strip()):
                raise ParseError(
                    f"date annotation expects a day offset, got {args!r}",
                    line=line,
                    column=column,
                )
            offset = int(args.strip())
        else:
            raise ParseError(f"Unknown annotation {name!r}", line=line, column=column)

    return Annotations(
        description=" ".join(remaining.split()),
        split=split,
        date_offset=offset or 0,
    )
