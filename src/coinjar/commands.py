"""Command grammar for the interactive interpreter.

Commands are single lines tokenized with shell quoting::

    split $30 on liability/card to expense/food for "team lunch" with @Anna @John
    reg food
    date -1
    open asset/@Mary/receivable
"""

import shlex
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from coinjar.dates import DateArg
from coinjar.exceptions import CommandError, ParseError
from coinjar.models import CONTACT_MARKER, Account, SplitMode

ALIASES = {
    "register": "reg",
    "write": "save",
    "w": "save",
    "ins": "inspect",
}

SPLIT_KEYWORDS = ("on", "to", "for", "with", "by")


def _check_account(value: str) -> str:
    try:
        return Account.parse(value).name
    except ParseError as e:
        raise ValueError(e.message) from e


class SplitCommand(BaseModel):
    """Evaluate a split without committing it."""

    kind: Literal["split"] = "split"
    money: str = Field(min_length=1)
    on: str
    to: str = "expense"
    description: str = ""
    mode: SplitMode = SplitMode.EVEN
    contacts: list[str] = Field(min_length=1)

    @field_validator("on", "to")
    @classmethod
    def check_account(cls, v: str) -> str:
        """Normalize account paths."""
        return _check_account(v)

    @field_validator("contacts")
    @classmethod
    def check_contacts(cls, v: list[str]) -> list[str]:
        """Strip the contact marker and reject bare names."""
        names = []
        for item in v:
            item = item.strip().rstrip(",")
            if not item.startswith(CONTACT_MARKER) or len(item) == len(CONTACT_MARKER):
                msg = f"Contact {item!r} must start with {CONTACT_MARKER!r}"
                raise ValueError(msg)
            names.append(item[len(CONTACT_MARKER) :])
        return names


class RegisterCommand(BaseModel):
    """List postings matching a description or account matcher."""

    kind: Literal["reg"] = "reg"
    matcher: str | None = None


class DateCommand(BaseModel):
    """Show or move the context date."""

    kind: Literal["date"] = "date"
    arg: str | None = None

    @field_validator("arg")
    @classmethod
    def check_arg(cls, v: str | None) -> str | None:
        if v is not None:
            DateArg.parse(v)
        return v


class AccountsCommand(BaseModel):
    kind: Literal["accns"] = "accns"


class OpenCommand(BaseModel):
    """Register an account with a zero balance."""

    kind: Literal["open"] = "open"
    account: str

    @field_validator("account")
    @classmethod
    def check_account(cls, v: str) -> str:
        return _check_account(v)


class SaveCommand(BaseModel):
    kind: Literal["save"] = "save"


class DeleteCommand(BaseModel):
    kind: Literal["del"] = "del"


class UndoCommand(BaseModel):
    kind: Literal["undo"] = "undo"


class InspectCommand(BaseModel):
    kind: Literal["inspect"] = "inspect"


Command = Annotated[
    SplitCommand
    | RegisterCommand
    | DateCommand
    | AccountsCommand
    | OpenCommand
    | SaveCommand
    | DeleteCommand
    | UndoCommand
    | InspectCommand,
    Field(discriminator="kind"),
]

_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


def _split_payload(args: list[str]) -> dict[str, object]:
    """Group split arguments by the keyword that precedes them."""
    groups: dict[str, list[str]] = {"money": []}
    current = "money"
    for arg in args:
        if arg in SPLIT_KEYWORDS:
            if arg in groups:
                msg = f"Keyword {arg!r} given twice"
                raise CommandError(msg, command="split")
            current = arg
            groups[current] = []
            continue
        groups[current].append(arg)

    if "with" in groups and "by" in groups:
        raise CommandError("Use either 'with' or 'by', not both", command="split")

    payload: dict[str, object] = {"kind": "split", "money": " ".join(groups["money"])}
    for key in ("on", "to"):
        if key in groups:
            payload[key] = " ".join(groups[key])
    if "for" in groups:
        payload["description"] = " ".join(groups["for"])
    if "by" in groups:
        if len(groups["by"]) != 1:
            raise CommandError("'by' takes exactly one contact", command="split")
        payload["mode"] = SplitMode.BY
        payload["contacts"] = groups["by"]
    else:
        payload["contacts"] = groups.get("with", [])
    return payload


def parse_command(line: str) -> Command:
    """Parse one command line.

    Raises:
        CommandError: If the command is unknown or its arguments are malformed
    """
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        raise CommandError(f"Cannot tokenize {line!r}: {e}") from e
    if not tokens:
        raise CommandError("Empty command")

    name, args = tokens[0], tokens[1:]
    kind = ALIASES.get(name, name)

    payload: dict[str, object]
    match kind:
        case "split":
            payload = _split_payload(args)
        case "reg" | "date":
            if len(args) > 1:
                raise CommandError(f"{name} takes at most one argument", command=kind)
            key = "matcher" if kind == "reg" else "arg"
            payload = {"kind": kind, key: args[0] if args else None}
        case "open":
            if not args:
                raise CommandError("open needs an account", command=kind)
            payload = {"kind": kind, "account": " ".join(args)}
        case "accns" | "save" | "del" | "undo" | "inspect":
            if args:
                raise CommandError(f"{name} takes no arguments", command=kind)
            payload = {"kind": kind}
        case _:
            raise CommandError(f"Unknown command {name!r}", command=name)

    try:
        return _command_adapter.validate_python(payload)
    except ValidationError as e:
        details = "; ".join(err["msg"] for err in e.errors())
        raise CommandError(f"Invalid {kind} arguments: {details}", command=kind) from e
