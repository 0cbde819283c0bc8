"""Display rows for ledger queries."""

from collections.abc import Iterable
from datetime import date

from pydantic import BaseModel

from coinjar.ledger import ContactRow, LedgerStore, RegisterRow
from coinjar.money import CurrencyRegistry, Money, format_money


def format_balance(moneys: Iterable[Money], registry: CurrencyRegistry) -> str:
    """Render several currencies side by side ("0" when there are none)."""
    parts = [format_money(m, registry) for m in moneys]
    return ", ".join(parts) if parts else "0"


class AccountView(BaseModel):
    """An account and its balance per currency."""

    account: str
    balance: str


class RegisterView(BaseModel):
    """A register row with its running total."""

    date: date
    description: str
    account: str
    amount: str
    total: str


class ContactView(BaseModel):
    """A contact ledger row with the running balance."""

    date: date
    description: str
    account: str
    delta: str
    balance: str


def account_views(store: LedgerStore) -> list[AccountView]:
    registry = store.registry
    return [
        AccountView(
            account=account.name,
            balance=format_balance(store.balance(account).values(), registry),
        )
        for account in store.accounts()
    ]


def register_views(rows: Iterable[RegisterRow], registry: CurrencyRegistry) -> list[RegisterView]:
    return [
        RegisterView(
            date=row.date,
            description=row.description,
            account=row.account.name,
            amount=format_money(row.amount, registry),
            total=format_balance(row.total, registry),
        )
        for row in rows
    ]


def contact_views(rows: Iterable[ContactRow], registry: CurrencyRegistry) -> list[ContactView]:
    return [
        ContactView(
            date=row.date,
            description=row.description,
            account=row.account.name,
            delta=format_money(row.delta, registry),
            balance=format_balance(row.balance, registry),
        )
        for row in rows
    ]
