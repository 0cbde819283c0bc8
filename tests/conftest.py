"""Shared fixtures for coinjar tests."""

from datetime import date

import pytest

from coinjar.ledger import LedgerStore
from coinjar.loader import load_ledger

JOHN_LEDGER = """\
currency
    $ USD ; US Dollar
    € EUR ; Euro

2024-01-05
Dinner with John
    liability/@John/payable      -€10.00
    expense/food/dine out

2024-01-06
Lunch with John #[split(@John)]
    liability/@Bank of America/credits    -$10.00
    expense/food/dine out
"""


@pytest.fixture
def john_text() -> str:
    return JOHN_LEDGER


@pytest.fixture
def today() -> date:
    return date(2024, 1, 6)


@pytest.fixture
def john_store(today: date) -> LedgerStore:
    return load_ledger(JOHN_LEDGER, today=today)
