"""
Shared fixtures for the loanbook tests.

No test touches the real filesystem outside ``tmp_path``.
"""

from datetime import date
from decimal import Decimal

import pytest

from loanbook.activity import ActivityLogger
from loanbook.config import LedgerSettings
from loanbook.models import Borrower, Loan, Payment, Terms
from loanbook.services.storage import InMemoryStorage
from loanbook.store import LedgerStore

ORIGIN = date(2024, 1, 1)


class FixedClock:
    """Settable 'today' for the store."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


class RecordingActivityLogger(ActivityLogger):
    """Activity logger that also keeps every event for assertions."""

    def __init__(self):
        super().__init__("loanbook.tests")
        self.events = []

    def log(self, event):
        self.events.append(event)
        return super().log(event)

    def types(self) -> list[str]:
        return [event.event_type.value for event in self.events]


def make_loan(
    principal="1000",
    terms=Terms.MONTHLY,
    interest_rate="5",
    penalty_rate="2",
    loan_date=ORIGIN,
    payments=(),
    **kwargs,
) -> Loan:
    return Loan(
        principal=Decimal(principal),
        terms=terms,
        interest_rate=Decimal(interest_rate),
        penalty_rate=Decimal(penalty_rate),
        loan_date=loan_date,
        payments=[
            Payment(amount=Decimal(amount), payment_date=paid_on)
            for amount, paid_on in payments
        ],
        **kwargs,
    )


@pytest.fixture
def ledger_settings():
    return LedgerSettings(
        currency_symbol="₱",
        due_soon_days=5,
        worklist_limit=4,
        future_date_tolerance_days=1,
        max_principal=1000000.0,
    )


@pytest.fixture
def clock():
    return FixedClock(ORIGIN)


@pytest.fixture
def activity():
    return RecordingActivityLogger()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage, activity, ledger_settings, clock):
    return LedgerStore(
        storage=storage,
        activity_logger=activity,
        settings=ledger_settings,
        clock=clock,
    )


@pytest.fixture
def borrower():
    return Borrower(name="Maria Santos", mobile="09171234567", loans=[make_loan()])
