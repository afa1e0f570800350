"""
loanbook - a personal micro-lending ledger.

Tracks borrowers, the loans extended to them and the payments received,
computes interest, penalties and balances on demand, and projects the
history into double-entry journals.
"""

from loanbook.exceptions import (
    LedgerError,
    NotFoundError,
    ParseError,
    PersistenceCapacityError,
    StorageError,
    ValidationError,
)
from loanbook.models import (
    Borrower,
    JournalBook,
    Loan,
    LoanRequest,
    Payment,
    Terms,
    Urgency,
    WorklistFilter,
)
from loanbook.store import LedgerStore

__version__ = "2.0.0"

__all__ = [
    "LedgerStore",
    "Borrower",
    "Loan",
    "LoanRequest",
    "Payment",
    "Terms",
    "Urgency",
    "JournalBook",
    "WorklistFilter",
    "LedgerError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
    "PersistenceCapacityError",
    "ParseError",
]
