"""
Data Models Package

This package contains all Pydantic models used by the loan ledger.
All data flowing through the engine must conform to these schemas.
"""

from loanbook.models.ledger import (
    MAX_AMOUNT,
    MAX_RATE,
    PROFILE_FIELDS,
    Borrower,
    BorrowerSummary,
    Loan,
    LoanEvaluation,
    LoanRequest,
    Payment,
    PaymentReceipt,
    Terms,
    Transaction,
    TransactionType,
    Urgency,
    ValidationIssue,
    ValidationResult,
    new_id,
    to_decimal,
    utc_now,
)
from loanbook.models.reports import (
    Account,
    JournalBook,
    JournalReport,
    JournalRow,
    LedgerAccountBalance,
    Worklist,
    WorklistFilter,
)
from loanbook.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Ledger models
    "MAX_AMOUNT",
    "MAX_RATE",
    "PROFILE_FIELDS",
    "Borrower",
    "BorrowerSummary",
    "Loan",
    "LoanEvaluation",
    "LoanRequest",
    "Payment",
    "PaymentReceipt",
    "Terms",
    "Transaction",
    "TransactionType",
    "Urgency",
    "ValidationIssue",
    "ValidationResult",
    "new_id",
    "to_decimal",
    "utc_now",
    # Report models
    "Account",
    "JournalBook",
    "JournalReport",
    "JournalRow",
    "LedgerAccountBalance",
    "Worklist",
    "WorklistFilter",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
