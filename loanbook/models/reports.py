"""
Report Models

Row shapes for the four books of accounts and the borrower worklist.
Every report is a pure function of the transaction set and is
regenerated on demand; none of these are persisted.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from loanbook.models.ledger import BorrowerSummary, utc_now


class JournalBook(str, Enum):
    """The report projections available."""
    CASH_RECEIPTS = "crj"
    CASH_DISBURSEMENTS = "cdj"
    GENERAL_JOURNAL = "gj"
    GENERAL_LEDGER = "gl"
    TRANSACTIONS = "transactions"  # flat dump, CSV only


class Account(str, Enum):
    """Chart of accounts for the simplified double-entry projection."""
    CASH = "Cash on Hand"
    ACCOUNTS_RECEIVABLE = "Loans Receivable (AR)"


class WorklistFilter(str, Enum):
    """Status filters for the borrower worklist."""
    ALL = "all"
    DUE = "due"
    OVERDUE = "overdue"
    ACTIVE = "active"
    PAID = "paid"


class JournalRow(BaseModel):
    """
    One line in a journal.

    CRJ/CDJ rows carry the same amount in both columns. General journal
    rows come in pairs: a debit line then the complementary credit line.
    """

    transaction_id: str
    entry_date: date
    name: str = Field(..., description="Payer, payee or account title")
    reference: str = ""
    account: Optional[Account] = None
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")


class LedgerAccountBalance(BaseModel):
    """Running total of one general ledger account."""

    account: Account
    debit_balance: Decimal = Field(..., ge=0)
    credit_balance: Decimal = Field(..., ge=0)
    net_balance: Decimal


class JournalReport(BaseModel):
    """A projected book of accounts."""

    book: JournalBook
    generated_at: datetime = Field(default_factory=utc_now)
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    description: str = Field(
        ...,
        description="Human-readable description of what was projected"
    )
    rows: list[JournalRow] = Field(default_factory=list)
    balances: list[LedgerAccountBalance] = Field(
        default_factory=list,
        description="General ledger only"
    )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def total_debit(self) -> Decimal:
        return sum((row.debit for row in self.rows), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((row.credit for row in self.rows), Decimal("0"))


class Worklist(BaseModel):
    """The prioritized borrower list shown on the home screen."""

    as_of: date
    status: WorklistFilter = WorklistFilter.ALL
    search: str = ""
    entries: list[BorrowerSummary] = Field(default_factory=list)
    total_matches: int = Field(..., ge=0)

    @property
    def has_more(self) -> bool:
        """More matches exist than are shown."""
        return self.total_matches > len(self.entries)
