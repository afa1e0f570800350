"""
Core Data Models for the Loan Ledger

These models define the strict schemas for borrowers, loans and payments.
They are designed to:
1. Enforce the financial invariants at construction time
2. Be serializable for snapshots and backups
3. Carry no derived values (balances, urgency and accruals are computed on read)

DESIGN DECISION: Principal, rates and payment amounts are fixed once created.
Loans and payments are frozen; the only mutation on a loan is appending to
its payments list. Money is always Decimal.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)


# Upper bounds keep every accrual within Decimal's default 28-digit precision.
MAX_AMOUNT = Decimal("1000000000000")
MAX_RATE = Decimal("1000")


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_decimal(value) -> Decimal:
    """Convert user input (int, float, str, Decimal) to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Terms(str, Enum):
    """
    Repayment interval of a loan.

    Determines both the due-date offset and the length of one
    interest accrual period.
    """
    DAILY = "Daily"
    WEEKLY = "Weekly"
    KINSENAS = "Kinsenas"  # every 15 days
    MONTHLY = "Monthly"

    @property
    def period_days(self) -> int:
        """Canonical day-length of one term (a month counts as 30)."""
        return _TERM_DAYS[self]


_TERM_DAYS = {
    Terms.DAILY: 1,
    Terms.WEEKLY: 7,
    Terms.KINSENAS: 15,
    Terms.MONTHLY: 30,
}


class TransactionType(str, Enum):
    """Journal-level transaction kinds."""
    DISBURSEMENT = "Disbursement"  # loan out
    RECEIPT = "Receipt"            # payment in


class Urgency(str, Enum):
    """
    Borrower urgency classification.

    Ordered by rank: OVERDUE > DUE_SOON > ACTIVE > PAID.
    """
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    ACTIVE = "active"
    PAID = "paid"

    @property
    def rank(self) -> int:
        return _URGENCY_RANK[self]


_URGENCY_RANK = {
    Urgency.OVERDUE: 3,
    Urgency.DUE_SOON: 2,
    Urgency.ACTIVE: 1,
    Urgency.PAID: 0,
}


# =============================================================================
# LEDGER ENTITIES
# =============================================================================

class Payment(BaseModel):
    """A payment received against a loan. Immutable once created."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_id,
        description="Unique payment ID"
    )
    payment_date: date = Field(
        ...,
        description="Date the payment was recorded"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        le=MAX_AMOUNT,
        description="Amount paid"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Reference or note shown in the journals"
    )


class Loan(BaseModel):
    """
    A loan extended to a borrower.

    Principal, terms and rates are fixed at origination. Changing a rate
    means creating a new loan.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_id,
        description="Unique loan ID"
    )
    principal: Decimal = Field(
        ...,
        gt=0,
        le=MAX_AMOUNT,
        description="Amount lent"
    )
    loan_date: date = Field(
        ...,
        description="Origination date"
    )
    terms: Terms = Field(
        ...,
        description="Repayment interval"
    )
    interest_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        le=MAX_RATE,
        description="Interest per term, in percent"
    )
    penalty_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        le=MAX_RATE,
        description="Penalty per overdue day, in percent of principal"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Reference or note shown in the journals"
    )
    payments: list[Payment] = Field(default_factory=list)

    @property
    def total_paid(self) -> Decimal:
        return sum((payment.amount for payment in self.payments), Decimal("0"))


class Borrower(BaseModel):
    """
    A person who borrows money.

    Owns its loans exclusively: deleting the borrower deletes them.
    Only contact/display fields may be edited after creation.
    """
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    id: str = Field(
        default_factory=new_id,
        description="Unique borrower ID, immutable"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name (required)"
    )
    mobile: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Mobile/phone number"
    )
    address: Optional[str] = Field(
        default=None,
        max_length=500
    )
    age: Optional[int] = Field(
        default=None,
        ge=0,
        le=150
    )
    photo: Optional[str] = Field(
        default=None,
        description="Small encoded image (e.g. a data URL)"
    )
    loans: list[Loan] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(
        default_factory=utc_now,
        description="Last time a loan, payment or profile field changed"
    )

    def find_loan(self, loan_id: str) -> Optional[Loan]:
        for loan in self.loans:
            if loan.id == loan_id:
                return loan
        return None


# Fields editBorrowerProfile may touch. Everything else is financial or identity.
PROFILE_FIELDS = frozenset({"name", "mobile", "address", "age", "photo"})


class LoanRequest(BaseModel):
    """Parameters for originating a loan (used for a borrower's first loan)."""
    model_config = ConfigDict(str_strip_whitespace=True)

    principal: Decimal
    terms: Terms = Terms.MONTHLY
    interest_rate: Decimal = Decimal("0")
    penalty_rate: Decimal = Decimal("0")
    loan_date: Optional[date] = None
    notes: Optional[str] = None


# =============================================================================
# DERIVED VIEWS (computed on read, never persisted)
# =============================================================================

class Transaction(BaseModel):
    """
    A journal-level record derived from the Borrower -> Loan -> Payment graph.

    Each disbursement or receipt is a transfer between Cash and
    Accounts Receivable.
    """
    model_config = ConfigDict(frozen=True)

    transaction_id: str
    type: TransactionType
    transaction_date: date
    name: str = Field(..., description="Payer (receipt) or payee (disbursement)")
    reference: str = ""
    amount: Decimal
    borrower_id: str
    loan_id: str


class LoanEvaluation(BaseModel):
    """Accrual state of one loan as of a given date."""
    model_config = ConfigDict(frozen=True)

    loan_id: str
    as_of: date
    due_date: date
    elapsed_days: int = Field(ge=0)
    days_until_due: int
    is_overdue: bool
    interest_amount: Decimal
    penalty_amount: Decimal
    total_due: Decimal
    total_paid: Decimal
    remaining: Decimal = Field(ge=0, description="Clamped to zero for display")
    net_balance: Decimal = Field(
        ...,
        description="total_due - total_paid, unclamped (negative means overpaid)"
    )


class BorrowerSummary(BaseModel):
    """Aggregated view of a borrower used to rank the worklist."""
    model_config = ConfigDict(frozen=True)

    borrower_id: str
    name: str
    total_balance: Decimal
    urgency: Urgency
    next_due_date: Optional[date] = Field(
        default=None,
        description="Soonest due date among loans with a remaining balance"
    )
    loan_count: int = 0
    updated_at: datetime


class PaymentReceipt(BaseModel):
    """What record_payment hands back for receipt display."""
    model_config = ConfigDict(frozen=True)

    borrower_id: str
    borrower_name: str
    loan_id: str
    payment_id: str
    payment_date: date
    amount: Decimal
    remaining: Decimal = Field(..., description="Loan balance after this payment")
    borrower_balance: Decimal = Field(..., description="Total across all the borrower's loans")


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (required fields, signs)
    Stage 2: Semantic validation (suspicious but allowed values)
    """

    subject: str = Field(
        ...,
        description="What was validated (borrower, loan, payment, profile)"
    )
    schema_valid: bool
    semantic_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.schema_valid and self.semantic_valid

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
