"""
Borrower Aggregator

Derives a borrower's outstanding balance and urgency from its loans.
Nothing here is stored; every figure is recomputed from the loans as
of the requested date.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Union

from loanbook.engine.accrual import ZERO, evaluate
from loanbook.engine.temporal import as_date
from loanbook.models.ledger import (
    Borrower,
    BorrowerSummary,
    LoanEvaluation,
    Urgency,
)

DEFAULT_DUE_SOON_DAYS = 5


def evaluate_loans(borrower: Borrower, as_of: Union[date, datetime]) -> list[LoanEvaluation]:
    return [evaluate(loan, as_of) for loan in borrower.loans]


def total_balance(borrower: Borrower, as_of: Union[date, datetime]) -> Decimal:
    """Sum of the clamped remaining balance over all loans."""
    return sum(
        (evaluation.remaining for evaluation in evaluate_loans(borrower, as_of)),
        ZERO,
    )


def _classify(
    evaluations: list[LoanEvaluation],
    due_soon_days: int,
) -> Urgency:
    outstanding = [e for e in evaluations if e.remaining > 0]
    if not outstanding:
        return Urgency.PAID
    if any(e.is_overdue for e in outstanding):
        return Urgency.OVERDUE
    if any(0 <= e.days_until_due <= due_soon_days for e in outstanding):
        return Urgency.DUE_SOON
    return Urgency.ACTIVE


def urgency(
    borrower: Borrower,
    as_of: Union[date, datetime],
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> Urgency:
    """
    Classify a borrower as OVERDUE, DUE_SOON, ACTIVE or PAID.

    Only loans with a remaining balance count toward the first three.
    """
    return _classify(evaluate_loans(borrower, as_of), due_soon_days)


def summarize(
    borrower: Borrower,
    as_of: Union[date, datetime],
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> BorrowerSummary:
    """Balance, urgency and nearest outstanding due date in one pass."""
    evaluations = evaluate_loans(borrower, as_of)
    outstanding_due = [e.due_date for e in evaluations if e.remaining > 0]

    return BorrowerSummary(
        borrower_id=borrower.id,
        name=borrower.name,
        total_balance=sum((e.remaining for e in evaluations), ZERO),
        urgency=_classify(evaluations, due_soon_days),
        next_due_date=min(outstanding_due) if outstanding_due else None,
        loan_count=len(borrower.loans),
        updated_at=borrower.updated_at,
    )


def _timestamp(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def priority_key(summary: BorrowerSummary) -> tuple:
    """
    Sort key for the worklist.

    Higher urgency first, then the nearest due date (borrowers without
    an outstanding due date last), then the most recently updated, then id.
    """
    due: Optional[date] = summary.next_due_date
    return (
        -summary.urgency.rank,
        due is None,
        due.toordinal() if due else 0,
        -_timestamp(summary.updated_at),
        summary.borrower_id,
    )


def rank_borrowers(
    borrowers: Iterable[Borrower],
    as_of: Union[date, datetime],
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> list[BorrowerSummary]:
    """Summaries ordered from most to least urgent."""
    as_of = as_date(as_of)
    summaries = [summarize(b, as_of, due_soon_days) for b in borrowers]
    return sorted(summaries, key=priority_key)
