"""
Loan Ledger Engine

Temporal utilities, the accrual calculator and the borrower aggregator.
All functions are pure: they read loans and return derived values.
"""

from loanbook.engine.temporal import add_days, as_date, days_between, next_due_date
from loanbook.engine.accrual import evaluate, quote_total
from loanbook.engine.aggregator import (
    priority_key,
    rank_borrowers,
    summarize,
    total_balance,
    urgency,
)

__all__ = [
    "add_days",
    "as_date",
    "days_between",
    "next_due_date",
    "evaluate",
    "quote_total",
    "priority_key",
    "rank_borrowers",
    "summarize",
    "total_balance",
    "urgency",
]
