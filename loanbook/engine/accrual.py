"""
Loan Accrual Calculator

Interest accrues continuously in proportion to elapsed time relative
to one term, so a loan shows a partial charge before its first due
date and a growing charge after it. Penalty is linear in the days
past one full term and is computed on principal only; payments do
not reduce it.

Amounts are rounded to cents per loan.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Union

from loanbook.engine.temporal import as_date, days_between, next_due_date
from loanbook.models.ledger import Loan, LoanEvaluation, to_decimal

CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def quantize(amount: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def accrued_interest(loan: Loan, elapsed_days: int) -> Decimal:
    """principal * rate% * (elapsed / term length)."""
    term_days = Decimal(loan.terms.period_days)
    return quantize(
        loan.principal * (loan.interest_rate / HUNDRED) * Decimal(elapsed_days) / term_days
    )


def accrued_penalty(loan: Loan, elapsed_days: int) -> Decimal:
    """principal * penalty% per day beyond one full term; zero before that."""
    term_days = loan.terms.period_days
    if elapsed_days <= term_days:
        return quantize(ZERO)
    overdue_days = elapsed_days - term_days
    return quantize(loan.principal * (loan.penalty_rate / HUNDRED) * Decimal(overdue_days))


def evaluate(loan: Loan, as_of: Union[date, datetime]) -> LoanEvaluation:
    """
    Compute the accrual state of ``loan`` as of a date.

    ``remaining`` is clamped at zero; ``net_balance`` keeps the
    unclamped figure so overpayments stay visible.
    """
    as_of = as_date(as_of)
    due_date = next_due_date(loan.loan_date, loan.terms)
    elapsed_days = max(0, days_between(loan.loan_date, as_of))

    interest = accrued_interest(loan, elapsed_days)
    penalty = accrued_penalty(loan, elapsed_days)
    total_due = loan.principal + interest + penalty
    total_paid = loan.total_paid
    net_balance = total_due - total_paid

    return LoanEvaluation(
        loan_id=loan.id,
        as_of=as_of,
        due_date=due_date,
        elapsed_days=elapsed_days,
        days_until_due=days_between(as_of, due_date),
        is_overdue=as_of > due_date,
        interest_amount=interest,
        penalty_amount=penalty,
        total_due=total_due,
        total_paid=total_paid,
        remaining=max(ZERO, net_balance),
        net_balance=net_balance,
    )


def quote_total(principal, rate) -> Decimal:
    """
    Quick calculator: principal plus one flat interest charge.

    Used to quote a borrower before a loan is created.
    """
    principal = to_decimal(principal)
    return quantize(principal + principal * (to_decimal(rate) / HUNDRED))
