"""
Tests for the temporal utilities, accrual calculator and aggregator.
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from loanbook.engine import (
    add_days,
    days_between,
    evaluate,
    next_due_date,
    quote_total,
    rank_borrowers,
    summarize,
    total_balance,
    urgency,
)
from loanbook.models import Borrower, Terms, Urgency

from tests.conftest import ORIGIN, make_loan


class TestTemporal:
    """Tests for due-date and day arithmetic."""

    @pytest.mark.parametrize("terms,expected", [
        (Terms.DAILY, date(2024, 1, 2)),
        (Terms.WEEKLY, date(2024, 1, 8)),
        (Terms.KINSENAS, date(2024, 1, 16)),
        (Terms.MONTHLY, date(2024, 2, 1)),
    ])
    def test_next_due_date(self, terms, expected):
        """Test one term after the origin for every interval."""
        assert next_due_date(ORIGIN, terms) == expected

    def test_monthly_clamps_to_month_end(self):
        """Test Jan 31 + 1 month lands on the last day of February."""
        assert next_due_date(date(2024, 1, 31), Terms.MONTHLY) == date(2024, 2, 29)
        assert next_due_date(date(2023, 1, 31), Terms.MONTHLY) == date(2023, 2, 28)

    def test_monthly_crosses_year(self):
        """Test December rolls into January."""
        assert next_due_date(date(2024, 12, 15), Terms.MONTHLY) == date(2025, 1, 15)

    def test_next_due_date_ignores_time(self):
        """Test datetimes are reduced to their calendar date."""
        origin = datetime(2024, 1, 1, 23, 59, tzinfo=timezone.utc)
        assert next_due_date(origin, Terms.DAILY) == date(2024, 1, 2)

    def test_days_between(self):
        """Test whole-day difference, signed."""
        assert days_between(date(2024, 1, 1), date(2024, 1, 31)) == 30
        assert days_between(date(2024, 1, 31), date(2024, 1, 1)) == -30
        assert days_between(date(2024, 1, 1), date(2024, 1, 1)) == 0

    def test_add_days(self):
        """Test the date calculator."""
        assert add_days(date(2024, 2, 28), 2) == date(2024, 3, 1)
        assert add_days(date(2024, 1, 10), -10) == date(2023, 12, 31)


class TestAccrual:
    """Tests for loan evaluation."""

    def test_monthly_at_due(self):
        """Test 1000 at 5%/2% monthly, 30 days in: interest only."""
        result = evaluate(make_loan(), date(2024, 1, 31))
        assert result.elapsed_days == 30
        assert result.interest_amount == Decimal("50.00")
        assert result.penalty_amount == Decimal("0.00")
        assert result.remaining == Decimal("1050.00")
        assert result.is_overdue is False

    def test_monthly_past_due(self):
        """Test 40 days in: prorated interest plus 10 days of penalty."""
        result = evaluate(make_loan(), date(2024, 2, 10))
        assert result.interest_amount == Decimal("66.67")
        assert result.penalty_amount == Decimal("200.00")
        assert result.total_due == Decimal("1266.67")
        assert result.is_overdue is True
        assert result.days_until_due == -9

    def test_full_payment_clears_balance(self):
        """Test paying principal plus interest at day 30 leaves nothing."""
        loan = make_loan(payments=[("1050", date(2024, 1, 31))])
        result = evaluate(loan, date(2024, 1, 31))
        assert result.remaining == Decimal("0")

    def test_penalty_not_reduced_by_payment(self):
        """Test the penalty is charged on principal even after payment."""
        loan = make_loan(payments=[("1050", date(2024, 1, 31))])
        result = evaluate(loan, date(2024, 2, 10))
        assert result.remaining == Decimal("216.67")

    def test_overpayment_clamps_remaining(self):
        """Test remaining never goes negative; net_balance keeps the excess."""
        loan = make_loan(payments=[("2000", date(2024, 1, 2))])
        result = evaluate(loan, date(2024, 1, 2))
        assert result.remaining == Decimal("0")
        assert result.net_balance < 0

    def test_daily_interest(self):
        """Test 100 at 10% daily accrues 10 per day."""
        loan = make_loan(principal="100", terms=Terms.DAILY, interest_rate="10", penalty_rate="0")
        result = evaluate(loan, date(2024, 1, 3))
        assert result.interest_amount == Decimal("20.00")
        assert result.remaining == Decimal("120.00")

    def test_before_origin_has_no_accrual(self):
        """Test as_of before the loan date clamps elapsed days to zero."""
        result = evaluate(make_loan(), date(2023, 12, 1))
        assert result.elapsed_days == 0
        assert result.interest_amount == Decimal("0.00")
        assert result.remaining == Decimal("1000.00")

    def test_monthly_penalty_starts_after_thirty_days(self):
        """Test day 31 accrues one penalty day though not yet past the due date."""
        result = evaluate(make_loan(), date(2024, 2, 1))
        assert result.penalty_amount == Decimal("20.00")
        assert result.is_overdue is False

    def test_zero_rates(self):
        """Test a zero-rate loan only owes principal."""
        loan = make_loan(interest_rate="0", penalty_rate="0")
        assert evaluate(loan, date(2025, 1, 1)).remaining == Decimal("1000")

    def test_remaining_non_decreasing_without_payments(self):
        """Test the balance never falls as time passes with no payments."""
        loan = make_loan()
        previous = Decimal("0")
        for offset in range(0, 90, 3):
            remaining = evaluate(loan, ORIGIN + timedelta(days=offset)).remaining
            assert remaining >= previous
            previous = remaining

    def test_payment_never_increases_remaining(self):
        """Test adding a payment lowers or keeps the balance."""
        as_of = date(2024, 2, 15)
        before = evaluate(make_loan(), as_of).remaining
        after = evaluate(make_loan(payments=[("300", date(2024, 1, 20))]), as_of).remaining
        assert after <= before

    def test_quote_total(self):
        """Test the flat calculator."""
        assert quote_total("1000", "10") == Decimal("1100.00")
        assert quote_total(250, 3.5) == Decimal("258.75")

    def test_quote_total_large_input(self):
        """Test quoting beyond 28 significant digits rounds instead of failing."""
        assert quote_total("1e27", "10") == Decimal("1.1e27")


class TestAggregator:
    """Tests for borrower balances and urgency."""

    def test_total_balance_sums_loans(self):
        """Test the borrower balance is the sum of loan balances."""
        borrower = Borrower(name="A", loans=[make_loan(), make_loan(principal="500")])
        assert total_balance(borrower, date(2024, 1, 31)) == Decimal("1575.00")

    def test_no_loans_is_paid(self):
        """Test a borrower without loans owes nothing."""
        borrower = Borrower(name="A")
        assert total_balance(borrower, ORIGIN) == Decimal("0")
        assert urgency(borrower, ORIGIN) == Urgency.PAID

    @pytest.mark.parametrize("as_of,expected", [
        (date(2024, 1, 10), Urgency.ACTIVE),
        (date(2024, 1, 27), Urgency.DUE_SOON),
        (date(2024, 2, 1), Urgency.DUE_SOON),
        (date(2024, 2, 2), Urgency.OVERDUE),
    ])
    def test_urgency_over_time(self, as_of, expected):
        """Test urgency moves from active to due soon to overdue."""
        borrower = Borrower(name="A", loans=[make_loan()])
        assert urgency(borrower, as_of) == expected

    def test_paid_loan_does_not_make_borrower_overdue(self):
        """Test a settled overdue loan is ignored."""
        settled = make_loan(interest_rate="0", penalty_rate="0",
                            payments=[("1000", date(2024, 1, 5))])
        borrower = Borrower(name="A", loans=[settled])
        assert urgency(borrower, date(2024, 6, 1)) == Urgency.PAID

    def test_any_overdue_loan_wins(self):
        """Test one overdue loan makes the borrower overdue."""
        borrower = Borrower(name="A", loans=[
            make_loan(loan_date=date(2024, 3, 1)),
            make_loan(loan_date=date(2024, 1, 1)),
        ])
        assert urgency(borrower, date(2024, 3, 2)) == Urgency.OVERDUE

    def test_summary_next_due_date(self):
        """Test the summary reports the nearest outstanding due date."""
        borrower = Borrower(name="A", loans=[
            make_loan(loan_date=date(2024, 1, 10)),
            make_loan(loan_date=date(2024, 1, 5)),
        ])
        summary = summarize(borrower, date(2024, 1, 12))
        assert summary.next_due_date == date(2024, 2, 5)
        assert summary.loan_count == 2

    def test_rank_orders_by_urgency_then_due_date(self):
        """Test overdue first, then due soon, then the nearest due date."""
        as_of = date(2024, 2, 5)
        overdue = Borrower(name="Overdue", loans=[make_loan(loan_date=date(2024, 1, 1))])
        due_soon = Borrower(name="Soon", loans=[make_loan(loan_date=date(2024, 1, 8))])
        later = Borrower(name="Later", loans=[make_loan(loan_date=date(2024, 1, 30))])
        sooner = Borrower(name="Sooner", loans=[make_loan(loan_date=date(2024, 1, 20))])
        paid = Borrower(name="Paid")

        ranked = rank_borrowers([paid, later, due_soon, sooner, overdue], as_of)
        assert [s.name for s in ranked] == ["Overdue", "Soon", "Sooner", "Later", "Paid"]

    def test_rank_ties_prefer_recently_updated(self):
        """Test equal urgency and due date fall back to updated_at."""
        older = Borrower(name="Older", updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        newer = Borrower(name="Newer", updated_at=datetime(2024, 1, 2, tzinfo=timezone.utc))
        ranked = rank_borrowers([older, newer], ORIGIN)
        assert [s.name for s in ranked] == ["Newer", "Older"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
