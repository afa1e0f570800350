"""
Tests for loanbook models

Test strategy:
1. Unit tests for individual components (models, engine, validators)
2. Integration tests for the store (with in-memory storage)
3. No real files outside tmp_path
"""

import pytest
from datetime import date
from decimal import Decimal

from loanbook.models import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
    Borrower,
    JournalReport,
    JournalRow,
    JournalBook,
    Loan,
    Payment,
    Terms,
    Urgency,
    ValidationIssue,
    ValidationResult,
    Worklist,
)

from tests.conftest import make_loan


class TestLedgerModels:
    """Tests for borrower, loan and payment models."""

    def test_borrower_creation(self):
        """Test Borrower model creation with defaults."""
        borrower = Borrower(name="Juan dela Cruz", mobile="0917")
        assert borrower.name == "Juan dela Cruz"
        assert borrower.loans == []
        assert borrower.id
        assert borrower.created_at.tzinfo is not None

    def test_borrower_strips_whitespace(self):
        """Test that whitespace is stripped from the name."""
        borrower = Borrower(name="  Juan  ")
        assert borrower.name == "Juan"

    def test_borrower_requires_name(self):
        """Test that a blank name is rejected."""
        with pytest.raises(ValueError):
            Borrower(name="   ")

    def test_borrower_ids_are_unique(self):
        """Test that default ids differ."""
        assert Borrower(name="A").id != Borrower(name="A").id

    def test_find_loan(self):
        """Test looking up a loan by id."""
        loan = make_loan()
        borrower = Borrower(name="A", loans=[loan])
        assert borrower.find_loan(loan.id) is loan
        assert borrower.find_loan("missing") is None

    def test_loan_rejects_non_positive_principal(self):
        """Test that principal must be greater than zero."""
        with pytest.raises(ValueError):
            make_loan(principal="0")

    def test_loan_rejects_negative_rate(self):
        """Test that rates cannot be negative."""
        with pytest.raises(ValueError):
            make_loan(interest_rate="-1")

    def test_loan_is_frozen(self):
        """Test that principal cannot be changed after creation."""
        loan = make_loan()
        with pytest.raises(ValueError):
            loan.principal = Decimal("5")

    def test_loan_total_paid(self):
        """Test total_paid sums every payment."""
        loan = make_loan(payments=[("100", date(2024, 1, 5)), ("50.50", date(2024, 1, 9))])
        assert loan.total_paid == Decimal("150.50")

    def test_loan_rejects_principal_above_limit(self):
        """Test principal is bounded so accruals stay in range."""
        with pytest.raises(ValueError):
            make_loan(principal="1e27")

    def test_loan_rejects_rate_above_limit(self):
        """Test rates are bounded."""
        with pytest.raises(ValueError):
            make_loan(penalty_rate="1000.01")

    def test_payment_rejects_zero(self):
        """Test that a payment must be positive."""
        with pytest.raises(ValueError):
            Payment(amount=Decimal("0"), payment_date=date(2024, 1, 1))

    def test_loan_accepts_term_label(self):
        """Test terms parse from their display label."""
        loan = Loan(principal=Decimal("10"), loan_date=date(2024, 1, 1), terms="Kinsenas")
        assert loan.terms == Terms.KINSENAS


class TestEnums:
    """Tests for the enums."""

    def test_term_period_days(self):
        """Test canonical term lengths."""
        assert Terms.DAILY.period_days == 1
        assert Terms.WEEKLY.period_days == 7
        assert Terms.KINSENAS.period_days == 15
        assert Terms.MONTHLY.period_days == 30

    def test_urgency_rank_order(self):
        """Test OVERDUE > DUE_SOON > ACTIVE > PAID."""
        ranks = [u.rank for u in (Urgency.OVERDUE, Urgency.DUE_SOON, Urgency.ACTIVE, Urgency.PAID)]
        assert ranks == sorted(ranks, reverse=True)

    def test_journal_book_values(self):
        """Test book codes."""
        assert JournalBook("crj") == JournalBook.CASH_RECEIPTS
        assert JournalBook("gl") == JournalBook.GENERAL_LEDGER


class TestActivityModels:
    """Tests for activity event models."""

    def test_activity_event_creation(self):
        """Test ActivityEvent model creation."""
        event = ActivityEvent(
            event_type=ActivityEventType.BORROWER_ADDED,
            description="Borrower added",
        )
        assert event.severity == ActivitySeverity.INFO

    def test_activity_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = ActivityEvent(
            event_type=ActivityEventType.PAYMENT_RECORDED,
            description="Payment recorded",
            details={"amount": "500"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "payment_recorded"
        assert log_dict["details"]["amount"] == "500"

    def test_builder_save_failed_is_error(self):
        """Test that save failures are logged at error severity."""
        event = ActivityEventBuilder.save_failed("disk full", 1024)
        assert event.event_type == ActivityEventType.SAVE_FAILED
        assert event.severity == ActivitySeverity.ERROR
        assert event.error_message == "disk full"

    def test_builder_payment_recorded(self):
        """Test ActivityEventBuilder.payment_recorded."""
        event = ActivityEventBuilder.payment_recorded("b1", "l1", "100.00", "950.00")
        assert event.event_type == ActivityEventType.PAYMENT_RECORDED
        assert event.entity_id == "l1"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            subject="loan",
            schema_valid=False,
            semantic_valid=False,
            issues=[
                ValidationIssue(
                    field="principal",
                    issue_type="missing",
                    message="Principal required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.is_valid is False

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            subject="payment",
            schema_valid=True,
            semantic_valid=False,
            issues=[
                ValidationIssue(
                    field="payment_date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.warnings == ["Date in future"]

    def test_issue_severity_pattern(self):
        """Test severity must be error, warning or info."""
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


class TestReportModels:
    """Tests for report models."""

    def test_journal_report_totals(self):
        """Test debit and credit totals."""
        report = JournalReport(
            book=JournalBook.GENERAL_JOURNAL,
            description="test",
            rows=[
                JournalRow(transaction_id="t", entry_date=date(2024, 1, 1), name="Cash",
                           debit=Decimal("10")),
                JournalRow(transaction_id="t", entry_date=date(2024, 1, 1), name="AR",
                           credit=Decimal("10")),
            ],
        )
        assert report.row_count == 2
        assert report.total_debit == report.total_credit == Decimal("10")

    def test_worklist_has_more(self):
        """Test has_more when matches exceed the shown entries."""
        worklist = Worklist(as_of=date(2024, 1, 1), entries=[], total_matches=3)
        assert worklist.has_more is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
