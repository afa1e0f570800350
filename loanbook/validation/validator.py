"""
Two-Stage Validation Pipeline

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (borrower name)
- Range checks (principal and payment amount > 0, rates >= 0, upper bounds)
- Parseable numbers
Any stage 1 issue is an error and blocks the mutation.

STAGE 2 - SEMANTIC VALIDATION:
- Dates too far in the future
- Unusually large principal
- Payment larger than what is currently owed
Stage 2 issues are warnings. They are logged and returned but never
block, and stage 2 only runs when stage 1 passed.

IMPORTANT: Validation never silently fixes input. It reports.
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from loanbook.config import LedgerSettings, get_settings
from loanbook.exceptions import ValidationError
from loanbook.models.ledger import (
    MAX_AMOUNT,
    MAX_RATE,
    PROFILE_FIELDS,
    ValidationIssue,
    ValidationResult,
    to_decimal,
)


def parse_amount(value: Any) -> Optional[Decimal]:
    """Decimal from user input, or None if it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = to_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not amount.is_finite():
        return None
    return amount


class LedgerValidator:
    """
    Validates borrower, loan and payment input before the store mutates.
    """

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    # -------------------------------------------------------------------------
    # Borrowers
    # -------------------------------------------------------------------------

    def validate_borrower(self, name: Any) -> ValidationResult:
        issues = self._check_name(name)
        return self._result("borrower", issues, [])

    def validate_profile_edit(self, fields: dict) -> ValidationResult:
        """Only contact/display fields may change, and name cannot become blank."""
        issues = []
        for key in sorted(fields):
            if key not in PROFILE_FIELDS:
                issues.append(ValidationIssue(
                    field=key,
                    issue_type="not_editable",
                    message=f"'{key}' cannot be edited on a borrower profile",
                    severity="error",
                    suggested_fix="Create a new loan to change financial terms",
                ))
        if "name" in fields:
            issues.extend(self._check_name(fields["name"]))
        return self._result("profile", issues, [])

    # -------------------------------------------------------------------------
    # Loans
    # -------------------------------------------------------------------------

    def validate_loan(
        self,
        principal: Any,
        interest_rate: Any,
        penalty_rate: Any,
        loan_date: date,
        today: date,
    ) -> ValidationResult:
        issues = []
        amount = parse_amount(principal)
        if amount is None:
            issues.append(self._missing_number("principal", "Principal"))
        elif amount <= 0:
            issues.append(ValidationIssue(
                field="principal",
                issue_type="invalid_value",
                message="Principal must be greater than zero",
                severity="error",
            ))
        elif amount > MAX_AMOUNT:
            issues.append(self._too_large("principal", "Principal", MAX_AMOUNT))

        for field, label, value in (
            ("interest_rate", "Interest rate", interest_rate),
            ("penalty_rate", "Penalty rate", penalty_rate),
        ):
            rate = parse_amount(value)
            if rate is None:
                issues.append(self._missing_number(field, label))
            elif rate < 0:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="invalid_value",
                    message=f"{label} cannot be negative",
                    severity="error",
                ))
            elif rate > MAX_RATE:
                issues.append(self._too_large(field, label, MAX_RATE))

        warnings = []
        if not issues:
            warnings.extend(self._check_future_date("loan_date", loan_date, today))
            max_principal = Decimal(str(self._settings.max_principal))
            if amount > max_principal:
                warnings.append(ValidationIssue(
                    field="principal",
                    issue_type="suspicious_value",
                    message=f"Principal ({amount:,.2f}) seems unusually high",
                    severity="warning",
                    suggested_fix="Please verify this amount is correct",
                ))
        return self._result("loan", issues, warnings)

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    def validate_payment(
        self,
        amount: Any,
        payment_date: date,
        today: date,
        remaining: Optional[Decimal] = None,
    ) -> ValidationResult:
        """
        ``remaining`` is the loan's current balance, when known; paying
        more than that is allowed but flagged.
        """
        issues = []
        value = parse_amount(amount)
        if value is None:
            issues.append(self._missing_number("amount", "Payment amount"))
        elif value <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Payment amount must be greater than zero",
                severity="error",
            ))
        elif value > MAX_AMOUNT:
            issues.append(self._too_large("amount", "Payment amount", MAX_AMOUNT))

        warnings = []
        if not issues:
            warnings.extend(self._check_future_date("payment_date", payment_date, today))
            if remaining is not None and value > remaining:
                warnings.append(ValidationIssue(
                    field="amount",
                    issue_type="overpayment",
                    message=f"Payment ({value:,.2f}) exceeds the remaining balance ({remaining:,.2f})",
                    severity="warning",
                    suggested_fix="Overpayments are not carried as credit",
                ))
        return self._result("payment", issues, warnings)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def ensure_valid(self, result: ValidationResult) -> ValidationResult:
        """Raise ValidationError if the result carries any error."""
        if result.has_errors:
            errors = [i for i in result.issues if i.severity == "error"]
            raise ValidationError(errors[0].message, issues=result.issues)
        return result

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Short text suitable for showing next to a form."""
        if not result.issues:
            return "✅ All checks passed."

        lines = []
        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")
        return "\n".join(lines)

    def _result(
        self,
        subject: str,
        errors: list[ValidationIssue],
        warnings: list[ValidationIssue],
    ) -> ValidationResult:
        schema_valid = not errors
        return ValidationResult(
            subject=subject,
            schema_valid=schema_valid,
            semantic_valid=schema_valid and not warnings,
            issues=errors + warnings,
        )

    def _check_name(self, name: Any) -> list[ValidationIssue]:
        if not isinstance(name, str) or not name.strip():
            return [ValidationIssue(
                field="name",
                issue_type="missing",
                message="Borrower name is required",
                severity="error",
            )]
        if len(name.strip()) > 200:
            return [ValidationIssue(
                field="name",
                issue_type="invalid_value",
                message="Borrower name is longer than 200 characters",
                severity="error",
            )]
        return []

    def _missing_number(self, field: str, label: str) -> ValidationIssue:
        return ValidationIssue(
            field=field,
            issue_type="missing",
            message=f"{label} must be a number",
            severity="error",
        )

    def _too_large(self, field: str, label: str, limit: Decimal) -> ValidationIssue:
        return ValidationIssue(
            field=field,
            issue_type="out_of_range",
            message=f"{label} cannot exceed {limit:,}",
            severity="error",
        )

    def _check_future_date(
        self,
        field: str,
        value: date,
        today: date,
    ) -> list[ValidationIssue]:
        limit = today + timedelta(days=self._settings.future_date_tolerance_days)
        if value > limit:
            return [ValidationIssue(
                field=field,
                issue_type="future_date",
                message=f"Date ({value}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            )]
        return []
