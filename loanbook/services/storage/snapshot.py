"""
Snapshot codec and legacy migration.

The current schema is a JSON object::

    {"schema_version": 2, "exported_at": "...", "borrowers": [...]}

Version 1 stored a bare array of borrowers, each with a flat
``transactions`` list of ``{type: "Loan" | "Payment", amount, notes, date}``
(or only a ``balance``) plus borrower-level ``terms``. Loading a v1 record
synthesizes loans from those fields. Records that already carry ``loans``
are left untouched, so migrating twice gives the same result as once.
"""

import json
from datetime import date, datetime
from typing import Any, Optional, Union

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from loanbook.exceptions import ParseError
from loanbook.models.ledger import Borrower, Terms, new_id, utc_now

SCHEMA_VERSION = 2

LEGACY_LOAN = "Loan"
LEGACY_PAYMENT = "Payment"


class LedgerSnapshot(BaseModel):
    """The persisted and exported form of the whole ledger."""

    schema_version: int = SCHEMA_VERSION
    exported_at: datetime = Field(default_factory=utc_now)
    borrowers: list[Borrower] = Field(default_factory=list)


class MigrationReport(BaseModel):
    """What a migration pass changed."""

    migrated_borrowers: int = 0
    synthesized_loans: int = 0
    dropped_payments: int = 0

    @property
    def changed(self) -> bool:
        return self.migrated_borrowers > 0


# =============================================================================
# LEGACY MIGRATION
# =============================================================================

def _legacy_date(value: Any) -> Optional[date]:
    """Parse an ISO date or datetime string, keeping the calendar day."""
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _legacy_terms(value: Any) -> Terms:
    try:
        return Terms(value)
    except ValueError:
        return Terms.MONTHLY


def _legacy_amount(value: Any) -> Optional[str]:
    """Positive amount as a string, or None for blanks and junk."""
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    if amount <= 0:
        return None
    return str(value).strip() if isinstance(value, str) else repr(amount)


def _origin_from_due_date(due: Optional[date], terms: Terms) -> Optional[date]:
    if due is None:
        return None
    if terms == Terms.MONTHLY:
        return due - relativedelta(months=1)
    return due - relativedelta(days=terms.period_days)


def migrate_borrower(record: dict, fallback_date: date) -> tuple[dict, MigrationReport]:
    """
    Rebuild one v1 borrower record in the current shape.

    Each legacy ``Loan`` transaction becomes a loan with the borrower's
    terms and zero rates. Each ``Payment`` attaches to the latest loan
    originated on or before it, else to the earliest loan. A borrower with
    only a flat ``balance`` gets a single loan of that principal.
    """
    report = MigrationReport(migrated_borrowers=1)
    borrower_id = str(record.get("id") or new_id())
    terms = _legacy_terms(record.get("terms"))
    interest_rate = record.get("interestRate") or 0
    penalty_rate = record.get("penaltyRate") or 0

    migrated = {
        "id": borrower_id,
        "name": record.get("name"),
        "mobile": record.get("mobile") or record.get("phone") or None,
        "address": record.get("address") or None,
        "age": record.get("age") or None,
        "photo": record.get("photo") or None,
        "loans": [],
    }
    if record.get("lastUpdated"):
        migrated["updated_at"] = record["lastUpdated"]
        migrated["created_at"] = record["lastUpdated"]

    transactions = [t for t in record.get("transactions") or [] if isinstance(t, dict)]
    loans = []
    for t in transactions:
        if t.get("type") != LEGACY_LOAN:
            continue
        principal = _legacy_amount(t.get("amount"))
        if principal is None:
            continue
        loans.append({
            "id": f"{borrower_id}-L{len(loans) + 1}",
            "principal": principal,
            "loan_date": _legacy_date(t.get("date")) or fallback_date,
            "terms": terms,
            "interest_rate": interest_rate,
            "penalty_rate": penalty_rate,
            "notes": t.get("notes") or None,
            "payments": [],
        })

    if not loans:
        principal = _legacy_amount(record.get("balance"))
        if principal is not None:
            origin = (
                _legacy_date(record.get("loanDate"))
                or _origin_from_due_date(_legacy_date(record.get("dueDate")), terms)
                or fallback_date
            )
            loans.append({
                "id": f"{borrower_id}-L1",
                "principal": principal,
                "loan_date": origin,
                "terms": terms,
                "interest_rate": interest_rate,
                "penalty_rate": penalty_rate,
                "notes": None,
                "payments": [],
            })

    for t in transactions:
        if t.get("type") != LEGACY_PAYMENT:
            continue
        amount = _legacy_amount(t.get("amount"))
        if amount is None or not loans:
            report.dropped_payments += 1
            continue
        paid_on = _legacy_date(t.get("date")) or fallback_date
        earlier = [loan for loan in loans if loan["loan_date"] <= paid_on]
        target = earlier[-1] if earlier else min(loans, key=lambda loan: loan["loan_date"])
        target["payments"].append({
            "id": f"{target['id']}-P{len(target['payments']) + 1}",
            "payment_date": paid_on,
            "amount": amount,
            "notes": t.get("notes") or None,
        })

    migrated["loans"] = loans
    report.synthesized_loans = len(loans)
    return migrated, report


def migrate_state(raw: Any, fallback_date: date) -> tuple[dict, MigrationReport]:
    """
    Bring decoded JSON to the current shape.

    Accepts the v1 array or the v2 object. Raises ParseError for any
    other top-level shape.
    """
    if isinstance(raw, list):
        records = raw
        state: dict = {"schema_version": SCHEMA_VERSION}
    elif isinstance(raw, dict) and isinstance(raw.get("borrowers"), list):
        records = raw["borrowers"]
        state = {k: v for k, v in raw.items() if k != "borrowers"}
        state["schema_version"] = SCHEMA_VERSION
    else:
        raise ParseError(
            "Snapshot must be a list of borrowers or an object with a 'borrowers' list"
        )

    report = MigrationReport()
    borrowers = []
    for record in records:
        if not isinstance(record, dict):
            raise ParseError(f"Borrower record must be an object, got {type(record).__name__}")
        if "loans" in record:
            borrowers.append(record)
            continue
        migrated, borrower_report = migrate_borrower(record, fallback_date)
        borrowers.append(migrated)
        report.migrated_borrowers += borrower_report.migrated_borrowers
        report.synthesized_loans += borrower_report.synthesized_loans
        report.dropped_payments += borrower_report.dropped_payments

    state["borrowers"] = borrowers
    return state, report


# =============================================================================
# ENCODE / DECODE
# =============================================================================

def encode_snapshot(borrowers: list[Borrower]) -> str:
    """Serialize the ledger as pretty-printed JSON text."""
    return LedgerSnapshot(borrowers=borrowers).model_dump_json(indent=2)


def decode_snapshot(
    payload: Union[str, bytes],
    fallback_date: date,
) -> tuple[LedgerSnapshot, MigrationReport]:
    """
    Parse, migrate and validate a snapshot.

    Raises:
        ParseError: Invalid JSON, wrong shape, invalid records or
            duplicate borrower ids
    """
    try:
        raw = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Snapshot is not valid JSON: {e}") from e

    state, report = migrate_state(raw, fallback_date)

    try:
        snapshot = LedgerSnapshot.model_validate(state)
    except PydanticValidationError as e:
        raise ParseError(f"Snapshot contains invalid records: {e.error_count()} errors") from e

    seen = set()
    for borrower in snapshot.borrowers:
        if borrower.id in seen:
            raise ParseError(f"Duplicate borrower id in snapshot: {borrower.id}")
        seen.add(borrower.id)

    return snapshot, report
