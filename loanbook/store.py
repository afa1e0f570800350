"""
Ledger Store

The in-memory collection of borrowers and the only place that mutates
it. Each mutation:

1. Validates input and looks up referenced entities (nothing changes on failure)
2. Applies the change in memory
3. Logs an activity event
4. Writes the full snapshot to storage

DESIGN DECISION: Nothing derived is cached. Balances, urgency and the
journals are recomputed from principal, rates, dates and payments on
every read, so restoring or migrating state always reproduces the same
figures.

If step 4 fails because storage is full, the in-memory change stands and
PersistenceCapacityError is raised carrying the mutation's result; the
caller should prompt for a backup export.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from loanbook.activity import ActivityLogger
from loanbook.config import LedgerSettings, get_settings
from loanbook.engine import aggregator
from loanbook.engine.accrual import evaluate
from loanbook.exceptions import (
    NotFoundError,
    ParseError,
    PersistenceCapacityError,
    StorageError,
    ValidationError,
)
from loanbook.models.ledger import (
    Borrower,
    BorrowerSummary,
    Loan,
    LoanEvaluation,
    LoanRequest,
    Payment,
    PaymentReceipt,
    Terms,
    Transaction,
    Urgency,
    ValidationIssue,
    ValidationResult,
    utc_now,
)
from loanbook.models.reports import JournalBook, JournalReport, Worklist, WorklistFilter
from loanbook.reports.export import export_csv
from loanbook.reports.journal import (
    JournalProjector,
    filter_by_date_range,
    flatten_transactions,
)
from loanbook.reports.worklist import build_worklist, collection_list
from loanbook.services.storage import (
    LedgerStorageInterface,
    MigrationReport,
    decode_snapshot,
    encode_snapshot,
)
from loanbook.validation import LedgerValidator

ModelT = TypeVar("ModelT", bound=BaseModel)


class LedgerStore:
    """
    Borrowers, loans and payments, with invariant-preserving mutations.

    Args:
        storage: Key-value backend. If None, nothing is persisted.
        clock: Returns "today"; injectable for tests.
    """

    def __init__(
        self,
        storage: Optional[LedgerStorageInterface] = None,
        validator: Optional[LedgerValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
        projector: Optional[JournalProjector] = None,
        settings: Optional[LedgerSettings] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        self._storage = storage
        self._settings = settings or get_settings().ledger
        self._validator = validator or LedgerValidator(self._settings)
        self._activity = activity_logger or ActivityLogger()
        self._projector = projector or JournalProjector()
        self._clock = clock or date.today
        self._borrowers: list[Borrower] = []

    @classmethod
    def open(cls, storage: LedgerStorageInterface, **kwargs: Any) -> "LedgerStore":
        """Create a store and load whatever the storage holds."""
        store = cls(storage, **kwargs)
        store.load()
        return store

    def today(self) -> date:
        return self._clock()

    # =========================================================================
    # LOADING
    # =========================================================================

    def load(self) -> MigrationReport:
        """
        Replace in-memory state with the stored snapshot.

        Absent or unreadable state yields an empty store. Legacy records are
        migrated and the migrated form is saved back immediately.
        """
        self._borrowers = []
        if self._storage is None:
            return MigrationReport()

        try:
            payload = self._storage.load()
        except StorageError as e:
            self._activity.log_state_load_failed(str(e))
            return MigrationReport()

        if payload is None or not payload.strip():
            self._activity.log_state_loaded(0)
            return MigrationReport()

        try:
            snapshot, report = decode_snapshot(payload, self.today())
        except ParseError as e:
            self._activity.log_state_load_failed(str(e))
            return MigrationReport()

        self._borrowers = snapshot.borrowers
        self._activity.log_state_loaded(len(self._borrowers))

        if report.changed:
            self._activity.log_state_migrated(
                report.migrated_borrowers, report.synthesized_loans
            )
            try:
                self._persist(report)
            except StorageError:
                # Logged by _persist; the next successful save writes the migrated form
                pass
        return report

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def borrowers(self) -> list[Borrower]:
        return list(self._borrowers)

    def get_borrower(self, borrower_id: str) -> Borrower:
        for borrower in self._borrowers:
            if borrower.id == borrower_id:
                return borrower
        raise NotFoundError(f"Borrower not found: {borrower_id}")

    def get_loan(self, borrower_id: str, loan_id: str) -> Loan:
        loan = self.get_borrower(borrower_id).find_loan(loan_id)
        if loan is None:
            raise NotFoundError(f"Loan not found: {loan_id} (borrower {borrower_id})")
        return loan

    def evaluate_loan(
        self,
        borrower_id: str,
        loan_id: str,
        as_of: Optional[date] = None,
    ) -> LoanEvaluation:
        return evaluate(self.get_loan(borrower_id, loan_id), as_of or self.today())

    def borrower_balance(self, borrower_id: str, as_of: Optional[date] = None) -> Decimal:
        return aggregator.total_balance(self.get_borrower(borrower_id), as_of or self.today())

    def borrower_urgency(self, borrower_id: str, as_of: Optional[date] = None) -> Urgency:
        return aggregator.urgency(
            self.get_borrower(borrower_id),
            as_of or self.today(),
            self._settings.due_soon_days,
        )

    def summaries(self, as_of: Optional[date] = None) -> list[BorrowerSummary]:
        """Every borrower, most urgent first."""
        return aggregator.rank_borrowers(
            self._borrowers, as_of or self.today(), self._settings.due_soon_days
        )

    def worklist(
        self,
        as_of: Optional[date] = None,
        search: str = "",
        status: WorklistFilter = WorklistFilter.ALL,
        show_all: bool = False,
    ) -> Worklist:
        as_of = as_of or self.today()
        return build_worklist(
            self.summaries(as_of),
            as_of=as_of,
            search=search,
            status=WorklistFilter(status),
            limit=None if show_all else self._settings.worklist_limit,
        )

    def collection_list(self, as_of: Optional[date] = None) -> str:
        return collection_list(self.summaries(as_of), self._settings.currency_symbol)

    def transactions(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Transaction]:
        """All disbursements and receipts, newest first."""
        return filter_by_date_range(
            flatten_transactions(self._borrowers), date_from, date_to
        )

    def report(
        self,
        book: JournalBook,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> JournalReport:
        return self._projector.project(
            JournalBook(book), flatten_transactions(self._borrowers), date_from, date_to
        )

    def export_csv(
        self,
        book: JournalBook,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> str:
        book = JournalBook(book)
        text = export_csv(
            book,
            flatten_transactions(self._borrowers),
            date_from,
            date_to,
            projector=self._projector,
        )
        self._activity.log_report_exported(book.value, text.count("\n") - 1)
        return text

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def add_borrower(
        self,
        name: str,
        mobile: Optional[str] = None,
        address: Optional[str] = None,
        age: Optional[int] = None,
        photo: Optional[str] = None,
        initial_loan: Optional[LoanRequest] = None,
    ) -> Borrower:
        """
        Create a borrower, optionally with its first loan.

        Raises:
            ValidationError: Missing name or invalid initial loan
        """
        self._check(self._validator.validate_borrower(name))

        loans = []
        if initial_loan is not None:
            loans.append(self._new_loan(
                principal=initial_loan.principal,
                terms=initial_loan.terms,
                interest_rate=initial_loan.interest_rate,
                penalty_rate=initial_loan.penalty_rate,
                loan_date=initial_loan.loan_date,
                notes=initial_loan.notes,
            ))

        borrower = self._build(
            Borrower,
            subject="borrower",
            name=name,
            mobile=mobile,
            address=address,
            age=age,
            photo=photo,
            loans=loans,
        )
        self._borrowers.append(borrower)

        self._activity.log_borrower_added(borrower.id, borrower.name, len(loans))
        for loan in loans:
            self._log_loan(borrower, loan)
        self._persist(borrower)
        return borrower

    def add_loan(
        self,
        borrower_id: str,
        principal: Any,
        terms: Terms = Terms.MONTHLY,
        interest_rate: Any = 0,
        penalty_rate: Any = 0,
        loan_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> Loan:
        """
        Extend a new loan to an existing borrower.

        Raises:
            NotFoundError: Unknown borrower
            ValidationError: Non-positive principal or negative rates
        """
        borrower = self.get_borrower(borrower_id)
        loan = self._new_loan(
            principal=principal,
            terms=terms,
            interest_rate=interest_rate,
            penalty_rate=penalty_rate,
            loan_date=loan_date,
            notes=notes,
        )

        borrower.loans.append(loan)
        borrower.updated_at = utc_now()

        self._log_loan(borrower, loan)
        self._persist(loan)
        return loan

    def record_payment(
        self,
        borrower_id: str,
        loan_id: str,
        amount: Any,
        payment_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> PaymentReceipt:
        """
        Record a payment against a loan and return the receipt.

        Raises:
            ValidationError: Non-positive amount
            NotFoundError: Unknown borrower or loan
        """
        today = self.today()
        payment_date = payment_date or today

        loan = self._find_loan(borrower_id, loan_id)
        remaining_before = evaluate(loan, max(payment_date, today)).remaining if loan else None
        self._check(self._validator.validate_payment(
            amount, payment_date, today, remaining=remaining_before
        ))
        if loan is None:
            # Raises the precise NotFoundError (borrower vs loan)
            self.get_loan(borrower_id, loan_id)

        borrower = self.get_borrower(borrower_id)
        payment = self._build(
            Payment,
            subject="payment",
            payment_date=payment_date,
            amount=amount,
            notes=notes,
        )

        loan.payments.append(payment)
        borrower.updated_at = utc_now()

        as_of = max(payment_date, today)
        remaining = evaluate(loan, as_of).remaining
        receipt = PaymentReceipt(
            borrower_id=borrower.id,
            borrower_name=borrower.name,
            loan_id=loan.id,
            payment_id=payment.id,
            payment_date=payment_date,
            amount=payment.amount,
            remaining=remaining,
            borrower_balance=aggregator.total_balance(borrower, as_of),
        )

        self._activity.log_payment_recorded(
            borrower.id, loan.id, str(payment.amount), str(remaining)
        )
        self._persist(receipt)
        return receipt

    def edit_borrower_profile(self, borrower_id: str, fields: dict) -> Borrower:
        """
        Change contact/display fields (name, mobile, address, age, photo).

        Raises:
            NotFoundError: Unknown borrower
            ValidationError: A financial or identity field, or a blank name
        """
        borrower = self.get_borrower(borrower_id)
        self._check(self._validator.validate_profile_edit(fields))

        # Validate the whole update first so a bad field changes nothing
        self._build(
            Borrower,
            subject="profile",
            **{**borrower.model_dump(exclude={"loans"}), **fields},
        )
        for key, value in fields.items():
            setattr(borrower, key, value)
        borrower.updated_at = utc_now()

        self._activity.log_borrower_edited(borrower.id, sorted(fields))
        self._persist(borrower)
        return borrower

    def delete_borrower(self, borrower_id: str) -> Borrower:
        """
        Remove a borrower together with its loans and payments.

        Their disbursements and receipts disappear from every report,
        including past periods.
        """
        borrower = self.get_borrower(borrower_id)
        self._borrowers = [b for b in self._borrowers if b.id != borrower_id]

        self._activity.log_borrower_deleted(
            borrower.id,
            len(borrower.loans),
            sum(len(loan.payments) for loan in borrower.loans),
        )
        self._persist(borrower)
        return borrower

    # =========================================================================
    # BACKUP / RESTORE
    # =========================================================================

    def export_snapshot(self) -> bytes:
        """Full JSON dump of the current state."""
        data = encode_snapshot(self._borrowers).encode("utf-8")
        self._activity.log_snapshot_exported(len(self._borrowers), len(data))
        return data

    def import_snapshot(self, data: bytes) -> MigrationReport:
        """
        Replace the current state with a backup.

        All or nothing: on ParseError the current state is untouched.
        """
        try:
            snapshot, report = decode_snapshot(data, self.today())
        except ParseError as e:
            self._activity.log_snapshot_rejected(str(e))
            raise

        self._borrowers = snapshot.borrowers
        self._activity.log_snapshot_restored(len(self._borrowers))
        if report.changed:
            self._activity.log_state_migrated(
                report.migrated_borrowers, report.synthesized_loans
            )
        self._persist(report)
        return report

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _new_loan(
        self,
        principal: Any,
        terms: Any,
        interest_rate: Any,
        penalty_rate: Any,
        loan_date: Optional[date],
        notes: Optional[str],
    ) -> Loan:
        today = self.today()
        loan_date = loan_date or today
        self._check(self._validator.validate_loan(
            principal, interest_rate, penalty_rate, loan_date, today
        ))
        return self._build(
            Loan,
            subject="loan",
            principal=principal,
            terms=terms,
            interest_rate=interest_rate,
            penalty_rate=penalty_rate,
            loan_date=loan_date,
            notes=notes,
        )

    def _find_loan(self, borrower_id: str, loan_id: str) -> Optional[Loan]:
        try:
            return self.get_loan(borrower_id, loan_id)
        except NotFoundError:
            return None

    def _check(self, result: ValidationResult) -> ValidationResult:
        """Log the outcome, then raise if it carries errors."""
        if result.has_errors:
            self._activity.log_validation_rejected(
                result.subject,
                [{"field": i.field, "type": i.issue_type, "message": i.message}
                 for i in result.issues],
            )
        elif result.warnings:
            self._activity.log_validation_warnings(result.subject, result.warnings)
        return self._validator.ensure_valid(result)

    def _build(self, model: Type[ModelT], subject: str, **data: Any) -> ModelT:
        """Construct a model, turning schema failures into ValidationError."""
        try:
            return model(**data)
        except PydanticValidationError as e:
            issues = [
                ValidationIssue(
                    field=".".join(str(part) for part in error["loc"]) or subject,
                    issue_type=error["type"],
                    message=error["msg"],
                    severity="error",
                )
                for error in e.errors()
            ]
            self._activity.log_validation_rejected(
                subject,
                [{"field": i.field, "type": i.issue_type, "message": i.message}
                 for i in issues],
            )
            raise ValidationError(
                f"Invalid {subject}: {issues[0].field}: {issues[0].message}",
                issues=issues,
            ) from e

    def _log_loan(self, borrower: Borrower, loan: Loan) -> None:
        self._activity.log_loan_added(
            borrower.id, loan.id, str(loan.principal), loan.terms.value
        )

    def _persist(self, result: Any) -> None:
        """Write the full snapshot; on a full backend keep memory and raise."""
        if self._storage is None:
            return
        payload = encode_snapshot(self._borrowers)
        try:
            self._storage.save(payload)
        except PersistenceCapacityError as e:
            self._activity.log_save_failed(str(e), len(payload.encode("utf-8")))
            raise PersistenceCapacityError(str(e), result=result) from e
        except StorageError as e:
            self._activity.log_save_failed(str(e), len(payload.encode("utf-8")))
            raise
