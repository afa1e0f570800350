"""
Journal Projector

DESIGN DECISION: Reports are projected DETERMINISTICALLY from the
Borrower -> Loan -> Payment graph. There is no separate transaction log:
every loan origination is a disbursement and every payment is a receipt.

Each transaction is a transfer between Cash and Accounts Receivable,
so every general journal entry balances and the two ledger accounts
always sum to zero.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from loanbook.models.ledger import Borrower, Transaction, TransactionType
from loanbook.models.reports import (
    Account,
    JournalBook,
    JournalReport,
    JournalRow,
    LedgerAccountBalance,
)

ZERO = Decimal("0")


def flatten_transactions(borrowers: Iterable[Borrower]) -> list[Transaction]:
    """
    Every disbursement and receipt across all borrowers, newest first.

    Transactions on the same date keep their graph order.
    """
    transactions = []
    for borrower in borrowers:
        for loan in borrower.loans:
            transactions.append(Transaction(
                transaction_id=loan.id,
                type=TransactionType.DISBURSEMENT,
                transaction_date=loan.loan_date,
                name=borrower.name,
                reference=loan.notes or "",
                amount=loan.principal,
                borrower_id=borrower.id,
                loan_id=loan.id,
            ))
            for payment in loan.payments:
                transactions.append(Transaction(
                    transaction_id=payment.id,
                    type=TransactionType.RECEIPT,
                    transaction_date=payment.payment_date,
                    name=borrower.name,
                    reference=payment.notes or "",
                    amount=payment.amount,
                    borrower_id=borrower.id,
                    loan_id=loan.id,
                ))
    return sort_transactions(transactions)


def sort_transactions(transactions: Iterable[Transaction]) -> list[Transaction]:
    return sorted(transactions, key=lambda t: t.transaction_date, reverse=True)


def filter_by_date_range(
    transactions: Iterable[Transaction],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[Transaction]:
    """Keep transactions dated within [date_from, date_to], both inclusive."""
    result = []
    for transaction in transactions:
        if date_from and transaction.transaction_date < date_from:
            continue
        if date_to and transaction.transaction_date > date_to:
            continue
        result.append(transaction)
    return result


def debit_account(transaction: Transaction) -> Account:
    if transaction.type == TransactionType.DISBURSEMENT:
        return Account.ACCOUNTS_RECEIVABLE
    return Account.CASH


def credit_account(transaction: Transaction) -> Account:
    if transaction.type == TransactionType.DISBURSEMENT:
        return Account.CASH
    return Account.ACCOUNTS_RECEIVABLE


def account_movements(transaction: Transaction) -> dict[Account, Decimal]:
    """Signed effect of one transaction on each ledger account (debit positive)."""
    return {
        debit_account(transaction): transaction.amount,
        credit_account(transaction): -transaction.amount,
    }


class JournalProjector:
    """
    Projects a transaction set into the four books of accounts.

    GUARANTEES:
    - Output depends only on the transactions and the date range
    - Rows are ordered newest first
    - Each general journal entry is one balanced debit/credit pair
    """

    def project(
        self,
        book: JournalBook,
        transactions: Iterable[Transaction],
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> JournalReport:
        """Filter by date range, then route to the book's projection."""
        selected = sort_transactions(
            filter_by_date_range(transactions, date_from, date_to)
        )

        if book == JournalBook.CASH_RECEIPTS:
            report = self._project_cash_receipts(selected)
        elif book == JournalBook.CASH_DISBURSEMENTS:
            report = self._project_cash_disbursements(selected)
        elif book == JournalBook.GENERAL_JOURNAL:
            report = self._project_general_journal(selected)
        elif book == JournalBook.GENERAL_LEDGER:
            report = self._project_general_ledger(selected)
        else:
            report = self._project_transactions(selected)

        date_str = self._date_range_str(date_from, date_to)
        if date_str:
            report.description = f"{report.description} {date_str}"
        report.date_from = date_from
        report.date_to = date_to
        return report

    def cash_receipts(self, transactions: Iterable[Transaction]) -> list[JournalRow]:
        """Payments only: debit Cash, credit Accounts Receivable."""
        return [
            self._mirrored_row(t)
            for t in transactions
            if t.type == TransactionType.RECEIPT
        ]

    def cash_disbursements(self, transactions: Iterable[Transaction]) -> list[JournalRow]:
        """Loan originations only: debit Accounts Receivable, credit Cash."""
        return [
            self._mirrored_row(t)
            for t in transactions
            if t.type == TransactionType.DISBURSEMENT
        ]

    def general_journal(self, transactions: Iterable[Transaction]) -> list[JournalRow]:
        """Two rows per transaction: the debit line, then the credit line."""
        rows = []
        for t in transactions:
            rows.append(JournalRow(
                transaction_id=t.transaction_id,
                entry_date=t.transaction_date,
                name=debit_account(t).value,
                reference=t.reference,
                account=debit_account(t),
                debit=t.amount,
                credit=ZERO,
            ))
            rows.append(JournalRow(
                transaction_id=t.transaction_id,
                entry_date=t.transaction_date,
                name=credit_account(t).value,
                reference=t.reference,
                account=credit_account(t),
                debit=ZERO,
                credit=t.amount,
            ))
        return rows

    def general_ledger(self, transactions: Iterable[Transaction]) -> list[LedgerAccountBalance]:
        """
        Running totals of Cash and Accounts Receivable.

        A positive total is a debit balance, a negative one a credit
        balance shown as its absolute value.
        """
        totals = {Account.CASH: ZERO, Account.ACCOUNTS_RECEIVABLE: ZERO}
        for t in transactions:
            for account, movement in account_movements(t).items():
                totals[account] += movement

        return [
            LedgerAccountBalance(
                account=account,
                debit_balance=total if total > 0 else ZERO,
                credit_balance=abs(total) if total < 0 else ZERO,
                net_balance=total,
            )
            for account, total in totals.items()
        ]

    def _project_cash_receipts(self, transactions: list[Transaction]) -> JournalReport:
        rows = self.cash_receipts(transactions)
        return JournalReport(
            book=JournalBook.CASH_RECEIPTS,
            description=f"Cash receipts journal: {len(rows)} payments",
            rows=rows,
        )

    def _project_cash_disbursements(self, transactions: list[Transaction]) -> JournalReport:
        rows = self.cash_disbursements(transactions)
        return JournalReport(
            book=JournalBook.CASH_DISBURSEMENTS,
            description=f"Cash disbursements journal: {len(rows)} loans",
            rows=rows,
        )

    def _project_general_journal(self, transactions: list[Transaction]) -> JournalReport:
        return JournalReport(
            book=JournalBook.GENERAL_JOURNAL,
            description=f"General journal: {len(transactions)} entries",
            rows=self.general_journal(transactions),
        )

    def _project_general_ledger(self, transactions: list[Transaction]) -> JournalReport:
        return JournalReport(
            book=JournalBook.GENERAL_LEDGER,
            description=f"General ledger over {len(transactions)} transactions",
            balances=self.general_ledger(transactions),
        )

    def _project_transactions(self, transactions: list[Transaction]) -> JournalReport:
        rows = [
            JournalRow(
                transaction_id=t.transaction_id,
                entry_date=t.transaction_date,
                name=t.name,
                reference=t.reference,
                debit=t.amount if t.type == TransactionType.DISBURSEMENT else ZERO,
                credit=t.amount if t.type == TransactionType.RECEIPT else ZERO,
            )
            for t in transactions
        ]
        return JournalReport(
            book=JournalBook.TRANSACTIONS,
            description=f"All transactions: {len(rows)}",
            rows=rows,
        )

    def _mirrored_row(self, transaction: Transaction) -> JournalRow:
        return JournalRow(
            transaction_id=transaction.transaction_id,
            entry_date=transaction.transaction_date,
            name=transaction.name,
            reference=transaction.reference,
            debit=transaction.amount,
            credit=transaction.amount,
        )

    def _date_range_str(
        self,
        date_from: Optional[date],
        date_to: Optional[date],
    ) -> str:
        """Format date range for description."""
        if date_from and date_to:
            if date_from == date_to:
                return f"on {date_from.strftime('%d %b %Y')}"
            return f"from {date_from.strftime('%d %b %Y')} to {date_to.strftime('%d %b %Y')}"
        elif date_from:
            return f"from {date_from.strftime('%d %b %Y')}"
        elif date_to:
            return f"until {date_to.strftime('%d %b %Y')}"
        return ""
