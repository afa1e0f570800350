"""
CSV export of the books of accounts.

The date range filter is applied before projection. Values are written
with the csv module, so names or notes containing commas are quoted
instead of shifting columns.
"""

import csv
import io
from datetime import date
from typing import Iterable, Optional

from loanbook.models.ledger import Transaction
from loanbook.models.reports import JournalBook, JournalReport
from loanbook.reports.journal import (
    JournalProjector,
    filter_by_date_range,
    sort_transactions,
)

CSV_HEADERS = {
    JournalBook.CASH_RECEIPTS: ["Date", "Payer", "Reference", "Debit(Cash)", "Credit(AR)"],
    JournalBook.CASH_DISBURSEMENTS: ["Date", "Payee", "Reference", "Debit(AR)", "Credit(Cash)"],
    JournalBook.GENERAL_JOURNAL: ["Date", "Account", "Reference", "Debit", "Credit"],
    JournalBook.GENERAL_LEDGER: ["Account", "Debit Balance", "Credit Balance", "Net Balance"],
    JournalBook.TRANSACTIONS: ["Date", "Name", "Reference", "Type", "Amount"],
}


def export_filename(book: JournalBook, today: date) -> str:
    return f"loanbook_{book.value.upper()}_{today.isoformat()}.csv"


def backup_filename(today: date) -> str:
    return f"loanbook_backup_{today.isoformat()}.json"


def report_to_rows(report: JournalReport) -> list[list[str]]:
    """Flatten a projected report into CSV cells (header excluded)."""
    if report.book == JournalBook.GENERAL_LEDGER:
        return [
            [
                balance.account.value,
                str(balance.debit_balance),
                str(balance.credit_balance),
                str(balance.net_balance),
            ]
            for balance in report.balances
        ]
    return [
        [
            row.entry_date.isoformat(),
            row.name,
            row.reference,
            str(row.debit) if row.debit else "",
            str(row.credit) if row.credit else "",
        ]
        for row in report.rows
    ]


def transactions_to_rows(transactions: Iterable[Transaction]) -> list[list[str]]:
    return [
        [
            t.transaction_date.isoformat(),
            t.name,
            t.reference,
            t.type.value,
            str(t.amount),
        ]
        for t in transactions
    ]


def export_csv(
    book: JournalBook,
    transactions: Iterable[Transaction],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    projector: Optional[JournalProjector] = None,
) -> str:
    """
    Render one book as CSV text.

    The ``transactions`` book is a flat dump with a Type column; the
    others use the journal-specific column sets.
    """
    if book == JournalBook.TRANSACTIONS:
        selected = sort_transactions(filter_by_date_range(transactions, date_from, date_to))
        rows = transactions_to_rows(selected)
    else:
        projector = projector or JournalProjector()
        report = projector.project(book, transactions, date_from, date_to)
        rows = report_to_rows(report)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS[book])
    writer.writerows(rows)
    return buffer.getvalue()
