"""Report projection package."""

from loanbook.reports.journal import (
    JournalProjector,
    account_movements,
    filter_by_date_range,
    flatten_transactions,
)
from loanbook.reports.export import backup_filename, export_csv, export_filename
from loanbook.reports.worklist import build_worklist, collection_list, format_amount

__all__ = [
    "JournalProjector",
    "account_movements",
    "filter_by_date_range",
    "flatten_transactions",
    "backup_filename",
    "export_csv",
    "export_filename",
    "build_worklist",
    "collection_list",
    "format_amount",
]
