"""
Borrower worklist and collection list.

The worklist is the prioritized list on the home screen: search by
name, optionally filter by status, then show the most urgent few.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from loanbook.engine.aggregator import priority_key
from loanbook.models.ledger import BorrowerSummary, Urgency
from loanbook.models.reports import Worklist, WorklistFilter

_FILTER_URGENCY = {
    WorklistFilter.DUE: Urgency.DUE_SOON,
    WorklistFilter.OVERDUE: Urgency.OVERDUE,
    WorklistFilter.ACTIVE: Urgency.ACTIVE,
    WorklistFilter.PAID: Urgency.PAID,
}


def matches(summary: BorrowerSummary, search: str, status: WorklistFilter) -> bool:
    if search and search.lower() not in summary.name.lower():
        return False
    if status == WorklistFilter.ALL:
        return True
    return summary.urgency == _FILTER_URGENCY[status]


def build_worklist(
    summaries: Iterable[BorrowerSummary],
    as_of: date,
    search: str = "",
    status: WorklistFilter = WorklistFilter.ALL,
    limit: Optional[int] = 4,
) -> Worklist:
    """
    Filter and rank borrower summaries.

    ``limit=None`` shows every match.
    """
    search = search.strip()
    matched = sorted(
        (s for s in summaries if matches(s, search, status)),
        key=priority_key,
    )
    shown = matched if limit is None else matched[:limit]
    return Worklist(
        as_of=as_of,
        status=status,
        search=search,
        entries=shown,
        total_matches=len(matched),
    )


def format_amount(amount: Decimal, currency_symbol: str = "₱") -> str:
    return f"{currency_symbol}{amount:,.2f}"


def collection_list(
    summaries: Iterable[BorrowerSummary],
    currency_symbol: str = "₱",
) -> str:
    """Plain-text list of everyone who still owes money, ready to copy."""
    lines = ["📋 LIST:"]
    for summary in summaries:
        if summary.total_balance > 0:
            lines.append(
                f"- {summary.name}: {format_amount(summary.total_balance, currency_symbol)}"
            )
    return "\n".join(lines) + "\n"
