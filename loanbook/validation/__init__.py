"""Input validation package."""

from loanbook.validation.validator import LedgerValidator, parse_amount

__all__ = ["LedgerValidator", "parse_amount"]
