"""
Activity Logger

Every ledger mutation is written to a structured local log so an
operator can see what happened and when. The logger never raises:
a logging failure must not undo or block a ledger operation.
"""

import logging
import sys
from typing import Optional

import structlog

from loanbook.config import LoggingSettings, get_settings
from loanbook.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivitySeverity,
)


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """Configure structlog on top of the standard library logger."""
    settings = settings or get_settings().logging

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.level, logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class ActivityLogger:
    """
    Central activity logging service.

    Writes one structured record per event to the ``loanbook`` logger.
    """

    def __init__(self, logger_name: str = "loanbook"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: ActivityEvent) -> ActivityEvent:
        """Log an event at a level matching its severity."""
        log_dict = event.to_log_dict()
        try:
            if event.severity == ActivitySeverity.ERROR:
                self._logger.error("activity_event", **log_dict)
            elif event.severity == ActivitySeverity.WARNING:
                self._logger.warning("activity_event", **log_dict)
            elif event.severity == ActivitySeverity.DEBUG:
                self._logger.debug("activity_event", **log_dict)
            else:
                self._logger.info("activity_event", **log_dict)
        except (TypeError, ValueError, OSError) as e:
            # Unserializable detail or closed stream
            logging.getLogger("loanbook").error(
                "activity_log_failed event_id=%s error=%s", log_dict["event_id"], e
            )
        return event

    def log_borrower_added(self, borrower_id: str, name: str, loan_count: int) -> None:
        self.log(ActivityEventBuilder.borrower_added(borrower_id, name, loan_count))

    def log_borrower_edited(self, borrower_id: str, fields: list[str]) -> None:
        self.log(ActivityEventBuilder.borrower_edited(borrower_id, fields))

    def log_borrower_deleted(
        self,
        borrower_id: str,
        loan_count: int,
        payment_count: int,
    ) -> None:
        self.log(
            ActivityEventBuilder.borrower_deleted(borrower_id, loan_count, payment_count)
        )

    def log_loan_added(
        self,
        borrower_id: str,
        loan_id: str,
        principal: str,
        terms: str,
    ) -> None:
        self.log(ActivityEventBuilder.loan_added(borrower_id, loan_id, principal, terms))

    def log_payment_recorded(
        self,
        borrower_id: str,
        loan_id: str,
        amount: str,
        remaining: str,
    ) -> None:
        self.log(
            ActivityEventBuilder.payment_recorded(borrower_id, loan_id, amount, remaining)
        )

    def log_validation_rejected(self, subject: str, issues: list[dict]) -> None:
        self.log(ActivityEventBuilder.validation_rejected(subject, issues))

    def log_validation_warnings(self, subject: str, warnings: list[str]) -> None:
        self.log(ActivityEventBuilder.validation_warnings(subject, warnings))

    def log_state_loaded(self, borrower_count: int) -> None:
        self.log(ActivityEventBuilder.state_loaded(borrower_count))

    def log_state_load_failed(self, error_message: str) -> None:
        self.log(ActivityEventBuilder.state_load_failed(error_message))

    def log_state_migrated(self, migrated_borrowers: int, synthesized_loans: int) -> None:
        self.log(ActivityEventBuilder.state_migrated(migrated_borrowers, synthesized_loans))

    def log_save_failed(self, error_message: str, size_bytes: int) -> None:
        self.log(ActivityEventBuilder.save_failed(error_message, size_bytes))

    def log_snapshot_exported(self, borrower_count: int, size_bytes: int) -> None:
        self.log(ActivityEventBuilder.snapshot_exported(borrower_count, size_bytes))

    def log_snapshot_restored(self, borrower_count: int) -> None:
        self.log(ActivityEventBuilder.snapshot_restored(borrower_count))

    def log_snapshot_rejected(self, error_message: str) -> None:
        self.log(ActivityEventBuilder.snapshot_rejected(error_message))

    def log_report_exported(self, book: str, row_count: int) -> None:
        self.log(ActivityEventBuilder.report_exported(book, row_count))
