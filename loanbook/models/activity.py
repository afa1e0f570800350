"""
Activity Event Models

Every ledger mutation, restore and persistence failure produces one
structured event that is written to the local log. Events are not
stored and cannot be replayed; balances are always rebuilt from the
borrower graph.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from loanbook.models.ledger import utc_now


class ActivityEventType(str, Enum):
    """Types of events we log."""
    # Borrowers
    BORROWER_ADDED = "borrower_added"
    BORROWER_EDITED = "borrower_edited"
    BORROWER_DELETED = "borrower_deleted"

    # Money movement
    LOAN_ADDED = "loan_added"
    PAYMENT_RECORDED = "payment_recorded"

    # Validation
    VALIDATION_REJECTED = "validation_rejected"
    VALIDATION_WARNINGS = "validation_warnings"

    # Persistence
    STATE_LOADED = "state_loaded"
    STATE_LOAD_FAILED = "state_load_failed"
    STATE_MIGRATED = "state_migrated"
    SAVE_FAILED = "save_failed"
    SNAPSHOT_EXPORTED = "snapshot_exported"
    SNAPSHOT_RESTORED = "snapshot_restored"
    SNAPSHOT_REJECTED = "snapshot_rejected"

    # Reports
    REPORT_EXPORTED = "report_exported"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=utc_now)

    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'borrower', 'loan', 'payment')"
    )
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.loan_added(borrower_id, loan_id, "1000")
    """

    @staticmethod
    def borrower_added(borrower_id: str, name: str, loan_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.BORROWER_ADDED,
            entity_type="borrower",
            entity_id=borrower_id,
            description=f"Borrower added: {name}",
            details={"loan_count": loan_count},
        )

    @staticmethod
    def borrower_edited(borrower_id: str, fields: list[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.BORROWER_EDITED,
            entity_type="borrower",
            entity_id=borrower_id,
            description=f"Borrower profile edited ({', '.join(fields) or 'no fields'})",
            details={"fields": fields},
        )

    @staticmethod
    def borrower_deleted(borrower_id: str, loan_count: int, payment_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.BORROWER_DELETED,
            severity=ActivitySeverity.WARNING,
            entity_type="borrower",
            entity_id=borrower_id,
            description="Borrower deleted with all loans and payments",
            details={"loan_count": loan_count, "payment_count": payment_count},
        )

    @staticmethod
    def loan_added(
        borrower_id: str,
        loan_id: str,
        principal: str,
        terms: str,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOAN_ADDED,
            entity_type="loan",
            entity_id=loan_id,
            description=f"Disbursement of {principal} ({terms})",
            details={"borrower_id": borrower_id, "principal": principal, "terms": terms},
        )

    @staticmethod
    def payment_recorded(
        borrower_id: str,
        loan_id: str,
        amount: str,
        remaining: str,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.PAYMENT_RECORDED,
            entity_type="loan",
            entity_id=loan_id,
            description=f"Receipt of {amount}, remaining {remaining}",
            details={
                "borrower_id": borrower_id,
                "amount": amount,
                "remaining": remaining,
            },
        )

    @staticmethod
    def validation_rejected(subject: str, issues: list[dict]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.VALIDATION_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type=subject,
            description=f"{subject.capitalize()} rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def validation_warnings(subject: str, warnings: list[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.VALIDATION_WARNINGS,
            severity=ActivitySeverity.WARNING,
            entity_type=subject,
            description=f"{subject.capitalize()} accepted with {len(warnings)} warnings",
            details={"warnings": warnings},
        )

    @staticmethod
    def state_loaded(borrower_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STATE_LOADED,
            description=f"Loaded {borrower_count} borrowers",
            details={"borrower_count": borrower_count},
        )

    @staticmethod
    def state_load_failed(error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STATE_LOAD_FAILED,
            severity=ActivitySeverity.ERROR,
            description="Stored state unreadable, starting empty",
            error_message=error_message,
        )

    @staticmethod
    def state_migrated(migrated_borrowers: int, synthesized_loans: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STATE_MIGRATED,
            description=f"Migrated {migrated_borrowers} legacy borrowers",
            details={
                "migrated_borrowers": migrated_borrowers,
                "synthesized_loans": synthesized_loans,
            },
        )

    @staticmethod
    def save_failed(error_message: str, size_bytes: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SAVE_FAILED,
            severity=ActivitySeverity.ERROR,
            description="Change kept in memory but not saved; export a backup",
            error_message=error_message,
            details={"size_bytes": size_bytes},
        )

    @staticmethod
    def snapshot_exported(borrower_count: int, size_bytes: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_EXPORTED,
            description="Backup snapshot exported",
            details={"borrower_count": borrower_count, "size_bytes": size_bytes},
        )

    @staticmethod
    def snapshot_restored(borrower_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_RESTORED,
            severity=ActivitySeverity.WARNING,
            description="Current state replaced from backup",
            details={"borrower_count": borrower_count},
        )

    @staticmethod
    def snapshot_rejected(error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_REJECTED,
            severity=ActivitySeverity.WARNING,
            description="Backup file rejected, current state untouched",
            error_message=error_message,
        )

    @staticmethod
    def report_exported(book: str, row_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.REPORT_EXPORTED,
            entity_type="report",
            description=f"Exported {book.upper()} with {row_count} rows",
            details={"book": book, "row_count": row_count},
        )
