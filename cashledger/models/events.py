"""
Ledger Event Models

Significant actions are emitted as structured log events. They are written
to the log stream only; the ledger keeps no event history of its own.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events we log."""
    # Mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_EDITED = "transaction_edited"
    TRANSACTION_DELETED = "transaction_deleted"
    SAVE_FAILED = "save_failed"

    # Reads
    VIEWS_RECOMPUTED = "views_recomputed"
    EXPORT_CREATED = "export_created"

    # Refusals
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    PRECONDITION_FAILED = "precondition_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class EventSeverity(str, Enum):
    """Severity level for ledger events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single structured log event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: LedgerEventType
    severity: EventSeverity = EventSeverity.INFO

    partition: Optional[str] = Field(
        default=None,
        description="Storage key of the affected record collection"
    )
    transaction_id: Optional[str] = None
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate the events of one user action"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "partition": self.partition,
            "transaction_id": self.transaction_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build ledger events with common patterns.

    Usage:
        event = LedgerEventBuilder.transaction_added(partition, tx_id, "inflow", "500")
    """

    @staticmethod
    def transaction_added(
        partition: str,
        transaction_id: str,
        category: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_ADDED,
            partition=partition,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction added: {category} {amount}",
            details={"category": category, "amount": amount},
        )

    @staticmethod
    def transaction_edited(
        partition: str,
        transaction_id: str,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_EDITED,
            partition=partition,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction edited: {', '.join(changed_fields) or 'no changes'}",
            details={"changed_fields": changed_fields},
        )

    @staticmethod
    def transaction_deleted(
        partition: str,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_DELETED,
            partition=partition,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
            description="Transaction deleted",
        )

    @staticmethod
    def save_failed(
        partition: str,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SAVE_FAILED,
            severity=EventSeverity.ERROR,
            partition=partition,
            correlation_id=correlation_id,
            description=f"Store write failed during {operation}",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def views_recomputed(
        partition: str,
        record_count: int,
        period_count: int,
        displayed_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.VIEWS_RECOMPUTED,
            severity=EventSeverity.DEBUG,
            partition=partition,
            correlation_id=correlation_id,
            description=f"Views recomputed over {record_count} records",
            details={
                "record_count": record_count,
                "period_count": period_count,
                "displayed_count": displayed_count,
            },
        )

    @staticmethod
    def export_created(
        partition: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXPORT_CREATED,
            partition=partition,
            correlation_id=correlation_id,
            description=f"Export created with {record_count} transactions",
            details={"record_count": record_count},
        )

    @staticmethod
    def validation_failed(
        operation: str,
        issues: list[dict],
        partition: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.VALIDATION_FAILED,
            severity=EventSeverity.WARNING,
            partition=partition,
            correlation_id=correlation_id,
            description=f"{operation} rejected with {len(issues)} issues",
            details={"operation": operation, "issues": issues},
        )

    @staticmethod
    def not_found(
        partition: str,
        transaction_id: str,
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.NOT_FOUND,
            severity=EventSeverity.WARNING,
            partition=partition,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
            description=f"{operation} referenced a missing transaction",
            details={"operation": operation},
        )

    @staticmethod
    def precondition_failed(
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.PRECONDITION_FAILED,
            severity=EventSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{operation} refused: no active identity",
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.SYSTEM_ERROR,
            severity=EventSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
