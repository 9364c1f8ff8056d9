"""
Ledger Event Logger

Every mutation, refusal and recompute is written to the structured log as
a LedgerEvent. The log is the only destination: nothing here is persisted
alongside the records.
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from cashledger.models.events import (
    EventSeverity,
    LedgerEvent,
    LedgerEventBuilder,
)


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route the structured log to stderr at `level`. Entry points call this once."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class LedgerEventLogger:
    """Central event logging for the ledger service."""

    def __init__(self, logger_name: str = "cashledger"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: LedgerEvent) -> None:
        """Write an event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity == EventSeverity.ERROR:
            self._logger.error("ledger_event", **log_dict)
        elif event.severity == EventSeverity.WARNING:
            self._logger.warning("ledger_event", **log_dict)
        elif event.severity == EventSeverity.DEBUG:
            self._logger.debug("ledger_event", **log_dict)
        else:
            self._logger.info("ledger_event", **log_dict)

    def log_transaction_added(
        self,
        partition: str,
        transaction_id: str,
        category: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(LedgerEventBuilder.transaction_added(
            partition=partition,
            transaction_id=transaction_id,
            category=category,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_transaction_edited(
        self,
        partition: str,
        transaction_id: str,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(LedgerEventBuilder.transaction_edited(
            partition=partition,
            transaction_id=transaction_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    def log_transaction_deleted(
        self,
        partition: str,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(LedgerEventBuilder.transaction_deleted(
            partition=partition,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        ))

    def log_save_failed(
        self,
        partition: str,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(LedgerEventBuilder.save_failed(
            partition=partition,
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_views_recomputed(
        self,
        partition: str,
        record_count: int,
        period_count: int,
        displayed_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(LedgerEventBuilder.views_recomputed(
            partition=partition,
            record_count=record_count,
            period_count=period_count,
            displayed_count=displayed_count,
            correlation_id=correlation_id,
        ))

    def log_export_created(
        self,
        partition: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(LedgerEventBuilder.export_created(
            partition=partition,
            record_count=record_count,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        operation: str,
        issues: list[dict],
        partition: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(LedgerEventBuilder.validation_failed(
            operation=operation,
            issues=issues,
            partition=partition,
            correlation_id=correlation_id,
        ))

    def log_not_found(
        self,
        partition: str,
        transaction_id: str,
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(LedgerEventBuilder.not_found(
            partition=partition,
            transaction_id=transaction_id,
            operation=operation,
            correlation_id=correlation_id,
        ))

    def log_precondition_failed(
        self,
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(LedgerEventBuilder.precondition_failed(
            operation=operation,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(LedgerEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action and pass it through every
    service call that action makes.
    """
    return uuid4()
