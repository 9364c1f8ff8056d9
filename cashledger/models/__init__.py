"""
Data Models Package

This package contains all Pydantic models used by the cash ledger.
All data flowing through the ledger must conform to these schemas.
"""

from cashledger.models.transaction import (
    Category,
    Identity,
    PartitionKey,
    Timestamp,
    Transaction,
    ValidationIssue,
    ViewCategory,
    ViewFilter,
    format_calendar_date,
    new_transaction_id,
    parse_calendar_date,
)
from cashledger.models.views import (
    BalanceRow,
    CategoryLedger,
    DailyTotals,
    ExportDocument,
    LedgerDay,
    LedgerEntryRow,
    LedgerViews,
    MonthlySavings,
    PeriodStatistics,
    ReportTable,
    ReportType,
    SavingsSummary,
    SavingsSummaryRow,
    TransactionDay,
)
from cashledger.models.events import (
    EventSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)

__all__ = [
    # Transaction models
    "Category",
    "Identity",
    "PartitionKey",
    "Timestamp",
    "Transaction",
    "ValidationIssue",
    "ViewCategory",
    "ViewFilter",
    "format_calendar_date",
    "new_transaction_id",
    "parse_calendar_date",
    # View models
    "BalanceRow",
    "CategoryLedger",
    "DailyTotals",
    "ExportDocument",
    "LedgerDay",
    "LedgerEntryRow",
    "LedgerViews",
    "MonthlySavings",
    "PeriodStatistics",
    "ReportTable",
    "ReportType",
    "SavingsSummary",
    "SavingsSummaryRow",
    "TransactionDay",
    # Event models
    "EventSeverity",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
]
