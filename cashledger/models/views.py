"""
View and Report Models

Plain data handed to the presentation layer. Amounts are raw Decimals here;
currency formatting happens once, when a report is turned into a table.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from cashledger.models.transaction import (
    Category,
    Identity,
    Timestamp,
    Transaction,
    ViewFilter,
)


ZERO = Decimal("0")


class ReportType(str, Enum):
    """The three printable report projections."""
    DAILY_CASH_INFLOWS = "daily-cash-inflows"
    DAILY_CASH_OUTFLOWS = "daily-cash-outflows"
    DAILY_SAVINGS_SUMMARY = "daily-savings-summary"


# =============================================================================
# AGGREGATES
# =============================================================================

class DailyTotals(BaseModel):
    """Inflow and outflow sums for one calendar date."""

    inflow_total: Decimal = ZERO
    outflow_total: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.inflow_total - self.outflow_total


class PeriodStatistics(BaseModel):
    """Totals over every record in the active period."""

    total_inflow: Decimal = ZERO
    total_outflow: Decimal = ZERO
    net: Decimal = ZERO
    count: int = Field(default=0, ge=0)


class BalanceRow(BaseModel):
    """One date of the running-balance history."""

    calendar_date: str
    inflow_total: Decimal
    outflow_total: Decimal
    cumulative_balance: Decimal


class TransactionDay(BaseModel):
    """
    One date of the transaction list.

    `transactions` holds only the records that passed every filter; the
    totals and cumulative balance cover the whole period for that date.
    """

    calendar_date: str
    inflow_total: Decimal
    outflow_total: Decimal
    cumulative_balance: Decimal
    transactions: list[Transaction] = Field(default_factory=list)


class MonthlySavings(BaseModel):
    """Net savings per month of one year, January first."""

    year: int
    labels: list[str]
    values: list[Decimal]


# =============================================================================
# REPORT PROJECTIONS
# =============================================================================

class LedgerEntryRow(BaseModel):
    """A single row of an inflow or outflow ledger."""

    transaction_id: str
    calendar_date: str
    amount: Decimal
    note: str
    timestamp: Timestamp
    edited_by: str = Field(
        ...,
        description="Last-editor display string, or the '-' marker"
    )


class LedgerDay(BaseModel):
    calendar_date: str
    rows: list[LedgerEntryRow] = Field(default_factory=list)


class CategoryLedger(BaseModel):
    """Records of a single category, newest date first."""

    category: Category
    days: list[LedgerDay] = Field(default_factory=list)

    @property
    def rows(self) -> list[LedgerEntryRow]:
        return [row for day in self.days for row in day.rows]

    @property
    def dates(self) -> list[str]:
        return [day.calendar_date for day in self.days]


class SavingsSummaryRow(BaseModel):
    """Per-date inflow/outflow/savings line of the daily savings summary."""

    calendar_date: str
    inflow_total: Decimal
    outflow_total: Decimal
    savings: Decimal
    cumulative_balance: Decimal
    latest_activity: Timestamp
    editors: list[str] = Field(default_factory=list)


class SavingsSummary(BaseModel):
    rows: list[SavingsSummaryRow] = Field(default_factory=list)

    @property
    def dates(self) -> list[str]:
        return [row.calendar_date for row in self.rows]


class ReportTable(BaseModel):
    """A report rendered to strings, ready for printing."""

    report_type: ReportType
    title: str
    user_line: Optional[str] = None
    generated_at: str
    period_line: Optional[str] = None
    headers: list[str]
    rows: list[list[str]] = Field(default_factory=list)


# =============================================================================
# RECOMPUTED VIEWS
# =============================================================================

class LedgerViews(BaseModel):
    """
    Everything derived from one identity's records for one filter selection.

    Produced fresh by each recompute; never updated in place.
    """

    identity_key: str
    view_filter: ViewFilter
    computed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    statistics: PeriodStatistics
    transaction_days: list[TransactionDay] = Field(default_factory=list)
    inflow_ledger: CategoryLedger
    outflow_ledger: CategoryLedger
    savings_summary: SavingsSummary
    history: list[BalanceRow] = Field(default_factory=list)
    monthly_savings: MonthlySavings


# =============================================================================
# EXPORT
# =============================================================================

class ExportDocument(BaseModel):
    """A snapshot of one identity's records; carries no aggregates."""

    exported_at: Timestamp
    user: Optional[Identity] = None
    transactions: list[Transaction] = Field(default_factory=list)
