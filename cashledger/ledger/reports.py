"""
Report Projector

Turns period records into the three printable reports and the grouped
transaction list.

Every projection orders dates newest first and, inside a date, orders the
ledgers by ascending time of day. The category ledgers always use their own
fixed category; the view's category selector does not reach them.
"""

from collections.abc import Iterable
from typing import Optional, Union

from cashledger.ledger.aggregator import (
    cumulative_balances,
    daily_totals,
    group_by_date,
    sort_dates,
)
from cashledger.ledger.formatting import (
    DEFAULT_CURRENCY_SYMBOL,
    format_currency,
    format_period,
)
from cashledger.models.transaction import (
    Category,
    Identity,
    Timestamp,
    Transaction,
    ViewFilter,
)
from cashledger.models.views import (
    ZERO,
    CategoryLedger,
    LedgerDay,
    LedgerEntryRow,
    ReportTable,
    ReportType,
    SavingsSummary,
    SavingsSummaryRow,
    TransactionDay,
)


NONE_MARKER = "-"
REPORT_HEADING = "Cash Management System - Report"

REPORT_TITLES = {
    ReportType.DAILY_CASH_INFLOWS: "Daily Cash Inflows Report",
    ReportType.DAILY_CASH_OUTFLOWS: "Daily Cash Outflows Report",
    ReportType.DAILY_SAVINGS_SUMMARY: "Daily Savings Summary",
}

LEDGER_HEADERS = ["Date", "Note", "Amount", "Timestamp", "Edited By"]
SUMMARY_HEADERS = ["Date", "Inflow", "Outflow", "Savings", "Timestamp", "Edited By"]


def _time_key(tx: Transaction) -> tuple:
    return (tx.created_at.time, tx.created_at.iso)


def category_ledger(
    records: Iterable[Transaction],
    category: Category,
) -> CategoryLedger:
    """Rows of one category grouped by date, dates descending."""
    grouped = group_by_date(tx for tx in records if tx.category == category)
    days = []
    for calendar_date in sort_dates(grouped, descending=True):
        rows = [
            LedgerEntryRow(
                transaction_id=tx.id,
                calendar_date=calendar_date,
                amount=tx.amount,
                note=tx.note,
                timestamp=tx.created_at,
                edited_by=tx.editor_display or NONE_MARKER,
            )
            for tx in sorted(grouped[calendar_date], key=_time_key)
        ]
        days.append(LedgerDay(calendar_date=calendar_date, rows=rows))
    return CategoryLedger(category=category, days=days)


def inflow_ledger(records: Iterable[Transaction]) -> CategoryLedger:
    return category_ledger(records, Category.INFLOW)


def outflow_ledger(records: Iterable[Transaction]) -> CategoryLedger:
    return category_ledger(records, Category.OUTFLOW)


def savings_summary(records: Iterable[Transaction]) -> SavingsSummary:
    """
    Per-date totals, savings, latest activity and editors.

    Editors are deduplicated in order of first appearance while the date's
    records are visited by ascending time of day.
    """
    records = list(records)
    grouped = group_by_date(records)
    totals = daily_totals(records)
    balances = cumulative_balances(totals)

    rows = []
    for calendar_date in sort_dates(grouped, descending=True):
        day_records = sorted(grouped[calendar_date], key=_time_key)
        latest = max(day_records, key=lambda tx: tx.created_at.iso)
        editors: list[str] = []
        for tx in day_records:
            editor = tx.editor_display
            if editor and editor not in editors:
                editors.append(editor)
        day = totals[calendar_date]
        rows.append(SavingsSummaryRow(
            calendar_date=calendar_date,
            inflow_total=day.inflow_total,
            outflow_total=day.outflow_total,
            savings=day.net,
            cumulative_balance=balances[calendar_date],
            latest_activity=latest.created_at,
            editors=editors,
        ))
    return SavingsSummary(rows=rows)


def transaction_days(
    displayed: Iterable[Transaction],
    period: Iterable[Transaction],
) -> list[TransactionDay]:
    """
    Group the displayed records by date for the transaction list.

    Day totals and cumulative balances come from `period`, so a category or
    search filter narrows the list without changing the numbers.
    """
    totals = daily_totals(period)
    balances = cumulative_balances(totals)
    grouped = group_by_date(displayed)

    days = []
    for calendar_date in sort_dates(grouped, descending=True):
        day = totals.get(calendar_date)
        days.append(TransactionDay(
            calendar_date=calendar_date,
            inflow_total=day.inflow_total if day else ZERO,
            outflow_total=day.outflow_total if day else ZERO,
            cumulative_balance=balances.get(calendar_date, ZERO),
            transactions=sorted(grouped[calendar_date], key=_time_key, reverse=True),
        ))
    return days


def project(
    report_type: ReportType,
    records: Iterable[Transaction],
) -> Union[CategoryLedger, SavingsSummary]:
    """Build the named projection from period records."""
    if report_type == ReportType.DAILY_CASH_INFLOWS:
        return inflow_ledger(records)
    if report_type == ReportType.DAILY_CASH_OUTFLOWS:
        return outflow_ledger(records)
    return savings_summary(records)


def to_table(
    report_type: ReportType,
    records: Iterable[Transaction],
    generated_at: Timestamp,
    identity: Optional[Identity] = None,
    view_filter: Optional[ViewFilter] = None,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> ReportTable:
    """
    Render a report to strings for printing.

    Args:
        report_type: Which projection to render
        records: Period records (already filtered by date range)
        generated_at: Timestamp printed on the report
        identity: Owner printed on the report, if any
        view_filter: Filter whose period is printed, if any
        currency_symbol: Symbol used by every amount column

    Returns:
        ReportTable with headers and formatted rows
    """
    projection = project(report_type, records)

    if isinstance(projection, CategoryLedger):
        headers = LEDGER_HEADERS
        rows = [
            [
                row.calendar_date,
                row.note or NONE_MARKER,
                format_currency(row.amount, currency_symbol),
                row.timestamp.display,
                row.edited_by,
            ]
            for row in projection.rows
        ]
    else:
        headers = SUMMARY_HEADERS
        rows = [
            [
                row.calendar_date,
                format_currency(row.inflow_total, currency_symbol),
                format_currency(row.outflow_total, currency_symbol),
                format_currency(row.savings, currency_symbol),
                row.latest_activity.display,
                "; ".join(row.editors) or NONE_MARKER,
            ]
            for row in projection.rows
        ]

    return ReportTable(
        report_type=report_type,
        title=REPORT_TITLES[report_type],
        user_line=f"{identity.key} ({identity.display_name})" if identity else None,
        generated_at=generated_at.display,
        period_line=(
            format_period(view_filter.start_date, view_filter.end_date)
            if view_filter else None
        ),
        headers=headers,
        rows=rows,
    )
