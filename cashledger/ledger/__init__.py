"""Ledger aggregation, filtering and report engine."""

from cashledger.ledger.aggregator import (
    balance_history,
    cumulative_balances,
    daily_totals,
    group_by_date,
    monthly_savings,
    period_statistics,
    sort_dates,
)
from cashledger.ledger.engine import compute_views
from cashledger.ledger.filters import (
    filter_records,
    matches_search,
    period_records,
    validate_date_range,
)
from cashledger.ledger.formatting import export_filename, format_currency
from cashledger.ledger.reports import (
    NONE_MARKER,
    category_ledger,
    inflow_ledger,
    outflow_ledger,
    project,
    savings_summary,
    to_table,
    transaction_days,
)

__all__ = [
    "NONE_MARKER",
    "balance_history",
    "category_ledger",
    "compute_views",
    "cumulative_balances",
    "daily_totals",
    "export_filename",
    "filter_records",
    "format_currency",
    "group_by_date",
    "inflow_ledger",
    "matches_search",
    "monthly_savings",
    "outflow_ledger",
    "period_records",
    "period_statistics",
    "project",
    "savings_summary",
    "sort_dates",
    "to_table",
    "transaction_days",
    "validate_date_range",
]
