"""
View recomputation.

`compute_views` is the single entry point the service calls after every
read or write. Two differently filtered collections are in play:

- period records: date range only. Statistics, day totals, running
  balances and the three reports are computed from these.
- displayed records: date range + category + search. Only the transaction
  list shows these.
"""

from collections.abc import Sequence
from datetime import datetime, timezone, tzinfo
from typing import Optional

from cashledger.ledger.aggregator import (
    balance_history,
    monthly_savings,
    period_statistics,
)
from cashledger.ledger.filters import filter_records, period_records
from cashledger.ledger.reports import (
    inflow_ledger,
    outflow_ledger,
    savings_summary,
    transaction_days,
)
from cashledger.models.transaction import Transaction, ViewFilter
from cashledger.models.views import LedgerViews


def compute_views(
    identity_key: str,
    records: Sequence[Transaction],
    view_filter: ViewFilter,
    tz: tzinfo = timezone.utc,
    now: Optional[datetime] = None,
) -> LedgerViews:
    """
    Derive every view from the full record collection.

    Args:
        identity_key: Owner of `records`
        records: The complete collection read from the store
        view_filter: Active selection
        tz: Ledger timezone for period bounds
        now: Current instant; picks the monthly savings year

    Raises:
        ValidationError: If the filter period is inverted
    """
    now = now or datetime.now(timezone.utc)
    displayed = filter_records(records, view_filter, tz)
    period = period_records(records, view_filter, tz)

    return LedgerViews(
        identity_key=identity_key,
        view_filter=view_filter,
        computed_at=now,
        statistics=period_statistics(period),
        transaction_days=transaction_days(displayed, period),
        inflow_ledger=inflow_ledger(period),
        outflow_ledger=outflow_ledger(period),
        savings_summary=savings_summary(period),
        history=balance_history(records),
        monthly_savings=monthly_savings(records, now.astimezone(tz).year),
    )
