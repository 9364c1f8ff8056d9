"""
Ledger Aggregator

Pure functions over an in-memory record collection: per-date totals,
cumulative running balance, period statistics and the savings series.

DESIGN DECISION: The cumulative balance is accumulated in ascending
calendar order, always. Callers that want newest-first output re-order
the finished mapping afterwards; they never accumulate in display order.
Dates are ordered by their parsed calendar value, never as strings
("12/31/23" sorts before "01/01/24").
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal

from cashledger.models.transaction import (
    Category,
    Transaction,
    parse_calendar_date,
)
from cashledger.models.views import (
    ZERO,
    BalanceRow,
    DailyTotals,
    MonthlySavings,
    PeriodStatistics,
)


MONTH_LABELS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]


def sort_dates(dates: Iterable[str], descending: bool = False) -> list[str]:
    """Order MM/DD/YY strings by calendar value."""
    return sorted(dates, key=parse_calendar_date, reverse=descending)


def group_by_date(records: Iterable[Transaction]) -> dict[str, list[Transaction]]:
    """Bucket records by attribution date, preserving input order per bucket."""
    grouped: dict[str, list[Transaction]] = {}
    for tx in records:
        grouped.setdefault(tx.calendar_date, []).append(tx)
    return grouped


def daily_totals(records: Iterable[Transaction]) -> dict[str, DailyTotals]:
    """
    Sum inflow and outflow amounts per calendar date.

    Only dates with at least one record appear in the result.
    """
    totals: dict[str, DailyTotals] = {}
    for tx in records:
        day = totals.setdefault(tx.calendar_date, DailyTotals())
        if tx.category == Category.INFLOW:
            day.inflow_total += tx.amount
        else:
            day.outflow_total += tx.amount
    return totals


def cumulative_balances(totals: Mapping[str, DailyTotals]) -> dict[str, Decimal]:
    """
    Running balance per date.

    The value for a date is the sum of (inflow - outflow) over that date and
    every earlier date in `totals`. The returned dict iterates oldest first.
    """
    running = ZERO
    balances: dict[str, Decimal] = {}
    for calendar_date in sort_dates(totals):
        running += totals[calendar_date].net
        balances[calendar_date] = running
    return balances


def period_statistics(records: Iterable[Transaction]) -> PeriodStatistics:
    """Total inflow, total outflow, net and record count."""
    inflow = ZERO
    outflow = ZERO
    count = 0
    for tx in records:
        if tx.category == Category.INFLOW:
            inflow += tx.amount
        else:
            outflow += tx.amount
        count += 1
    return PeriodStatistics(
        total_inflow=inflow,
        total_outflow=outflow,
        net=inflow - outflow,
        count=count,
    )


def balance_history(records: Iterable[Transaction]) -> list[BalanceRow]:
    """Per-date totals with running balance, newest date first."""
    totals = daily_totals(records)
    balances = cumulative_balances(totals)
    return [
        BalanceRow(
            calendar_date=calendar_date,
            inflow_total=totals[calendar_date].inflow_total,
            outflow_total=totals[calendar_date].outflow_total,
            cumulative_balance=balances[calendar_date],
        )
        for calendar_date in sort_dates(totals, descending=True)
    ]


def monthly_savings(records: Iterable[Transaction], year: int) -> MonthlySavings:
    """Net savings per month of `year`, keyed by attribution date."""
    values = [ZERO] * 12
    for tx in records:
        day = tx.calendar_day
        if day.year != year:
            continue
        if tx.category == Category.INFLOW:
            values[day.month - 1] += tx.amount
        else:
            values[day.month - 1] -= tx.amount
    return MonthlySavings(year=year, labels=list(MONTH_LABELS), values=values)
