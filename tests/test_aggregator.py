"""Tests for per-date totals, running balances and statistics."""

from decimal import Decimal

from cashledger.ledger.aggregator import (
    MONTH_LABELS,
    balance_history,
    cumulative_balances,
    daily_totals,
    group_by_date,
    monthly_savings,
    period_statistics,
    sort_dates,
)


class TestSortDates:
    """Calendar ordering of MM/DD/YY strings."""

    def test_year_boundary(self):
        dates = ["01/01/24", "12/31/23", "02/15/23"]
        assert sort_dates(dates) == ["02/15/23", "12/31/23", "01/01/24"]
        assert sort_dates(dates, descending=True) == ["01/01/24", "12/31/23", "02/15/23"]

    def test_not_string_order(self):
        # as plain strings "12/31/23" would sort after "01/01/24"
        assert sort_dates(["12/31/23", "01/01/24"]) == ["12/31/23", "01/01/24"]


class TestDailyTotals:

    def test_scenario(self, scenario):
        totals = daily_totals(scenario)
        assert set(totals) == {"01/01/24", "01/02/24"}
        assert totals["01/01/24"].inflow_total == Decimal("600")
        assert totals["01/01/24"].outflow_total == Decimal("200")
        assert totals["01/01/24"].net == Decimal("400")
        assert totals["01/02/24"].inflow_total == Decimal("0")
        assert totals["01/02/24"].outflow_total == Decimal("50")
        assert totals["01/02/24"].net == Decimal("-50")

    def test_empty(self):
        assert daily_totals([]) == {}

    def test_group_by_date_keeps_input_order(self, scenario):
        grouped = group_by_date(scenario)
        assert [tx.note for tx in grouped["01/01/24"]] == [
            "Allowance", "Lunch and books", "Tutoring",
        ]


class TestCumulativeBalances:
    """Running balance is always accumulated oldest date first."""

    def test_scenario(self, scenario):
        balances = cumulative_balances(daily_totals(scenario))
        assert balances == {
            "01/01/24": Decimal("400"),
            "01/02/24": Decimal("350"),
        }

    def test_independent_of_input_order(self, scenario):
        forward = cumulative_balances(daily_totals(scenario))
        backward = cumulative_balances(daily_totals(list(reversed(scenario))))
        assert forward == backward

    def test_year_boundary_accumulates_in_calendar_order(self, make_tx):
        records = [
            make_tx("inflow", 100, "01/01/24"),
            make_tx("inflow", 1000, "12/31/23"),
            make_tx("outflow", 300, "01/02/24"),
        ]
        balances = cumulative_balances(daily_totals(records))
        assert list(balances) == ["12/31/23", "01/01/24", "01/02/24"]
        assert balances["12/31/23"] == Decimal("1000")
        assert balances["01/01/24"] == Decimal("1100")
        assert balances["01/02/24"] == Decimal("800")

    def test_latest_balance_equals_sum_of_nets(self, make_tx):
        records = [
            make_tx("inflow", "120.25", "03/01/24"),
            make_tx("outflow", "20.10", "03/01/24"),
            make_tx("outflow", "75", "03/04/24"),
            make_tx("inflow", "10.05", "03/09/24"),
            make_tx("outflow", "300", "03/10/24"),
        ]
        totals = daily_totals(records)
        balances = cumulative_balances(totals)
        latest = sort_dates(balances)[-1]
        assert balances[latest] == sum(day.net for day in totals.values())
        assert balances[latest] == period_statistics(records).net

    def test_may_go_negative(self, make_tx):
        balances = cumulative_balances(daily_totals([make_tx("outflow", 50, "01/01/24")]))
        assert balances["01/01/24"] == Decimal("-50")


class TestPeriodStatistics:

    def test_scenario(self, scenario):
        stats = period_statistics(scenario)
        assert stats.total_inflow == Decimal("600")
        assert stats.total_outflow == Decimal("250")
        assert stats.net == Decimal("350")
        assert stats.count == 4

    def test_empty(self):
        stats = period_statistics([])
        assert stats.count == 0
        assert stats.net == Decimal("0")


class TestBalanceHistory:

    def test_newest_first_with_ascending_balances(self, scenario, make_tx):
        records = scenario + [make_tx("inflow", 1000, "12/31/23")]
        history = balance_history(records)
        assert [row.calendar_date for row in history] == ["01/02/24", "01/01/24", "12/31/23"]
        assert [row.cumulative_balance for row in history] == [
            Decimal("1350"), Decimal("1400"), Decimal("1000"),
        ]


class TestMonthlySavings:

    def test_twelve_months(self, make_tx):
        records = [
            make_tx("inflow", 500, "01/05/24"),
            make_tx("outflow", 100, "01/20/24"),
            make_tx("outflow", 40, "03/02/24"),
            make_tx("inflow", 999, "12/31/23"),
        ]
        series = monthly_savings(records, 2024)
        assert series.year == 2024
        assert series.labels == MONTH_LABELS
        assert len(series.values) == 12
        assert series.values[0] == Decimal("400")
        assert series.values[1] == Decimal("0")
        assert series.values[2] == Decimal("-40")
        assert sum(series.values) == Decimal("360")
