"""Tests for period, category and search filtering."""

from datetime import date, timedelta, timezone

import pytest

from cashledger.errors import ValidationError
from cashledger.ledger.filters import (
    filter_records,
    matches_search,
    period_records,
    validate_date_range,
)
from cashledger.models.transaction import ViewCategory, ViewFilter


@pytest.fixture
def january(make_tx):
    return [
        make_tx("inflow", 1000, "12/31/23", "23:59:59", note="New year gift"),
        make_tx("inflow", 500, "01/01/24", "00:00:00", note="Allowance"),
        make_tx("outflow", "12.50", "01/15/24", "12:00:00", note="Jeepney FARE"),
        make_tx("outflow", 200, "01/31/24", "23:59:59", note="Books"),
        make_tx("inflow", 300, "02/01/24", "00:00:00", note="Allowance"),
    ]


class TestPeriod:
    """Period bounds are start-of-day inclusive, end-of-day inclusive."""

    def test_bounds(self, january):
        view_filter = ViewFilter(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))
        notes = [tx.note for tx in filter_records(january, view_filter)]
        assert notes == ["Allowance", "Jeepney FARE", "Books"]

    def test_open_start(self, january):
        view_filter = ViewFilter(end_date=date(2024, 1, 1))
        assert len(filter_records(january, view_filter)) == 2

    def test_open_end(self, january):
        view_filter = ViewFilter(start_date=date(2024, 2, 1))
        assert [tx.note for tx in filter_records(january, view_filter)] == ["Allowance"]

    def test_no_filter_returns_everything(self, january):
        assert filter_records(january, ViewFilter()) == january

    def test_widening_never_drops_records(self, january):
        narrow = filter_records(
            january, ViewFilter(start_date=date(2024, 1, 10), end_date=date(2024, 1, 20))
        )
        wide = filter_records(
            january, ViewFilter(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))
        )
        assert {tx.id for tx in narrow} <= {tx.id for tx in wide}

    def test_bounds_use_ledger_timezone(self, make_tx):
        # 20:00 UTC on Jan 1 is 04:00 on Jan 2 at UTC+8
        tx = make_tx("inflow", 10, "01/01/24", "20:00:00")
        view_filter = ViewFilter(start_date=date(2024, 1, 2), end_date=date(2024, 1, 2))
        assert filter_records([tx], view_filter) == []
        assert filter_records([tx], view_filter, tz=timezone(timedelta(hours=8))) == [tx]

    def test_inverted_range_raises(self, january):
        view_filter = ViewFilter(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))
        with pytest.raises(ValidationError) as exc_info:
            filter_records(january, view_filter)
        assert exc_info.value.issues[0].issue_type == "invalid_range"

    def test_single_day_range_is_valid(self):
        validate_date_range(date(2024, 1, 1), date(2024, 1, 1))


class TestCategory:

    def test_partition(self, january):
        inflows = filter_records(january, ViewFilter(category=ViewCategory.INFLOW))
        outflows = filter_records(january, ViewFilter(category=ViewCategory.OUTFLOW))
        assert len(inflows) + len(outflows) == len(january)
        assert not {tx.id for tx in inflows} & {tx.id for tx in outflows}


class TestSearch:

    def test_note_is_case_insensitive(self, january):
        found = filter_records(january, ViewFilter(search_text="jeepney fare"))
        assert [tx.note for tx in found] == ["Jeepney FARE"]
        assert filter_records(january, ViewFilter(search_text="ALLOW")) == [
            january[1], january[4],
        ]

    def test_amount_matches_plain_decimal(self, january):
        assert [tx.note for tx in filter_records(january, ViewFilter(search_text="12.5"))] == [
            "Jeepney FARE"
        ]
        assert [tx.note for tx in filter_records(january, ViewFilter(search_text="500"))] == [
            "Allowance"
        ]

    def test_empty_search_matches_everything(self, january):
        assert all(matches_search(tx, "") for tx in january)
        assert all(matches_search(tx, None) for tx in january)

    def test_filters_compose(self, january):
        view_filter = ViewFilter(
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
            category=ViewCategory.INFLOW,
            search_text="allowance",
        )
        assert [tx.calendar_date for tx in filter_records(january, view_filter)] == ["01/01/24"]


class TestPeriodRecords:

    def test_ignores_category_and_search(self, january):
        view_filter = ViewFilter(
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
            category=ViewCategory.OUTFLOW,
            search_text="books",
        )
        assert len(period_records(january, view_filter)) == 3

    def test_does_not_mutate_input(self, january):
        before = list(january)
        filter_records(january, ViewFilter(category=ViewCategory.OUTFLOW))
        assert january == before
