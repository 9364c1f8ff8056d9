"""
Tests for the ledger service

All tests run against the in-memory record store; async operations are
driven with asyncio.run.
"""

import asyncio
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from cashledger.config import LedgerSettings
from cashledger.errors import (
    NotFoundError,
    PersistenceError,
    PreconditionError,
    ValidationError,
)
from cashledger.events import LedgerEventLogger
from cashledger.models.transaction import Category, Identity, ViewCategory, ViewFilter
from cashledger.models.views import ReportType
from cashledger.orchestrator import LedgerService
from cashledger.services.storage import InMemoryRecordStore


class RejectingStore(InMemoryRecordStore):
    """Store whose writes report failure without raising."""

    async def write_all(self, partition, records):
        return False


class BrokenReadStore(InMemoryRecordStore):
    async def read_all(self, partition):
        raise RuntimeError("socket closed")


def seed_three_days(service, identity, clock):
    """Inflow 500 on 01/01, outflow 100 on 01/02, inflow 50 on 01/03."""
    clock.set("01/01/24", "08:00:00")
    first = asyncio.run(service.add_transaction(identity, "inflow", "500", "Allowance"))
    clock.set("01/02/24", "12:00:00")
    second = asyncio.run(service.add_transaction(identity, "outflow", "100", "Lunch"))
    clock.set("01/03/24", "16:00:00")
    third = asyncio.run(service.add_transaction(identity, "inflow", "50", "Change"))
    return first, second, third


def balances(views):
    return {row.calendar_date: row.cumulative_balance for row in views.savings_summary.rows}


class TestAddTransaction:

    def test_add_and_list(self, service, identity, clock):
        tx = asyncio.run(service.add_transaction(identity, "inflow", "1,250.50", "  Allowance "))
        assert tx.category == Category.INFLOW
        assert tx.amount == Decimal("1250.50")
        assert tx.note == "Allowance"
        assert tx.calendar_date == "01/01/24"
        assert tx.created_at.time == "09:00:00"
        assert tx.created_by == "Demo Student"
        assert asyncio.run(service.list_transactions(identity)) == [tx]

    def test_trailing_zero_amount(self, service, identity):
        tx = asyncio.run(service.add_transaction(identity, "outflow", "500.000", "Rent share"))
        assert tx.amount == Decimal("500.00")

    def test_writes_to_identity_partition(self, service, identity, store):
        asyncio.run(service.add_transaction(identity, "inflow", "10", "x"))
        assert store.partitions() == ["cms_tx_student@school.edu"]

    def test_identities_are_isolated(self, service, identity):
        other = Identity(key="other@school.edu", display_name="Other")
        asyncio.run(service.add_transaction(identity, "inflow", "10", "mine"))
        assert asyncio.run(service.list_transactions(other)) == []

    @pytest.mark.parametrize("category,amount,note,field", [
        ("inflow", "0", "x", "amount"),
        ("inflow", "-5", "x", "amount"),
        ("inflow", "abc", "x", "amount"),
        ("inflow", "10", "   ", "note"),
        ("savings", "10", "x", "category"),
        (None, "10", "x", "category"),
    ])
    def test_rejects_invalid_input(self, service, identity, store, category, amount, note, field):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(service.add_transaction(identity, category, amount, note))
        assert field in [issue.field for issue in exc_info.value.issues]
        assert store.write_count == 0

    def test_requires_identity(self, service, store):
        with pytest.raises(PreconditionError):
            asyncio.run(service.add_transaction(None, "inflow", "10", "x"))
        assert store.write_count == 0

    def test_failed_write_adds_nothing(self, service, identity, store):
        asyncio.run(service.add_transaction(identity, "inflow", "10", "first"))
        store.fail_writes = True
        with pytest.raises(PersistenceError):
            asyncio.run(service.add_transaction(identity, "inflow", "20", "second"))
        store.fail_writes = False
        notes = [tx.note for tx in asyncio.run(service.list_transactions(identity))]
        assert notes == ["first"]

    def test_rejected_write_is_a_persistence_error(self, identity, clock):
        service = LedgerService(RejectingStore(), settings=LedgerSettings(), clock=clock)
        with pytest.raises(PersistenceError):
            asyncio.run(service.add_transaction(identity, "inflow", "10", "x"))

    def test_read_failure_is_a_persistence_error(self, identity, clock):
        service = LedgerService(BrokenReadStore(), settings=LedgerSettings(), clock=clock)
        with pytest.raises(PersistenceError):
            asyncio.run(service.list_transactions(identity))

    def test_logs_save_failure(self, store, identity, clock):
        events = MagicMock(spec=LedgerEventLogger)
        service = LedgerService(store, event_logger=events, settings=LedgerSettings(), clock=clock)
        store.fail_writes = True
        with pytest.raises(PersistenceError):
            asyncio.run(service.add_transaction(identity, "inflow", "10", "x"))
        events.log_save_failed.assert_called_once()
        events.log_transaction_added.assert_not_called()


class TestEditTransaction:

    def test_edit_keeps_date_and_sets_editor(self, service, identity, clock):
        tx = asyncio.run(service.add_transaction(identity, "inflow", "100", "Tutoring"))
        clock.set("01/05/24", "18:30:00")
        edited = asyncio.run(
            service.edit_transaction(identity, tx.id, "outflow", "80", "Snacks")
        )
        assert edited.id == tx.id
        assert edited.calendar_date == "01/01/24"
        assert edited.created_at == tx.created_at
        assert edited.category == Category.OUTFLOW
        assert edited.editor_display == "Demo Student (01/05/24 18:30:00)"
        assert asyncio.run(service.get_transaction(identity, tx.id)) == edited

    def test_edit_changes_only_that_date_and_later(self, service, identity, clock):
        _, second, _ = seed_three_days(service, identity, clock)
        before = balances(asyncio.run(service.recompute_views(identity)))
        assert before == {
            "01/03/24": Decimal("450"),
            "01/02/24": Decimal("400"),
            "01/01/24": Decimal("500"),
        }

        asyncio.run(service.edit_transaction(identity, second.id, "outflow", "300", "Lunch"))
        after = balances(asyncio.run(service.recompute_views(identity)))
        assert after["01/01/24"] == before["01/01/24"]
        assert after["01/02/24"] == Decimal("200")
        assert after["01/03/24"] == Decimal("250")

    def test_unknown_id(self, service, identity):
        with pytest.raises(NotFoundError) as exc_info:
            asyncio.run(service.edit_transaction(identity, "tx_missing", "inflow", "1", "x"))
        assert exc_info.value.transaction_id == "tx_missing"

    def test_failed_write_keeps_original(self, service, identity, store):
        tx = asyncio.run(service.add_transaction(identity, "inflow", "100", "Tutoring"))
        store.fail_writes = True
        with pytest.raises(PersistenceError):
            asyncio.run(service.edit_transaction(identity, tx.id, "inflow", "999", "Changed"))
        store.fail_writes = False
        assert asyncio.run(service.get_transaction(identity, tx.id)) == tx

    def test_invalid_edit_is_rejected_before_lookup(self, service, identity):
        with pytest.raises(ValidationError):
            asyncio.run(service.edit_transaction(identity, "tx_missing", "inflow", "-1", "x"))


class TestDeleteTransaction:

    def test_requires_confirmation(self, service, identity, store):
        tx = asyncio.run(service.add_transaction(identity, "inflow", "10", "x"))
        with pytest.raises(ValidationError):
            asyncio.run(service.delete_transaction(identity, tx.id))
        assert store.write_count == 1

    def test_delete_last_record_of_a_date(self, service, identity, clock):
        _, _, third = seed_three_days(service, identity, clock)
        removed = asyncio.run(service.delete_transaction(identity, third.id, confirmed=True))
        assert removed == third

        views = asyncio.run(service.recompute_views(identity))
        assert "01/03/24" not in views.savings_summary.dates
        assert "01/03/24" not in views.inflow_ledger.dates
        assert "01/03/24" not in [day.calendar_date for day in views.transaction_days]
        assert "01/03/24" not in [row.calendar_date for row in views.history]

    def test_unknown_id(self, service, identity):
        with pytest.raises(NotFoundError):
            asyncio.run(service.delete_transaction(identity, "tx_missing", confirmed=True))

    def test_failed_write_keeps_record(self, service, identity, store):
        tx = asyncio.run(service.add_transaction(identity, "inflow", "10", "x"))
        store.fail_writes = True
        with pytest.raises(PersistenceError):
            asyncio.run(service.delete_transaction(identity, tx.id, confirmed=True))
        store.fail_writes = False
        assert asyncio.run(service.list_transactions(identity)) == [tx]


class TestRecomputeViews:

    def test_statistics_ignore_category_and_search(self, service, identity, clock):
        seed_three_days(service, identity, clock)
        period = ViewFilter(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))
        narrowed = ViewFilter(
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
            category=ViewCategory.OUTFLOW,
            search_text="lunch",
        )
        full = asyncio.run(service.recompute_views(identity, period))
        filtered = asyncio.run(service.recompute_views(identity, narrowed))

        assert filtered.statistics == full.statistics
        assert filtered.statistics.count == 3
        assert filtered.statistics.net == Decimal("450")
        assert [day.calendar_date for day in filtered.transaction_days] == ["01/02/24"]
        assert filtered.transaction_days[0].cumulative_balance == Decimal("400")
        assert filtered.savings_summary == full.savings_summary

    def test_period_narrows_statistics(self, service, identity, clock):
        seed_three_days(service, identity, clock)
        views = asyncio.run(service.recompute_views(
            identity, ViewFilter(start_date=date(2024, 1, 2), end_date=date(2024, 1, 2))
        ))
        assert views.statistics.count == 1
        assert views.statistics.total_outflow == Decimal("100")
        # running balance starts inside the period
        assert balances(views) == {"01/02/24": Decimal("-100")}
        # history always covers every record
        assert len(views.history) == 3

    def test_inverted_period(self, service, identity):
        with pytest.raises(ValidationError):
            asyncio.run(service.recompute_views(
                identity, ViewFilter(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))
            ))

    def test_monthly_savings_for_current_year(self, service, identity, clock):
        seed_three_days(service, identity, clock)
        views = asyncio.run(service.recompute_views(identity))
        assert views.monthly_savings.year == 2024
        assert views.monthly_savings.values[0] == Decimal("450")

    def test_requires_identity(self, service):
        with pytest.raises(PreconditionError):
            asyncio.run(service.recompute_views(None))


class TestReportsAndExport:

    def test_build_report(self, service, identity, clock):
        seed_three_days(service, identity, clock)
        clock.set("01/04/24", "07:00:00")
        table = asyncio.run(service.build_report(
            identity,
            ReportType.DAILY_CASH_INFLOWS,
            ViewFilter(category=ViewCategory.OUTFLOW),
        ))
        assert table.title == "Daily Cash Inflows Report"
        assert table.generated_at == "01/04/24 07:00:00"
        assert [row[0] for row in table.rows] == ["01/03/24", "01/01/24"]
        assert table.rows[1][2] == "₱500.00"

    def test_export(self, service, identity, clock):
        seed_three_days(service, identity, clock)
        document = asyncio.run(service.export(identity))
        assert document.user == identity
        assert len(document.transactions) == 3
        assert document.exported_at.date == "01/03/24"
