"""
Shared fixtures.

Transactions are built directly with fixed UTC instants so that calendar
dates, times and period bounds are predictable.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import count

import pytest

from cashledger.config import LedgerSettings
from cashledger.models.transaction import (
    Category,
    Identity,
    Timestamp,
    Transaction,
    parse_calendar_date,
)
from cashledger.orchestrator import LedgerService
from cashledger.services.storage import InMemoryRecordStore


def instant(calendar_date: str, time_of_day: str = "09:00:00") -> datetime:
    day = parse_calendar_date(calendar_date)
    hour, minute, second = (int(part) for part in time_of_day.split(":"))
    return datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=timezone.utc)


@pytest.fixture
def make_tx():
    """Factory: make_tx("inflow", "500", "01/01/24", "09:00:00", note=..., edited_by=...)."""
    ids = count(1)

    def _make(
        category,
        amount,
        calendar_date,
        time_of_day="09:00:00",
        note="entry",
        tx_id=None,
        edited_by=None,
        edited_on=None,
    ) -> Transaction:
        edited_at = None
        if edited_by:
            edited_at = Timestamp.from_datetime(
                instant(*(edited_on or (calendar_date, "18:00:00")))
            )
        return Transaction(
            id=tx_id or f"tx_{next(ids):03d}",
            category=Category(category),
            amount=Decimal(str(amount)),
            note=note,
            calendar_date=calendar_date,
            created_at=Timestamp.from_datetime(instant(calendar_date, time_of_day)),
            created_by="Demo Student",
            edited_at=edited_at,
            edited_by=edited_by,
        )

    return _make


@pytest.fixture
def scenario(make_tx):
    """Three records on 01/01/24 and one on 01/02/24."""
    return [
        make_tx("inflow", 500, "01/01/24", "08:00:00", note="Allowance"),
        make_tx("outflow", 200, "01/01/24", "12:30:00", note="Lunch and books"),
        make_tx("inflow", 100, "01/01/24", "17:45:00", note="Tutoring"),
        make_tx("outflow", 50, "01/02/24", "10:00:00", note="Bus fare"),
    ]


class FakeClock:
    """Callable clock the tests can move forward."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def set(self, calendar_date: str, time_of_day: str = "09:00:00") -> None:
        self.current = instant(calendar_date, time_of_day)

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(instant("01/01/24", "09:00:00"))


@pytest.fixture
def identity():
    return Identity(key="student@school.edu", display_name="Demo Student")


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def service(store, clock):
    return LedgerService(
        record_store=store,
        settings=LedgerSettings(timezone="UTC", currency_symbol="₱"),
        clock=clock,
    )
