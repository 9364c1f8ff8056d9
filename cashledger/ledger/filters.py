"""
View Filter

Narrows a record collection by period, category and free-text search.
Filters compose with AND and always return a new list.

The period is matched against the creation instant (`created_at.iso`),
not against the attribution date string: the start bound is the
start-of-day of `start_date`, the end bound is exclusive at the start-of-day
following `end_date`.
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from cashledger.errors import ValidationError
from cashledger.models.transaction import (
    Transaction,
    ValidationIssue,
    ViewCategory,
    ViewFilter,
)


def start_of_day(day: date, tz: tzinfo = timezone.utc) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def validate_date_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    """Raise ValidationError when the period is inverted."""
    if start_date and end_date and start_date > end_date:
        issue = ValidationIssue(
            field="end_date",
            issue_type="invalid_range",
            message=f"End date {end_date} is before start date {start_date}",
            suggested_fix="Pick an end date on or after the start date",
        )
        raise ValidationError(issue.message, [issue])


def in_period(
    tx: Transaction,
    start_date: Optional[date],
    end_date: Optional[date],
    tz: tzinfo = timezone.utc,
) -> bool:
    instant = tx.created_at.iso
    if start_date and instant < start_of_day(start_date, tz):
        return False
    if end_date and instant >= start_of_day(end_date + timedelta(days=1), tz):
        return False
    return True


def matches_search(tx: Transaction, search_text: Optional[str]) -> bool:
    """Case-insensitive substring match over the note or the amount."""
    if not search_text:
        return True
    needle = search_text.lower()
    return needle in tx.note.lower() or needle in tx.amount_text


def filter_records(
    records: Iterable[Transaction],
    view_filter: ViewFilter,
    tz: tzinfo = timezone.utc,
) -> list[Transaction]:
    """
    Apply every dimension of `view_filter`.

    Args:
        records: Records of a single identity
        view_filter: Active selection; unset fields are no-ops
        tz: Timezone used to place the start-of-day bounds

    Returns:
        Matching records in input order

    Raises:
        ValidationError: If start_date is after end_date
    """
    validate_date_range(view_filter.start_date, view_filter.end_date)

    result = []
    for tx in records:
        if not in_period(tx, view_filter.start_date, view_filter.end_date, tz):
            continue
        if (
            view_filter.category != ViewCategory.ALL
            and tx.category.value != view_filter.category.value
        ):
            continue
        if not matches_search(tx, view_filter.search_text):
            continue
        result.append(tx)
    return result


def period_records(
    records: Iterable[Transaction],
    view_filter: ViewFilter,
    tz: tzinfo = timezone.utc,
) -> list[Transaction]:
    """Records in the filter's period, ignoring category and search."""
    return filter_records(records, view_filter.date_range_only(), tz)
