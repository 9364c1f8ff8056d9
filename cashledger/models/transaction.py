"""
Core Data Models for the Cash Ledger

These models define the strict schemas for every record the ledger keeps.
They are designed to:
1. Enforce the amount/note invariants at runtime
2. Provide clear validation error messages
3. Be serializable for the record store and exports

DESIGN DECISION: A transaction carries two date representations.
`calendar_date` (MM/DD/YY) is the attribution date used for grouping and is
frozen at creation. `created_at.iso` is the instant used for range filtering.
They are written together and never recomputed from one another.
"""

from datetime import date, datetime, timezone, tzinfo
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)


CALENDAR_DATE_PATTERN = r"^\d{2}/\d{2}/\d{2}$"
TIME_OF_DAY_PATTERN = r"^\d{2}:\d{2}:\d{2}$"

# Largest accepted amount: 15 significant digits survive a JSON number
# (binary float) round trip unchanged.
MAX_AMOUNT = Decimal("9999999999999.99")


def format_calendar_date(value: date) -> str:
    """Render a date as the MM/DD/YY attribution string."""
    return f"{value.month:02d}/{value.day:02d}/{value.year % 100:02d}"


def parse_calendar_date(value: str) -> date:
    """
    Parse an MM/DD/YY attribution string.

    Two-digit years always land in 2000-2099.
    """
    month, day, year = (int(part) for part in value.split("/"))
    return date(2000 + year, month, day)


def new_transaction_id(prefix: str = "tx_") -> str:
    return f"{prefix}{uuid4().hex[:12]}"


# =============================================================================
# ENUMS
# =============================================================================

class Category(str, Enum):
    """The two mutually exclusive transaction categories."""
    INFLOW = "inflow"    # money received
    OUTFLOW = "outflow"  # money spent


class ViewCategory(str, Enum):
    """Category selector for views; ALL disables the category filter."""
    ALL = "all"
    INFLOW = "inflow"
    OUTFLOW = "outflow"


# =============================================================================
# IDENTITY
# =============================================================================

class Identity(BaseModel):
    """
    The active user, as supplied by the session provider.

    `key` partitions the record store, `display_name` is used in
    attribution strings (created by / edited by).
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    key: str = Field(..., min_length=1, max_length=200)
    display_name: str = Field(..., min_length=1, max_length=200)


class PartitionKey(BaseModel):
    """Namespace + identity key addressing one record collection."""
    model_config = ConfigDict(frozen=True)

    namespace: str = Field(default="cms_tx_")
    identity_key: str = Field(..., min_length=1)

    @classmethod
    def for_identity(cls, identity: Identity, namespace: str = "cms_tx_") -> "PartitionKey":
        return cls(namespace=namespace, identity_key=identity.key)

    @property
    def storage_key(self) -> str:
        return f"{self.namespace}{self.identity_key}"

    def __str__(self) -> str:
        return self.storage_key


# =============================================================================
# TIMESTAMPS
# =============================================================================

class Timestamp(BaseModel):
    """
    A wall-clock reading kept in two forms.

    `date` and `time` are the local MM/DD/YY and HH:MM:SS strings shown to
    the user; `iso` is the comparable instant (always timezone-aware).
    """
    model_config = ConfigDict(frozen=True)

    date: str = Field(..., pattern=CALENDAR_DATE_PATTERN)
    time: str = Field(..., pattern=TIME_OF_DAY_PATTERN)
    iso: datetime

    @field_validator("iso")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        """Naive instants are taken to be UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def from_datetime(cls, moment: datetime, tz: Optional[tzinfo] = None) -> "Timestamp":
        """
        Build a timestamp from an instant.

        Args:
            moment: The instant. Naive values are taken to be UTC.
            tz: Timezone for the date/time strings. Defaults to the
                instant's own timezone.
        """
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        local = moment.astimezone(tz) if tz is not None else moment
        return cls(
            date=format_calendar_date(local.date()),
            time=local.strftime("%H:%M:%S"),
            iso=moment.astimezone(timezone.utc),
        )

    @property
    def display(self) -> str:
        return f"{self.date} {self.time}"


# =============================================================================
# TRANSACTION
# =============================================================================

class Transaction(BaseModel):
    """
    A single ledger entry.

    `id`, `calendar_date`, `created_at` and `created_by` never change after
    creation. An edit replaces category/amount/note and overwrites the single
    `edited_at`/`edited_by` slot.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(..., min_length=1)
    category: Category
    amount: Decimal = Field(
        ...,
        gt=0,
        le=MAX_AMOUNT,
        decimal_places=2,
        description="Positive amount, at most two decimal places",
    )
    note: str = Field(..., min_length=1, max_length=1000)
    calendar_date: str = Field(..., pattern=CALENDAR_DATE_PATTERN)
    created_at: Timestamp
    created_by: str = Field(..., min_length=1)
    edited_at: Optional[Timestamp] = None
    edited_by: Optional[str] = None

    @model_validator(mode="after")
    def validate_edit_slot(self) -> "Transaction":
        """edited_at and edited_by are set together or not at all."""
        if (self.edited_at is None) != (self.edited_by is None):
            raise ValueError("edited_at and edited_by must be set together")
        return self

    @field_serializer("amount", when_used="json")
    def serialize_amount(self, amount: Decimal) -> float:
        return float(amount)

    @classmethod
    def new(
        cls,
        category: Category,
        amount: Decimal,
        note: str,
        created_at: Timestamp,
        created_by: str,
        id_prefix: str = "tx_",
    ) -> "Transaction":
        """Create a record; the attribution date is taken from created_at."""
        return cls(
            id=new_transaction_id(id_prefix),
            category=category,
            amount=amount,
            note=note,
            calendar_date=created_at.date,
            created_at=created_at,
            created_by=created_by,
        )

    def with_edit(
        self,
        category: Category,
        amount: Decimal,
        note: str,
        edited_at: Timestamp,
        edited_by: str,
    ) -> "Transaction":
        """Return a validated copy carrying the edit."""
        data = self.model_dump()
        data.update(
            category=category,
            amount=amount,
            note=note,
            edited_at=edited_at,
            edited_by=edited_by,
        )
        return Transaction.model_validate(data)

    @property
    def calendar_day(self) -> date:
        return parse_calendar_date(self.calendar_date)

    @property
    def amount_text(self) -> str:
        """Plain decimal form of the amount, e.g. "500" or "12.5"."""
        text = format(self.amount, "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text

    @property
    def editor_display(self) -> Optional[str]:
        """"<editor> (<date> <time>)" or None when never edited."""
        if self.edited_by is None or self.edited_at is None:
            return None
        return f"{self.edited_by} ({self.edited_at.display})"


# =============================================================================
# VIEW FILTER
# =============================================================================

class ViewFilter(BaseModel):
    """
    Active filter selection.

    Every field is optional; an absent value lets all records through for
    that dimension.
    """

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category: ViewCategory = ViewCategory.ALL
    search_text: Optional[str] = None

    def date_range_only(self) -> "ViewFilter":
        """The same period with category and search cleared."""
        return ViewFilter(start_date=self.start_date, end_date=self.end_date)

    @property
    def has_period(self) -> bool:
        return self.start_date is not None or self.end_date is not None


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'invalid_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )
