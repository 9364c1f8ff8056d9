"""
Google Sheets Record Store

Each partition is a worksheet named after its storage key, holding one
transaction per row under a fixed header row. A write replaces the whole
worksheet, matching the replace-all contract of the record store.

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions: a write is one update call covering the whole sheet
- Limited query capabilities (all filtering happens in Python)
"""

import hashlib
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from pydantic import ValidationError as PydanticValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from cashledger.config import GoogleSheetsSettings, get_settings
from cashledger.models.transaction import (
    Category,
    PartitionKey,
    Timestamp,
    Transaction,
)
from cashledger.services.storage.interface import (
    ConnectionError,
    CorruptRecordError,
    RecordStoreInterface,
    StorageError,
)


# Column mappings for a partition worksheet
TX_COLUMNS = [
    "id",
    "category",
    "amount",
    "note",
    "calendar_date",
    "created_date",
    "created_time",
    "created_iso",
    "created_by",
    "edited_date",
    "edited_time",
    "edited_iso",
    "edited_by",
]

MAX_TITLE_LENGTH = 100
TITLE_HASH_LENGTH = 12


def worksheet_title(storage_key: str) -> str:
    """
    Worksheet title for a partition.

    Keys longer than the Sheets title limit keep their prefix and end in a
    hash of the full key, so distinct keys never share a worksheet.
    """
    if len(storage_key) <= MAX_TITLE_LENGTH:
        return storage_key
    digest = hashlib.sha256(storage_key.encode("utf-8")).hexdigest()[:TITLE_HASH_LENGTH]
    return f"{storage_key[:MAX_TITLE_LENGTH - TITLE_HASH_LENGTH - 1]}~{digest}"


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_partition_sheet(self, storage_key: str) -> gspread.Worksheet:
        """Get or create the worksheet holding one partition."""
        spreadsheet = self.get_spreadsheet()
        title = worksheet_title(storage_key)
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=self._settings.worksheet_rows,
                cols=len(TX_COLUMNS),
            )
            sheet.append_row(TX_COLUMNS)
        return sheet


def transaction_to_row(tx: Transaction) -> list[str]:
    """Convert a Transaction to a spreadsheet row."""
    edited = tx.edited_at
    return [
        tx.id,
        tx.category.value,
        str(tx.amount),
        tx.note,
        tx.calendar_date,
        tx.created_at.date,
        tx.created_at.time,
        tx.created_at.iso.isoformat(),
        tx.created_by,
        edited.date if edited else "",
        edited.time if edited else "",
        edited.iso.isoformat() if edited else "",
        tx.edited_by or "",
    ]


def row_to_transaction(row: list[str]) -> Transaction:
    """
    Convert a spreadsheet row to a Transaction.

    Raises:
        CorruptRecordError: If the row cannot be parsed
    """
    # Handle short rows: Sheets drops trailing empty cells
    def safe_get(index: int) -> str:
        try:
            return row[index] or ""
        except IndexError:
            return ""

    try:
        edited_at = None
        if safe_get(11):
            edited_at = Timestamp(
                date=safe_get(9),
                time=safe_get(10),
                iso=datetime.fromisoformat(safe_get(11)),
            )
        return Transaction(
            id=safe_get(0),
            category=Category(safe_get(1)),
            amount=Decimal(safe_get(2)),
            note=safe_get(3),
            calendar_date=safe_get(4),
            created_at=Timestamp(
                date=safe_get(5),
                time=safe_get(6),
                iso=datetime.fromisoformat(safe_get(7)),
            ),
            created_by=safe_get(8),
            edited_at=edited_at,
            edited_by=safe_get(12) or None,
        )
    except (ValueError, InvalidOperation, PydanticValidationError) as e:
        raise CorruptRecordError(f"Malformed transaction row {safe_get(0)!r}: {e}")


class GoogleSheetsRecordStore(RecordStoreInterface):
    """
    Google Sheets implementation of the record store.

    Every read returns the rows below the header in sheet order, which is
    insertion order because writes always rewrite the full collection.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    async def read_all(self, partition: PartitionKey) -> list[Transaction]:
        try:
            sheet = self._client.get_partition_sheet(partition.storage_key)
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read partition {partition.storage_key}: {e}")

        return [row_to_transaction(row) for row in all_rows if row and row[0]]

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def write_all(
        self,
        partition: PartitionKey,
        records: list[Transaction],
    ) -> bool:
        try:
            sheet = self._client.get_partition_sheet(partition.storage_key)
            values = [TX_COLUMNS] + [transaction_to_row(tx) for tx in records]
            # Blank out leftover rows in the same update: a failed call
            # leaves the previous collection in place.
            stale = len(sheet.get_all_values()) - len(values)
            values += [[""] * len(TX_COLUMNS)] * max(stale, 0)
            if len(values) > sheet.row_count:
                sheet.add_rows(len(values) - sheet.row_count)
            sheet.update(values=values, range_name="A1", value_input_option="RAW")
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write partition {partition.storage_key}: {e}")
