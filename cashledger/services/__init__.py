"""Services package."""

from cashledger.services.session import SessionProvider
from cashledger.services.storage import (
    ConnectionError,
    CorruptRecordError,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordStoreInterface,
    StorageError,
)

__all__ = [
    # Session
    "SessionProvider",
    # Storage services
    "ConnectionError",
    "CorruptRecordError",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "RecordStoreInterface",
    "StorageError",
]
