"""
Storage Services Package

Provides the abstract record store interface and its implementations:
in-memory, JSON files on local disk, and Google Sheets.
"""

from cashledger.services.storage.interface import (
    ConnectionError,
    CorruptRecordError,
    RecordStoreInterface,
    StorageError,
)
from cashledger.services.storage.memory import InMemoryRecordStore
from cashledger.services.storage.json_file import JsonFileRecordStore
from cashledger.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
)

__all__ = [
    # Interfaces
    "RecordStoreInterface",
    # Exceptions
    "ConnectionError",
    "CorruptRecordError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
]
