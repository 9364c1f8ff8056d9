"""
Abstract Record Store Interface

The ledger needs exactly two things from storage: read a partition's whole
collection, and replace it. Any backend (in-memory, JSON files, Google
Sheets) implements these two methods.

A partition is addressed by a PartitionKey (namespace + identity key), so
backends never see or interpret identities themselves.
"""

from abc import ABC, abstractmethod

from cashledger.errors import PersistenceError
from cashledger.models.transaction import PartitionKey, Transaction


class RecordStoreInterface(ABC):
    """
    Abstract interface for transaction record storage.

    Collections are returned in insertion order.
    """

    @abstractmethod
    async def read_all(self, partition: PartitionKey) -> list[Transaction]:
        """
        Read every record of a partition.

        Args:
            partition: The collection to read

        Returns:
            The records, or an empty list for an unknown partition

        Raises:
            PersistenceError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def write_all(
        self,
        partition: PartitionKey,
        records: list[Transaction],
    ) -> bool:
        """
        Replace every record of a partition.

        Args:
            partition: The collection to replace
            records: The complete new collection

        Returns:
            True if written successfully

        Raises:
            PersistenceError: If the write fails
        """
        pass


class StorageError(PersistenceError):
    """Base exception raised by storage backends."""
    pass


class CorruptRecordError(StorageError):
    """Stored data could not be parsed back into records."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
