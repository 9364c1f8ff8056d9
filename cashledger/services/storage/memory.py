"""
In-Memory Record Store

Keeps collections in a dict. Used by tests and by sessions that do not
need durability.
"""

from cashledger.models.transaction import PartitionKey, Transaction
from cashledger.services.storage.interface import RecordStoreInterface, StorageError


class InMemoryRecordStore(RecordStoreInterface):
    """
    Dict-backed record store.

    Set `fail_writes` to make every write raise, for exercising the
    not-committed path.
    """

    def __init__(self):
        self._partitions: dict[str, list[Transaction]] = {}
        self.fail_writes = False
        self.write_count = 0

    async def read_all(self, partition: PartitionKey) -> list[Transaction]:
        return list(self._partitions.get(partition.storage_key, []))

    async def write_all(
        self,
        partition: PartitionKey,
        records: list[Transaction],
    ) -> bool:
        if self.fail_writes:
            raise StorageError(f"Write refused for partition {partition.storage_key}")
        self._partitions[partition.storage_key] = list(records)
        self.write_count += 1
        return True

    def partitions(self) -> list[str]:
        return sorted(self._partitions)
