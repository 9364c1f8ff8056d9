"""
JSON File Record Store

One JSON array per partition, stored as `<data_dir>/<storage_key>.json`.
Writes go to a temporary file that is then renamed over the target, so a
failed write leaves the previous collection intact.
"""

import json
import os
from pathlib import Path
from typing import Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from cashledger.models.transaction import PartitionKey, Transaction
from cashledger.services.storage.interface import (
    CorruptRecordError,
    RecordStoreInterface,
    StorageError,
)


_RECORDS = TypeAdapter(list[Transaction])


class JsonFileRecordStore(RecordStoreInterface):
    """Local-disk record store."""

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    def path_for(self, partition: PartitionKey) -> Path:
        safe_name = "".join(
            ch if ch.isalnum() or ch in "-_.@" else "_"
            for ch in partition.storage_key
        )
        return self._data_dir / f"{safe_name}.json"

    async def read_all(self, partition: PartitionKey) -> list[Transaction]:
        path = self.path_for(partition)
        if not path.exists():
            return []
        try:
            payload = path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")
        if not payload.strip():
            return []
        try:
            return _RECORDS.validate_json(payload)
        except PydanticValidationError as e:
            raise CorruptRecordError(f"Stored records in {path} are invalid: {e}")

    async def write_all(
        self,
        partition: PartitionKey,
        records: list[Transaction],
    ) -> bool:
        path = self.path_for(partition)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            data = _RECORDS.dump_python(records, mode="json")
            tmp_path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            os.replace(tmp_path, path)
            return True
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}")
