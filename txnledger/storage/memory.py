"""Process-local store. Nothing survives the process."""

from typing import Any, Dict, List

from txnledger.storage.base import DEFAULT_COLLECTION, RecordStore


class MemoryStore(RecordStore):

    def __init__(self, collection: str = DEFAULT_COLLECTION) -> None:
        super().__init__(collection)
        self._records: List[Dict[str, Any]] = []

    def append(self, record: Dict[str, Any]) -> int:
        self._records.append(dict(record))
        return len(self._records) - 1

    def get(self, position: int) -> Dict[str, Any]:
        if position < 0:
            raise IndexError(f"position must be non-negative, got {position}")
        return dict(self._records[position])

    def __len__(self) -> int:
        return len(self._records)
