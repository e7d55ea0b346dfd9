import copy
from typing import Any, Dict, List, Optional

from stores.base import Collection, Database, DuplicateRecordError, Record


class MemoryCollection(Collection):
    def __init__(self, name: str, records: Optional[List[Record]] = None):
        self.name = name
        # dicts keep insertion order
        self._rows: Dict[str, Record] = {}
        for r in records or []:
            self._rows[r["id"]] = copy.deepcopy(r)

    async def all(self) -> List[Record]:
        return [copy.deepcopy(r) for r in self._rows.values()]

    async def get(self, record_id: str) -> Optional[Record]:
        row = self._rows.get(record_id)
        return copy.deepcopy(row) if row is not None else None

    async def find_one(self, field: str, value: Any) -> Optional[Record]:
        for row in self._rows.values():
            if row.get(field) == value:
                return copy.deepcopy(row)
        return None

    async def insert(self, record: Record) -> Record:
        if record["id"] in self._rows:
            raise DuplicateRecordError("id", record["id"])
        self._rows[record["id"]] = copy.deepcopy(record)
        return copy.deepcopy(record)

    async def replace(self, record_id: str, record: Record) -> Optional[Record]:
        if record_id not in self._rows:
            return None
        self._rows[record_id] = copy.deepcopy(record)
        return copy.deepcopy(record)

    async def remove(self, record_id: str) -> Optional[Record]:
        return self._rows.pop(record_id, None)

    async def count(self) -> int:
        return len(self._rows)


class MemoryDatabase(Database):
    """Process-local collections; nothing survives a restart."""

    kind = "memory"

    def __init__(self):
        self._collections: Dict[str, MemoryCollection] = {}

    def collection(self, name: str) -> MemoryCollection:
        if name not in self._collections:
            self._collections[name] = MemoryCollection(name)
        return self._collections[name]
