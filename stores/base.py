from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]


class DuplicateRecordError(Exception):
    """A backend refused a write because a unique field (usually ``id``) is taken."""

    def __init__(self, field: str, value: Any = None):
        super().__init__(f"duplicate {field}")
        self.field = field
        self.value = value


class Collection(ABC):
    """One named collection of records keyed by their string ``id``."""

    name: str

    @abstractmethod
    async def all(self) -> List[Record]:
        """Every record, in insertion order."""

    @abstractmethod
    async def get(self, record_id: str) -> Optional[Record]:
        ...

    @abstractmethod
    async def find_one(self, field: str, value: Any) -> Optional[Record]:
        """First record (insertion order) whose ``field`` equals ``value``."""

    @abstractmethod
    async def insert(self, record: Record) -> Record:
        ...

    @abstractmethod
    async def replace(self, record_id: str, record: Record) -> Optional[Record]:
        """Replace the whole record; None when ``record_id`` is unknown."""

    @abstractmethod
    async def remove(self, record_id: str) -> Optional[Record]:
        ...

    async def count(self) -> int:
        return len(await self.all())


class Database(ABC):
    kind: str

    @abstractmethod
    def collection(self, name: str) -> Collection:
        ...

    async def ensure_indexes(self) -> None:
        pass

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass
