import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from errors import PersistenceError
from stores.base import Database, Record
from stores.memory import MemoryCollection

logger = logging.getLogger("chain.stores")


class JsonFileCollection(MemoryCollection):
    """
    A collection mirrored to ``<dir>/<name>.json`` as one JSON array.

    Every mutation rewrites the whole file. Calls never yield to the event loop
    between the change and the write, so writers inside one process are
    serialised; two processes sharing the file can still overwrite each
    other's changes.
    """

    def __init__(self, name: str, path: Path):
        super().__init__(name, self._load(path))
        self.path = path

    @staticmethod
    def _load(path: Path) -> List[Record]:
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as fh:
                rows = json.load(fh)
        except (OSError, ValueError) as e:
            logger.exception("Failed to read %s", path)
            raise PersistenceError(f"cannot read {path.name}") from e
        if not isinstance(rows, list):
            raise PersistenceError(f"{path.name} does not hold a JSON array")
        return [r for r in rows if isinstance(r, dict) and r.get("id")]

    def _flush(self) -> None:
        tmp = self.path.with_suffix(".json.tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(list(self._rows.values()), fh, indent=2, ensure_ascii=False)
        os.replace(tmp, self.path)

    async def _commit(self, previous: Dict[str, Record]) -> None:
        try:
            self._flush()
        except OSError as e:
            self._rows = previous
            logger.exception("Failed to write %s", self.path)
            raise PersistenceError(f"cannot write {self.path.name}") from e

    async def insert(self, record: Record) -> Record:
        previous = dict(self._rows)
        out = await super().insert(record)
        await self._commit(previous)
        return out

    async def replace(self, record_id: str, record: Record) -> Optional[Record]:
        previous = dict(self._rows)
        out = await super().replace(record_id, record)
        if out is not None:
            await self._commit(previous)
        return out

    async def remove(self, record_id: str) -> Optional[Record]:
        previous = dict(self._rows)
        out = await super().remove(record_id)
        if out is not None:
            await self._commit(previous)
        return out


class JsonFileDatabase(Database):
    kind = "json"

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._collections: Dict[str, JsonFileCollection] = {}

    def collection(self, name: str) -> JsonFileCollection:
        if name not in self._collections:
            self._collections[name] = JsonFileCollection(name, self.directory / f"{name}.json")
        return self._collections[name]

    async def ping(self) -> bool:
        return self.directory.is_dir() and os.access(self.directory, os.W_OK)
