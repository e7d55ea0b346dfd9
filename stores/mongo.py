import contextlib
import logging
from typing import Any, Dict, Iterator, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import PersistenceError
from stores.base import Collection, Database, DuplicateRecordError, Record

logger = logging.getLogger("chain.stores")


# ---------- Helpers ----------
def serialize_doc(d: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(d)
    _id = out.pop("_id", None)
    out["id"] = str(_id) if _id is not None else None
    return out


def to_doc(record: Record) -> Dict[str, Any]:
    doc = {k: v for k, v in record.items() if k != "id"}
    doc["_id"] = record["id"]
    return doc


def _id_filter(record_id: str) -> Dict[str, Any]:
    # older documents carry ObjectId keys
    if ObjectId.is_valid(record_id):
        return {"_id": {"$in": [record_id, ObjectId(record_id)]}}
    return {"_id": record_id}


def _duplicate_field(e: DuplicateKeyError) -> str:
    pattern = (e.details or {}).get("keyPattern") or {"_id": 1}
    field = next(iter(pattern))
    return "id" if field == "_id" else field


@contextlib.contextmanager
def _translate_errors(collection: str, action: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as e:
        logger.exception("MongoDB %s on %s failed", action, collection)
        raise PersistenceError(f"{action} failed on {collection}") from e


class MongoCollection(Collection):
    """
    Records live one per document with ``_id`` holding the record id, so every
    write is a single atomic document operation.
    """

    def __init__(self, name: str, coll):
        self.name = name
        self._coll = coll

    async def all(self) -> List[Record]:
        out = []
        with _translate_errors(self.name, "find"):
            async for d in self._coll.find({}):
                out.append(serialize_doc(d))
        return out

    async def get(self, record_id: str) -> Optional[Record]:
        with _translate_errors(self.name, "find_one"):
            d = await self._coll.find_one(_id_filter(record_id))
        return serialize_doc(d) if d else None

    async def find_one(self, field: str, value: Any) -> Optional[Record]:
        query = _id_filter(value) if field == "id" else {field: value}
        with _translate_errors(self.name, "find_one"):
            d = await self._coll.find_one(query)
        return serialize_doc(d) if d else None

    async def insert(self, record: Record) -> Record:
        with _translate_errors(self.name, "insert_one"):
            try:
                await self._coll.insert_one(to_doc(record))
            except DuplicateKeyError as e:
                raise DuplicateRecordError(_duplicate_field(e)) from e
        return dict(record)

    async def replace(self, record_id: str, record: Record) -> Optional[Record]:
        # replacing without _id keeps the stored key and its type
        doc = {k: v for k, v in record.items() if k != "id"}
        with _translate_errors(self.name, "find_one_and_replace"):
            try:
                d = await self._coll.find_one_and_replace(
                    _id_filter(record_id), doc, return_document=ReturnDocument.AFTER
                )
            except DuplicateKeyError as e:
                raise DuplicateRecordError(_duplicate_field(e)) from e
        return serialize_doc(d) if d else None

    async def remove(self, record_id: str) -> Optional[Record]:
        with _translate_errors(self.name, "find_one_and_delete"):
            d = await self._coll.find_one_and_delete(_id_filter(record_id))
        return serialize_doc(d) if d else None

    async def count(self) -> int:
        with _translate_errors(self.name, "count_documents"):
            return await self._coll.count_documents({})


class MongoDatabase(Database):
    kind = "mongo"

    def __init__(self, uri: Optional[str] = None, db_name: str = "Chain_db", client=None):
        self.client = client if client is not None else AsyncIOMotorClient(uri)
        self.db = self.client[db_name]

    def collection(self, name: str) -> MongoCollection:
        return MongoCollection(name, self.db[name])

    async def ensure_indexes(self) -> None:
        try:
            await self.db.users.create_index([("email", ASCENDING)])
            await self.db.students.create_index([("studentId", ASCENDING)], unique=True, sparse=True)
            logger.info("MongoDB connected and indexes ensured")
        except PyMongoError as e:
            logger.exception("Index creation failed: %s", e)

    async def ping(self) -> bool:
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning("Health DB ping failed: %s", e)
            return False

    async def close(self) -> None:
        self.client.close()
