import logging
import secrets
import string
import uuid
from typing import Any, Dict, Iterator, List, Optional

from bson import ObjectId

from errors import AuthenticationError, NotFoundError, UnknownReferenceError, ValidationError
from rules import ID_OBJECTID, ID_SHORT, ID_UUID, RULES, RuleSet
from security import hash_password, is_password_hash, verify_password
from stores.base import Collection, Database, DuplicateRecordError, Record

logger = logging.getLogger("chain.stores")

_SHORT_ALPHABET = string.ascii_lowercase + string.digits


def short_id(length: int = 8) -> str:
    return "".join(secrets.choice(_SHORT_ALPHABET) for _ in range(length))


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ResourceStore:
    """
    CRUD over one collection, validated by the collection's RuleSet.

    Updates replace the whole record; the id from the path always wins over
    any id in the payload.
    """

    def __init__(self, rules: RuleSet, collection: Collection):
        self.rules = rules
        self.collection = collection

    @property
    def entity(self) -> str:
        return self.rules.entity

    async def list(self) -> List[Record]:
        return [self.rules.public(r) for r in await self.collection.all()]

    async def get_by_id(self, record_id: str) -> Record:
        return self.rules.public(await self._get(record_id))

    async def create(self, payload: Any) -> Record:
        record = self.rules.clean(payload)
        self.rules.check(record)
        record = await self.prepare(record, None)
        record["id"] = self._new_id(record.get("id"))
        for name in self.rules.generated:
            if _blank(record.get(name)):
                record[name] = short_id()
        record = self._compact(record)
        await self._check_unique(record)
        saved = await self._write(self.collection.insert(record))
        logger.info("Created %s %s", self.entity, saved["id"])
        return self.rules.public(saved)

    async def update(self, record_id: str, payload: Any) -> Record:
        current = await self._get(record_id)
        record = self.rules.clean(payload)
        record["id"] = record_id
        self.rules.check(record)
        record = await self.prepare(record, current)
        for name in self.rules.generated:
            if _blank(record.get(name)):
                record[name] = current.get(name) or short_id()
        record = self._compact(record)
        await self._check_unique(record)
        saved = await self._write(self.collection.replace(record_id, record))
        if saved is None:
            # deleted between the read and the write
            raise NotFoundError()
        logger.info("Updated %s %s", self.entity, record_id)
        return self.rules.public(saved)

    async def delete(self, record_id: str) -> Record:
        removed = await self.collection.remove(record_id)
        if removed is None:
            raise NotFoundError()
        logger.info("Deleted %s %s", self.entity, record_id)
        return self.rules.public(removed)

    async def prepare(self, record: Record, current: Optional[Record]) -> Record:
        """Hook for entity-specific changes after validation, before the write."""
        return record

    # ---------- Helpers ----------
    async def _get(self, record_id: str) -> Record:
        row = await self.collection.get(record_id)
        if row is None:
            raise NotFoundError()
        return row

    def _new_id(self, requested: Optional[str]) -> str:
        policy = self.rules.id_policy
        if policy == ID_OBJECTID:
            return str(ObjectId())
        if policy == ID_UUID:
            return str(uuid.uuid4())
        if policy == ID_SHORT and _blank(requested):
            return short_id()
        return requested

    @staticmethod
    def _compact(record: Record) -> Record:
        return {k: v for k, v in record.items() if v is not None}

    async def _check_unique(self, record: Record) -> None:
        for name in self.rules.unique:
            value = record.get(name)
            if _blank(value):
                continue
            other = await self.collection.find_one(name, value)
            if other is not None and other["id"] != record["id"]:
                raise ValidationError(f"{name} already in use", name)

    @staticmethod
    async def _write(operation):
        try:
            return await operation
        except DuplicateRecordError as e:
            raise ValidationError(f"{e.field} already in use", e.field)


class UserStore(ResourceStore):
    async def prepare(self, record: Record, current: Optional[Record]) -> Record:
        record["pwd"] = hash_password(record["pwd"])
        return record

    async def authenticate(self, email: str, senha: str) -> str:
        """Return the access level of the User with this email and password."""
        user = await self.collection.find_one("email", email)
        if user is None:
            raise NotFoundError("user not found")
        stored = user.get("pwd") or ""
        if not verify_password(senha, stored):
            logger.warning("Failed login for user %s", user["id"])
            raise AuthenticationError("wrong password")
        if not is_password_hash(stored):
            upgraded = await self.collection.replace(user["id"], {**user, "pwd": hash_password(senha)})
            if upgraded is None:
                logger.warning("Could not upgrade plain-text password of user %s", user["id"])
            else:
                logger.info("Upgraded plain-text password of user %s", user["id"])
        return user.get("level")


class ProfileStore(ResourceStore):
    """
    Student and Teacher records belong to a User and share its id.

    The User's name is copied into the profile when the profile is written; a
    later rename of the User shows up only after the profile is saved again.
    """

    def __init__(self, rules: RuleSet, collection: Collection, targets: Collection):
        super().__init__(rules, collection)
        self.targets = targets

    async def prepare(self, record: Record, current: Optional[Record]) -> Record:
        ref = self.rules.reference
        target_id = record[ref.field]
        target = await self.targets.get(target_id)
        if target is None:
            raise UnknownReferenceError(f"no user with id {target_id}", ref.field)
        for name in ref.copy:
            record[name] = target.get(name)
        return record


class Stores:
    """The Resource Stores of every collection, built once over one Database."""

    def __init__(self, database: Database):
        self.database = database
        self._stores: Dict[str, ResourceStore] = {}
        for name, rules in RULES.items():
            collection = database.collection(name)
            if name == "users":
                store = UserStore(rules, collection)
            elif rules.reference:
                store = ProfileStore(rules, collection, database.collection(rules.reference.collection))
            else:
                store = ResourceStore(rules, collection)
            self._stores[name] = store

    def __getitem__(self, name: str) -> ResourceStore:
        return self._stores[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._stores)

    @property
    def users(self) -> UserStore:
        return self._stores["users"]
