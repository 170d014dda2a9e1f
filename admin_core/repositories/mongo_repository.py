# File: admin_core/repositories/mongo_repository.py

"""
Document backend on motor.

Documents keep the camelCase field names of the original collections and use
engine-generated ObjectId keys. Canonical field names are translated with
pydantic's ``to_camel`` plus a per-repository override map. Grouped entities are
read through an aggregation that joins the owning language with ``$lookup``.
"""

import logging
import re
import uuid
from abc import abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic.alias_generators import to_camel
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import BulkWriteError, DuplicateKeyError

from admin_core.core.exceptions import ConflictException
from admin_core.db.mongo import LANGUAGES
from admin_core.repositories.base_repository import (
    BaseRepository,
    Filter,
    T,
    handle_backend_errors,
    violated_key,
)
from admin_core.schemas.common import FindOptions

logger = logging.getLogger(__name__)

DUPLICATE_KEY_CODE = 11000

LANGUAGE_LOOKUP = [
    {
        "$lookup": {
            "from": LANGUAGES,
            "localField": "languageId",
            "foreignField": "_id",
            "as": "language",
        }
    },
    {"$unwind": {"path": "$language", "preserveNullAndEmptyArrays": True}},
]


def strip_document(doc: Mapping[str, Any], object_id_fields: Sequence[str] = ()) -> Dict[str, Any]:
    """
    Drop engine-internal fields from a raw document.

    ``_id`` becomes a plain string ``id``, ``__v`` is removed and the given
    ObjectId reference fields are rendered as strings.
    """
    data = dict(doc)
    data.pop("__v", None)
    if "_id" in data:
        data["id"] = str(data.pop("_id"))
    for field in object_id_fields:
        if isinstance(data.get(field), ObjectId):
            data[field] = str(data[field])
    return data


def _to_object_id(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        # An id that cannot be an ObjectId matches nothing
        return value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MongoRepository(BaseRepository[T]):
    """
    Base class for document repositories.

    Attributes:
        collection_name: Collection backing this repository
        field_map: Canonical field name to document field name, where ``to_camel`` is not enough
        object_id_fields: Document fields holding ObjectId values
        populate_language: Join the owning language on reads
    """

    collection_name: str = None
    field_map: Dict[str, str] = {}
    object_id_fields: Sequence[str] = ("_id",)
    populate_language: bool = False

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database
        self.collection = database[self.collection_name]

    @abstractmethod
    def to_entity(self, doc: Mapping[str, Any]) -> T:
        """Map a raw document to the canonical model."""

    # Translation helpers

    def _field(self, name: str) -> str:
        if name == "id":
            return "_id"
        return self.field_map.get(name) or to_camel(name)

    def _coerce(self, field: str, value: Any) -> Any:
        if field in self.object_id_fields and value is not None:
            return _to_object_id(value)
        return value

    def _query(self, filter: Optional[Filter]) -> Dict[str, Any]:
        query = {}
        for name, value in (filter or {}).items():
            field = self._field(name)
            if isinstance(value, (list, tuple, set, frozenset)):
                query[field] = {"$in": [self._coerce(field, v) for v in value]}
            else:
                query[field] = self._coerce(field, value)
        return query

    def _document(self, data: Dict[str, Any]) -> Dict[str, Any]:
        doc = {}
        for name, value in data.items():
            field = self._field(name)
            doc[field] = self._coerce(field, value)
        return doc

    def _sort(self, options: Optional[FindOptions]) -> List[Any]:
        if options is None:
            return []
        return [
            (self._field(name), ASCENDING if direction == 1 else DESCENDING)
            for name, direction in options.sort.items()
        ]

    def _search_query(self, term: str, search_fields: Sequence[str], filter: Optional[Filter]):
        pattern = re.escape(term)
        search = {
            "$or": [
                {self._field(name): {"$regex": pattern, "$options": "i"}}
                for name in search_fields
            ]
        }
        query = self._query(filter)
        return {"$and": [query, search]} if query else search

    async def _find(self, query: Dict[str, Any], options: Optional[FindOptions] = None) -> List[T]:
        sort = self._sort(options)
        skip = options.skip if options else 0
        limit = options.limit if options and options.limit else 0

        if self.populate_language:
            pipeline = [{"$match": query}]
            if sort:
                pipeline.append({"$sort": dict(sort)})
            if skip:
                pipeline.append({"$skip": skip})
            if limit:
                pipeline.append({"$limit": limit})
            pipeline.extend(LANGUAGE_LOOKUP)
            docs = await self.collection.aggregate(pipeline).to_list(length=None)
        else:
            cursor = self.collection.find(query, sort=sort or None, skip=skip, limit=limit)
            docs = await cursor.to_list(length=None)

        return [self.to_entity(doc) for doc in docs]

    async def _find_one(self, query: Dict[str, Any]) -> Optional[T]:
        entities = await self._find(query, FindOptions(limit=1))
        return entities[0] if entities else None

    def _new_document(self, data: Dict[str, Any]) -> Dict[str, Any]:
        doc = self._document(data)
        now = _utcnow()
        doc.setdefault("publicId", str(uuid.uuid4()))
        doc.setdefault("createdAt", now)
        doc.setdefault("updatedAt", now)
        doc.setdefault("__v", 0)
        return doc

    # Contract

    @handle_backend_errors("insert")
    async def insert(self, data: Dict[str, Any]) -> T:
        result = await self.collection.insert_one(self._new_document(data))
        logger.debug(f"Inserted {self.entity_type} {result.inserted_id}")
        return await self._find_one({"_id": result.inserted_id})

    @handle_backend_errors("insert batch")
    async def insert_many(self, rows: List[Dict[str, Any]]) -> List[T]:
        docs = [self._new_document(data) for data in rows]
        public_ids = [doc["publicId"] for doc in docs]
        try:
            await self.collection.insert_many(docs, ordered=True)
        except (BulkWriteError, DuplicateKeyError) as e:
            # Ordered inserts stop at the first failure; remove what got through
            await self.collection.delete_many({"publicId": {"$in": public_ids}})
            if isinstance(e, DuplicateKeyError):
                raise ConflictException(self.entity_type, "unique key", violated_key(e)) from e
            duplicate = next(
                (error for error in e.details.get("writeErrors", []) if error.get("code") == DUPLICATE_KEY_CODE),
                None,
            )
            if duplicate is not None:
                key = ", ".join(duplicate.get("keyPattern") or {}) or "unknown"
                raise ConflictException(self.entity_type, "unique key", key) from e
            raise

        by_public_id = {
            entity.public_id: entity
            for entity in await self._find({"publicId": {"$in": public_ids}})
        }
        return [by_public_id[public_id] for public_id in public_ids]

    @handle_backend_errors("get")
    async def get_detail(self, filter: Filter) -> Optional[T]:
        return await self._find_one(self._query(filter))

    @handle_backend_errors("update")
    async def update_by_id(self, id: str, data: Dict[str, Any]) -> Optional[T]:
        doc = self._document(data)
        doc["updatedAt"] = _utcnow()
        query = {"_id": _to_object_id(id)}
        result = await self.collection.update_one(query, {"$set": doc})
        if result.matched_count == 0:
            return None
        return await self._find_one(query)

    @handle_backend_errors("delete")
    async def delete_by_id(self, id: str) -> bool:
        result = await self.collection.delete_one({"_id": _to_object_id(id)})
        return result.deleted_count > 0

    @handle_backend_errors("list")
    async def find_many(
        self, filter: Optional[Filter] = None, options: Optional[FindOptions] = None
    ) -> List[T]:
        return await self._find(self._query(filter), options)

    @handle_backend_errors("count")
    async def count(self, filter: Optional[Filter] = None) -> int:
        return await self.collection.count_documents(self._query(filter))

    @handle_backend_errors("update many")
    async def update_many(self, filter: Filter, data: Dict[str, Any]) -> int:
        doc = self._document(data)
        doc["updatedAt"] = _utcnow()
        result = await self.collection.update_many(self._query(filter), {"$set": doc})
        return result.matched_count

    @handle_backend_errors("delete many")
    async def delete_many(self, filter: Filter) -> int:
        result = await self.collection.delete_many(self._query(filter))
        return result.deleted_count

    @handle_backend_errors("increment")
    async def increment(self, id: str, field: str, amount: int = 1) -> bool:
        result = await self.collection.update_one(
            {"_id": _to_object_id(id)},
            {"$inc": {self._field(field): amount}, "$set": {"updatedAt": _utcnow()}},
        )
        return result.matched_count > 0

    @handle_backend_errors("search")
    async def _search(
        self,
        term: str,
        search_fields: Sequence[str],
        filter: Optional[Filter],
        options: FindOptions,
    ) -> List[T]:
        return await self._find(self._search_query(term, search_fields, filter), options)

    @handle_backend_errors("search count")
    async def _search_count(
        self, term: str, search_fields: Sequence[str], filter: Optional[Filter]
    ) -> int:
        return await self.collection.count_documents(
            self._search_query(term, search_fields, filter)
        )
