"""
Record Store
Capability wrapper over the BookWorm MongoDB database.

The aggregate maintainer and the managers only talk to MongoDB through
this class, so driver failures surface as UpstreamError and upserts
report whether a document was created or updated.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from src.exceptions import ConflictError, UpstreamError

logger = logging.getLogger(__name__)

USERS = "users"
BOOKS = "books"
GENRES = "genres"
REVIEWS = "reviews"
SHELVES = "shelves"
TUTORIALS = "tutorials"

COLLECTIONS = (USERS, BOOKS, GENRES, REVIEWS, SHELVES, TUTORIALS)


class UpsertOutcome(str, Enum):
    """Whether an upsert inserted a new document or modified an existing one"""

    CREATED = "created"
    UPDATED = "updated"


@dataclass
class UpsertResult:
    outcome: UpsertOutcome
    document: Dict[str, Any]
    previous: Optional[Dict[str, Any]] = None

    @property
    def created(self) -> bool:
        return self.outcome is UpsertOutcome.CREATED


@dataclass
class DeleteResult:
    deleted_count: int

    @property
    def deleted(self) -> bool:
        return self.deleted_count > 0


class RecordStore:
    """Find / insert / update / delete / aggregate over the six collections"""

    def __init__(self, db: Database):
        self.db = db

    def _collection(self, name: str):
        if name not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {name}")
        return self.db[name]

    def _fail(self, operation: str, collection: str, error: Exception):
        logger.error(f"❌ {operation} on {collection} failed: {error}")
        raise UpstreamError(
            f"{operation} on {collection} failed: {error}", operation=operation
        ) from error

    # ===== READS =====

    def find_one(self, collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            return self._collection(collection).find_one(query)
        except PyMongoError as e:
            self._fail("find_one", collection, e)

    def find(
        self,
        collection: str,
        query: Dict[str, Any],
        sort: Optional[Sequence[Tuple[str, int]]] = None,
        skip: int = 0,
        limit: int = 0,
        projection: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        try:
            cursor = self._collection(collection).find(query, projection)
            if sort:
                cursor = cursor.sort(list(sort))
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)
        except PyMongoError as e:
            self._fail("find", collection, e)

    def count(self, collection: str, query: Dict[str, Any]) -> int:
        try:
            return self._collection(collection).count_documents(query)
        except PyMongoError as e:
            self._fail("count_documents", collection, e)

    def aggregate(self, collection: str, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        try:
            return list(self._collection(collection).aggregate(pipeline))
        except PyMongoError as e:
            self._fail("aggregate", collection, e)

    # ===== WRITES =====

    def insert(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert and return the document with its new _id"""
        try:
            result = self._collection(collection).insert_one(document)
        except DuplicateKeyError as e:
            raise ConflictError(f"Duplicate {collection} record", details={"key": str(e.details)})
        except PyMongoError as e:
            self._fail("insert_one", collection, e)
        document["_id"] = result.inserted_id
        return document

    def update(
        self,
        collection: str,
        query: Dict[str, Any],
        set_doc: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """$set on one document; returns the updated document or None if absent"""
        try:
            return self._collection(collection).find_one_and_update(
                query, {"$set": set_doc}, return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError as e:
            raise ConflictError(f"Duplicate {collection} record", details={"key": str(e.details)})
        except PyMongoError as e:
            self._fail("update", collection, e)

    def upsert(
        self,
        collection: str,
        query: Dict[str, Any],
        set_doc: Dict[str, Any],
        set_on_insert: Optional[Dict[str, Any]] = None,
    ) -> UpsertResult:
        """
        Atomically update-or-insert one document.

        The prior document is captured in the same find-and-modify call, so
        the CREATED / UPDATED outcome cannot be confused by a concurrent
        writer touching the same key.
        """
        update: Dict[str, Any] = {"$set": set_doc}
        if set_on_insert:
            update["$setOnInsert"] = set_on_insert

        try:
            previous = self._collection(collection).find_one_and_update(
                query, update, upsert=True, return_document=ReturnDocument.BEFORE
            )
            # An updated record is re-read by _id since the update may have
            # changed the fields the query matched on
            read_back = {"_id": previous["_id"]} if previous is not None else query
            document = self._collection(collection).find_one(read_back)
        except DuplicateKeyError as e:
            raise ConflictError(f"Duplicate {collection} record", details={"key": str(e.details)})
        except PyMongoError as e:
            self._fail("upsert", collection, e)

        if document is None:
            raise ConflictError(
                f"{collection} record was removed during upsert",
                details={"query": str(query)},
            )

        outcome = UpsertOutcome.CREATED if previous is None else UpsertOutcome.UPDATED
        return UpsertResult(outcome=outcome, document=document, previous=previous)

    def increment(
        self,
        collection: str,
        query: Dict[str, Any],
        field: str,
        delta: int,
    ) -> bool:
        """
        Apply an atomic $inc without reading the document first.

        Negative deltas only match documents whose counter is at least the
        size of the decrement, so counters never drop below zero. Returns True if a document changed.
        """
        match = dict(query)
        if delta < 0:
            match[field] = {"$gte": -delta}

        try:
            result = self._collection(collection).update_one(match, {"$inc": {field: delta}})
        except PyMongoError as e:
            self._fail("increment", collection, e)
        return result.modified_count > 0

    def delete_one(self, collection: str, query: Dict[str, Any]) -> DeleteResult:
        try:
            result = self._collection(collection).delete_one(query)
        except PyMongoError as e:
            self._fail("delete_one", collection, e)
        return DeleteResult(deleted_count=result.deleted_count)

    def delete_many(self, collection: str, query: Dict[str, Any]) -> DeleteResult:
        try:
            result = self._collection(collection).delete_many(query)
        except PyMongoError as e:
            self._fail("delete_many", collection, e)
        return DeleteResult(deleted_count=result.deleted_count)

    def pop(self, collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Delete one document and return it in a single atomic call"""
        try:
            return self._collection(collection).find_one_and_delete(query)
        except PyMongoError as e:
            self._fail("find_one_and_delete", collection, e)
