"""
Document store abstraction for MongoDB and an in-memory test implementation.

Stores work on plain dict documents. Identifiers are exposed as strings;
the Mongo store converts them to and from ``ObjectId``.
"""

from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Protocol

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from journey.connector import MongoConnector
from journey.errors import StorageError

logger = logging.getLogger(__name__)


class DestinationStore(Protocol):
    """Interface for the destinations collection."""

    def find_all(self) -> list[dict]:
        ...

    def insert_one(self, document: dict) -> str:
        ...

    def update_one(self, destination_id: str, fields: dict) -> bool:
        ...

    def delete_one(self, destination_id: str) -> bool:
        ...

    def delete_all(self) -> int:
        ...

    def insert_many(self, documents: list[dict]) -> int:
        ...


@contextmanager
def _storage_errors(message: str) -> Iterator[None]:
    try:
        yield
    except (PyMongoError, InvalidId) as exc:
        logger.exception("%s: %s", message, exc)
        raise StorageError(message) from exc


def _object_id(destination_id: str) -> ObjectId:
    # InvalidId is translated by the caller's _storage_errors block.
    return ObjectId(destination_id)


def _from_mongo(document: dict) -> dict:
    document["_id"] = str(document["_id"])
    return document


class MongoDestinationStore:
    """pymongo-backed store using the connector's collection."""

    def __init__(self, connector: MongoConnector):
        self.connector = connector

    def find_all(self) -> list[dict]:
        with _storage_errors("Failed to fetch destinations"):
            cursor = self.connector.collection().find({}).sort("timestamp", ASCENDING)
            return [_from_mongo(doc) for doc in cursor]

    def insert_one(self, document: dict) -> str:
        with _storage_errors("Failed to add destination"):
            result = self.connector.collection().insert_one(dict(document))
            return str(result.inserted_id)

    def update_one(self, destination_id: str, fields: dict) -> bool:
        with _storage_errors("Failed to update destination"):
            result = self.connector.collection().update_one(
                {"_id": _object_id(destination_id)}, {"$set": fields}
            )
            return result.matched_count > 0

    def delete_one(self, destination_id: str) -> bool:
        with _storage_errors("Failed to delete destination"):
            result = self.connector.collection().delete_one(
                {"_id": _object_id(destination_id)}
            )
            return result.deleted_count > 0

    def delete_all(self) -> int:
        with _storage_errors("Failed to clear destinations"):
            return self.connector.collection().delete_many({}).deleted_count

    def insert_many(self, documents: list[dict]) -> int:
        with _storage_errors("Failed to import destinations"):
            result = self.connector.collection().insert_many(
                [dict(doc) for doc in documents], ordered=True
            )
            return len(result.inserted_ids)


class InMemoryDestinationStore:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.documents: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def _check_id(self, destination_id: str, message: str) -> None:
        if not ObjectId.is_valid(destination_id):
            logger.error("%s: invalid identifier %r", message, destination_id)
            raise StorageError(message)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.documents.clear()

    def find_all(self) -> list[dict]:
        with self._lock:
            docs = copy.deepcopy(list(self.documents.values()))
        # sorted() is stable, so equal timestamps keep insertion order.
        return sorted(docs, key=lambda doc: doc["timestamp"])

    def insert_one(self, document: dict) -> str:
        destination_id = str(ObjectId())
        stored = copy.deepcopy(document)
        stored["_id"] = destination_id
        with self._lock:
            self.documents[destination_id] = stored
        return destination_id

    def update_one(self, destination_id: str, fields: dict) -> bool:
        self._check_id(destination_id, "Failed to update destination")
        with self._lock:
            existing = self.documents.get(destination_id)
            if existing is None:
                return False
            existing.update(copy.deepcopy(fields))
            return True

    def delete_one(self, destination_id: str) -> bool:
        self._check_id(destination_id, "Failed to delete destination")
        with self._lock:
            return self.documents.pop(destination_id, None) is not None

    def delete_all(self) -> int:
        with self._lock:
            count = len(self.documents)
            self.documents.clear()
            return count

    def insert_many(self, documents: list[dict]) -> int:
        for document in documents:
            self.insert_one(document)
        return len(documents)
