"""
Destination repository: the rules around the destinations collection.

Every operation fails fast with ServiceUnavailable until the connector is
ready. Timestamps and identifiers are always assigned here or by the store,
never taken from the client.
"""

from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from journey.connector import StorageConnector
from journey.db import DestinationStore
from journey.errors import NotFound, ServiceUnavailable, Unauthorized, ValidationError
from journey.schemas import SERVER_KEYS, Destination

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _client_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if key not in SERVER_KEYS}


def _is_missing(value: Any) -> bool:
    if isinstance(value, (bool, int, float)):
        return not value
    return value is None or value == ""


class DestinationRepository:
    def __init__(
        self,
        store: DestinationStore,
        connector: StorageConnector,
        passphrase: str,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.connector = connector
        self.passphrase = passphrase
        self.clock = clock

    def _require_ready(self) -> None:
        if not self.connector.is_ready():
            raise ServiceUnavailable()

    def _check_passphrase(self, secret: Any, operation: str) -> None:
        if not isinstance(secret, str) or not hmac.compare_digest(
            secret.encode("utf-8"), self.passphrase.encode("utf-8")
        ):
            logger.warning("Rejected %s: invalid password", operation)
            raise Unauthorized("Invalid password")

    def list_destinations(self) -> list[Destination]:
        """All destinations, oldest first."""
        self._require_ready()
        return [Destination.from_document(doc) for doc in self.store.find_all()]

    def create(self, fields: dict[str, Any]) -> Destination:
        """Insert a destination. ``city`` and ``coords`` are required."""
        self._require_ready()
        document = _client_fields(fields)
        city = document.get("city")
        if not isinstance(city, str) or not city or _is_missing(document.get("coords")):
            raise ValidationError("City and coordinates are required")

        document["timestamp"] = self.clock()
        destination_id = self.store.insert_one(document)
        logger.info("Added destination %s (%s)", destination_id, city)
        return Destination.from_document({**document, "_id": destination_id})

    def update(self, destination_id: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` into an existing destination."""
        self._require_ready()
        changes = _client_fields(fields)
        changes["lastModified"] = self.clock()
        if not self.store.update_one(destination_id, changes):
            raise NotFound("Destination not found")
        logger.info("Updated destination %s", destination_id)

    def delete(self, destination_id: str) -> None:
        self._require_ready()
        if not self.store.delete_one(destination_id):
            raise NotFound("Destination not found")
        logger.info("Deleted destination %s", destination_id)

    def clear(self, secret: Any) -> int:
        """Delete every destination. Returns how many were removed."""
        self._require_ready()
        self._check_passphrase(secret, "clear")
        deleted = self.store.delete_all()
        logger.info("Cleared %d destinations", deleted)
        return deleted

    def bulk_import(self, secret: Any, records: Any) -> int:
        """
        Replace the whole collection with ``records``.

        Records get fresh identifiers and timestamps one second apart in input
        order, so listing returns them in the order they were given. The
        delete and insert are two separate calls; a failure in between leaves
        the collection empty.
        """
        self._require_ready()
        self._check_passphrase(secret, "import")
        if not isinstance(records, list):
            raise ValidationError("Destinations must be an array")
        if not all(isinstance(record, dict) for record in records):
            raise ValidationError("Each destination must be an object")

        removed = self.store.delete_all()
        logger.info("Import: removed %d existing destinations", removed)
        if not records:
            return 0

        base = self.clock()
        documents = [
            {**_client_fields(record), "timestamp": base + timedelta(seconds=index)}
            for index, record in enumerate(records)
        ]
        inserted = self.store.insert_many(documents)
        logger.info("Imported %d destinations", inserted)
        return inserted
