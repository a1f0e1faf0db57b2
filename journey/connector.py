"""
Storage connector: owns the single MongoDB session shared by all requests.

The connector starts in DISCONNECTED, moves to CONNECTING when started and
to CONNECTED after the first successful ping. A failed attempt keeps it in
CONNECTING and schedules another try after a fixed delay; there is no
terminal failure state. The retry loop runs on a daemon thread so the HTTP
server can answer (with 503) while the database is still unreachable.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from journey.config import redact_uri
from journey.errors import ServiceUnavailable

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, int], Any]


class ConnectionState(str, Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"


class StorageConnector(Protocol):
    """Readiness contract shared by the Mongo and in-memory connectors."""

    @property
    def state(self) -> ConnectionState:
        ...

    def start(self) -> None:
        ...

    def is_ready(self) -> bool:
        ...

    def close(self) -> None:
        ...


def default_client_factory(uri: str, timeout_ms: int) -> MongoClient:
    return MongoClient(
        uri,
        server_api=ServerApi("1", strict=True, deprecation_errors=True),
        connectTimeoutMS=timeout_ms,
        serverSelectionTimeoutMS=timeout_ms,
        tz_aware=True,
    )


class MongoConnector:
    """Connects to MongoDB in the background, retrying forever on failure."""

    def __init__(
        self,
        uri: str,
        database_name: str,
        collection_name: str = "destinations",
        *,
        retry_seconds: float = 5.0,
        timeout_ms: int = 10000,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.uri = uri
        self.database_name = database_name
        self.collection_name = collection_name
        self.retry_seconds = retry_seconds
        self.timeout_ms = timeout_ms
        self.attempts = 0
        self._client_factory = client_factory or default_client_factory
        self._state = ConnectionState.DISCONNECTED
        self._client: Any = None
        self._collection: Optional[Collection] = None
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_ready(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    def start(self) -> None:
        """Launch the background connect loop. Calling it twice is a no-op."""
        with self._lock:
            if self._thread is not None:
                return
            self._stop.clear()
            self._state = ConnectionState.CONNECTING
            self._thread = threading.Thread(
                target=self._run, name="mongo-connector", daemon=True
            )
            self._thread.start()
        logger.info(
            "Connecting to MongoDB database %s at %s",
            self.database_name,
            redact_uri(self.uri),
        )

    def _run(self) -> None:
        while not self._stop.is_set():
            if self.connect_once():
                return
            logger.info("Retrying connection in %.0f seconds...", self.retry_seconds)
            if self._stop.wait(self.retry_seconds):
                return

    def connect_once(self) -> bool:
        """
        Make a single connection attempt. Returns True once connected.

        The driver connects lazily, so the attempt only counts after a
        ``ping`` round-trips to the server.
        """
        self.attempts += 1
        logger.info("MongoDB connection attempt %d", self.attempts)
        client = None
        try:
            client = self._client_factory(self.uri, self.timeout_ms)
            client.admin.command("ping")
        except PyMongoError as exc:
            logger.error("MongoDB connection error: %s", exc)
            if client is not None:
                client.close()
            if not self._stop.is_set():
                self._state = ConnectionState.CONNECTING
            return False

        collection = client[self.database_name][self.collection_name]
        self._ensure_indexes(collection)

        with self._lock:
            if self._stop.is_set():
                client.close()
                return True
            self._client = client
            self._collection = collection
            self._state = ConnectionState.CONNECTED
        logger.info("Connected to MongoDB successfully!")
        return True

    def _ensure_indexes(self, collection: Collection) -> None:
        try:
            collection.create_index([("timestamp", ASCENDING)])
            logger.info("Index created or already exists")
        except PyMongoError as exc:
            logger.warning("Index error: %s", exc)

    def collection(self) -> Collection:
        """Return the destinations collection, or raise if not connected."""
        collection = self._collection
        if not self.is_ready() or collection is None:
            raise ServiceUnavailable()
        return collection

    def close(self) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            # An attempt can block for the whole server-selection timeout.
            thread.join(timeout=max(self.retry_seconds, self.timeout_ms / 1000) + 1)
        with self._lock:
            client, self._client = self._client, None
            self._collection = None
            self._thread = None
            self._state = ConnectionState.DISCONNECTED
        if client is not None:
            client.close()
            logger.info("MongoDB connection closed")


class InMemoryConnector:
    """Connector for the in-memory store; connects as soon as it starts."""

    def __init__(self):
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_ready(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    def start(self) -> None:
        self._state = ConnectionState.CONNECTED

    def close(self) -> None:
        self._state = ConnectionState.DISCONNECTED
