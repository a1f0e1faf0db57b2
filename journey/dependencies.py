"""
Dependency wiring for the FastAPI app.

The connector, store and repository are built once per application and kept
on ``app.state.services``; routes reach them through the getters below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request

from journey.config import Settings, get_settings, redact_uri, resolve_mongo_target
from journey.connector import InMemoryConnector, MongoConnector, StorageConnector
from journey.db import DestinationStore, InMemoryDestinationStore, MongoDestinationStore
from journey.repository import DestinationRepository

logger = logging.getLogger(__name__)


@dataclass
class JourneyServices:
    connector: StorageConnector
    store: DestinationStore
    repository: DestinationRepository


def build_services(settings: Settings | None = None) -> JourneyServices:
    """Construct the storage stack described by ``settings``."""
    settings = settings or get_settings()

    if settings.use_in_memory_backends:
        logger.info("Using in-memory destination store")
        connector: StorageConnector = InMemoryConnector()
        store: DestinationStore = InMemoryDestinationStore()
    else:
        uri, db_name = resolve_mongo_target(settings)
        logger.info("MongoDB target %s (database %s)", redact_uri(uri), db_name)
        mongo = MongoConnector(
            uri,
            db_name,
            settings.mongodb_collection,
            retry_seconds=settings.connect_retry_seconds,
            timeout_ms=settings.connect_timeout_ms,
        )
        connector = mongo
        store = MongoDestinationStore(mongo)

    repository = DestinationRepository(
        store, connector, passphrase=settings.admin_passphrase
    )
    return JourneyServices(connector=connector, store=store, repository=repository)


def get_services(request: Request) -> JourneyServices:
    return request.app.state.services


def get_repository(request: Request) -> DestinationRepository:
    return get_services(request).repository


def get_connector(request: Request) -> StorageConnector:
    return get_services(request).connector
