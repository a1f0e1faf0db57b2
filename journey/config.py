"""
Configuration and settings for the Love Journey backend.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_NAME = "love_journey"

# Database name is the first path segment after the host list.
_URI_DB_PATTERN = re.compile(r"^[a-z+]+://[^/]+/([^/?]+)(\?|$)")
_URI_CREDENTIALS_PATTERN = re.compile(r"://([^:/@]+):([^@]+)@")


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # HTTP listener
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3005)
    log_level: str = Field(default="INFO")
    max_body_bytes: int = Field(default=50 * 1024 * 1024)

    # MongoDB. A full URI wins over the individual parts.
    mongodb_uri: Optional[str] = Field(default=None)
    mongodb_host: str = Field(default="localhost")
    mongodb_port: int = Field(default=27017)
    mongodb_user: Optional[str] = Field(default=None)
    mongodb_password: Optional[str] = Field(default=None)
    mongodb_db: str = Field(default=DEFAULT_DATABASE_NAME)
    mongodb_collection: str = Field(default="destinations")

    connect_retry_seconds: float = Field(default=5.0)
    connect_timeout_ms: int = Field(default=10000)

    # Shared secret for the destructive clear/import endpoints.
    admin_passphrase: str = Field(default="iloveyou")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)


def compose_mongo_uri(settings: Settings) -> str:
    """Build a connection string from the host/port/user/password parts."""
    credentials = ""
    if settings.mongodb_user:
        credentials = quote_plus(settings.mongodb_user)
        if settings.mongodb_password:
            credentials += ":" + quote_plus(settings.mongodb_password)
        credentials += "@"
    return f"mongodb://{credentials}{settings.mongodb_host}:{settings.mongodb_port}"


def resolve_mongo_target(settings: Settings) -> tuple[str, str]:
    """
    Return ``(uri, database_name)`` for the configured MongoDB deployment.

    A database name embedded in the URI path is used as-is. Otherwise the
    configured default database is appended to the path, ahead of any
    query string.
    """
    uri = settings.mongodb_uri or compose_mongo_uri(settings)
    match = _URI_DB_PATTERN.match(uri)
    if match:
        return uri, match.group(1)

    db_name = settings.mongodb_db
    base, sep, query = uri.partition("?")
    base = base.rstrip("/")
    return f"{base}/{db_name}{sep}{query}", db_name


def redact_uri(uri: str) -> str:
    """Hide credentials so the URI can be logged."""
    return _URI_CREDENTIALS_PATTERN.sub("://<user>:<pass>@", uri)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
