"""
Pydantic schemas for the Love Journey API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

# Keys the server owns; anything a client sends under these names is dropped.
SERVER_KEYS = ("_id", "timestamp", "lastModified")


class Destination(BaseModel):
    """
    A stored destination: the fixed fields plus free-form attributes.

    ``city`` and ``coords`` are required when a record is created, but updates
    merge arbitrary fields, so the read model accepts whatever is stored.
    """

    id: str
    city: Any = None
    coords: Any = None
    timestamp: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    attributes: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, document: dict) -> "Destination":
        attributes = {
            key: value
            for key, value in document.items()
            if key not in SERVER_KEYS and key not in ("city", "coords")
        }
        return cls(
            id=str(document["_id"]),
            city=document.get("city"),
            coords=document.get("coords"),
            timestamp=document.get("timestamp"),
            last_modified=document.get("lastModified"),
            attributes=attributes,
        )

    def to_wire(self) -> dict[str, Any]:
        """Flatten back into the JSON shape the web client expects."""
        payload: dict[str, Any] = {
            **self.attributes,
            "_id": self.id,
            "city": self.city,
            "coords": self.coords,
            "timestamp": self.timestamp,
        }
        if self.last_modified is not None:
            payload["lastModified"] = self.last_modified
        return payload


class ClearRequest(BaseModel):
    password: Any = None


class ImportRequest(BaseModel):
    password: Any = None
    destinations: Any = None


class DestinationListResponse(BaseModel):
    success: bool = True
    data: list[dict[str, Any]]
    count: int


class DestinationResponse(BaseModel):
    success: bool = True
    data: dict[str, Any]
    message: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ClearResponse(MessageResponse):
    deletedCount: int


class ImportResponse(MessageResponse):
    count: int


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str


class HealthResponse(BaseModel):
    status: Literal["healthy", "connecting"]
    mongodb: Literal["connected", "disconnected"]
    timestamp: str
