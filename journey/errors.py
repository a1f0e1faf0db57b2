"""
Error taxonomy shared by the repository and the HTTP layer.

Each error carries the HTTP status code it maps to, so the request-handler
boundary can turn any of them into the ``{success: false, error}`` envelope.
"""

from __future__ import annotations


class JourneyError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(JourneyError):
    """Missing required fields or a malformed payload."""

    status_code = 400


class Unauthorized(JourneyError):
    """Wrong passphrase for a protected operation."""

    status_code = 401


class NotFound(JourneyError):
    """No record exists for the identifier."""

    status_code = 404


class StorageError(JourneyError):
    """Unexpected failure reported by the document store."""

    status_code = 500


class ServiceUnavailable(JourneyError):
    """The storage connector has not connected yet."""

    status_code = 503

    def __init__(self, message: str = "Database connection not ready"):
        super().__init__(message)
