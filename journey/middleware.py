"""
Request size guard.

Destinations may carry embedded photos, so bodies are allowed to be large,
but anything above the configured limit is refused from its Content-Length
header before the body is read.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared body exceeds ``max_bytes``."""

    def __init__(self, app: ASGIApp, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            logger.warning(
                "Rejected %s %s: body of %s bytes exceeds %d",
                request.method,
                request.url.path,
                declared,
                self.max_bytes,
            )
            return JSONResponse(
                status_code=413,
                content={"success": False, "error": "Request body too large"},
            )
        return await call_next(request)
