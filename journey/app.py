"""
FastAPI application entry point for the Love Journey backend.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from journey.config import Settings, get_settings
from journey.dependencies import JourneyServices, build_services
from journey.errors import JourneyError
from journey.middleware import BodySizeLimitMiddleware
from journey.routes import health_router, router

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    services: JourneyServices = app.state.services
    services.connector.start()
    logger.info("Application startup complete")
    yield
    logger.info("Application shutdown: closing storage connector")
    services.connector.close()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(JourneyError)
    async def journey_error_handler(request: Request, exc: JourneyError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Invalid request body for %s: %s", request.url.path, exc.errors())
        return _error(400, "Invalid request body")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error for %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")


def create_app(
    services: Optional[JourneyServices] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Love Journey Backend", version="0.1.0", lifespan=lifespan)
    app.state.services = services or build_services(settings)

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
