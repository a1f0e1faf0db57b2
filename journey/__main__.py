"""
Run the Love Journey API under uvicorn.

uvicorn handles SIGTERM/SIGINT: it stops accepting connections, lets
in-flight requests finish and then runs the app lifespan shutdown, which
closes the MongoDB connection.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from journey.app import create_app
from journey.config import get_settings

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Love Journey backend")
    parser.add_argument(
        "--host",
        type=str,
        default=settings.host,
        help="Interface to bind (default from HOST)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help="Port to listen on (default from PORT)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=settings.log_level,
        help="Logging level (default from LOG_LEVEL)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    app = create_app(settings=settings)
    logger.info("Server running on %s:%d", args.host, args.port)
    logger.info("Health check: http://localhost:%d/health", args.port)
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
