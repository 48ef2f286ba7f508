"""Main entry point for the state store API server."""

import argparse
import logging
import os
import sys

import uvicorn

from api.app import StateStoreAPI
from services.backend_factory import get_redis_client
from services.log_service import configure_logging
from services.redis_store import RedisStateStore

logger = logging.getLogger(__name__)


def get_expires_in() -> int | None:
    """Read RESULTS_EXPIRE_IN (seconds) from environment."""
    value = os.environ.get("RESULTS_EXPIRE_IN")
    if not value:
        return None
    return int(value)


def create_app() -> "uvicorn.ASGIApplication":
    """Create FastAPI application backed by Redis."""
    redis_url = os.environ.get("REDIS_URL", "redis://localhost:6379")
    store = RedisStateStore(get_redis_client(redis_url), expires_in=get_expires_in())
    api = StateStoreAPI(store, prefix=os.environ.get("API_PREFIX", "/api/v1"))
    return api.create_app()


def main() -> int:
    """Run the state store API server."""
    parser = argparse.ArgumentParser(description="Result Backend State Store")
    parser.add_argument(
        "--host",
        default=os.environ.get("HOST", "0.0.0.0"),
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", "8080")),
        help="Port to bind to (default: 8080)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=os.environ.get("LOG_LEVEL", "info").lower(),
        help="Log level (default: info)",
    )
    args = parser.parse_args()

    configure_logging(level=args.log_level, log_dir=os.environ.get("LOG_DIR"))

    logger.info("Starting state store API server")
    logger.info(f"Redis: {os.environ.get('REDIS_URL', 'redis://localhost:6379')}")

    app = create_app()
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)
    return 0


if __name__ == "__main__":
    sys.exit(main())
