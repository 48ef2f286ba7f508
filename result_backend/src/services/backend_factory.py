"""Select a state store variant from configuration."""

import logging
from urllib.parse import urlparse

import redis

from models.config import BackendSettings
from services.http_store import HTTPStateStore
from services.redis_store import RedisStateStore
from services.result_backend import ResultBackend
from services.state_store import StateStore

logger = logging.getLogger(__name__)

HTTP_SCHEMES = ("http", "https")
REDIS_SCHEMES = ("redis", "rediss", "unix")


def get_redis_client(url: str, timeout: float | None = None) -> redis.Redis:
    """Create Redis client from a redis:// URL."""
    return redis.Redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )


def create_store(settings: BackendSettings) -> StateStore:
    """Build the store named by settings.result_backend."""
    scheme = urlparse(settings.result_backend).scheme.lower()

    if scheme in HTTP_SCHEMES:
        logger.info(f"Using HTTP result backend at {settings.result_backend}")
        if settings.results_expire_in is not None:
            logger.warning(
                "RESULTS_EXPIRE_IN is ignored by the HTTP backend; "
                "retention is managed by the store"
            )
        return HTTPStateStore(settings.result_backend, timeout=settings.timeout)

    if scheme in REDIS_SCHEMES:
        logger.info("Using Redis result backend")
        client = get_redis_client(settings.result_backend, timeout=settings.timeout)
        return RedisStateStore(client, expires_in=settings.results_expire_in)

    raise ValueError(f"Unsupported result backend: {settings.result_backend}")


def create_backend(settings: BackendSettings) -> ResultBackend:
    """Build a ResultBackend over the configured store."""
    return ResultBackend(create_store(settings))
