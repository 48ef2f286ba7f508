# Services package

from services.backend_factory import create_backend, create_store, get_redis_client
from services.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    StateStoreError,
    UnexpectedResponseError,
    UnreachableError,
)
from services.http_store import HTTPStateStore
from services.log_service import SizeAndTimeRotatingHandler, configure_logging
from services.redis_store import RedisStateStore
from services.result_backend import ResultBackend
from services.state_store import StateStore

__all__ = [
    "ConflictError",
    "HTTPStateStore",
    "InvalidArgumentError",
    "NotFoundError",
    "RedisStateStore",
    "ResultBackend",
    "SizeAndTimeRotatingHandler",
    "StateStore",
    "StateStoreError",
    "UnexpectedResponseError",
    "UnreachableError",
    "configure_logging",
    "create_backend",
    "create_store",
    "get_redis_client",
]
