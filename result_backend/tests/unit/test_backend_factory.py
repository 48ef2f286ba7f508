"""Unit tests for backend selection and settings."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from models.config import DEFAULT_RESULT_BACKEND, BackendSettings
from services.backend_factory import create_backend, create_store, get_redis_client
from services.http_store import HTTPStateStore
from services.redis_store import RedisStateStore
from services.result_backend import ResultBackend


class TestBackendSettings:
    """Tests for BackendSettings."""

    def test_defaults_from_empty_environment(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = BackendSettings.from_env()

        assert settings.result_backend == DEFAULT_RESULT_BACKEND
        assert settings.timeout == 30.0
        assert settings.results_expire_in is None
        assert settings.log_level == "info"
        assert settings.log_dir is None

    def test_reads_environment(self):
        env = {
            "RESULT_BACKEND": "redis://cache:6379/1",
            "RESULT_BACKEND_TIMEOUT": "2.5",
            "RESULTS_EXPIRE_IN": "600",
            "LOG_LEVEL": "DEBUG",
            "LOG_DIR": "/var/log/backend",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = BackendSettings.from_env()

        assert settings.result_backend == "redis://cache:6379/1"
        assert settings.timeout == 2.5
        assert settings.results_expire_in == 600
        assert settings.log_level == "debug"
        assert settings.log_dir == "/var/log/backend"

    def test_non_positive_timeout_raises(self):
        with pytest.raises(ValidationError, match="timeout must be positive"):
            BackendSettings(timeout=0)

    def test_non_positive_expiry_raises(self):
        with pytest.raises(ValidationError, match="results_expire_in must be positive"):
            BackendSettings(results_expire_in=-5)

    def test_blank_backend_raises(self):
        with pytest.raises(ValidationError, match="result_backend is required"):
            BackendSettings(result_backend="  ")

    def test_unknown_log_level_raises(self):
        with pytest.raises(ValidationError, match="Unknown log level"):
            BackendSettings(log_level="verbose")


class TestGetRedisClient:
    """Tests for get_redis_client."""

    def test_builds_client_from_url(self):
        with patch("services.backend_factory.redis.Redis") as mock_redis:
            get_redis_client("redis://custom:1234", timeout=3.0)
            mock_redis.from_url.assert_called_once_with(
                "redis://custom:1234",
                decode_responses=True,
                socket_timeout=3.0,
                socket_connect_timeout=3.0,
            )


class TestCreateStore:
    """Tests for create_store."""

    @pytest.mark.parametrize("url", ["http://store:8080/api/v1", "https://store/api"])
    def test_http_url_selects_http_store(self, url):
        store = create_store(BackendSettings(result_backend=url, timeout=4.0))

        assert isinstance(store, HTTPStateStore)
        assert store.base_url == url
        assert store._timeout == 4.0

    def test_redis_url_selects_redis_store(self):
        settings = BackendSettings(
            result_backend="redis://cache:6379/0", results_expire_in=60
        )
        with patch("services.backend_factory.get_redis_client") as mock_get:
            store = create_store(settings)

        assert isinstance(store, RedisStateStore)
        assert store._expires_in == 60
        mock_get.assert_called_once_with("redis://cache:6379/0", timeout=30.0)

    def test_unknown_scheme_raises(self):
        with pytest.raises(ValueError, match="Unsupported result backend"):
            create_store(BackendSettings(result_backend="amqp://broker"))

    def test_create_backend_wraps_store(self):
        backend = create_backend(BackendSettings())
        assert isinstance(backend, ResultBackend)
        assert isinstance(backend.store, HTTPStateStore)
