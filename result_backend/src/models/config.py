"""Backend settings read from the environment."""

import os

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_RESULT_BACKEND = "http://localhost:8080/api/v1"


class BackendSettings(BaseModel):
    """Where task state lives and how to talk to it."""

    model_config = ConfigDict(frozen=True)

    result_backend: str = DEFAULT_RESULT_BACKEND
    timeout: float = 30.0
    results_expire_in: int | None = None
    log_level: str = "info"
    log_dir: str | None = None

    @field_validator("result_backend")
    @classmethod
    def backend_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("result_backend is required")
        return v.strip()

    @field_validator("timeout")
    @classmethod
    def timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("results_expire_in")
    @classmethod
    def expiry_positive(cls, v: int | None) -> int | None:
        if v is not None and v <= 0:
            raise ValueError("results_expire_in must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        v = v.lower()
        if v not in ("debug", "info", "warning", "error"):
            raise ValueError(f"Unknown log level: {v}")
        return v

    @classmethod
    def from_env(cls) -> "BackendSettings":
        """Build settings from RESULT_BACKEND and related variables."""
        expire_in = os.environ.get("RESULTS_EXPIRE_IN")
        return cls(
            result_backend=os.environ.get("RESULT_BACKEND", DEFAULT_RESULT_BACKEND),
            timeout=float(os.environ.get("RESULT_BACKEND_TIMEOUT", "30.0")),
            results_expire_in=int(expire_in) if expire_in else None,
            log_level=os.environ.get("LOG_LEVEL", "info"),
            log_dir=os.environ.get("LOG_DIR") or None,
        )
