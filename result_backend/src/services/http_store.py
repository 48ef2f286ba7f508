"""HTTP client for a remote task state store."""

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict

from models.group import ChordTriggerResult, GroupMeta
from models.state import TaskResult, TaskState, TaskStatus
from services.errors import (
    InvalidArgumentError,
    UnreachableError,
    raise_for_response,
    require,
)

logger = logging.getLogger(__name__)


def _path(*segments: str) -> str:
    """Join segments into a path, escaping each so it stays one segment."""
    return "".join(f"/{quote(segment, safe='')}" for segment in segments)


class CreateTaskRequest(BaseModel):
    """Body for POST /tasks/{group}/{task}."""

    model_config = ConfigDict(frozen=True)

    task_name: str


class UpdateTaskRequest(BaseModel):
    """Body for PATCH /tasks/{task}."""

    model_config = ConfigDict(frozen=True)

    status: TaskStatus
    results: list[TaskResult] | None = None
    error: str | None = None


class HTTPStateStore:
    """Talks to the state store's REST API, one exchange per call."""

    def __init__(self, base_url: str, timeout: float = 30.0):
        """Initialize client with the store endpoint and timeout."""
        if not base_url or not base_url.strip():
            raise ValueError("base_url is required")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._base_url = base_url.strip().rstrip("/")
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url


    def _send(
        self,
        method: str,
        path: str,
        json: dict | None = None,
        params: dict | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        if timeout is None:
            timeout = self._timeout
        elif timeout <= 0:
            raise InvalidArgumentError("timeout must be positive")

        url = f"{self._base_url}{path}"
        logger.debug(f"{method} {url}")

        try:
            with httpx.Client(timeout=timeout) as client:
                return client.request(method, url, json=json, params=params)
        except httpx.ConnectError as e:
            raise UnreachableError(f"Connection failed: {e}") from e
        except httpx.TimeoutException as e:
            raise UnreachableError(f"Request timed out: {e}") from e
        except httpx.RequestError as e:
            raise UnreachableError(f"Request failed: {e}") from e

    def _decode(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UnreachableError(f"Invalid response: {e}") from e

    def create_task(
        self,
        group_uuid: str | None,
        task_uuid: str,
        task_name: str,
        timeout: float | None = None,
    ) -> None:
        """Call POST /tasks/{group}/{task}, or POST /tasks/{task} when ungrouped."""
        require(task_uuid, "task_uuid")
        body = CreateTaskRequest(task_name=task_name)

        if group_uuid:
            path = _path("tasks", group_uuid, task_uuid)
        else:
            path = _path("tasks", task_uuid)

        response = self._send(
            "POST", path, json=body.model_dump(mode="json"), timeout=timeout
        )
        raise_for_response(response, 201, "task", task_uuid)

    def fetch_task(self, task_uuid: str, timeout: float | None = None) -> TaskState:
        """Call GET /tasks/{task}."""
        require(task_uuid, "task_uuid")

        response = self._send("GET", _path("tasks", task_uuid), timeout=timeout)
        raise_for_response(response, 200, "task", task_uuid)

        try:
            return TaskState.from_store(self._decode(response))
        except ValueError as e:
            raise UnreachableError(f"Invalid response: {e}") from e

    def fetch_tasks(
        self, task_uuids: list[str], timeout: float | None = None
    ) -> list[TaskState]:
        """Call GET /tasks with one task_uuid query parameter per task."""
        if not task_uuids:
            raise InvalidArgumentError("task_uuids must not be empty")
        for task_uuid in task_uuids:
            require(task_uuid, "task_uuid")

        response = self._send(
            "GET", "/tasks", params={"task_uuid": list(task_uuids)}, timeout=timeout
        )
        raise_for_response(response, 200, "task", ",".join(task_uuids))

        payload = self._decode(response)
        if not isinstance(payload, list):
            raise UnreachableError("Invalid response: expected a list of task states")
        try:
            return [TaskState.from_store(item) for item in payload]
        except ValueError as e:
            raise UnreachableError(f"Invalid response: {e}") from e

    def update_task_status(
        self,
        task_uuid: str,
        status: TaskStatus,
        results: list[TaskResult] | None = None,
        error: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Call PATCH /tasks/{task}."""
        require(task_uuid, "task_uuid")
        body = UpdateTaskRequest(status=status, results=results, error=error)

        response = self._send(
            "PATCH",
            _path("tasks", task_uuid),
            json=body.model_dump(mode="json", exclude_none=True),
            timeout=timeout,
        )
        raise_for_response(response, 200, "task", task_uuid)

    def fetch_group(self, group_uuid: str, timeout: float | None = None) -> GroupMeta:
        """Call GET /groups/{group}."""
        require(group_uuid, "group_uuid")

        response = self._send("GET", _path("groups", group_uuid), timeout=timeout)
        raise_for_response(response, 200, "group", group_uuid)

        try:
            return GroupMeta.model_validate(self._decode(response))
        except ValueError as e:
            raise UnreachableError(f"Invalid response: {e}") from e

    def set_chord_triggered(self, group_uuid: str, timeout: float | None = None) -> bool:
        """Call PATCH /groups/{group}/chord-triggered."""
        require(group_uuid, "group_uuid")

        response = self._send(
            "PATCH",
            _path("groups", group_uuid, "chord-triggered"),
            json={"chord_triggered": True},
            timeout=timeout,
        )
        raise_for_response(response, 200, "group", group_uuid)

        try:
            return ChordTriggerResult.model_validate(self._decode(response)).updated
        except ValueError as e:
            raise UnreachableError(f"Invalid response: {e}") from e

    def delete_task(self, task_uuid: str, timeout: float | None = None) -> None:
        """Call DELETE /tasks/{task}."""
        require(task_uuid, "task_uuid")

        response = self._send("DELETE", _path("tasks", task_uuid), timeout=timeout)
        raise_for_response(response, (200, 204), "task", task_uuid)

    def delete_group(self, group_uuid: str, timeout: float | None = None) -> None:
        """Call DELETE /groups/{group}."""
        require(group_uuid, "group_uuid")

        response = self._send("DELETE", _path("groups", group_uuid), timeout=timeout)
        raise_for_response(response, (200, 204), "group", group_uuid)
