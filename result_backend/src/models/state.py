"""State models for task lifecycle tracking."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from models.signature import TaskSignature


class TaskStatus(str, Enum):
    """Task lifecycle status."""

    PENDING = "PENDING"
    RECEIVED = "RECEIVED"
    STARTED = "STARTED"
    RETRY = "RETRY"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


TERMINAL_STATUSES = frozenset({TaskStatus.SUCCESS, TaskStatus.FAILURE})

# Transitions a store accepts; re-applying the current status is always allowed.
_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset(
        {TaskStatus.RECEIVED, TaskStatus.STARTED, TaskStatus.FAILURE}
    ),
    TaskStatus.RECEIVED: frozenset({TaskStatus.STARTED, TaskStatus.FAILURE}),
    TaskStatus.STARTED: frozenset(
        {TaskStatus.SUCCESS, TaskStatus.FAILURE, TaskStatus.RETRY}
    ),
    TaskStatus.FAILURE: frozenset({TaskStatus.RETRY}),
    TaskStatus.RETRY: frozenset(
        {TaskStatus.PENDING, TaskStatus.RECEIVED, TaskStatus.STARTED}
    ),
    TaskStatus.SUCCESS: frozenset(),
}


def can_transition(current: TaskStatus, new: TaskStatus) -> bool:
    """Return True if a store may move a task from current to new."""
    return current == new or new in _TRANSITIONS[current]


class TaskResult(BaseModel):
    """Single typed value returned by a task."""

    model_config = ConfigDict(frozen=True)

    type: str
    value: Any = None


def _normalize_placeholders(data: Any) -> Any:
    # Stores may send "" / null / [] for fields that do not apply.
    if not isinstance(data, dict):
        return data
    data = dict(data)
    try:
        status = TaskStatus(data.get("status"))
    except ValueError:
        return data
    if data.get("group_uuid") == "":
        data["group_uuid"] = None
    if status != TaskStatus.FAILURE and data.get("error") == "":
        data["error"] = None
    if status == TaskStatus.SUCCESS and data.get("results") is None:
        data["results"] = []
    elif status != TaskStatus.SUCCESS and data.get("results") == []:
        data["results"] = None
    return data


class TaskState(BaseModel):
    """Snapshot of a task's lifecycle state.

    ``results`` is present only for SUCCESS and ``error`` only for FAILURE.
    Both rules are checked strictly whenever a snapshot is built. Only
    ``from_store`` tolerates the placeholders a store payload may carry.
    """

    model_config = ConfigDict(frozen=True)

    task_uuid: str
    task_name: str = ""
    group_uuid: str | None = None
    status: TaskStatus
    results: list[TaskResult] | None = None
    error: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode="after")
    def check_presence(self) -> "TaskState":
        if not self.task_uuid or not self.task_uuid.strip():
            raise ValueError("task_uuid is required")
        if self.status == TaskStatus.SUCCESS:
            if self.results is None:
                raise ValueError("results are required for SUCCESS")
        elif self.results is not None:
            raise ValueError(f"results are not allowed for {self.status.value}")
        if self.status == TaskStatus.FAILURE:
            if self.error is None:
                raise ValueError("error is required for FAILURE")
        elif self.error is not None:
            raise ValueError(f"error is not allowed for {self.status.value}")
        return self

    @classmethod
    def for_signature(
        cls,
        signature: TaskSignature,
        status: TaskStatus,
        results: list[TaskResult] | None = None,
        error: str | None = None,
    ) -> "TaskState":
        """Build the snapshot a lifecycle event submits for a signature."""
        return cls(
            task_uuid=signature.uuid,
            task_name=signature.name,
            group_uuid=signature.group_uuid,
            status=status,
            results=results,
            error=error,
        )

    @classmethod
    def from_store(cls, data: Any) -> "TaskState":
        """Decode a store payload, mapping placeholder values to absent ones."""
        return cls.model_validate(_normalize_placeholders(data))

    def is_completed(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_success(self) -> bool:
        return self.status == TaskStatus.SUCCESS

    def is_failure(self) -> bool:
        return self.status == TaskStatus.FAILURE
