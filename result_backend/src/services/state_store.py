"""Storage contract shared by every result backend variant."""

from typing import Protocol, runtime_checkable

from models.group import GroupMeta
from models.state import TaskResult, TaskState, TaskStatus


@runtime_checkable
class StateStore(Protocol):
    """One request/response exchange per call against the authoritative store.

    Implementations keep no state between calls beyond their configuration.
    Atomicity of transitions and of the chord latch belongs to the store.
    ``timeout`` bounds a single exchange in seconds; None keeps the default
    the store was configured with.
    """

    def create_task(
        self,
        group_uuid: str | None,
        task_uuid: str,
        task_name: str,
        timeout: float | None = None,
    ) -> None:
        """Create a PENDING record. ConflictError if it already exists."""
        ...

    def fetch_task(self, task_uuid: str, timeout: float | None = None) -> TaskState:
        """NotFoundError if the task is unknown."""
        ...

    def fetch_tasks(
        self, task_uuids: list[str], timeout: float | None = None
    ) -> list[TaskState]:
        """InvalidArgumentError on an empty list, without contacting the store."""
        ...

    def update_task_status(
        self,
        task_uuid: str,
        status: TaskStatus,
        results: list[TaskResult] | None = None,
        error: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """ConflictError if the store rejects the transition."""
        ...

    def fetch_group(self, group_uuid: str, timeout: float | None = None) -> GroupMeta:
        """NotFoundError if the group was never formed."""
        ...

    def set_chord_triggered(self, group_uuid: str, timeout: float | None = None) -> bool:
        """Flip the latch; True only for the call that performed the flip."""
        ...

    def delete_task(self, task_uuid: str, timeout: float | None = None) -> None:
        ...

    def delete_group(self, group_uuid: str, timeout: float | None = None) -> None:
        ...
