"""Result backend recording task lifecycle and group completion."""

import logging
import time

from models.signature import TaskSignature
from models.state import TaskResult, TaskState, TaskStatus
from services.errors import InvalidArgumentError, UnreachableError, require
from services.state_store import StateStore


class _Deadline:
    """Shares one call-level timeout across the exchanges of an operation."""

    def __init__(self, timeout: float | None):
        if timeout is not None and timeout <= 0:
            raise InvalidArgumentError("timeout must be positive")
        self._expires_at = None if timeout is None else time.monotonic() + timeout

    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        left = self._expires_at - time.monotonic()
        if left <= 0:
            raise UnreachableError("Deadline exceeded before the store was reached")
        return left


class ResultBackend:
    """Translates lifecycle events and queries into state store exchanges.

    The backend is stateless: every query re-reads the store, nothing is
    retried, and every classified store error reaches the caller unchanged.
    Re-delivered events are forwarded as-is; applying them idempotently is
    the store's responsibility.

    Every operation takes an optional ``timeout`` in seconds that bounds the
    whole call. None falls back to the timeout the store was built with.
    """

    def __init__(self, store: StateStore):
        if store is None:
            raise ValueError("store is required")
        self._store = store
        self.logger = logging.getLogger(__name__)

    @property
    def store(self) -> StateStore:
        return self._store

    def mark_pending(
        self, signature: TaskSignature, timeout: float | None = None
    ) -> None:
        """Create the task record in PENDING state."""
        self.logger.debug(f"Task {signature.uuid} -> PENDING")
        self._store.create_task(
            signature.group_uuid, signature.uuid, signature.name, timeout=timeout
        )

    def mark_received(
        self, signature: TaskSignature, timeout: float | None = None
    ) -> None:
        self._update(TaskState.for_signature(signature, TaskStatus.RECEIVED), timeout)

    def mark_started(
        self, signature: TaskSignature, timeout: float | None = None
    ) -> None:
        self._update(TaskState.for_signature(signature, TaskStatus.STARTED), timeout)

    def mark_retry(self, signature: TaskSignature, timeout: float | None = None) -> None:
        self._update(TaskState.for_signature(signature, TaskStatus.RETRY), timeout)

    def mark_success(
        self,
        signature: TaskSignature,
        results: list[TaskResult],
        timeout: float | None = None,
    ) -> None:
        """Record SUCCESS with the task's ordered results."""
        self._update(
            TaskState.for_signature(
                signature, TaskStatus.SUCCESS, results=list(results or [])
            ),
            timeout,
        )

    def mark_failure(
        self, signature: TaskSignature, error: str, timeout: float | None = None
    ) -> None:
        """Record FAILURE with the error message."""
        self._update(
            TaskState.for_signature(signature, TaskStatus.FAILURE, error=error),
            timeout,
        )

    def _update(self, state: TaskState, timeout: float | None) -> None:
        self.logger.debug(f"Task {state.task_uuid} -> {state.status.value}")
        self._store.update_task_status(
            state.task_uuid,
            state.status,
            results=state.results,
            error=state.error,
            timeout=timeout,
        )

    def get_state(self, task_uuid: str, timeout: float | None = None) -> TaskState:
        """Return the latest stored state of a task."""
        return self._store.fetch_task(task_uuid, timeout=timeout)

    def group_task_states(
        self, group_uuid: str, expected_count: int, timeout: float | None = None
    ) -> list[TaskState]:
        """Return the states of every task in the group, in group order.

        expected_count is accepted for interface symmetry with
        is_group_complete and does not filter the result.
        """
        require(group_uuid, "group_uuid")
        deadline = _Deadline(timeout)
        meta = self._store.fetch_group(group_uuid, timeout=deadline.remaining())
        if not meta.task_uuids:
            return []
        return self._store.fetch_tasks(
            list(meta.task_uuids), timeout=deadline.remaining()
        )

    def is_group_complete(
        self, group_uuid: str, expected_count: int, timeout: float | None = None
    ) -> bool:
        """True once exactly expected_count members are SUCCESS or FAILURE."""
        states = self.group_task_states(group_uuid, expected_count, timeout=timeout)
        completed = sum(1 for state in states if state.is_completed())
        self.logger.debug(
            f"Group {group_uuid}: {completed}/{expected_count} tasks completed"
        )
        return completed == expected_count

    def trigger_chord(self, group_uuid: str, timeout: float | None = None) -> bool:
        """Flip the group's chord latch.

        Returns True only to the caller whose request performed the flip and
        False when the store reports the latch was already set. Transport and
        store failures raise instead of returning False.
        """
        require(group_uuid, "group_uuid")
        triggered = self._store.set_chord_triggered(group_uuid, timeout=timeout)
        if triggered:
            self.logger.info(f"Chord triggered for group {group_uuid}")
        else:
            self.logger.info(f"Chord already triggered for group {group_uuid}")
        return triggered

    def purge_state(self, task_uuid: str, timeout: float | None = None) -> None:
        """Delete the stored task state."""
        self._store.delete_task(task_uuid, timeout=timeout)
        self.logger.info(f"Purged state of task {task_uuid}")

    def purge_group(self, group_uuid: str, timeout: float | None = None) -> None:
        """Delete the stored group metadata."""
        self._store.delete_group(group_uuid, timeout=timeout)
        self.logger.info(f"Purged group {group_uuid}")
