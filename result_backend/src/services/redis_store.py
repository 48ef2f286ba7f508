"""Redis-based state store for task and group state."""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from pydantic import ValidationError
from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, WatchError
from redis.exceptions import TimeoutError as RedisTimeoutError

from models.group import GroupMeta
from models.state import TaskResult, TaskState, TaskStatus, can_transition
from services.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    UnexpectedResponseError,
    UnreachableError,
    require,
)


class RedisStateStore:
    """Keeps task and group state in Redis, acting as the store itself.

    Commands are bounded by the socket timeout of the Redis client, so the
    per-call ``timeout`` of the store contract is accepted but not used.
    """

    def __init__(self, redis_client: Redis, expires_in: int | None = None):
        if redis_client is None:
            raise ValueError("redis_client is required")
        if expires_in is not None and expires_in <= 0:
            raise ValueError("expires_in must be positive")
        self._redis = redis_client
        self._expires_in = expires_in

    def _task_key(self, task_uuid: str) -> str:
        return f"task:{task_uuid}"

    def _group_key(self, group_uuid: str) -> str:
        return f"group:{group_uuid}"

    def _chord_key(self, group_uuid: str) -> str:
        return f"group:{group_uuid}:chord"

    def _utc_now(self) -> datetime:
        return datetime.now(timezone.utc)

    @contextmanager
    def _classified(self) -> Iterator[None]:
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise UnreachableError(f"Redis unavailable: {e}") from e
        except RedisError as e:
            raise UnexpectedResponseError(None, str(e)) from e

    def _load_task(self, data: bytes | str) -> TaskState:
        try:
            return TaskState.model_validate_json(data)
        except ValidationError as e:
            raise UnreachableError(f"Malformed task record: {e}") from e

    def init_group(self, group_uuid: str, task_uuids: list[str]) -> GroupMeta:
        """Form a group. ConflictError if it already exists."""
        require(group_uuid, "group_uuid")
        for task_uuid in task_uuids:
            require(task_uuid, "task_uuid")

        meta = GroupMeta(
            group_uuid=group_uuid,
            task_uuids=tuple(task_uuids),
            created_at=self._utc_now(),
        )
        with self._classified():
            created = self._redis.set(
                self._group_key(group_uuid),
                meta.model_dump_json(exclude={"chord_triggered"}),
                nx=True,
                ex=self._expires_in,
            )
        if not created:
            raise ConflictError("group", group_uuid, "already exists")
        return meta

    def create_task(
        self,
        group_uuid: str | None,
        task_uuid: str,
        task_name: str,
        timeout: float | None = None,
    ) -> None:
        """Create a task in PENDING state.

        An existing record is a conflict unless it is in RETRY, in which case
        it is re-dispatched to PENDING.
        """
        require(task_uuid, "task_uuid")
        key = self._task_key(task_uuid)

        with self._classified(), self._redis.pipeline() as pipe:
            try:
                pipe.watch(key)
                now = self._utc_now()
                created_at = now
                data = pipe.get(key)
                if data is not None:
                    existing = self._load_task(data)
                    if existing.status != TaskStatus.RETRY:
                        raise ConflictError("task", task_uuid, "already exists")
                    created_at = existing.created_at or now

                state = TaskState(
                    task_uuid=task_uuid,
                    task_name=task_name,
                    group_uuid=group_uuid or None,
                    status=TaskStatus.PENDING,
                    created_at=created_at,
                    updated_at=now,
                )
                pipe.multi()
                pipe.set(key, state.model_dump_json(), ex=self._expires_in)
                pipe.execute()
            except WatchError as e:
                raise ConflictError("task", task_uuid, "concurrent update") from e

    def fetch_task(self, task_uuid: str, timeout: float | None = None) -> TaskState:
        """Get task state by UUID."""
        require(task_uuid, "task_uuid")

        with self._classified():
            data = self._redis.get(self._task_key(task_uuid))
        if data is None:
            raise NotFoundError("task", task_uuid)
        return self._load_task(data)

    def fetch_tasks(
        self, task_uuids: list[str], timeout: float | None = None
    ) -> list[TaskState]:
        """Get task states in the order of task_uuids."""
        if not task_uuids:
            raise InvalidArgumentError("task_uuids must not be empty")
        for task_uuid in task_uuids:
            require(task_uuid, "task_uuid")

        with self._classified():
            values = self._redis.mget([self._task_key(t) for t in task_uuids])

        states = []
        for task_uuid, data in zip(task_uuids, values):
            if data is None:
                raise NotFoundError("task", task_uuid)
            states.append(self._load_task(data))
        return states

    def update_task_status(
        self,
        task_uuid: str,
        status: TaskStatus,
        results: list[TaskResult] | None = None,
        error: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Apply a transition if the state machine allows it."""
        require(task_uuid, "task_uuid")
        key = self._task_key(task_uuid)

        with self._classified(), self._redis.pipeline() as pipe:
            try:
                pipe.watch(key)
                data = pipe.get(key)
                if data is None:
                    raise NotFoundError("task", task_uuid)

                current = self._load_task(data)
                if not can_transition(current.status, status):
                    raise ConflictError(
                        "task",
                        task_uuid,
                        f"{current.status.value} -> {TaskStatus(status).value} not allowed",
                    )

                update = current.model_dump()
                update.update(
                    status=status,
                    results=results,
                    error=error,
                    updated_at=self._utc_now(),
                )
                try:
                    updated = TaskState.from_store(update)
                except ValidationError as e:
                    raise InvalidArgumentError(str(e)) from e

                pipe.multi()
                pipe.set(key, updated.model_dump_json(), ex=self._expires_in)
                pipe.execute()
            except WatchError as e:
                raise ConflictError("task", task_uuid, "concurrent update") from e

    def fetch_group(self, group_uuid: str, timeout: float | None = None) -> GroupMeta:
        """Get group metadata together with the current latch value."""
        require(group_uuid, "group_uuid")

        with self._classified():
            pipe = self._redis.pipeline()
            pipe.get(self._group_key(group_uuid))
            pipe.exists(self._chord_key(group_uuid))
            data, triggered = pipe.execute()

        if data is None:
            raise NotFoundError("group", group_uuid)
        try:
            meta = GroupMeta.model_validate_json(data)
        except ValidationError as e:
            raise UnreachableError(f"Malformed group record: {e}") from e
        return meta.model_copy(update={"chord_triggered": bool(triggered)})

    def set_chord_triggered(self, group_uuid: str, timeout: float | None = None) -> bool:
        """Flip the chord latch with SET NX; True only for the flipping call."""
        require(group_uuid, "group_uuid")

        with self._classified():
            if not self._redis.exists(self._group_key(group_uuid)):
                raise NotFoundError("group", group_uuid)
            flipped = self._redis.set(
                self._chord_key(group_uuid), "1", nx=True, ex=self._expires_in
            )
        return bool(flipped)

    def delete_task(self, task_uuid: str, timeout: float | None = None) -> None:
        """Delete task state. NotFoundError if nothing was deleted."""
        require(task_uuid, "task_uuid")

        with self._classified():
            deleted = self._redis.delete(self._task_key(task_uuid))
        if not deleted:
            raise NotFoundError("task", task_uuid)

    def delete_group(self, group_uuid: str, timeout: float | None = None) -> None:
        """Delete group metadata and its latch."""
        require(group_uuid, "group_uuid")

        with self._classified():
            pipe = self._redis.pipeline()
            pipe.delete(self._group_key(group_uuid))
            pipe.delete(self._chord_key(group_uuid))
            group_deleted, _ = pipe.execute()
        if not group_deleted:
            raise NotFoundError("group", group_uuid)
