"""Unit tests for task state, group and signature models."""

import pytest
from pydantic import ValidationError

from models.group import ChordTriggerResult, GroupMeta
from models.signature import TaskSignature
from models.state import (
    TERMINAL_STATUSES,
    TaskResult,
    TaskState,
    TaskStatus,
    can_transition,
)


@pytest.fixture
def signature():
    return TaskSignature(uuid="task-1", name="add", group_uuid="group-1")


class TestTaskSignature:
    """Tests for TaskSignature validation."""

    def test_valid_signature(self, signature):
        assert signature.uuid == "task-1"
        assert signature.group_uuid == "group-1"

    def test_empty_uuid_raises(self):
        with pytest.raises(ValidationError, match="uuid is required"):
            TaskSignature(uuid="  ", name="add")

    def test_empty_name_raises(self):
        with pytest.raises(ValidationError, match="name is required"):
            TaskSignature(uuid="task-1", name="")

    def test_blank_group_becomes_none(self):
        sig = TaskSignature(uuid="task-1", name="add", group_uuid="")
        assert sig.group_uuid is None

    def test_negative_group_task_count_raises(self):
        with pytest.raises(ValidationError, match="must be non-negative"):
            TaskSignature(uuid="task-1", name="add", group_task_count=-1)


class TestTaskStatePresence:
    """Tests for the results/error presence rules."""

    def test_success_requires_results_list(self, signature):
        state = TaskState.for_signature(
            signature,
            TaskStatus.SUCCESS,
            results=[TaskResult(type="int", value=42)],
        )
        assert state.results == [TaskResult(type="int", value=42)]
        assert state.error is None

    def test_success_without_results_raises(self, signature):
        with pytest.raises(ValidationError, match="results are required"):
            TaskState.for_signature(signature, TaskStatus.SUCCESS)

    def test_empty_results_not_allowed_for_started(self, signature):
        with pytest.raises(ValidationError, match="results are not allowed"):
            TaskState.for_signature(signature, TaskStatus.STARTED, results=[])

    def test_empty_error_not_allowed_for_started(self, signature):
        with pytest.raises(ValidationError, match="error is not allowed"):
            TaskState.for_signature(signature, TaskStatus.STARTED, error="")

    def test_failure_requires_error(self, signature):
        with pytest.raises(ValidationError, match="error is required"):
            TaskState.for_signature(signature, TaskStatus.FAILURE)

    def test_failure_with_error(self, signature):
        state = TaskState.for_signature(
            signature, TaskStatus.FAILURE, error="division by zero"
        )
        assert state.error == "division by zero"
        assert state.results is None

    def test_results_not_allowed_for_started(self, signature):
        with pytest.raises(ValidationError, match="results are not allowed"):
            TaskState.for_signature(
                signature,
                TaskStatus.STARTED,
                results=[TaskResult(type="int", value=1)],
            )

    def test_error_not_allowed_for_success(self, signature):
        with pytest.raises(ValidationError, match="error is not allowed"):
            TaskState.for_signature(
                signature, TaskStatus.SUCCESS, results=[], error="boom"
            )

    def test_empty_task_uuid_raises(self):
        with pytest.raises(ValidationError, match="task_uuid is required"):
            TaskState(task_uuid="", status=TaskStatus.PENDING)

    def test_state_is_frozen(self, signature):
        state = TaskState.for_signature(signature, TaskStatus.STARTED)
        with pytest.raises(ValidationError):
            state.status = TaskStatus.SUCCESS


class TestTaskStateFromStorePayload:
    """Tests for decoding store payloads."""

    def test_placeholders_are_normalized(self):
        state = TaskState.from_store(
            {
                "task_uuid": "task-1",
                "task_name": "add",
                "group_uuid": "",
                "status": "STARTED",
                "results": None,
                "error": "",
            }
        )
        assert state.group_uuid is None
        assert state.error is None
        assert state.results is None

    def test_success_payload_round_trip(self):
        payload = {
            "task_uuid": "task-1",
            "task_name": "add",
            "status": "SUCCESS",
            "results": [{"type": "int", "value": 42}],
            "created_at": "2024-01-01T00:00:00Z",
            "updated_at": "2024-01-01T00:00:01Z",
        }
        state = TaskState.from_store(payload)
        again = TaskState.from_store(state.model_dump(mode="json"))
        assert again.status == TaskStatus.SUCCESS
        assert again.results == [TaskResult(type="int", value=42)]

    def test_unknown_status_raises(self):
        with pytest.raises(ValidationError):
            TaskState.from_store({"task_uuid": "task-1", "status": "LOST"})

    def test_failure_payload_without_error_raises(self):
        with pytest.raises(ValidationError):
            TaskState.from_store(
                {"task_uuid": "task-1", "status": "FAILURE", "error": None}
            )

    def test_success_payload_with_null_results_gets_empty_list(self):
        state = TaskState.from_store(
            {"task_uuid": "task-1", "status": "SUCCESS", "results": None}
        )
        assert state.results == []

    def test_empty_results_for_started_payload_become_none(self):
        state = TaskState.from_store(
            {"task_uuid": "task-1", "status": "STARTED", "results": []}
        )
        assert state.results is None


class TestCompletion:
    """Tests for terminal status helpers."""

    @pytest.mark.parametrize(
        "status,completed",
        [
            (TaskStatus.PENDING, False),
            (TaskStatus.RECEIVED, False),
            (TaskStatus.STARTED, False),
            (TaskStatus.RETRY, False),
            (TaskStatus.SUCCESS, True),
            (TaskStatus.FAILURE, True),
        ],
    )
    def test_is_completed(self, signature, status, completed):
        kwargs = {}
        if status == TaskStatus.SUCCESS:
            kwargs["results"] = []
        if status == TaskStatus.FAILURE:
            kwargs["error"] = "boom"
        state = TaskState.for_signature(signature, status, **kwargs)
        assert state.is_completed() is completed
        assert (status in TERMINAL_STATUSES) is completed

    def test_success_and_failure_flags(self, signature):
        ok = TaskState.for_signature(signature, TaskStatus.SUCCESS, results=[])
        failed = TaskState.for_signature(signature, TaskStatus.FAILURE, error="x")
        assert ok.is_success() and not ok.is_failure()
        assert failed.is_failure() and not failed.is_success()


class TestTransitions:
    """Tests for the store-side transition table."""

    @pytest.mark.parametrize(
        "current,new",
        [
            (TaskStatus.PENDING, TaskStatus.RECEIVED),
            (TaskStatus.RECEIVED, TaskStatus.STARTED),
            (TaskStatus.STARTED, TaskStatus.SUCCESS),
            (TaskStatus.STARTED, TaskStatus.FAILURE),
            (TaskStatus.STARTED, TaskStatus.RETRY),
            (TaskStatus.FAILURE, TaskStatus.RETRY),
            (TaskStatus.RETRY, TaskStatus.PENDING),
            (TaskStatus.SUCCESS, TaskStatus.SUCCESS),
        ],
    )
    def test_allowed(self, current, new):
        assert can_transition(current, new)

    @pytest.mark.parametrize(
        "current,new",
        [
            (TaskStatus.SUCCESS, TaskStatus.PENDING),
            (TaskStatus.SUCCESS, TaskStatus.RETRY),
            (TaskStatus.FAILURE, TaskStatus.STARTED),
            (TaskStatus.STARTED, TaskStatus.RECEIVED),
            (TaskStatus.PENDING, TaskStatus.SUCCESS),
        ],
    )
    def test_rejected(self, current, new):
        assert not can_transition(current, new)


class TestGroupMeta:
    """Tests for GroupMeta."""

    def test_defaults(self):
        meta = GroupMeta(group_uuid="group-1", task_uuids=["a", "b"])
        assert meta.task_uuids == ("a", "b")
        assert meta.chord_triggered is False

    def test_empty_group_uuid_raises(self):
        with pytest.raises(ValidationError, match="group_uuid is required"):
            GroupMeta(group_uuid="")

    def test_chord_trigger_result(self):
        assert ChordTriggerResult.model_validate({"updated": True}).updated is True
