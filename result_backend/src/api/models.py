"""Request and response models for the state store REST API."""

from pydantic import BaseModel, ConfigDict, field_validator

from models.state import TaskResult, TaskStatus


class CreateTaskBody(BaseModel):
    """Request to create a task record."""

    model_config = ConfigDict(extra="forbid")

    task_name: str = ""


class UpdateTaskBody(BaseModel):
    """Request to move a task to a new status."""

    model_config = ConfigDict(extra="forbid")

    status: TaskStatus
    results: list[TaskResult] | None = None
    error: str | None = None


class CreateGroupBody(BaseModel):
    """Request to form a group."""

    model_config = ConfigDict(extra="forbid")

    task_uuids: list[str]

    @field_validator("task_uuids")
    @classmethod
    def task_uuids_not_blank(cls, v: list[str]) -> list[str]:
        if any(not t or not t.strip() for t in v):
            raise ValueError("task_uuids must not contain blank entries")
        return v


class ChordTriggerBody(BaseModel):
    """Request to set the chord latch."""

    model_config = ConfigDict(extra="forbid")

    chord_triggered: bool


class ChordTriggerResponse(BaseModel):
    """Whether this request performed the flip."""

    model_config = ConfigDict(frozen=True)

    updated: bool


class HealthResponse(BaseModel):
    """Health check response."""

    model_config = ConfigDict(frozen=True)

    status: str


class ErrorResponse(BaseModel):
    """Error response."""

    model_config = ConfigDict(frozen=True)

    detail: str
