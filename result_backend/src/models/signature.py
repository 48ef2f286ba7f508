"""Task reference handed in by the execution engine."""

from pydantic import BaseModel, ConfigDict, field_validator


class TaskSignature(BaseModel):
    """Identifies the task a lifecycle event belongs to."""

    model_config = ConfigDict(frozen=True)

    uuid: str
    name: str
    group_uuid: str | None = None
    group_task_count: int = 0

    @field_validator("uuid")
    @classmethod
    def uuid_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("uuid is required")
        return v

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("name is required")
        return v

    @field_validator("group_uuid")
    @classmethod
    def blank_group_is_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("group_task_count")
    @classmethod
    def count_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("group_task_count must be non-negative")
        return v
