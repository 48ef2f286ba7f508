"""Group metadata models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class GroupMeta(BaseModel):
    """Task UUIDs forming a group and its one-shot chord latch."""

    model_config = ConfigDict(frozen=True)

    group_uuid: str
    task_uuids: tuple[str, ...] = ()
    chord_triggered: bool = False
    created_at: datetime | None = None

    @field_validator("group_uuid")
    @classmethod
    def group_uuid_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("group_uuid is required")
        return v


class ChordTriggerResult(BaseModel):
    """Store reply to a chord latch flip."""

    model_config = ConfigDict(frozen=True)

    updated: bool
