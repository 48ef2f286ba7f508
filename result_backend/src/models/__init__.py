"""Models package."""

from models.config import BackendSettings
from models.group import ChordTriggerResult, GroupMeta
from models.signature import TaskSignature
from models.state import (
    TERMINAL_STATUSES,
    TaskResult,
    TaskState,
    TaskStatus,
    can_transition,
)

__all__ = [
    "BackendSettings",
    "ChordTriggerResult",
    "GroupMeta",
    "TERMINAL_STATUSES",
    "TaskResult",
    "TaskSignature",
    "TaskState",
    "TaskStatus",
    "can_transition",
]
