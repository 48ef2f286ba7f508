# API package

from api.app import StateStoreAPI
from api.models import (
    ChordTriggerBody,
    ChordTriggerResponse,
    CreateGroupBody,
    CreateTaskBody,
    ErrorResponse,
    HealthResponse,
    UpdateTaskBody,
)

__all__ = [
    "ChordTriggerBody",
    "ChordTriggerResponse",
    "CreateGroupBody",
    "CreateTaskBody",
    "ErrorResponse",
    "HealthResponse",
    "StateStoreAPI",
    "UpdateTaskBody",
]
