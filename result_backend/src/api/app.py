"""FastAPI service exposing a Redis state store over the result backend wire contract."""

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse

from api.models import (
    ChordTriggerBody,
    ChordTriggerResponse,
    CreateGroupBody,
    CreateTaskBody,
    ErrorResponse,
    HealthResponse,
    UpdateTaskBody,
)
from models.group import GroupMeta
from models.state import TaskState
from services.errors import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    UnexpectedResponseError,
    UnreachableError,
)
from services.redis_store import RedisStateStore

_ERROR_STATUS = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidArgumentError, 400),
    (UnreachableError, 503),
    (UnexpectedResponseError, 500),
)


class StateStoreAPI:
    """REST API over a RedisStateStore."""

    def __init__(self, store: RedisStateStore, prefix: str = "/api/v1"):
        """Initialize API with the backing store and route prefix."""
        if store is None:
            raise ValueError("store is required")
        self._store = store
        self._prefix = prefix.rstrip("/")

    def create_app(self) -> FastAPI:
        """Create FastAPI application."""
        app = FastAPI(
            title="Result Backend State Store",
            description="Task and group state for distributed task execution",
            version="1.0.0",
        )

        for error_type, status_code in _ERROR_STATUS:
            app.add_exception_handler(error_type, _error_handler(status_code))

        app.include_router(self._tasks_router(), prefix=self._prefix)
        app.include_router(self._groups_router(), prefix=self._prefix)

        @app.get("/health", response_model=HealthResponse)
        def health_check() -> HealthResponse:
            """Health check endpoint."""
            return HealthResponse(status="ok")

        return app

    def _tasks_router(self) -> APIRouter:
        router = APIRouter(prefix="/tasks", tags=["tasks"])
        errors = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}

        @router.get("", response_model=list[TaskState])
        def get_tasks(task_uuid: list[str] = Query(default=[])) -> list[TaskState]:
            """Bulk fetch by repeated task_uuid parameters."""
            return self._store.fetch_tasks(task_uuid)

        @router.post(
            "/{group_uuid}/{task_uuid}",
            status_code=201,
            response_model=TaskState,
            responses=errors,
        )
        def create_group_task(
            group_uuid: str, task_uuid: str, body: CreateTaskBody
        ) -> TaskState:
            """Create a PENDING task that belongs to a group."""
            self._store.create_task(group_uuid, task_uuid, body.task_name)
            return self._store.fetch_task(task_uuid)

        @router.post(
            "/{task_uuid}", status_code=201, response_model=TaskState, responses=errors
        )
        def create_task(task_uuid: str, body: CreateTaskBody) -> TaskState:
            """Create a PENDING task outside any group."""
            self._store.create_task(None, task_uuid, body.task_name)
            return self._store.fetch_task(task_uuid)

        @router.get("/{task_uuid}", response_model=TaskState, responses=errors)
        def get_task(task_uuid: str) -> TaskState:
            """Get task state."""
            return self._store.fetch_task(task_uuid)

        @router.patch("/{task_uuid}", response_model=TaskState, responses=errors)
        def update_task(task_uuid: str, body: UpdateTaskBody) -> TaskState:
            """Apply a status transition."""
            self._store.update_task_status(
                task_uuid, body.status, results=body.results, error=body.error
            )
            return self._store.fetch_task(task_uuid)

        @router.delete("/{task_uuid}", status_code=204, responses=errors)
        def delete_task(task_uuid: str) -> Response:
            """Delete task state."""
            self._store.delete_task(task_uuid)
            return Response(status_code=204)

        return router

    def _groups_router(self) -> APIRouter:
        router = APIRouter(prefix="/groups", tags=["groups"])
        errors = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}

        @router.post(
            "/{group_uuid}", status_code=201, response_model=GroupMeta, responses=errors
        )
        def create_group(group_uuid: str, body: CreateGroupBody) -> GroupMeta:
            """Form a group from task UUIDs."""
            return self._store.init_group(group_uuid, body.task_uuids)

        @router.get("/{group_uuid}", response_model=GroupMeta, responses=errors)
        def get_group(group_uuid: str) -> GroupMeta:
            """Get group metadata."""
            return self._store.fetch_group(group_uuid)

        @router.patch(
            "/{group_uuid}/chord-triggered",
            response_model=ChordTriggerResponse,
            responses=errors,
        )
        def trigger_chord(
            group_uuid: str, body: ChordTriggerBody
        ) -> ChordTriggerResponse:
            """Set the chord latch; updated is True only for the flipping request."""
            if not body.chord_triggered:
                raise HTTPException(
                    status_code=400, detail="chord_triggered cannot be reset"
                )
            updated = self._store.set_chord_triggered(group_uuid)
            return ChordTriggerResponse(updated=updated)

        @router.delete("/{group_uuid}", status_code=204, responses=errors)
        def delete_group(group_uuid: str) -> Response:
            """Delete group metadata."""
            self._store.delete_group(group_uuid)
            return Response(status_code=204)

        return router


def _error_handler(status_code: int):
    def handle(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handle
