"""REST API router."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from taskdesk.api.deps import get_store, verify_basic_auth
from taskdesk.api.schemas import (
    DeletedTaskSummary,
    ErrorResponse,
    HealthResponse,
    ListLogsResponse,
    ListTasksResponse,
    MetricsResponse,
    TaskCreatedResponse,
    TaskDeletedResponse,
    TaskPayload,
    TaskUpdatedResponse,
)
from taskdesk.engine import TaskDeskEngine
from taskdesk.models import Task
from taskdesk.observability.metrics import metrics
from taskdesk.store.base import TaskStore
from taskdesk.utils.time import utc_now

router = APIRouter(
    prefix="/api",
    dependencies=[Depends(verify_basic_auth)],
    responses={
        status: {"model": ErrorResponse} for status in (400, 401, 404, 500)
    },
)
public_router = APIRouter(prefix="/api")


# ============================================================================
# Health
# ============================================================================


@public_router.get("/health", response_model=HealthResponse)
async def health_check(store: TaskStore = Depends(get_store)):
    """Liveness probe. Reachable without credentials."""
    store_ok = await store.ping()
    return HealthResponse(
        status="OK",
        message="Task Manager API is running",
        timestamp=utc_now(),
        store="ok" if store_ok else "unavailable",
    )


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics():
    """In-process counters and latency histograms."""
    return MetricsResponse(**metrics.snapshot())


# ============================================================================
# Tasks
# ============================================================================


@router.get("/tasks", response_model=ListTasksResponse)
async def list_tasks(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    store: TaskStore = Depends(get_store),
):
    """List tasks newest first, optionally filtered by a search term."""
    engine = TaskDeskEngine(store)
    result = await engine.list_tasks(page=page, limit=limit, search=search)
    return ListTasksResponse(**result)


@router.get("/tasks/{task_id}", response_model=Task)
async def get_task(task_id: str, store: TaskStore = Depends(get_store)):
    """Get a task by ID."""
    engine = TaskDeskEngine(store)
    return await engine.get_task(task_id)


@router.post("/tasks", response_model=TaskCreatedResponse, status_code=201)
async def create_task(request: TaskPayload, store: TaskStore = Depends(get_store)):
    """Create a new task."""
    engine = TaskDeskEngine(store)
    task = await engine.create_task(request.title, request.description)
    return TaskCreatedResponse(**task.model_dump())


@router.put("/tasks/{task_id}", response_model=TaskUpdatedResponse)
async def update_task(
    task_id: str,
    request: TaskPayload,
    store: TaskStore = Depends(get_store),
):
    """Replace a task's title and description."""
    engine = TaskDeskEngine(store)
    task = await engine.update_task(task_id, request.title, request.description)
    return TaskUpdatedResponse(task=task)


@router.delete("/tasks/{task_id}", response_model=TaskDeletedResponse)
async def delete_task(task_id: str, store: TaskStore = Depends(get_store)):
    """Delete a task."""
    engine = TaskDeskEngine(store)
    task = await engine.delete_task(task_id)
    return TaskDeletedResponse(deleted_task=DeletedTaskSummary(id=task.id, title=task.title))


# ============================================================================
# Audit logs
# ============================================================================


@router.get("/logs", response_model=ListLogsResponse)
async def list_logs(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    store: TaskStore = Depends(get_store),
):
    """List audit log entries."""
    engine = TaskDeskEngine(store)
    result = await engine.list_audit_logs(
        page=page,
        limit=limit,
        action=action,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ListLogsResponse(**result)
