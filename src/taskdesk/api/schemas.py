"""API request/response schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskdesk.models import AuditLogEntry, Task


class CamelModel(BaseModel):
    """Schema base serialized with camelCase keys for the SPA."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Shared schemas
# ============================================================================


class Pagination(CamelModel):
    """Offset pagination metadata."""

    page: int
    limit: int
    total: int
    pages: int = Field(..., description="ceil(total / limit)")


class ErrorResponse(CamelModel):
    """Error body returned for every non-2xx response."""

    error: str
    errors: Optional[list[str]] = None
    details: Optional[str] = None


# ============================================================================
# Tasks
# ============================================================================


class TaskPayload(CamelModel):
    """Create/update task request body. Presence is checked by the engine."""

    title: Optional[str] = Field(None, description="Task title (max 100 characters)")
    description: Optional[str] = Field(None, description="Task description (max 500 characters)")


class ListTasksResponse(CamelModel):
    tasks: list[Task]
    pagination: Pagination


class TaskCreatedResponse(Task):
    """Created task plus a confirmation message."""

    message: str = "Task created successfully"


class TaskUpdatedResponse(CamelModel):
    message: str = "Task updated successfully"
    task: Task


class DeletedTaskSummary(CamelModel):
    id: str
    title: str


class TaskDeletedResponse(CamelModel):
    message: str = "Task deleted successfully"
    deleted_task: DeletedTaskSummary


# ============================================================================
# Audit logs
# ============================================================================


class ListLogsResponse(CamelModel):
    logs: list[AuditLogEntry]
    pagination: Pagination


# ============================================================================
# Health & metrics
# ============================================================================


class HealthResponse(CamelModel):
    status: str
    message: str
    timestamp: datetime
    store: str


class MetricsResponse(CamelModel):
    counters: dict[str, float]
    gauges: dict[str, float]
    histograms: dict[str, dict[str, Any]]
