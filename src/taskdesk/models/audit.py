"""Audit log model - append-only record of task mutations."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskdesk.models.enums import AuditAction, AuditSortField, SortOrder


class AuditLogEntry(BaseModel):
    """Immutable record of a create/update/delete action taken on a task."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    action: AuditAction
    # Not enforced after the task is deleted
    task_id: str
    # Changed field name -> new value; None for deletes
    updated_content: Optional[dict[str, Any]] = None
    timestamp: datetime


class AuditLogQuery(BaseModel):
    """Filtering, ordering and paging for the audit trail."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)
    action: Optional[AuditAction] = None
    search: Optional[str] = None
    sort_by: AuditSortField = AuditSortField.TIMESTAMP
    sort_order: SortOrder = SortOrder.DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
