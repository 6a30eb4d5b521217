"""TaskDesk core engine - task mutations and their audit trail."""

import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from taskdesk.config import settings
from taskdesk.engine.audit import AuditRecorder
from taskdesk.engine.diff import diff_task
from taskdesk.engine.validation import clean_field, validate_task
from taskdesk.errors import TaskNotFound, ValidationFailed
from taskdesk.models import AuditAction, AuditLogQuery, Task
from taskdesk.observability.metrics import metrics
from taskdesk.store.base import TaskStore, total_pages

logger = logging.getLogger(__name__)


# Leading integer, as parseInt reads it: "5.5" -> 5, "10abc" -> 10
_LEADING_INT = re.compile(r"\s*([+-]?[0-9]{1,18})")

# Keeps (page - 1) * limit inside a signed 64-bit OFFSET
MAX_PAGE = 2**31 - 1


def coerce_positive_int(value: Any, default: int, maximum: Optional[int] = None) -> int:
    """Parse the leading integer of a query value, falling back to the default."""
    if value is None:
        return default
    match = _LEADING_INT.match(str(value))
    if not match:
        return default
    number = int(match.group(1))
    if number < 1:
        return default
    if maximum is not None:
        number = min(number, maximum)
    return number


class TaskDeskEngine:
    """Core engine implementing the task and audit log operations."""

    def __init__(self, store: TaskStore):
        self.store = store
        self.audit = AuditRecorder(store)

    # =========================================================================
    # Tasks
    # =========================================================================

    async def list_tasks(
        self,
        page: Any = None,
        limit: Any = None,
        search: Optional[str] = None,
    ) -> dict[str, Any]:
        """List tasks newest first with pagination metadata."""
        page_number = coerce_positive_int(page, 1, MAX_PAGE)
        page_size = coerce_positive_int(
            limit, settings.default_task_page_size, settings.max_page_size
        )

        tasks, total = await self.store.list_tasks(page_number, page_size, search or None)
        logger.debug(f"Found {len(tasks)} tasks, total: {total}")

        return {
            "tasks": tasks,
            "pagination": self._pagination(page_number, page_size, total),
        }

    async def get_task(self, task_id: str) -> Task:
        """Get a task by ID."""
        task = await self.store.get_task(task_id)
        if not task:
            raise TaskNotFound(task_id)
        return task

    async def create_task(self, title: Optional[str], description: Optional[str]) -> Task:
        """
        Create a task and record a Create Task audit entry.

        Both fields must be present; they are trimmed and stripped of script
        blocks before validation, and the audit entry carries the stored values.
        """
        missing = []
        if not title:
            missing.append("Title is required")
        if not description:
            missing.append("Description is required")
        if missing:
            raise ValidationFailed(missing, message="Title and description are required")

        title = clean_field(title)
        description = clean_field(description)
        self._validate(title, description)

        task = await self.store.create_task(title, description)
        metrics.inc_counter("tasks.created")
        logger.info(f"Task created with ID: {task.id}")

        await self.audit.record(
            AuditAction.CREATE_TASK,
            task.id,
            {"title": title, "description": description},
        )
        return task

    async def update_task(
        self,
        task_id: str,
        title: Optional[str],
        description: Optional[str],
    ) -> Task:
        """
        Overwrite a task's title and description.

        The write always happens, even when nothing changed; the Update Task
        audit entry only lists the fields whose value actually differs.
        """
        title = clean_field(title)
        description = clean_field(description)
        self._validate(title, description)

        original = await self.store.get_task(task_id)
        if not original:
            raise TaskNotFound(task_id)

        changes = diff_task(original, {"title": title, "description": description})

        updated = await self.store.update_task(task_id, title, description)
        if not updated:
            # Deleted between the read and the write
            raise TaskNotFound(task_id)
        metrics.inc_counter("tasks.updated")
        logger.info(f"Task {task_id} updated, changed fields: {sorted(changes) or 'none'}")

        await self.audit.record(AuditAction.UPDATE_TASK, task_id, changes)
        return updated

    async def delete_task(self, task_id: str) -> Task:
        """Delete a task and record a Delete Task audit entry."""
        existing = await self.store.get_task(task_id)
        if not existing:
            raise TaskNotFound(task_id)

        deleted = await self.store.delete_task(task_id)
        if not deleted:
            raise TaskNotFound(task_id)
        metrics.inc_counter("tasks.deleted")
        logger.info(f"Task {task_id} deleted")

        await self.audit.record(AuditAction.DELETE_TASK, task_id)
        return deleted

    # =========================================================================
    # Audit logs
    # =========================================================================

    async def list_audit_logs(
        self,
        page: Any = None,
        limit: Any = None,
        action: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> dict[str, Any]:
        """List audit entries with filtering, ordering and pagination metadata."""
        page_number = coerce_positive_int(page, 1, MAX_PAGE)
        page_size = coerce_positive_int(
            limit, settings.default_log_page_size, settings.max_page_size
        )

        try:
            action_filter = AuditAction(action) if action else None
        except ValueError:
            raise ValidationFailed(
                [f"Unknown action: {action}"], message="Invalid audit log query"
            )

        try:
            query = AuditLogQuery(
                page=page_number,
                limit=page_size,
                action=action_filter,
                search=search or None,
                sort_by=sort_by or "timestamp",
                sort_order=(sort_order or "desc").lower(),
            )
        except ValidationError as exc:
            raise ValidationFailed(
                [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()],
                message="Invalid audit log query",
            ) from exc

        logs, total = await self.store.list_audit_logs(query)
        return {
            "logs": logs,
            "pagination": self._pagination(page_number, page_size, total),
        }

    # =========================================================================
    # Helpers
    # =========================================================================

    def _validate(self, title: Optional[str], description: Optional[str]) -> None:
        errors = validate_task(title, description)
        if errors:
            logger.info(f"Task rejected: {errors}")
            raise ValidationFailed(errors)

    @staticmethod
    def _pagination(page: int, limit: int, total: int) -> dict[str, int]:
        return {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": total_pages(total, limit),
        }
