"""Persistence interface shared by every store backend."""

import math
from abc import ABC, abstractmethod
from typing import Any, Optional

from taskdesk.models import AuditAction, AuditLogEntry, AuditLogQuery, Task


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed to show ``total`` items ``page_size`` at a time."""
    return math.ceil(total / page_size) if page_size else 0


class TaskStore(ABC):
    """Abstract base class for task + audit log persistence."""

    name: str = "abstract"

    @abstractmethod
    async def connect(self) -> None:
        """Acquire connections and make sure the schema/keyspace is usable."""

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return True when the backend answers."""

    # Tasks

    @abstractmethod
    async def list_tasks(
        self, page: int, page_size: int, search: Optional[str] = None
    ) -> tuple[list[Task], int]:
        """
        List tasks newest first.

        Args:
            page: 1-based page number
            page_size: Items per page; offset is (page - 1) * page_size
            search: Case-insensitive substring matched against title OR description

        Returns:
            Tuple of (items on the page, total matching items)
        """

    @abstractmethod
    async def get_task(self, task_id: str) -> Optional[Task]:
        """Fetch a task, or None if the id is unknown or malformed."""

    @abstractmethod
    async def create_task(self, title: str, description: str) -> Task:
        """Insert a task; created_at and updated_at are set to now."""

    @abstractmethod
    async def update_task(self, task_id: str, title: str, description: str) -> Optional[Task]:
        """Overwrite title/description and bump updated_at. None if not found."""

    @abstractmethod
    async def delete_task(self, task_id: str) -> Optional[Task]:
        """Remove a task and return it as it was. None if not found."""

    # Audit logs

    @abstractmethod
    async def append_audit_log(
        self,
        action: AuditAction,
        task_id: str,
        updated_content: Optional[dict[str, Any]] = None,
    ) -> AuditLogEntry:
        """Append one audit entry timestamped now."""

    @abstractmethod
    async def list_audit_logs(self, query: AuditLogQuery) -> tuple[list[AuditLogEntry], int]:
        """Return (page of entries, total matching entries) for the query."""
