"""Audit recorder - best-effort append of audit log entries."""

import logging
from typing import Any, Optional

from taskdesk.models import AuditAction, AuditLogEntry
from taskdesk.observability.metrics import metrics
from taskdesk.store.base import TaskStore

logger = logging.getLogger(__name__)


class AuditRecorder:
    """
    Writes one audit entry per task mutation.

    The task write has already been committed when record() is called, so a
    failure here cannot roll it back. Failures are logged and counted, never
    raised and never retried; the caller's response is unaffected.
    """

    def __init__(self, store: TaskStore):
        self.store = store

    async def record(
        self,
        action: AuditAction,
        task_id: str,
        updated_content: Optional[dict[str, Any]] = None,
    ) -> Optional[AuditLogEntry]:
        """Append an audit entry. Returns None if the write failed."""
        try:
            with metrics.timed("audit.write_latency_ms"):
                entry = await self.store.append_audit_log(
                    action=action,
                    task_id=task_id,
                    updated_content=updated_content,
                )
        except Exception as exc:
            metrics.inc_counter("audit.failed")
            logger.error(
                f"Failed to create audit log: {action.value} for task {task_id}: {exc}",
                exc_info=True,
            )
            return None

        metrics.inc_counter("audit.recorded")
        logger.info(f"Audit log created: {action.value} for task {task_id}")
        return entry
