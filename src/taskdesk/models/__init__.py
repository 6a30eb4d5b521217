"""TaskDesk data models."""

from taskdesk.models.enums import AuditAction, AuditSortField, SortOrder
from taskdesk.models.task import CONTENT_FIELDS, DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH, Task
from taskdesk.models.audit import AuditLogEntry, AuditLogQuery

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "AuditLogQuery",
    "AuditSortField",
    "CONTENT_FIELDS",
    "DESCRIPTION_MAX_LENGTH",
    "SortOrder",
    "TITLE_MAX_LENGTH",
    "Task",
]
