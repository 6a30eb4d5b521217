"""TaskDesk relational database layer."""

from taskdesk.db.base import Base, create_engine, create_session_factory
from taskdesk.db.tables import AuditLogTable, TaskTable

__all__ = [
    "AuditLogTable",
    "Base",
    "TaskTable",
    "create_engine",
    "create_session_factory",
]
