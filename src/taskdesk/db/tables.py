"""SQLAlchemy table definitions."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from taskdesk.db.base import Base
from taskdesk.models.enums import AuditAction

# BIGINT on server databases; SQLite only autoincrements an INTEGER PRIMARY KEY
RowId = BigInteger().with_variant(Integer, "sqlite")


class TaskTable(Base):
    """Tasks table."""

    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(RowId, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        # Index for newest-first listing
        Index("idx_tasks_created", "created_at"),
    )


class AuditLogTable(Base):
    """Audit logs table - append-only."""

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(RowId, primary_key=True, autoincrement=True)
    action: Mapped[AuditAction] = mapped_column(
        Enum(AuditAction, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
    )
    # No foreign key: entries outlive the tasks they describe
    task_id: Mapped[str] = mapped_column(String(64), nullable=False)
    updated_content: Mapped[dict[str, Any] | None] = mapped_column(JSON(none_as_null=True), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_audit_timestamp", "timestamp"),
        Index("idx_audit_task", "task_id", "timestamp"),
        Index("idx_audit_action", "action", "timestamp"),
    )
