"""Relational store backend (SQLite via aiosqlite, PostgreSQL via asyncpg)."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from taskdesk.db.base import Base, create_engine, create_session_factory
from taskdesk.db.repositories import AuditLogRepository, TaskRepository
from taskdesk.errors import StoreFault
from taskdesk.models import AuditAction, AuditLogEntry, AuditLogQuery, Task
from taskdesk.observability.metrics import metrics
from taskdesk.store.base import TaskStore

logger = logging.getLogger(__name__)


class SqlTaskStore(TaskStore):
    """
    Task store on SQLAlchemy's async ORM.

    Every operation runs in its own session, committed on success and rolled
    back on error. Driver errors surface as StoreFault.
    """

    name = "sql"

    def __init__(self, database_url: str, echo: bool = False, engine: AsyncEngine | None = None):
        self.database_url = database_url
        self.engine = engine or create_engine(database_url, echo=echo)
        self._session_factory = create_session_factory(self.engine)

    async def connect(self) -> None:
        """Create tables if they do not exist yet."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            raise StoreFault("connect", str(exc)) from exc
        logger.info(f"SQL store ready ({self.engine.url.get_backend_name()})")

    async def close(self) -> None:
        """Close database connections."""
        await self.engine.dispose()

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            logger.warning(f"SQL store ping failed: {exc}")
            return False

    @asynccontextmanager
    async def session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session scoped to one store operation."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                metrics.inc_counter("store.errors")
                raise StoreFault(operation, str(exc)) from exc
            except Exception:
                await session.rollback()
                raise

    async def list_tasks(
        self, page: int, page_size: int, search: Optional[str] = None
    ) -> tuple[list[Task], int]:
        async with self.session("list_tasks") as session:
            return await TaskRepository(session).list(page, page_size, search)

    async def get_task(self, task_id: str) -> Optional[Task]:
        async with self.session("get_task") as session:
            return await TaskRepository(session).get(task_id)

    async def create_task(self, title: str, description: str) -> Task:
        async with self.session("create_task") as session:
            return await TaskRepository(session).create(title, description)

    async def update_task(self, task_id: str, title: str, description: str) -> Optional[Task]:
        async with self.session("update_task") as session:
            return await TaskRepository(session).update(task_id, title, description)

    async def delete_task(self, task_id: str) -> Optional[Task]:
        async with self.session("delete_task") as session:
            return await TaskRepository(session).delete(task_id)

    async def append_audit_log(
        self,
        action: AuditAction,
        task_id: str,
        updated_content: Optional[dict[str, Any]] = None,
    ) -> AuditLogEntry:
        async with self.session("append_audit_log") as session:
            return await AuditLogRepository(session).create(action, task_id, updated_content)

    async def list_audit_logs(self, query: AuditLogQuery) -> tuple[list[AuditLogEntry], int]:
        async with self.session("list_audit_logs") as session:
            return await AuditLogRepository(session).list(query)
