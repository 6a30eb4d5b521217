"""Database repositories for TaskDesk entities."""

from typing import Any

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskdesk.db.tables import AuditLogTable, TaskTable
from taskdesk.models import (
    CONTENT_FIELDS,
    AuditAction,
    AuditLogEntry,
    AuditLogQuery,
    AuditSortField,
    SortOrder,
    Task,
)
from taskdesk.utils.time import ensure_utc, utc_now

# Primary keys are BIGINT (signed 64-bit)
_MAX_ROW_ID = 2**63 - 1


def parse_row_id(task_id: str) -> int | None:
    """Map an opaque API id onto an integer primary key, or None if it cannot be one."""
    if not task_id or not (task_id.isascii() and task_id.isdecimal()):
        return None
    if len(task_id) > len(str(_MAX_ROW_ID)):
        return None
    row_id = int(task_id)
    if not 1 <= row_id <= _MAX_ROW_ID:
        return None
    return row_id


def _contains(column, term: str):
    """Case-insensitive literal substring match (LIKE wildcards escaped)."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


class TaskRepository:
    """Repository for task operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, title: str, description: str) -> Task:
        """Create a new task."""
        now = utc_now()
        row = TaskTable(
            title=title,
            description=description,
            created_at=now,
            updated_at=now,
        )
        self.session.add(row)
        await self.session.flush()
        return self._row_to_model(row)

    async def get(self, task_id: str) -> Task | None:
        """Get a task by ID."""
        row = await self._get_row(task_id)
        return self._row_to_model(row) if row else None

    async def list(
        self,
        page: int,
        page_size: int,
        search: str | None = None,
    ) -> tuple[list[Task], int]:
        """List tasks newest first with optional substring search."""
        conditions = []
        if search and search.strip():
            conditions.append(
                or_(_contains(TaskTable.title, search), _contains(TaskTable.description, search))
            )

        count_query = select(func.count()).select_from(TaskTable).where(*conditions)
        total = (await self.session.execute(count_query)).scalar_one()

        query = (
            select(TaskTable)
            .where(*conditions)
            .order_by(TaskTable.created_at.desc(), TaskTable.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await self.session.execute(query)
        rows = result.scalars().all()

        return [self._row_to_model(r) for r in rows], total

    async def update(self, task_id: str, title: str, description: str) -> Task | None:
        """Overwrite title and description."""
        row = await self._get_row(task_id)
        if row is None:
            return None

        row.title = title
        row.description = description
        row.updated_at = utc_now()
        await self.session.flush()
        return self._row_to_model(row)

    async def delete(self, task_id: str) -> Task | None:
        """Delete a task, returning its last state."""
        row = await self._get_row(task_id)
        if row is None:
            return None

        task = self._row_to_model(row)
        await self.session.delete(row)
        await self.session.flush()
        return task

    async def _get_row(self, task_id: str) -> TaskTable | None:
        row_id = parse_row_id(task_id)
        if row_id is None:
            return None
        return await self.session.get(TaskTable, row_id)

    def _row_to_model(self, row: TaskTable) -> Task:
        return Task(
            id=str(row.id),
            title=row.title,
            description=row.description,
            created_at=ensure_utc(row.created_at),
            updated_at=ensure_utc(row.updated_at),
        )


class AuditLogRepository:
    """Repository for the append-only audit trail."""

    _SORT_COLUMNS = {
        AuditSortField.TIMESTAMP: AuditLogTable.timestamp,
        AuditSortField.ACTION: AuditLogTable.action,
        AuditSortField.TASK_ID: AuditLogTable.task_id,
    }

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        action: AuditAction,
        task_id: str,
        updated_content: dict[str, Any] | None = None,
    ) -> AuditLogEntry:
        """Append an audit entry."""
        row = AuditLogTable(
            action=action,
            task_id=task_id,
            updated_content=updated_content,
            timestamp=utc_now(),
        )
        self.session.add(row)
        await self.session.flush()
        return self._row_to_model(row)

    async def list(self, query: AuditLogQuery) -> tuple[list[AuditLogEntry], int]:
        """List audit entries with optional action filter, search and ordering."""
        conditions = []
        if query.action:
            conditions.append(AuditLogTable.action == query.action)
        if query.search and query.search.strip():
            conditions.append(
                or_(
                    _contains(AuditLogTable.task_id, query.search),
                    _contains(cast(AuditLogTable.action, String), query.search),
                    *(
                        _contains(AuditLogTable.updated_content[field].as_string(), query.search)
                        for field in CONTENT_FIELDS
                    ),
                )
            )

        count_query = select(func.count()).select_from(AuditLogTable).where(*conditions)
        total = (await self.session.execute(count_query)).scalar_one()

        sort_column = self._SORT_COLUMNS[query.sort_by]
        if query.sort_order == SortOrder.ASC:
            ordering = (sort_column.asc(), AuditLogTable.id.asc())
        else:
            ordering = (sort_column.desc(), AuditLogTable.id.desc())

        result = await self.session.execute(
            select(AuditLogTable)
            .where(*conditions)
            .order_by(*ordering)
            .offset(query.offset)
            .limit(query.limit)
        )
        rows = result.scalars().all()

        return [self._row_to_model(r) for r in rows], total

    def _row_to_model(self, row: AuditLogTable) -> AuditLogEntry:
        return AuditLogEntry(
            id=str(row.id),
            action=row.action,
            task_id=row.task_id,
            updated_content=row.updated_content,
            timestamp=ensure_utc(row.timestamp),
        )
