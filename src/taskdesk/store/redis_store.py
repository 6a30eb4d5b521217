"""Document store backend on Redis.

Each task and audit entry is a JSON document under its own key. Creation
order is kept in a sorted set scored by the numeric id handed out by INCR,
so newest-first listing is a reverse range over that set.

Key layout (``p`` is the configured prefix)::

    p:task:next_id        INCR counter
    p:task:<id>           task document
    p:tasks               sorted set of task ids
    p:audit:next_id       INCR counter
    p:audit:<id>          audit entry document
    p:audit_logs          sorted set of audit entry ids
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from taskdesk.errors import StoreFault
from taskdesk.models import (
    CONTENT_FIELDS,
    AuditAction,
    AuditLogEntry,
    AuditLogQuery,
    AuditSortField,
    SortOrder,
    Task,
)
from taskdesk.observability.metrics import metrics
from taskdesk.store.base import TaskStore
from taskdesk.utils.time import utc_now

logger = logging.getLogger(__name__)


def _matches(term: str, *values: Optional[str]) -> bool:
    needle = term.lower()
    return any(value is not None and needle in value.lower() for value in values)


def _content_value(entry: AuditLogEntry, field: str) -> Optional[str]:
    value = (entry.updated_content or {}).get(field)
    return value if isinstance(value, str) else None


class RedisTaskStore(TaskStore):
    """Task store keeping JSON documents in Redis."""

    name = "redis"

    def __init__(
        self,
        redis_url: str | None = None,
        key_prefix: str = "taskdesk",
        client: Any = None,
    ):
        if client is None and not redis_url:
            raise ValueError("redis_url or client required for RedisTaskStore")
        self.redis_url = redis_url
        self.prefix = key_prefix
        self.redis = client if client is not None else aioredis.from_url(
            redis_url, decode_responses=True
        )

    # Keys

    def _task_key(self, task_id: str) -> str:
        return f"{self.prefix}:task:{task_id}"

    def _audit_key(self, entry_id: str) -> str:
        return f"{self.prefix}:audit:{entry_id}"

    @property
    def _task_index(self) -> str:
        return f"{self.prefix}:tasks"

    @property
    def _audit_index(self) -> str:
        return f"{self.prefix}:audit_logs"

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncGenerator[None, None]:
        try:
            with metrics.timed("redis.command.duration_ms"):
                yield
        except RedisError as exc:
            metrics.inc_counter("store.errors")
            raise StoreFault(operation, str(exc)) from exc

    # Lifecycle

    async def connect(self) -> None:
        async with self._guard("connect"):
            await self.redis.ping()
        logger.info(f"Redis store ready (prefix={self.prefix})")

    async def close(self) -> None:
        await self.redis.aclose()

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError as exc:
            logger.warning(f"Redis store ping failed: {exc}")
            return False

    # Tasks

    async def list_tasks(
        self, page: int, page_size: int, search: Optional[str] = None
    ) -> tuple[list[Task], int]:
        offset = (page - 1) * page_size
        async with self._guard("list_tasks"):
            if not search or not search.strip():
                total = await self.redis.zcard(self._task_index)
                ids = await self.redis.zrevrange(self._task_index, offset, offset + page_size - 1)
                return await self._load_tasks(ids), total

            ids = await self.redis.zrevrange(self._task_index, 0, -1)
            tasks = await self._load_tasks(ids)

        matching = [t for t in tasks if _matches(search, t.title, t.description)]
        return matching[offset:offset + page_size], len(matching)

    async def get_task(self, task_id: str) -> Optional[Task]:
        async with self._guard("get_task"):
            document = await self.redis.get(self._task_key(task_id))
        return Task.model_validate_json(document) if document else None

    async def create_task(self, title: str, description: str) -> Task:
        now = utc_now()
        async with self._guard("create_task"):
            task_id = await self.redis.incr(f"{self.prefix}:task:next_id")
            task = Task(
                id=str(task_id),
                title=title,
                description=description,
                created_at=now,
                updated_at=now,
            )
            pipe = self.redis.pipeline(transaction=True)
            pipe.set(self._task_key(task.id), task.model_dump_json())
            pipe.zadd(self._task_index, {task.id: task_id})
            await pipe.execute()
        return task

    async def update_task(self, task_id: str, title: str, description: str) -> Optional[Task]:
        existing = await self.get_task(task_id)
        if existing is None:
            return None

        task = existing.model_copy(
            update={"title": title, "description": description, "updated_at": utc_now()}
        )
        async with self._guard("update_task"):
            # xx: a task deleted in the meantime stays deleted
            written = await self.redis.set(self._task_key(task_id), task.model_dump_json(), xx=True)
        return task if written else None

    async def delete_task(self, task_id: str) -> Optional[Task]:
        existing = await self.get_task(task_id)
        if existing is None:
            return None

        async with self._guard("delete_task"):
            pipe = self.redis.pipeline(transaction=True)
            pipe.delete(self._task_key(task_id))
            pipe.zrem(self._task_index, task_id)
            deleted, _ = await pipe.execute()
        return existing if deleted else None

    async def _load_tasks(self, ids: list[str]) -> list[Task]:
        if not ids:
            return []
        documents = await self.redis.mget([self._task_key(i) for i in ids])
        return [Task.model_validate_json(doc) for doc in documents if doc]

    # Audit logs

    async def append_audit_log(
        self,
        action: AuditAction,
        task_id: str,
        updated_content: Optional[dict[str, Any]] = None,
    ) -> AuditLogEntry:
        async with self._guard("append_audit_log"):
            entry_id = await self.redis.incr(f"{self.prefix}:audit:next_id")
            entry = AuditLogEntry(
                id=str(entry_id),
                action=action,
                task_id=task_id,
                updated_content=updated_content,
                timestamp=utc_now(),
            )
            pipe = self.redis.pipeline(transaction=True)
            pipe.set(self._audit_key(entry.id), entry.model_dump_json())
            pipe.zadd(self._audit_index, {entry.id: entry_id})
            await pipe.execute()
        return entry

    async def list_audit_logs(self, query: AuditLogQuery) -> tuple[list[AuditLogEntry], int]:
        async with self._guard("list_audit_logs"):
            ids = await self.redis.zrevrange(self._audit_index, 0, -1)
            if not ids:
                return [], 0
            documents = await self.redis.mget([self._audit_key(i) for i in ids])

        entries = [AuditLogEntry.model_validate_json(doc) for doc in documents if doc]

        if query.action:
            entries = [e for e in entries if e.action == query.action]
        if query.search and query.search.strip():
            entries = [
                e
                for e in entries
                if _matches(
                    query.search,
                    e.task_id,
                    e.action.value,
                    *(_content_value(e, field) for field in CONTENT_FIELDS),
                )
            ]

        entries.sort(
            key=lambda e: (self._sort_value(e, query.sort_by), int(e.id)),
            reverse=query.sort_order == SortOrder.DESC,
        )
        return entries[query.offset:query.offset + query.limit], len(entries)

    @staticmethod
    def _sort_value(entry: AuditLogEntry, field: AuditSortField) -> Any:
        if field == AuditSortField.ACTION:
            return entry.action.value
        if field == AuditSortField.TASK_ID:
            return entry.task_id
        return entry.timestamp
