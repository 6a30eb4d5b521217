"""TaskDesk persistence backends."""

from taskdesk.config import Settings, StoreBackend
from taskdesk.store.base import TaskStore, total_pages
from taskdesk.store.redis_store import RedisTaskStore
from taskdesk.store.sql import SqlTaskStore


def build_store(settings: Settings) -> TaskStore:
    """Instantiate the store backend selected by configuration."""
    if settings.store_backend == StoreBackend.REDIS:
        return RedisTaskStore(redis_url=settings.redis_url, key_prefix=settings.redis_key_prefix)
    return SqlTaskStore(settings.database_url, echo=settings.debug)


__all__ = [
    "RedisTaskStore",
    "SqlTaskStore",
    "TaskStore",
    "build_store",
    "total_pages",
]
