"""Database engine and session factory construction."""

import json
import time
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from taskdesk.observability.metrics import metrics


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


def _json_dumps(value: Any) -> str:
    # Non-ASCII text stays literal so it can be searched as typed
    return json.dumps(value, ensure_ascii=False)


def _unicode_lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to server databases."""
    kwargs = {"echo": echo, "pool_pre_ping": True, "json_serializer": _json_dumps}
    if not database_url.startswith("sqlite"):
        kwargs.update(pool_size=20, max_overflow=10)
    engine = create_async_engine(database_url, **kwargs)
    if engine.dialect.name == "sqlite":
        _attach_sqlite_functions(engine)
    _attach_query_metrics(engine)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def _attach_sqlite_functions(target_engine: AsyncEngine) -> None:
    """Replace SQLite's ASCII-only lower() so ILIKE folds case like PostgreSQL does."""

    @event.listens_for(target_engine.sync_engine, "connect")
    def register_functions(dbapi_connection, connection_record):
        dbapi_connection.create_function("lower", 1, _unicode_lower)


def _attach_query_metrics(target_engine: AsyncEngine) -> None:
    """Attach SQLAlchemy event listeners for query metrics."""
    sync_engine = target_engine.sync_engine
    if getattr(sync_engine, "_taskdesk_metrics_attached", False):
        return

    @event.listens_for(sync_engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info["query_start_time"] = time.perf_counter()

    @event.listens_for(sync_engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        start_time = conn.info.pop("query_start_time", None)
        if start_time is None:
            return
        duration_ms = (time.perf_counter() - start_time) * 1000.0
        metrics.inc_counter("db.query.count")
        metrics.observe("db.query.duration_ms", duration_ms)

    sync_engine._taskdesk_metrics_attached = True
