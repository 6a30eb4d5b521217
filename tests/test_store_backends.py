"""
Store backend tests.

Every test runs against both the relational (SQLite) store and the
redis document store so the two stay interchangeable.
"""

import pytest

from taskdesk.db.repositories import parse_row_id
from taskdesk.errors import StoreFault
from taskdesk.models import AuditAction, AuditLogQuery, AuditSortField, SortOrder
from taskdesk.observability.metrics import metrics
from taskdesk.store import RedisTaskStore, total_pages

from tests.fakes import FakeRedis


@pytest.mark.asyncio
async def test_create_then_get_round_trips(store):
    created = await store.create_task("Buy milk", "2%")

    fetched = await store.get_task(created.id)

    assert fetched is not None
    assert fetched.id == created.id
    assert (fetched.title, fetched.description) == ("Buy milk", "2%")
    assert fetched.created_at == fetched.updated_at
    assert fetched.created_at.tzinfo is not None, "timestamps must be timezone-aware"


@pytest.mark.asyncio
async def test_ids_are_unique_opaque_strings(store):
    first = await store.create_task("a", "a")
    second = await store.create_task("b", "b")

    assert isinstance(first.id, str)
    assert first.id != second.id


@pytest.mark.asyncio
async def test_update_overwrites_fields_and_bumps_updated_at(store):
    task = await store.create_task("Buy milk", "2%")

    updated = await store.update_task(task.id, "Buy milk", "Whole")

    assert updated.description == "Whole"
    assert updated.created_at == task.created_at
    assert updated.updated_at >= task.updated_at
    assert (await store.get_task(task.id)).description == "Whole"


@pytest.mark.asyncio
async def test_unknown_and_malformed_ids_are_not_found(store):
    malformed = (
        "999999",
        "3000000000",
        "not-an-id",
        "64b7f0c2e4b0a1a2b3c4d5e6",
        "",
        "0",
        "\u00b2",
        "\u0663",
        "9" * 19,
        "9" * 5000,
    )
    for task_id in malformed:
        assert await store.get_task(task_id) is None
        assert await store.update_task(task_id, "t", "d") is None
        assert await store.delete_task(task_id) is None


@pytest.mark.parametrize(
    "task_id, expected",
    [
        ("1", 1),
        ("3000000000", 3000000000),
        (str(2**63 - 1), 2**63 - 1),
        (str(2**63), None),
        ("0", None),
        ("\u00b2", None),
        ("-1", None),
        (" 1", None),
    ],
)
def test_parse_row_id(task_id, expected):
    assert parse_row_id(task_id) == expected


@pytest.mark.asyncio
async def test_delete_is_terminal(store):
    task = await store.create_task("Buy milk", "2%")

    deleted = await store.delete_task(task.id)

    assert deleted.id == task.id
    assert deleted.title == "Buy milk"
    assert await store.get_task(task.id) is None
    assert await store.delete_task(task.id) is None
    _, total = await store.list_tasks(1, 5)
    assert total == 0


@pytest.mark.asyncio
async def test_list_pages_newest_first(store):
    """12 tasks, page 2 of 5 holds the 6th-10th newest."""
    created = [await store.create_task(f"Task {i}", f"Description {i}") for i in range(1, 13)]
    newest_first = [t.id for t in reversed(created)]

    page, total = await store.list_tasks(2, 5)

    assert total == 12
    assert total_pages(total, 5) == 3
    assert [t.id for t in page] == newest_first[5:10]

    last_page, _ = await store.list_tasks(3, 5)
    assert [t.id for t in last_page] == newest_first[10:]

    beyond, total = await store.list_tasks(4, 5)
    assert beyond == []
    assert total == 12


@pytest.mark.asyncio
async def test_search_matches_title_or_description_case_insensitively(store):
    await store.create_task("Buy MILK", "from the shop")
    await store.create_task("Call mom", "ask about milkshake recipe")
    await store.create_task("Write report", "quarterly numbers")

    matches, total = await store.list_tasks(1, 10, search="milk")

    assert total == 2
    assert {t.title for t in matches} == {"Buy MILK", "Call mom"}


@pytest.mark.asyncio
async def test_search_folds_non_ascii_case(store):
    await store.create_task("Caf\u00e9 order", "two flat whites")
    await store.create_task("Cafeteria", "lunch")

    matches, total = await store.list_tasks(1, 10, search="CAF\u00c9")

    assert total == 1
    assert matches[0].title == "Caf\u00e9 order"


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(store):
    await store.create_task("100% done", "finished")
    await store.create_task("1000 lines", "long file")

    matches, total = await store.list_tasks(1, 10, search="0%")

    assert total == 1
    assert matches[0].title == "100% done"


@pytest.mark.asyncio
async def test_blank_search_lists_everything(store):
    await store.create_task("a", "a")
    await store.create_task("b", "b")

    _, total = await store.list_tasks(1, 10, search="   ")

    assert total == 2


@pytest.mark.asyncio
async def test_audit_entries_append_with_timestamps(store):
    entry = await store.append_audit_log(AuditAction.CREATE_TASK, "7", {"title": "t", "description": "d"})

    assert entry.action == AuditAction.CREATE_TASK
    assert entry.task_id == "7"
    assert entry.updated_content == {"title": "t", "description": "d"}
    assert entry.timestamp.tzinfo is not None

    deleted = await store.append_audit_log(AuditAction.DELETE_TASK, "7")
    assert deleted.updated_content is None


@pytest.mark.asyncio
async def test_audit_entries_outlive_their_task(store):
    task = await store.create_task("gone soon", "bye")
    await store.append_audit_log(AuditAction.CREATE_TASK, task.id, {"title": "gone soon"})
    await store.delete_task(task.id)
    await store.append_audit_log(AuditAction.DELETE_TASK, task.id)

    logs, total = await store.list_audit_logs(AuditLogQuery())

    assert total == 2
    assert {log.task_id for log in logs} == {task.id}


@pytest.mark.asyncio
async def test_audit_default_order_is_newest_first(store):
    for task_id in ("1", "2", "3"):
        await store.append_audit_log(AuditAction.CREATE_TASK, task_id, {"title": task_id})

    logs, _ = await store.list_audit_logs(AuditLogQuery())

    assert [log.task_id for log in logs] == ["3", "2", "1"]


@pytest.mark.asyncio
async def test_audit_filter_search_and_sort(store):
    await store.append_audit_log(AuditAction.CREATE_TASK, "1", {"title": "Buy milk"})
    await store.append_audit_log(AuditAction.UPDATE_TASK, "1", {"description": "Whole"})
    await store.append_audit_log(AuditAction.CREATE_TASK, "2", {"title": "Walk dog"})
    await store.append_audit_log(AuditAction.DELETE_TASK, "2")

    creates, total = await store.list_audit_logs(AuditLogQuery(action=AuditAction.CREATE_TASK))
    assert total == 2
    assert all(log.action == AuditAction.CREATE_TASK for log in creates)

    whole, total = await store.list_audit_logs(AuditLogQuery(search="whole"))
    assert total == 1
    assert whole[0].action == AuditAction.UPDATE_TASK

    # Field names in the payload are not searchable, only values
    _, total = await store.list_audit_logs(AuditLogQuery(search="description"))
    assert total == 0

    by_action, _ = await store.list_audit_logs(
        AuditLogQuery(sort_by=AuditSortField.ACTION, sort_order=SortOrder.ASC)
    )
    assert [log.action.value for log in by_action] == [
        "Create Task",
        "Create Task",
        "Delete Task",
        "Update Task",
    ]

    page_two, total = await store.list_audit_logs(AuditLogQuery(page=2, limit=3))
    assert total == 4
    assert len(page_two) == 1
    assert page_two[0].task_id == "1"
    assert page_two[0].action == AuditAction.CREATE_TASK


@pytest.mark.asyncio
async def test_ping_reports_healthy_store(store):
    assert await store.ping() is True


@pytest.mark.asyncio
async def test_redis_errors_surface_as_store_fault():
    client = FakeRedis()
    store = RedisTaskStore(key_prefix="t", client=client)
    await store.connect()
    client.available = False

    with pytest.raises(StoreFault) as exc_info:
        await store.create_task("t", "d")

    assert exc_info.value.operation == "create_task"
    assert metrics.counter_value("store.errors") == 1
    assert await store.ping() is False


@pytest.mark.asyncio
async def test_redis_store_requires_url_or_client():
    with pytest.raises(ValueError):
        RedisTaskStore()


@pytest.mark.asyncio
async def test_redis_keys_are_namespaced(redis_store):
    task = await redis_store.create_task("t", "d")

    assert f"taskdesk-test:task:{task.id}" in redis_store.redis.values
    assert task.id in redis_store.redis.zsets["taskdesk-test:tasks"]


@pytest.mark.asyncio
async def test_audit_search_matches_non_ascii_content(store):
    await store.append_audit_log(AuditAction.CREATE_TASK, "1", {"title": "Café", "description": "d"})
    await store.append_audit_log(AuditAction.CREATE_TASK, "2", {"title": "Tea", "description": "d"})

    matches, total = await store.list_audit_logs(AuditLogQuery(search="cafÉ"))

    assert total == 1
    assert matches[0].updated_content["title"] == "Café"
