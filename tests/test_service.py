import asyncpg
import pytest

from conftest import FakePool, missing_table, valid_payload
from survey import service

pytestmark = pytest.mark.anyio


async def test_ensure_schema_is_idempotent():
    pool = FakePool(table_exists=False)

    await service.ensure_schema(pool)
    await service.ensure_schema(pool)

    assert pool.table_exists
    assert pool.create_calls == 2


async def test_insert_then_list_returns_newest_first(fake_pool):
    first = await service.submit_response(fake_pool, valid_payload(q2="first"))
    second = await service.submit_response(fake_pool, valid_payload(q1=1, q5=5, q2="second"))

    rows = await service.list_all(fake_pool)

    assert [r.id for r in rows] == [second.row.id, first.row.id]
    assert rows[0].model_dump(exclude={"id"}) == {
        "ts": "2024-01-01T00:00:00Z",
        "lang": "en",
        "gender": "f",
        "q1": 1,
        "q2": "second",
        "q3": "b",
        "q4": "c",
        "q5": 5,
    }
    assert not first.auto_created_table


async def test_invalid_submission_never_inserts(fake_pool):
    with pytest.raises(service.SubmissionInvalid) as exc_info:
        await service.submit_response(fake_pool, valid_payload(q1=0))

    assert exc_info.value.fields == ["q1"]
    assert fake_pool.insert_calls == 0


async def test_missing_table_is_recreated_and_retried_once():
    pool = FakePool(table_exists=False)

    result = await service.submit_response(pool, valid_payload())

    assert result.auto_created_table
    assert result.row.id == 1
    assert pool.create_calls == 1
    assert pool.insert_calls == 2


async def test_retry_failure_is_terminal():
    pool = FakePool()
    pool.insert_errors = [missing_table(), missing_table()]

    with pytest.raises(service.SchemaRecreateFailed):
        await service.submit_response(pool, valid_payload())

    assert pool.insert_calls == 2
    assert pool.create_calls == 1


async def test_recreate_failure_is_terminal():
    pool = FakePool(table_exists=False)
    pool.create_error = asyncpg.exceptions.InsufficientPrivilegeError("permission denied for schema public")

    with pytest.raises(service.SchemaRecreateFailed):
        await service.list_all(pool)


async def test_other_storage_errors_are_not_retried(fake_pool):
    fake_pool.insert_errors = [asyncpg.exceptions.TooManyConnectionsError("too many clients")]

    with pytest.raises(asyncpg.exceptions.TooManyConnectionsError):
        await service.submit_response(fake_pool, valid_payload())

    assert fake_pool.create_calls == 0
    assert fake_pool.insert_calls == 1


async def test_startup_schema_failure_is_swallowed():
    pool = FakePool(table_exists=False)
    pool.create_error = ConnectionRefusedError("connection refused")

    assert await service.ensure_schema_on_startup(pool) is False


async def test_check_health(fake_pool):
    assert await service.check_health(fake_pool) is True

    fake_pool.down = True

    assert await service.check_health(fake_pool) is False
