"""
Survey business logic.

Scope:
- schema guard (create the table if it is missing)
- submit: validate, then insert
- list for the admin view
- database health
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import asyncpg

from . import repository
from .schemas import StoredResponse
from .validation import validate_submission

T = TypeVar("T")

logger = logging.getLogger(__name__)


class SubmissionInvalid(ValueError):
    def __init__(self, fields: list[str]):
        super().__init__(f"Missing fields: {', '.join(fields)}")
        self.fields = fields


# Raised when the table was missing and recreating it (or the retried
# operation) failed as well.
class SchemaRecreateFailed(RuntimeError):
    pass


@dataclass(frozen=True)
class SubmitResult:
    row: StoredResponse
    auto_created_table: bool = False


async def ensure_schema(pool: asyncpg.Pool) -> None:
    """
    Create the responses table if absent. Safe to call repeatedly and
    concurrently (CREATE TABLE IF NOT EXISTS).
    """
    await repository.create_table(pool)


async def ensure_schema_on_startup(pool: asyncpg.Pool) -> bool:
    """
    Lifespan entrypoint. Never raises; the service starts degraded instead.
    """
    try:
        await ensure_schema(pool)
    except Exception:
        logger.exception("schema_ensure_failed at=startup")
        return False
    logger.info("schema_ready table=responses")
    return True


async def run_with_schema_retry(
    pool: asyncpg.Pool,
    operation: Callable[[], Awaitable[T]],
) -> tuple[T, bool]:
    """
    Run `operation`; if it fails because the table is missing, recreate the
    table and run it exactly once more.

    Returns (result, recreated). Errors other than a missing table propagate
    untouched from the first attempt.
    """
    try:
        return await operation(), False
    except asyncpg.exceptions.UndefinedTableError:
        logger.warning("table_missing table=responses action=recreate")

    try:
        await ensure_schema(pool)
        result = await operation()
    except Exception as exc:
        raise SchemaRecreateFailed("Table recreated but retry failed.") from exc
    logger.info("table_recreated table=responses")
    return result, True


async def submit_response(pool: asyncpg.Pool, payload: Any) -> SubmitResult:
    checked = validate_submission(payload)
    if checked.record is None:
        raise SubmissionInvalid(checked.fields)
    record = checked.record

    row, recreated = await run_with_schema_retry(
        pool,
        lambda: repository.insert_response(pool, record),
    )
    stored = StoredResponse(**row)
    logger.info("response_stored id=%s auto_created_table=%s", stored.id, recreated)
    return SubmitResult(row=stored, auto_created_table=recreated)


async def list_all(pool: asyncpg.Pool) -> list[StoredResponse]:
    rows, _ = await run_with_schema_retry(pool, lambda: repository.list_responses(pool))
    return [StoredResponse(**row) for row in rows]


async def check_health(pool: asyncpg.Pool) -> bool:
    try:
        await repository.ping(pool)
    except Exception:
        logger.exception("health_check_failed")
        return False
    return True
