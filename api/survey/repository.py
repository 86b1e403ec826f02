"""
Response persistence.
This module is where all SQL touching the `responses` table lives.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

from .schemas import ResponseRecord

CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS responses (
      id SERIAL PRIMARY KEY,
      ts TEXT NOT NULL,
      lang TEXT NOT NULL,
      gender TEXT NOT NULL,
      q1 INTEGER NOT NULL,
      q2 TEXT NOT NULL,
      q3 TEXT NOT NULL,
      q4 TEXT NOT NULL,
      q5 INTEGER NOT NULL
    )
"""


async def create_table(pool: asyncpg.Pool) -> None:
    await db.execute(pool, CREATE_TABLE_SQL)


async def insert_response(pool: asyncpg.Pool, record: ResponseRecord) -> dict[str, Any]:
    row = await db.fetch_one(
        pool,
        """
        INSERT INTO responses (ts, lang, gender, q1, q2, q3, q4, q5)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
        RETURNING *
        """,
        *record.insert_args(),
    )
    if row is None:
        raise RuntimeError("Failed to insert response.")
    return row


async def list_responses(pool: asyncpg.Pool) -> list[dict[str, Any]]:
    """
    All responses, most recent first.
    """
    return await db.fetch_all(pool, "SELECT * FROM responses ORDER BY id DESC")


async def ping(pool: asyncpg.Pool) -> None:
    await db.fetch_one(pool, "SELECT 1 AS ok")


async def count_responses(pool: asyncpg.Pool) -> int:
    row = await db.fetch_one(pool, "SELECT COUNT(*)::int AS n FROM responses")
    if row is None:
        return 0
    return int(row["n"] or 0)


async def truncate_responses(pool: asyncpg.Pool) -> None:
    await db.execute(pool, "TRUNCATE TABLE responses RESTART IDENTITY")
