"""
Empty the responses table and restart its id sequence.

Run:
  survey-reset-db
  (or, from api/: python -m maintenance.reset_db)

Prints `OK deleted=<n>` where n is the number of rows that existed before.
A missing table counts as zero rows.
"""

from __future__ import annotations

import asyncio
import logging

import asyncpg

from core import db
from core.config import get_settings
from core.log import configure_logging
from survey import repository

logger = logging.getLogger(__name__)


async def reset(pool: asyncpg.Pool) -> int:
    try:
        deleted = await repository.count_responses(pool)
    except asyncpg.exceptions.UndefinedTableError:
        deleted = 0

    try:
        await repository.truncate_responses(pool)
    except asyncpg.exceptions.UndefinedTableError:
        logger.info("reset_skipped reason=table_missing")
    return deleted


async def _main() -> int:
    settings = get_settings()
    pool = None
    try:
        pool = await db.create_pool(settings)
        deleted = await reset(pool)
    except Exception:
        logger.exception("reset_failed")
        return 1
    finally:
        await db.close_pool(pool)
    print(f"OK deleted={deleted}")
    return 0


def main() -> int:
    configure_logging(get_settings().log_level)
    return asyncio.run(_main())


if __name__ == "__main__":
    raise SystemExit(main())
