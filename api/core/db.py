"""
Async database wiring (raw SQL) using asyncpg.

The pool is created by the FastAPI lifespan (see `api/main.py`), stored on
`app.state.db_pool`, and handed to routes through the `get_pool` dependency.
Repositories receive the pool as an argument instead of reaching for a global.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import ssl
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg
from fastapi import Request

from .config import Settings


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def permissive_ssl_context() -> ssl.SSLContext:
    """
    Encrypted transport without certificate or hostname checks.
    """
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def connect_kwargs(settings: Settings) -> dict[str, Any]:
    """
    Translate settings into asyncpg connection arguments.

    Exactly one form is used: the URL when DATABASE_URL is set, otherwise the
    discrete PG* options. Unset discrete options are left to asyncpg's defaults.
    """
    kwargs: dict[str, Any] = {}
    if settings.uses_url:
        kwargs["dsn"] = _sanitize_database_url(settings.database_url or "")
    else:
        discrete = {
            "host": settings.pg_host,
            "port": settings.pg_port,
            "user": settings.pg_user,
            "password": settings.pg_password,
            "database": settings.pg_database,
        }
        kwargs.update({k: v for k, v in discrete.items() if v is not None})

    if settings.pg_ssl:
        kwargs["ssl"] = permissive_ssl_context()
    return kwargs


async def create_pool(settings: Settings) -> asyncpg.Pool:
    # min_size=0: no connection is opened until the first query, so an
    # unreachable database does not stop the process from starting.
    return await asyncpg.create_pool(
        **connect_kwargs(settings),
        min_size=0,
        max_size=settings.pool_max_size,
        command_timeout=settings.command_timeout_s,
    )


async def close_pool(pool: asyncpg.Pool | None) -> None:
    if pool is None:
        return None
    await pool.close()


def get_pool(request: Request) -> asyncpg.Pool:
    pool = getattr(request.app.state, "db_pool", None)
    if pool is None:
        raise RuntimeError("DB pool is not initialized. It is created by the app lifespan.")
    return pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(pool: asyncpg.Pool, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await pool.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(pool: asyncpg.Pool, sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await pool.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(pool: asyncpg.Pool, sql: str, *args: Any) -> None:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
    """
    await pool.execute(sql, *args)
