"""
Environment-driven settings.

Values are read once per process. A `.env` file next to the working directory
is loaded first and overrides the inherited environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_PORT = 3000
DEFAULT_POOL_MAX_SIZE = 10
DEFAULT_COMMAND_TIMEOUT_S = 30.0

_REPO_ROOT = Path(__file__).resolve().parents[2]


def _env_str(name: str) -> str | None:
    raw = os.environ.get(name, "").strip()
    return raw or None


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    database_url: str | None
    pg_host: str | None
    pg_port: int | None
    pg_user: str | None
    pg_password: str | None
    pg_database: str | None
    pg_ssl: bool
    host: str
    port: int
    pool_max_size: int
    command_timeout_s: float
    frontend_dir: Path
    cors_origins: tuple[str, ...]
    log_level: str

    @property
    def uses_url(self) -> bool:
        return self.database_url is not None


def load_settings() -> Settings:
    """
    Build settings from the current environment (no caching).
    """
    pg_port = _env_int("PGPORT", 0)
    origins = tuple(
        o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()
    )
    return Settings(
        database_url=_env_str("DATABASE_URL"),
        pg_host=_env_str("PGHOST"),
        pg_port=pg_port or None,
        pg_user=_env_str("PGUSER"),
        pg_password=_env_str("PGPASSWORD"),
        pg_database=_env_str("PGDATABASE"),
        pg_ssl=os.environ.get("PGSSL", "").strip().lower() == "true",
        host=os.environ.get("HOST", "0.0.0.0").strip() or "0.0.0.0",
        port=_env_int("PORT", DEFAULT_PORT),
        pool_max_size=max(1, _env_int("DB_POOL_MAX_SIZE", DEFAULT_POOL_MAX_SIZE)),
        command_timeout_s=_env_float("DB_COMMAND_TIMEOUT", DEFAULT_COMMAND_TIMEOUT_S),
        frontend_dir=Path(_env_str("FRONTEND_DIR") or _REPO_ROOT / "frontend"),
        cors_origins=origins or ("*",),
        log_level=(_env_str("LOG_LEVEL") or "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv(override=True)
    return load_settings()
