"""
Survey API endpoints.

Errors are returned as `{"error": ...}` bodies for the front end, so this
router builds JSONResponses instead of raising HTTPException.
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from core.db import get_pool

from . import service

router = APIRouter(prefix="/api")

logger = logging.getLogger(__name__)

SERVER_ERROR = "Server error"
RETRY_FAILED = "TABLE_RECREATED_RETRY_FAILED"


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return {}


@router.get("/health")
async def health(pool: asyncpg.Pool = Depends(get_pool)) -> JSONResponse:
    if await service.check_health(pool):
        return JSONResponse({"ok": True, "db": True})
    return JSONResponse({"ok": False, "db": False}, status_code=500)


@router.post("/submit")
async def submit(request: Request, pool: asyncpg.Pool = Depends(get_pool)) -> JSONResponse:
    payload = await _read_json(request)
    try:
        result = await service.submit_response(pool, payload)
    except service.SubmissionInvalid as exc:
        logger.info("submission_rejected fields=%s", ",".join(exc.fields))
        return JSONResponse({"error": "Missing fields", "fields": exc.fields}, status_code=400)
    except service.SchemaRecreateFailed:
        logger.exception("submit_failed reason=retry_failed")
        return JSONResponse({"error": RETRY_FAILED}, status_code=500)
    except Exception:
        logger.exception("submit_failed")
        return JSONResponse({"error": SERVER_ERROR}, status_code=500)

    row = result.row.model_dump()
    body: dict[str, Any] = {"ok": True, "id": result.row.id, "row": row}
    if result.auto_created_table:
        body["autoCreatedTable"] = True
    return JSONResponse(body)


@router.get("/quiz-responses")
async def quiz_responses(pool: asyncpg.Pool = Depends(get_pool)) -> JSONResponse:
    """
    Every stored response, newest first (admin dashboard).
    """
    try:
        rows = await service.list_all(pool)
    except service.SchemaRecreateFailed:
        logger.exception("list_failed reason=retry_failed")
        return JSONResponse({"error": RETRY_FAILED}, status_code=500)
    except Exception:
        logger.exception("list_failed")
        return JSONResponse({"error": SERVER_ERROR}, status_code=500)
    return JSONResponse([row.model_dump() for row in rows])
