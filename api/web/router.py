"""
Front-end delivery: the admin dashboard (never cached) and the static web
client with an index.html fallback for client-side routes.
"""

from __future__ import annotations

import os
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from starlette.types import Scope

router = APIRouter()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    "Surrogate-Control": "no-store",
}


class SPAStaticFiles(StaticFiles):
    """
    Static files that answer unknown non-API paths with index.html, so
    client-side routes survive a page reload.
    """

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404 or path == "api" or path.startswith("api/"):
                raise
        return await super().get_response("index.html", scope)

    async def check_config(self) -> None:
        # A deployment without a front end still serves the API; every
        # lookup then misses with 404.
        if self.directory is not None and not os.path.isdir(self.directory):
            return None
        await super().check_config()


def frontend_dir(request: Request) -> Path:
    return request.app.state.settings.frontend_dir


def static_app(directory: Path) -> SPAStaticFiles:
    return SPAStaticFiles(directory=directory, html=True, check_dir=False)


@router.get("/admin", include_in_schema=False)
@router.get("/admin.html", include_in_schema=False)
async def admin_page(root: Path = Depends(frontend_dir)) -> FileResponse:
    page = root / "admin.html"
    if not page.is_file():
        raise HTTPException(status_code=404, detail="Admin page not found.")
    return FileResponse(page, media_type="text/html", headers=NO_CACHE_HEADERS)
