"""
App factory and server entry point.

Nothing is read from the environment at import time: `run()` loads settings
(including `.env`) and builds the app. `uvicorn --factory main:create_app`
works as well.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import db
from core.config import Settings, get_settings
from core.log import configure_logging
from survey import router as survey_router
from survey import service as survey_service
from web import router as web_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)
    # Initialize the DB pool once per process.
    app.state.db_pool = await db.create_pool(settings)
    # Best-effort: a missing or unreachable database must not stop start-up.
    await survey_service.ensure_schema_on_startup(app.state.db_pool)
    try:
        yield
    finally:
        await db.close_pool(app.state.db_pool)
        app.state.db_pool = None


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="quiz survey api", lifespan=lifespan)
    app.state.settings = settings
    app.state.db_pool = None

    # Browser clients may be served from another origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(survey_router.router, tags=["survey"])
    app.include_router(web_router.router, tags=["web"])
    # Front-end files go last: the mount matches every remaining path.
    app.mount("/", web_router.static_app(settings.frontend_dir), name="frontend")
    return app


def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("server_starting host=%s port=%s", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
