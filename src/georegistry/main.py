"""
ASGI entrypoint.

    uvicorn georegistry.main:app

`create_app(settings)` builds a fresh application; tests call it with their own Settings.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from georegistry.api.v1.api import api_router
from georegistry.api.v1.error_handlers import register_exception_handlers
from georegistry.config import Settings, get_settings
from georegistry.core.logging import RequestIDMiddleware, setup_logging, stop_queue_logging
from georegistry.database.base import Base
from georegistry.database.session import dispose_engine, get_engine
from georegistry.utils.logging import get_project_name, get_project_version

# registers every table on Base.metadata
import georegistry.models  # noqa: F401

logger = logging.getLogger(__name__)


async def create_tables() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.DB_CREATE_ALL:
            await create_tables()
            logger.info("app.startup.tables_created")
        logger.info("app.startup", extra={"env": settings.ENV})
        try:
            yield
        finally:
            await dispose_engine()
            logger.info("app.shutdown")
            stop_queue_logging()

    app = FastAPI(
        title=get_project_name() or "geo-registry",
        version=get_project_version(),
        lifespan=lifespan,
    )
    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    app.include_router(api_router)

    return app


app = create_app()
