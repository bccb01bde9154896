"""
FastAPI app
"""

from importlib.metadata import version

from fastapi import FastAPI
from structlog import get_logger

from groupcal.config.observability import configure_logging

from .dependencies import DATABASE_MANAGER, SETTINGS
from .errors import add_exception_handlers
from .routes import build_router

settings = SETTINGS()


async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    app.settings = settings

    if settings.create_tables:
        await DATABASE_MANAGER.create_all()

    await get_logger().ainfo(
        "api.started",
        database_type=settings.database_type,
        hostname=settings.hostname,
    )

    yield

    await DATABASE_MANAGER.engine.dispose()


app = FastAPI(
    lifespan=lifespan,
    title="groupcal API",
    summary="Shared calendars, events and groups for authenticated users.",
    version=version("groupcal"),
)

app = add_exception_handlers(app)

app.include_router(build_router())
