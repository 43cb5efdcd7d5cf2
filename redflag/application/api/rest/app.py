import asyncio
import logging
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from redflag.application.api.rest.middleware import AccessGateMiddleware
from redflag.application.api.v1.errors import map_error
from redflag.application.api.v1.routes import auth, conversations, health, usage
from redflag.application.di import create_container
from redflag.config import Config, configure_logging
from redflag.domain.access.service.gate import AccessGate
from redflag.domain.shared.error import RedFlagError
from redflag.infrastructure.persistence.database import create_tables
from redflag.infrastructure.persistence.migrate import run_migrations
from redflag.infrastructure.scheduler.pool import SchedulePool
from redflag.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


async def prepare_database(config: Config, engine: AsyncEngine) -> None:
    """Bring the schema up to date: create_all for SQLite, alembic otherwise."""
    if not config.database.auto_migrate:
        return
    if config.database.url.startswith("sqlite"):
        await create_tables(engine)
    else:
        await asyncio.to_thread(run_migrations, config.database.url)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = app.state.dishka_container

    config = await container.get(Config)
    engine = await container.get(AsyncEngine)
    await prepare_database(config, engine)

    # Refuse to start if unauthenticated requests would redirect in a loop
    gate = await container.get(AccessGate)
    gate.check_bootstrap_reachable()

    schedule_pool = await container.get(SchedulePool)

    async with schedule_pool:
        yield

    await container.close()


def create_app(config: Config | None = None) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    configure_logging(config.logging)
    logger.info("Starting %s v%s", config.server.name, config.server.version)

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_httpx()
    logfire.instrument_fastapi(app_instance)

    # Gate runs outside the per-request container; added after dishka so it wraps it
    container = create_container(config)
    setup_dishka(container, app_instance)
    app_instance.add_middleware(AccessGateMiddleware)

    app_instance.include_router(health.router)
    app_instance.include_router(auth.router)
    app_instance.include_router(usage.router)
    app_instance.include_router(conversations.router)

    # Global error handler - maps domain and infrastructure errors to HTTP responses
    @app_instance.exception_handler(RedFlagError)
    async def redflag_error_handler(request: Request, exc: RedFlagError):
        http_exc = map_error(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
            headers=http_exc.headers,
        )

    # Global exception handler - logs all unhandled exceptions
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app_instance
