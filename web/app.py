"""FastAPI application factory and main app.

This module creates the FastAPI application with all routers and
dependency injection configured. Web routes are thin proxies to core APIs.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from jobparam import __version__
from jobparam.db import create_all_tables, get_engine, get_session_factory
from web.routers import config, health, jobs, parameters


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager.

    Initializes database tables on startup.
    """
    engine = get_engine()
    create_all_tables(engine)
    app.state.session_factory = get_session_factory(engine)
    yield


def include_routers(application: FastAPI) -> FastAPI:
    """Attach every API router to an application."""
    application.include_router(health.router, tags=["health"])
    application.include_router(config.router, prefix="/config", tags=["config"])
    application.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
    application.include_router(
        parameters.router, prefix="/parameters", tags=["parameters"]
    )
    return application


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application.
    """
    application = FastAPI(
        title="Job Build Name Parameter API",
        description="HTTP API offering recent successful build names of a job "
        "as parameter choices",
        version=__version__,
        lifespan=lifespan,
    )
    return include_routers(application)


# Create the default application instance
app = create_app()
