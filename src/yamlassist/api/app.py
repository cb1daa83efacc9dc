"""FastAPI application factory for yamlassist."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from yamlassist import __version__
from yamlassist.api.deps import init_engine, reset_engine
from yamlassist.api.middleware import RequestBodyLimitMiddleware, RequestTimingMiddleware
from yamlassist.api.routers import automation, catalog
from yamlassist.api.schemas import HealthResponse
from yamlassist.schema.registry import default_registry
from yamlassist.service.engine import AutomationEngine
from yamlassist.settings import Settings

logger = logging.getLogger("yamlassist.api")


def build_engine(settings: Settings) -> AutomationEngine:
    """Create the engine with the built-in (and configured) schemas."""
    return AutomationEngine(default_registry(settings.schema_dir), settings=settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Build the engine and compile its validators alongside the application."""
    settings: Settings = app.state.settings
    engine = build_engine(settings)
    await engine.queue.warm()
    init_engine(engine)
    try:
        yield
    finally:
        reset_engine()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="yamlassist",
        description="Lint and completions for YAML front matter and code-cell options.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Middleware
    app.add_middleware(RequestBodyLimitMiddleware)
    app.add_middleware(RequestTimingMiddleware)

    app.include_router(automation.router, tags=["automation"])
    app.include_router(catalog.router, prefix="/schemas", tags=["schemas"])

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


def main() -> None:
    """Run the REST API server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger.info(
        "yamlassist API server v%s starting (host=%s, port=%d)",
        __version__, settings.api_server_host, settings.effective_port,
    )

    uvicorn.run(
        "yamlassist.api.app:create_app",
        factory=True,
        host=settings.api_server_host,
        port=settings.effective_port,
        log_level=settings.log_level.lower(),
    )
