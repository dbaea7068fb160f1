"""FastAPI application factory and entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI

from sitesmith.api.middleware import CorrelationIdMiddleware, add_exception_handlers
from sitesmith.api.routes import checkout, deploy, domains, generate, sessions, status, system
from sitesmith.config import Settings
from sitesmith.logging import configure_logging
from sitesmith.services import build_services
from sitesmith.sessions import build_session_store

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build settings, session store and provider clients on startup."""
    settings = Settings()

    configure_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
    )

    app.state.settings = settings
    app.state.store = build_session_store(settings)
    app.state.services = build_services(settings)

    logger.info(
        "Sitesmith API started",
        host=settings.api_host,
        port=settings.api_port,
        registrar=settings.registrar,
        session_backend=settings.session_backend,
    )
    yield

    logger.info("Sitesmith API shut down")


def include_routes(app: FastAPI) -> None:
    prefix = "/api/v1"
    app.include_router(system.router, prefix=prefix)
    app.include_router(sessions.router, prefix=prefix)
    app.include_router(generate.router, prefix=prefix)
    app.include_router(domains.router, prefix=prefix)
    app.include_router(checkout.router, prefix=prefix)
    app.include_router(deploy.router, prefix=prefix)
    app.include_router(status.router, prefix=prefix)


def create_app() -> FastAPI:
    """Application factory."""
    app = FastAPI(
        title="Sitesmith",
        description="Generate, pay for, and publish small static websites",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(CorrelationIdMiddleware)
    add_exception_handlers(app)

    # Prometheus metrics endpoint
    from prometheus_client import make_asgi_app

    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)

    include_routes(app)
    return app


def main() -> None:
    """Entry point for `sitesmith-api` command."""
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "sitesmith.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )
