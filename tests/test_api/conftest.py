"""FastAPI test client fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sitesmith.api.app import include_routes
from sitesmith.api.middleware import CorrelationIdMiddleware, add_exception_handlers

if TYPE_CHECKING:
    from sitesmith.config import Settings
    from sitesmith.protocols import SessionStore
    from sitesmith.services import Services


def _create_test_app(settings: Settings, store: SessionStore, services: Services) -> FastAPI:
    """Create a FastAPI app with injected settings, store and clients (no lifespan)."""
    app = FastAPI(title="Sitesmith Test")

    app.state.settings = settings
    app.state.store = store
    app.state.services = services

    app.add_middleware(CorrelationIdMiddleware)
    add_exception_handlers(app)
    include_routes(app)

    return app


@pytest.fixture()
def app(settings: Settings, store: SessionStore, services: Services) -> FastAPI:
    return _create_test_app(settings, store, services)


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def lenient_client(app: FastAPI) -> TestClient:
    """Client that returns 500 responses instead of re-raising server errors."""
    return TestClient(app, raise_server_exceptions=False)
