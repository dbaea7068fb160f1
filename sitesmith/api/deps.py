"""FastAPI dependency injection."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from sitesmith.config import Settings
from sitesmith.protocols import SessionStore
from sitesmith.services import Services


def _get_settings(request: Request) -> Settings:
    """Get the settings instance from app state."""
    return request.app.state.settings  # type: ignore[no-any-return]


def _get_store(request: Request) -> SessionStore:
    """Get the session store from app state."""
    return request.app.state.store  # type: ignore[no-any-return]


def _get_services(request: Request) -> Services:
    return request.app.state.services  # type: ignore[no-any-return]


SettingsDep = Annotated[Settings, Depends(_get_settings)]
StoreDep = Annotated[SessionStore, Depends(_get_store)]
ServicesDep = Annotated[Services, Depends(_get_services)]
