"""Health check and config endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from sitesmith.api.deps import ServicesDep, SettingsDep, StoreDep
from sitesmith.api.schemas import ConfigCheckResponse, HealthResponse

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
def health_check(
    store: StoreDep,
) -> HealthResponse:
    store_ok = store.ping()
    return HealthResponse(
        status="healthy" if store_ok else "unhealthy",
        version="0.1.0",
        store_connected=store_ok,
    )


@router.get("/config/check", response_model=ConfigCheckResponse)
def config_check(
    settings: SettingsDep,
    services: ServicesDep,
) -> ConfigCheckResponse:
    return ConfigCheckResponse(
        registrar=settings.registrar,
        configured={
            "anthropic": services.generator.llm.is_available,
            "stripe": services.checkout.is_available,
            "stripe_webhook": bool(settings.stripe_webhook_secret),
            "registrar": services.registrar.is_available,
            "github": services.github.is_available,
            "netlify": services.netlify.is_available,
        },
    )
