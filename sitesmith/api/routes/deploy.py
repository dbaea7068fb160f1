"""Deployment endpoints: one per hosting option, all through the pipeline."""

from __future__ import annotations

from fastapi import APIRouter

from sitesmith.api.deps import ServicesDep, SettingsDep, StoreDep
from sitesmith.api.schemas import DeployRequest, SessionStatusResponse
from sitesmith.config import Settings
from sitesmith.models.session import DeploymentType
from sitesmith.orchestrator import DeploymentPipeline
from sitesmith.protocols import SessionStore
from sitesmith.services import Services
from sitesmith.sessions import require_session

router = APIRouter(prefix="/deploy", tags=["deploy"])


async def _deploy(
    request: DeployRequest,
    deployment_type: DeploymentType,
    settings: Settings,
    services: Services,
    store: SessionStore,
) -> SessionStatusResponse:
    if request.business_name:
        session = require_session(store, request.session_id)
        if not session.business_name:
            store.set(session.model_copy(update={"business_name": request.business_name}))
    pipeline = DeploymentPipeline(settings, services, store)
    session = await pipeline.run(request.session_id, deployment_type)
    return SessionStatusResponse.from_session(session)


@router.post("/github", response_model=SessionStatusResponse)
async def deploy_github(
    request: DeployRequest,
    settings: SettingsDep,
    services: ServicesDep,
    store: StoreDep,
) -> SessionStatusResponse:
    return await _deploy(request, DeploymentType.GITHUB_HOSTED, settings, services, store)


@router.post("/netlify", response_model=SessionStatusResponse)
async def deploy_netlify(
    request: DeployRequest,
    settings: SettingsDep,
    services: ServicesDep,
    store: StoreDep,
) -> SessionStatusResponse:
    return await _deploy(request, DeploymentType.NETLIFY, settings, services, store)


@router.post("/full-hosting", response_model=SessionStatusResponse)
async def deploy_full_hosting(
    request: DeployRequest,
    settings: SettingsDep,
    services: ServicesDep,
    store: StoreDep,
) -> SessionStatusResponse:
    """Domain purchase, DNS, repository push and Pages serving in one call."""
    return await _deploy(request, DeploymentType.FULL_HOSTING, settings, services, store)
