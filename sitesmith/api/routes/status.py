"""Deployment status polling endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Query

from sitesmith.api.deps import ServicesDep, StoreDep
from sitesmith.api.schemas import SessionStatusResponse
from sitesmith.status import StatusPoller

router = APIRouter(tags=["status"])


@router.get("/status", response_model=SessionStatusResponse)
async def poll_status(
    services: ServicesDep,
    store: StoreDep,
    session_id: str = Query(min_length=1),
) -> SessionStatusResponse:
    session = await StatusPoller(services, store).poll(session_id)
    return SessionStatusResponse.from_session(session)
