"""Session step storage, status log, and ZIP download endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query
from fastapi.responses import Response

from sitesmith.api.deps import StoreDep
from sitesmith.api.schemas import StatusLogResponse, StepsResponse, StoreStepRequest, SuccessResponse
from sitesmith.domains import require_valid_domain, require_valid_years
from sitesmith.errors import ValidationError
from sitesmith.models.session import Session
from sitesmith.sessions import get_or_create, require_session
from sitesmith.steps.deploy import build_zip, site_files

router = APIRouter(tags=["sessions"])

# Form steps that also set a first-class session field
_FIELD_STEPS = {"business_name", "domain", "domain_duration", "structure"}


@router.post("/store-step", response_model=SuccessResponse)
def store_step(request: StoreStepRequest, store: StoreDep) -> SuccessResponse:
    if request.content in (None, "", {}, []):
        raise ValidationError("Missing session_id, step, or content")
    session = get_or_create(store, request.session_id)
    changes: dict[str, object] = {"steps": {**session.steps, request.step: request.content}}
    if request.step in _FIELD_STEPS:
        changes[request.step] = _field_value(session, request.step, request.content)
    store.set(Session.model_validate({**session.model_dump(), **changes}))
    return SuccessResponse()


def _field_value(session: Session, step: str, content: object) -> object:
    if step == "domain":
        domain = require_valid_domain(content if isinstance(content, str) else None)
        # A purchased domain stays bound to its session
        if session.domain_purchased and domain != session.domain:
            raise ValidationError(f"Session already owns {session.domain}")
        return domain
    if step == "domain_duration":
        return require_valid_years(content)
    return content


@router.get("/get-steps/{session_id}", response_model=StepsResponse)
def get_steps(session_id: str, store: StoreDep) -> StepsResponse:
    session = require_session(store, session_id)
    return StepsResponse(steps=session.steps)


@router.get("/get-status", response_model=StatusLogResponse)
def get_status(store: StoreDep, session_id: str = Query(min_length=1)) -> StatusLogResponse:
    session = require_session(store, session_id)
    return StatusLogResponse(status_log=session.status_log)


@router.get("/sessions/{session_id}/download")
def download_zip(session_id: str, store: StoreDep) -> Response:
    session = require_session(store, session_id)
    archive = build_zip(site_files(session))
    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="site-{session_id}.zip"'},
    )
