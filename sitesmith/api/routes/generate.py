"""Website generation endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from sitesmith.api.deps import ServicesDep, StoreDep
from sitesmith.api.schemas import GenerateRequest, GenerateResponse
from sitesmith.sessions import get_or_create

router = APIRouter(tags=["generate"])


@router.post("/generate", response_model=GenerateResponse)
async def generate_site(
    request: GenerateRequest,
    services: ServicesDep,
    store: StoreDep,
) -> GenerateResponse:
    structure = request.structure or None
    pages = await services.generator.generate(request.query, request.page_count, structure)
    if request.session_id:
        session = get_or_create(store, request.session_id)
        update: dict[str, object] = {"pages": pages}
        if structure:
            update["structure"] = structure
        store.set(session.model_copy(update=update).log(f"Generated {len(pages)} page(s)"))
    return GenerateResponse(pages=pages)
