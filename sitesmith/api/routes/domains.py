"""Domain availability, pricing, purchase, and DNS endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from sitesmith.api.deps import ServicesDep, SettingsDep, StoreDep
from sitesmith.api.schemas import (
    DnsRequest,
    DnsResponse,
    DomainCheckRequest,
    DomainCheckResponse,
    DomainPriceRequest,
    DomainPriceResponse,
    DomainPurchaseRequest,
    DomainPurchaseResponse,
)
from sitesmith.config import Settings
from sitesmith.domains import require_valid_domain, require_valid_years
from sitesmith.errors import NotConfiguredError, ValidationError
from sitesmith.pricing import domain_price_pence
from sitesmith.services import Services
from sitesmith.sessions import get_or_create, require_session
from sitesmith.steps.base import StepContext, get_step_registry
from sitesmith.steps.domain import check_domain_availability, purchase_for_session

router = APIRouter(prefix="/domain", tags=["domains"])


async def _check(domain: str, services: Services, settings: Settings) -> DomainCheckResponse:
    result = await check_domain_availability(services.registrar, domain, settings)
    return DomainCheckResponse(
        domain=result.domain,
        available=result.available,
        price=result.price,
        currency=result.currency,
    )


@router.get("/check", response_model=DomainCheckResponse)
async def check_domain_get(
    services: ServicesDep,
    settings: SettingsDep,
    domain: str = Query(),
) -> DomainCheckResponse:
    return await _check(domain, services, settings)


@router.post("/check", response_model=DomainCheckResponse)
async def check_domain_post(
    request: DomainCheckRequest,
    services: ServicesDep,
    settings: SettingsDep,
) -> DomainCheckResponse:
    return await _check(request.domain, services, settings)


@router.post("/price", response_model=DomainPriceResponse)
def domain_price(request: DomainPriceRequest, settings: SettingsDep) -> DomainPriceResponse:
    domain = require_valid_domain(request.domain)
    years = require_valid_years(request.duration)
    return DomainPriceResponse(
        domain=domain,
        duration=years,
        price_pence=domain_price_pence(domain, years),
        currency=settings.currency,
    )


@router.post("/purchase", response_model=DomainPurchaseResponse)
async def purchase_domain(
    request: DomainPurchaseRequest,
    services: ServicesDep,
    settings: SettingsDep,
    store: StoreDep,
) -> DomainPurchaseResponse:
    domain = require_valid_domain(request.domain)
    years = require_valid_years(request.duration)
    session = get_or_create(store, request.session_id)
    if not session.domain_purchased:
        session = session.model_copy(update={"domain": domain, "domain_duration": years})
    session = await purchase_for_session(session, services.registrar, settings, domain)
    store.set(session)
    return DomainPurchaseResponse(
        domain=session.domain,
        duration=session.domain_duration,
        status=session.domain_status,
        domain_purchased=session.domain_purchased,
    )


@router.post("/dns", response_model=DnsResponse)
async def configure_dns(
    request: DnsRequest,
    services: ServicesDep,
    settings: SettingsDep,
    store: StoreDep,
) -> DnsResponse:
    session = require_session(store, request.session_id)
    if not session.domain:
        raise ValidationError("Session has no domain")
    if not session.domain_purchased:
        raise ValidationError("Domain must be purchased before configuring DNS")
    if not services.registrar.is_available:
        raise NotConfiguredError(services.registrar.name.capitalize())
    if not settings.github_username:
        raise NotConfiguredError("GitHub")
    step = get_step_registry()["configure_dns"]
    ctx = StepContext(settings=settings, services=services, session=session)
    try:
        session = await step.run(ctx)
    except Exception as exc:
        store.set(session.mark_failed(step.name, str(exc)))
        raise
    store.set(session)
    return DnsResponse(domain=session.domain, dns_records_installed=session.dns_records_installed)
