"""Stripe checkout session creation and webhook."""

from __future__ import annotations

from urllib.parse import urlencode

import structlog
from fastapi import APIRouter, Header, Request

from sitesmith.api.deps import ServicesDep, SettingsDep, StoreDep
from sitesmith.api.schemas import CheckoutRequest, CheckoutResponse, WebhookResponse
from sitesmith.domains import require_valid_domain, require_valid_years
from sitesmith.models.session import DeploymentType
from sitesmith.pricing import PRODUCTS, checkout_amount_pence
from sitesmith.sessions import get_or_create

logger = structlog.get_logger()

router = APIRouter(prefix="/stripe", tags=["checkout"])


@router.post("/create-checkout-session", response_model=CheckoutResponse)
async def create_checkout_session(
    request: CheckoutRequest,
    services: ServicesDep,
    settings: SettingsDep,
    store: StoreDep,
) -> CheckoutResponse:
    years = require_valid_years(request.duration)
    domain = ""
    if request.type is DeploymentType.FULL_HOSTING:
        domain = require_valid_domain(request.domain)
    elif request.domain:
        domain = require_valid_domain(request.domain)

    session = get_or_create(store, request.session_id)
    update: dict[str, object] = {"deployment_type": request.type, "domain_duration": years}
    if request.business_name:
        update["business_name"] = request.business_name
    if domain and not session.domain_purchased:
        update["domain"] = domain
    session = session.model_copy(update=update)
    store.set(session)

    amount = checkout_amount_pence(request.type, domain, years)
    product_name, _base = PRODUCTS[request.type]
    success_url = (
        settings.checkout_full_hosting_success_url
        if request.type is DeploymentType.FULL_HOSTING
        else settings.checkout_success_url
    )
    checkout = await services.checkout.create_checkout_session(
        product_name=product_name,
        amount=amount,
        metadata={
            "session_id": session.id,
            "type": request.type.value,
            "domain": domain,
            "duration": str(years),
            "business_name": request.business_name,
        },
        success_url=f"{success_url}?{urlencode({'option': request.type.value, 'sessionId': session.id})}",
        cancel_url=settings.checkout_cancel_url,
        customer_email=request.email,
    )
    store.set(session.log(f"Checkout started: {product_name}"))
    return CheckoutResponse(id=checkout["id"], url=checkout["url"], amount=amount)


@router.post("/webhook", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    services: ServicesDep,
    store: StoreDep,
    stripe_signature: str = Header(default=""),
) -> WebhookResponse:
    payload = await request.body()
    event = services.checkout.parse_webhook(payload, stripe_signature)
    event_type = str(event["type"])
    if event_type == "checkout.session.completed":
        checkout_session = event["data"]["object"]
        metadata = checkout_session["metadata"] if "metadata" in checkout_session else {}
        session_id = str(metadata["session_id"]) if metadata and "session_id" in metadata else ""
        if session_id:
            session = get_or_create(store, session_id)
            store.set(session.model_copy(update={"paid": True}).log("Payment received"))
            logger.info("Checkout completed", session_id=session_id)
    return WebhookResponse(received=event_type)
