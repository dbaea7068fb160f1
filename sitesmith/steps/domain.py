"""Domain step: availability check and ensure-owned purchase."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sitesmith.domains import require_valid_domain, require_valid_years
from sitesmith.errors import NotConfiguredError, UpstreamError, ValidationError
from sitesmith.metrics import domain_purchases_total
from sitesmith.models.deployment import DomainAvailability, DomainPurchase
from sitesmith.models.session import DeploymentState
from sitesmith.retry import async_with_retry
from sitesmith.steps.base import AbstractStep, StepContext, register_step

if TYPE_CHECKING:
    from sitesmith.config import Settings
    from sitesmith.models.session import Session
    from sitesmith.protocols import RegistrarPort

logger = structlog.get_logger()


def _require_registrar(registrar: RegistrarPort) -> None:
    if not registrar.is_available:
        raise NotConfiguredError(registrar.name.capitalize())


async def check_domain_availability(
    registrar: RegistrarPort, domain: str, settings: Settings
) -> DomainAvailability:
    """Read-only availability lookup, retried on transient failures."""
    d = require_valid_domain(domain)
    _require_registrar(registrar)

    async def check_availability() -> DomainAvailability:
        return await registrar.check_availability(d)

    result = await async_with_retry(
        check_availability,
        max_retries=settings.max_retries,
        base_delay=settings.retry_base_delay,
    )
    logger.info("Domain availability", domain=d, available=result.available)
    return result


async def ensure_domain_owned(
    registrar: RegistrarPort, domain: str, years: int, settings: Settings
) -> DomainPurchase:
    """Make sure *domain* belongs to this account, buying it if it is free.

    The purchase call itself is never retried. A registrar rejection is
    forgiven when the domain turns out to be ours already.
    """
    d = require_valid_domain(domain)
    y = require_valid_years(years)
    availability = await check_domain_availability(registrar, d, settings)

    if not availability.available:
        if await registrar.owns_domain(d):
            logger.info("Domain already owned", domain=d)
            domain_purchases_total.labels(registrar=registrar.name, outcome="already_owned").inc()
            return DomainPurchase(domain=d, years=y, registrar=registrar.name, status="already_owned")
        domain_purchases_total.labels(registrar=registrar.name, outcome="unavailable").inc()
        raise UpstreamError(registrar.name, 409, f"{d} is registered to someone else")

    try:
        purchase = await registrar.purchase_domain(d, y)
    except UpstreamError:
        if await registrar.owns_domain(d):
            logger.info("Purchase rejected but domain is owned", domain=d)
            domain_purchases_total.labels(registrar=registrar.name, outcome="already_owned").inc()
            return DomainPurchase(domain=d, years=y, registrar=registrar.name, status="already_owned")
        domain_purchases_total.labels(registrar=registrar.name, outcome="error").inc()
        raise

    domain_purchases_total.labels(registrar=registrar.name, outcome="purchased").inc()
    logger.info("Domain purchased", domain=d, years=y, registrar=registrar.name)
    return purchase


async def purchase_for_session(
    session: Session, registrar: RegistrarPort, settings: Settings, domain: str = ""
) -> Session:
    """Run the ensure-owned purchase for the session's domain at most once.

    A session holds a single domain; asking it to buy a second one is rejected.
    """
    d = require_valid_domain(domain or session.domain)
    if session.domain_purchased:
        if d != session.domain:
            raise ValidationError(f"Session already purchased {session.domain}")
        logger.info("Domain already purchased for session", domain=d, session_id=session.id)
        return session

    purchase = await ensure_domain_owned(registrar, d, session.domain_duration, settings)
    session = session.log(f"Domain {d} {purchase.status.replace('_', ' ')}")
    return session.advance(
        DeploymentState.PURCHASED,
        domain=d,
        domain_purchased=True,
        domain_status=purchase.status,
    )


@register_step
class PurchaseDomainStep(AbstractStep):
    name = "purchase_domain"

    def is_complete(self, session: Session) -> bool:
        return session.domain_purchased

    async def run(self, ctx: StepContext) -> Session:
        return await purchase_for_session(ctx.session, ctx.services.registrar, ctx.settings)
