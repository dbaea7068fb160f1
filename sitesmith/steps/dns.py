"""DNS step: point a purchased domain at GitHub Pages."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sitesmith.config import GITHUB_PAGES_IPV4, GITHUB_PAGES_IPV6
from sitesmith.domains import require_valid_domain
from sitesmith.errors import NotConfiguredError, UpstreamError, ValidationError
from sitesmith.models.deployment import DnsConfiguration, DnsRecord
from sitesmith.steps.base import AbstractStep, StepContext, register_step

if TYPE_CHECKING:
    from sitesmith.models.session import Session
    from sitesmith.protocols import RegistrarPort

logger = structlog.get_logger()

# (type, host) pairs cleared before the Pages records go in
STALE_RECORDS = (("A", "@"), ("AAAA", "@"), ("CNAME", "www"))


def github_pages_records(owner: str) -> list[DnsRecord]:
    records = [DnsRecord(type="A", name="@", data=ip) for ip in GITHUB_PAGES_IPV4]
    records += [DnsRecord(type="AAAA", name="@", data=ip) for ip in GITHUB_PAGES_IPV6]
    records.append(DnsRecord(type="CNAME", name="www", data=f"{owner.lower()}.github.io"))
    return records


async def configure_github_pages_dns(
    registrar: RegistrarPort, domain: str, owner: str
) -> DnsConfiguration:
    """Replace apex and ``www`` records with the GitHub Pages set.

    Deleting a record that is not there is expected on a fresh domain and
    only logged. Installing the new records must succeed.
    """
    d = require_valid_domain(domain)
    if not registrar.is_available:
        raise NotConfiguredError(registrar.name.capitalize())
    if not owner:
        raise NotConfiguredError("GitHub")

    deleted = []
    for record_type, host in STALE_RECORDS:
        try:
            await registrar.delete_records(d, record_type, host)
            deleted.append(f"{record_type} {host}")
        except UpstreamError as exc:
            logger.warning(
                "DNS record delete failed, continuing",
                domain=d,
                type=record_type,
                host=host,
                error=exc.message,
            )

    records = github_pages_records(owner)
    await registrar.add_records(d, records)
    logger.info("DNS configured for GitHub Pages", domain=d, owner=owner, records=len(records))
    return DnsConfiguration(
        domain=d,
        a_records=[r.data for r in records if r.type == "A"],
        aaaa_records=[r.data for r in records if r.type == "AAAA"],
        www_cname=next(r.data for r in records if r.type == "CNAME"),
        deleted=deleted,
    )


@register_step
class ConfigureDnsStep(AbstractStep):
    name = "configure_dns"

    def is_complete(self, session: Session) -> bool:
        return session.dns_records_installed

    def should_skip(self, session: Session) -> bool:
        return not session.domain

    async def run(self, ctx: StepContext) -> Session:
        session = ctx.session
        if not session.domain_purchased:
            raise ValidationError("Domain must be purchased before configuring DNS")
        config = await configure_github_pages_dns(
            ctx.services.registrar, session.domain, ctx.settings.github_username
        )
        return session.log(f"DNS records installed for {config.domain}").model_copy(
            update={"dns_records_installed": True}
        )
