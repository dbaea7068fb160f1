"""Construction of provider clients from settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sitesmith.clients import (
    DoHResolver,
    GitHubClient,
    GoDaddyClient,
    NamecheapClient,
    NetlifyClient,
    StripeCheckoutClient,
)
from sitesmith.generation import SiteGenerator
from sitesmith.llm import LLMClient

if TYPE_CHECKING:
    from sitesmith.config import Settings
    from sitesmith.protocols import RegistrarPort


@dataclass(frozen=True, slots=True)
class Services:
    """Every external collaborator a pipeline step may call."""

    registrar: RegistrarPort
    github: GitHubClient
    netlify: NetlifyClient
    resolver: DoHResolver
    checkout: StripeCheckoutClient
    generator: SiteGenerator


def build_registrar(settings: Settings) -> RegistrarPort:
    if settings.registrar == "godaddy":
        return GoDaddyClient(
            api_key=settings.godaddy_api_key,
            api_secret=settings.godaddy_api_secret,
            contact=settings.registrant,
            production=settings.godaddy_production,
            timeout=settings.http_timeout,
        )
    return NamecheapClient(
        api_user=settings.namecheap_api_user,
        api_key=settings.namecheap_api_key,
        client_ip=settings.namecheap_client_ip,
        contact=settings.registrant,
        sandbox=settings.namecheap_sandbox,
        timeout=settings.http_timeout,
    )


def build_services(settings: Settings) -> Services:
    return Services(
        registrar=build_registrar(settings),
        github=GitHubClient(
            token=settings.github_token,
            owner=settings.github_username,
            timeout=settings.http_timeout,
        ),
        netlify=NetlifyClient(token=settings.netlify_token),
        resolver=DoHResolver(url=settings.doh_url),
        checkout=StripeCheckoutClient(
            api_key=settings.stripe_secret_key,
            webhook_secret=settings.stripe_webhook_secret,
            currency=settings.currency,
        ),
        generator=SiteGenerator(LLMClient(settings), max_page_count=settings.max_page_count),
    )
