"""Shared test fixtures."""

from __future__ import annotations

import pytest
from pydantic_ai import models
from pydantic_ai.models.test import TestModel

from sitesmith.clients import (
    DoHResolver,
    GitHubClient,
    GoDaddyClient,
    NamecheapClient,
    NetlifyClient,
    StripeCheckoutClient,
)
from sitesmith.config import RegistrantContact, Settings
from sitesmith.generation import SiteGenerator
from sitesmith.llm import LLMClient
from sitesmith.models.session import GeneratedPage, Session
from sitesmith.services import Services
from sitesmith.sessions import InMemorySessionStore

# Safety net: block all real LLM API calls during tests.
# TestModel and FunctionModel are exempt from this check.
# If a test accidentally triggers a real model request, it gets
# a clear error instead of a billable API call.
models.ALLOW_MODEL_REQUESTS = False

PAGE_HTML = (
    "<!DOCTYPE html>\n<html lang=\"en\">\n<head><title>Home</title></head>\n"
    "<body><h1>Leeds Bakery</h1><a href=\"#\">About</a></body>\n</html>"
)
ABOUT_HTML = (
    "<!DOCTYPE html>\n<html lang=\"en\">\n<head><title>About</title></head>\n"
    "<body><h1>About us</h1><a href=\"#\">Home</a></body>\n</html>"
)

GODADDY = "https://api.ote-godaddy.com"
NAMECHEAP = "https://api.sandbox.namecheap.com/xml.response"
GITHUB = "https://api.github.com"
NETLIFY = "https://api.netlify.com/api/v1"
DOH = "https://cloudflare-dns.com/dns-query"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        anthropic_api_key="test-key",
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret="whsec_test",
        registrar="godaddy",
        godaddy_api_key="gd-key",
        godaddy_api_secret="gd-secret",
        namecheap_api_user="ncuser",
        namecheap_api_key="nc-key",
        namecheap_client_ip="203.0.113.7",
        github_token="ghp_test",
        github_username="siteowner",
        netlify_token="nf-token",
        nudge_delay_seconds=0.0,
        max_retries=2,
        retry_base_delay=0.0,
        log_level="DEBUG",
        log_format="console",
        _env_file=None,
    )


@pytest.fixture()
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def test_model() -> TestModel:
    return TestModel(custom_output_text=PAGE_HTML)


@pytest.fixture()
def godaddy(settings: Settings) -> GoDaddyClient:
    return GoDaddyClient(
        api_key=settings.godaddy_api_key,
        api_secret=settings.godaddy_api_secret,
        contact=RegistrantContact(),
    )


@pytest.fixture()
def namecheap(settings: Settings) -> NamecheapClient:
    return NamecheapClient(
        api_user=settings.namecheap_api_user,
        api_key=settings.namecheap_api_key,
        client_ip=settings.namecheap_client_ip,
        contact=RegistrantContact(),
    )


@pytest.fixture()
def github(settings: Settings) -> GitHubClient:
    return GitHubClient(token=settings.github_token, owner=settings.github_username)


@pytest.fixture()
def services(settings: Settings, godaddy: GoDaddyClient, github: GitHubClient, test_model: TestModel) -> Services:
    return Services(
        registrar=godaddy,
        github=github,
        netlify=NetlifyClient(token=settings.netlify_token),
        resolver=DoHResolver(url=DOH),
        checkout=StripeCheckoutClient(
            api_key=settings.stripe_secret_key,
            webhook_secret=settings.stripe_webhook_secret,
        ),
        generator=SiteGenerator(LLMClient(settings, model=test_model)),
    )


@pytest.fixture()
def session_with_pages(store: InMemorySessionStore) -> Session:
    session = Session(
        id="sess-1",
        business_name="Leeds Bakery",
        domain="mybakery.co.uk",
        domain_duration=2,
        pages=[
            GeneratedPage(filename="index.html", content=PAGE_HTML),
            GeneratedPage(filename="page2.html", content=ABOUT_HTML),
        ],
    )
    store.set(session)
    return session
