"""Tests for deployment status polling."""

from __future__ import annotations

import httpx
import pytest
import respx

from sitesmith.errors import SessionNotFoundError
from sitesmith.models.deployment import StatusSignals
from sitesmith.models.session import DeploymentState, Session
from sitesmith.services import Services
from sitesmith.sessions import InMemorySessionStore
from sitesmith.status import StatusPoller

GITHUB = "https://api.github.com"
NETLIFY = "https://api.netlify.com/api/v1"
DOH = "https://cloudflare-dns.com/dns-query"
PAGES = f"{GITHUB}/repos/siteowner/mybakery-co-uk/pages"


def _deployed(store: InMemorySessionStore, **changes) -> Session:
    session = Session(
        id="sess-1",
        domain="mybakery.co.uk",
        domain_purchased=True,
        deployed=True,
        hosting_target="github",
        hosting_owner="siteowner",
        repo_name="mybakery-co-uk",
        state=DeploymentState.DEPLOYED,
    ).model_copy(update=changes)
    store.set(session)
    return session


def _doh(answers: dict[tuple[str, str], list[dict]]):
    def handler(request: httpx.Request) -> httpx.Response:
        key = (request.url.params["name"], request.url.params["type"])
        return httpx.Response(200, json={"Status": 0, "Answer": answers.get(key, [])})

    return handler


def _pages(status: str = "building", cname: str = "mybakery.co.uk", **extra) -> httpx.Response:
    return httpx.Response(
        200,
        json={"status": status, "cname": cname, "protected_domain_state": "pending", **extra},
    )


@pytest.fixture()
def poller(services: Services, store: InMemorySessionStore) -> StatusPoller:
    return StatusPoller(services, store)


class TestApply:
    def test_never_regresses(self, poller: StatusPoller, store: InMemorySessionStore):
        session = _deployed(store, state=DeploymentState.HTTPS_READY, dns_configured=True, https_ready=True)
        updated = poller.apply(session, StatusSignals())
        assert updated.state is DeploymentState.HTTPS_READY
        assert updated.dns_configured is True
        assert updated.https_ready is True

    def test_failed_is_terminal(self, poller: StatusPoller, store: InMemorySessionStore):
        session = _deployed(store).mark_failed("configure_dns", "boom")
        signals = StatusSignals(provider_verified=True, build_complete=True)
        assert poller.apply(session, signals) is session

    def test_not_deployed_is_untouched(self, poller: StatusPoller):
        session = Session(id="s", domain="mybakery.co.uk")
        assert poller.apply(session, StatusSignals(provider_verified=True)) is session

    @pytest.mark.parametrize(
        "signals",
        [StatusSignals(provider_verified=True), StatusSignals(resolver_verified=True)],
    )
    def test_either_dns_signal_suffices(self, poller: StatusPoller, store: InMemorySessionStore, signals):
        updated = poller.apply(_deployed(store), signals)
        assert updated.state is DeploymentState.DNS_CONFIGURED
        assert updated.dns_configured is True
        assert updated.https_ready is False

    def test_https_needs_dns_and_build(self, poller: StatusPoller, store: InMemorySessionStore):
        updated = poller.apply(_deployed(store), StatusSignals(build_complete=True))
        assert updated.state is DeploymentState.DEPLOYED

        updated = poller.apply(updated, StatusSignals(resolver_verified=True, build_complete=True))
        assert updated.state is DeploymentState.HTTPS_READY
        assert updated.status_log[-1] == "Status: https_ready"

    def test_confirmed_dns_carries_over_to_https(self, poller: StatusPoller, store: InMemorySessionStore):
        session = _deployed(store, state=DeploymentState.DNS_CONFIGURED, dns_configured=True)
        # DNS lookups came back empty this time; the build has finished
        updated = poller.apply(session, StatusSignals(build_complete=True))
        assert updated.state is DeploymentState.HTTPS_READY
        assert updated.https_ready is True

    def test_unbound_netlify_domain_implies_dns(self, poller: StatusPoller, store: InMemorySessionStore):
        session = _deployed(store, hosting_target="netlify", site_id="site-1", domain_purchased=False)
        updated = poller.apply(session, StatusSignals(build_complete=True))
        assert updated.state is DeploymentState.HTTPS_READY

    def test_no_domain_implies_dns(self, poller: StatusPoller, store: InMemorySessionStore):
        session = _deployed(store, domain="", domain_purchased=False)
        updated = poller.apply(session, StatusSignals())
        assert updated.state is DeploymentState.DNS_CONFIGURED


class TestPoll:
    @respx.mock
    async def test_dns_propagation(self, poller: StatusPoller, store: InMemorySessionStore):
        """Before DNS propagates the session is deployed only; afterwards DNS is configured."""
        _deployed(store)
        respx.get(PAGES).mock(return_value=_pages())
        doh = respx.get(DOH).mock(side_effect=_doh({}))

        before = await poller.poll("sess-1")
        assert before.deployed is True
        assert before.dns_configured is False
        assert before.state is DeploymentState.DEPLOYED

        doh.side_effect = _doh(
            {
                ("mybakery.co.uk", "A"): [
                    {"type": 1, "data": "185.199.108.153"},
                    {"type": 1, "data": "185.199.109.153"},
                ],
                ("www.mybakery.co.uk", "CNAME"): [{"type": 5, "data": "siteowner.github.io."}],
            }
        )
        after = await poller.poll("sess-1")
        assert after.deployed is True
        assert after.dns_configured is True
        assert after.state is DeploymentState.DNS_CONFIGURED
        assert store.get("sess-1") == after

    @respx.mock
    async def test_provider_reports_https(self, poller: StatusPoller, store: InMemorySessionStore):
        _deployed(store)
        respx.get(PAGES).mock(
            return_value=_pages(
                status="built",
                protected_domain_state="verified",
                https_enforced=True,
            )
        )
        respx.get(DOH).mock(side_effect=_doh({}))

        session = await poller.poll("sess-1")

        assert session.state is DeploymentState.HTTPS_READY
        assert session.https_ready is True

    @respx.mock
    async def test_signal_errors_count_as_not_observed(
        self, poller: StatusPoller, store: InMemorySessionStore
    ):
        _deployed(store, state=DeploymentState.DNS_CONFIGURED, dns_configured=True)
        respx.get(PAGES).mock(return_value=httpx.Response(502, json={"message": "Bad gateway"}))
        respx.get(DOH).mock(side_effect=httpx.ConnectTimeout("timed out"))

        session = await poller.poll("sess-1")

        assert session.state is DeploymentState.DNS_CONFIGURED
        assert session.dns_configured is True

    @respx.mock
    async def test_netlify_ready(self, poller: StatusPoller, store: InMemorySessionStore):
        store.set(
            Session(
                id="nf",
                deployed=True,
                hosting_target="netlify",
                site_id="site-1",
                state=DeploymentState.DEPLOYED,
            )
        )
        respx.get(f"{NETLIFY}/sites/site-1").mock(
            return_value=httpx.Response(
                200,
                json={"id": "site-1", "ssl_url": "https://x.netlify.app", "published_deploy": {"state": "ready"}},
            )
        )

        session = await poller.poll("nf")

        assert session.state is DeploymentState.HTTPS_READY

    @respx.mock
    async def test_netlify_ready_with_unbought_domain(
        self, poller: StatusPoller, store: InMemorySessionStore
    ):
        store.set(
            Session(
                id="nf",
                domain="mybakery.co.uk",
                deployed=True,
                hosting_target="netlify",
                site_id="site-1",
                state=DeploymentState.DEPLOYED,
            )
        )
        respx.get(f"{NETLIFY}/sites/site-1").mock(
            return_value=httpx.Response(
                200,
                json={"id": "site-1", "ssl_url": "https://x.netlify.app", "published_deploy": {"state": "ready"}},
            )
        )

        session = await poller.poll("nf")

        assert session.state is DeploymentState.HTTPS_READY

    @respx.mock
    async def test_netlify_custom_domain_waits_for_certificate(
        self, poller: StatusPoller, store: InMemorySessionStore
    ):
        store.set(
            Session(
                id="nf",
                domain="mybakery.co.uk",
                domain_purchased=True,
                deployed=True,
                hosting_target="netlify",
                site_id="site-1",
                state=DeploymentState.DEPLOYED,
            )
        )
        site = respx.get(f"{NETLIFY}/sites/site-1")
        site.mock(
            return_value=httpx.Response(
                200,
                json={
                    "id": "site-1",
                    "custom_domain": "mybakery.co.uk",
                    "ssl_url": "https://x.netlify.app",
                    "published_deploy": {"state": "ready"},
                },
            )
        )
        before = await poller.poll("nf")
        assert before.state is DeploymentState.DEPLOYED

        site.mock(
            return_value=httpx.Response(
                200,
                json={
                    "id": "site-1",
                    "custom_domain": "mybakery.co.uk",
                    "ssl_url": "https://mybakery.co.uk",
                    "published_deploy": {"state": "ready"},
                },
            )
        )
        after = await poller.poll("nf")
        assert after.state is DeploymentState.HTTPS_READY

    async def test_undeployed_session_is_not_polled(self, poller: StatusPoller, store: InMemorySessionStore):
        store.set(Session(id="fresh"))
        session = await poller.poll("fresh")
        assert session.state is DeploymentState.UNCONFIGURED

    async def test_unknown_session(self, poller: StatusPoller):
        with pytest.raises(SessionNotFoundError):
            await poller.poll("missing")
