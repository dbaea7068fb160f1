"""Tests for the deployment and status endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import respx

from sitesmith.models.session import DeploymentState, Session

if TYPE_CHECKING:
    from fastapi.testclient import TestClient

    from sitesmith.sessions import InMemorySessionStore

GITHUB = "https://api.github.com"
NETLIFY = "https://api.netlify.com/api/v1"
DOH = "https://cloudflare-dns.com/dns-query"
REPO = f"{GITHUB}/repos/siteowner/mybakery-co-uk"


class TestDeployGitHub:
    @respx.mock
    def test_deploy(self, client: TestClient, session_with_pages: Session):
        respx.post(f"{GITHUB}/user/repos").mock(return_value=httpx.Response(201, json={}))
        respx.get(f"{REPO}/git/ref/heads/main").mock(
            return_value=httpx.Response(200, json={"object": {"sha": "parent"}})
        )
        respx.post(f"{REPO}/git/trees").mock(return_value=httpx.Response(201, json={"sha": "t"}))
        respx.post(f"{REPO}/git/commits").mock(return_value=httpx.Response(201, json={"sha": "c"}))
        respx.patch(f"{REPO}/git/refs/heads/main").mock(return_value=httpx.Response(200, json={}))
        respx.post(f"{REPO}/pages").mock(return_value=httpx.Response(201, json={}))
        respx.put(f"{REPO}/pages").mock(return_value=httpx.Response(204))

        resp = client.post("/api/v1/deploy/github", json={"session_id": "sess-1"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["state"] == "deployed"
        assert data["deployed"] is True
        assert data["repo_name"] == "mybakery-co-uk"
        assert data["repo_url"] == "https://github.com/siteowner/mybakery-co-uk"
        assert data["custom_url"] == "https://mybakery.co.uk/"

    def test_unknown_session(self, client: TestClient):
        resp = client.post("/api/v1/deploy/github", json={"session_id": "nope"})
        assert resp.status_code == 404

    def test_no_pages(self, client: TestClient, store: InMemorySessionStore):
        store.set(Session(id="bare"))
        resp = client.post("/api/v1/deploy/github", json={"session_id": "bare"})
        assert resp.status_code == 400


class TestDeployNetlify:
    @respx.mock
    def test_deploy_sets_business_name(
        self, client: TestClient, store: InMemorySessionStore, session_with_pages: Session
    ):
        store.set(session_with_pages.model_copy(update={"business_name": ""}))
        create = respx.post(f"{NETLIFY}/sites").mock(
            return_value=httpx.Response(
                201, json={"id": "site-1", "name": "corner-cafe", "ssl_url": "https://corner-cafe.netlify.app"}
            )
        )
        respx.post(f"{NETLIFY}/sites/site-1/deploys").mock(
            return_value=httpx.Response(200, json={"id": "d1", "state": "uploaded"})
        )

        resp = client.post(
            "/api/v1/deploy/netlify", json={"session_id": "sess-1", "business_name": "Corner Cafe"}
        )

        assert resp.status_code == 200
        assert resp.json()["pages_url"] == "https://corner-cafe.netlify.app"
        assert b'"corner-cafe"' in create.calls.last.request.content
        assert store.get("sess-1").business_name == "Corner Cafe"


class TestDeployFullHosting:
    def test_invalid_domain_rejected_before_any_call(
        self, client: TestClient, store: InMemorySessionStore, session_with_pages: Session
    ):
        store.set(session_with_pages.model_copy(update={"domain": ""}))
        resp = client.post("/api/v1/deploy/full-hosting", json={"session_id": "sess-1"})
        assert resp.status_code == 400
        assert store.get("sess-1").failed is False


class TestStatus:
    @respx.mock
    def test_poll(self, client: TestClient, store: InMemorySessionStore):
        store.set(
            Session(
                id="live",
                domain="mybakery.co.uk",
                deployed=True,
                hosting_target="github",
                hosting_owner="siteowner",
                repo_name="mybakery-co-uk",
                state=DeploymentState.DEPLOYED,
            )
        )
        respx.get(f"{REPO}/pages").mock(
            return_value=httpx.Response(
                200, json={"status": "built", "cname": "mybakery.co.uk", "protected_domain_state": "verified"}
            )
        )
        respx.get(DOH).mock(return_value=httpx.Response(200, json={"Status": 0}))

        resp = client.get("/api/v1/status", params={"session_id": "live"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["state"] == "https_ready"
        assert data["dns_configured"] is True
        assert data["https_ready"] is True

    def test_unknown_session(self, client: TestClient):
        assert client.get("/api/v1/status", params={"session_id": "nope"}).status_code == 404
