"""Tests for the generate endpoint."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from fastapi.testclient import TestClient

from sitesmith.generation import SiteGenerator
from sitesmith.llm import LLMClient

if TYPE_CHECKING:
    from fastapi import FastAPI

    from sitesmith.config import Settings
    from sitesmith.services import Services
    from sitesmith.sessions import InMemorySessionStore


class TestGenerate:
    def test_single_page(self, client: TestClient):
        resp = client.post("/api/v1/generate", json={"query": "bakery in Leeds", "page_count": 1})
        assert resp.status_code == 200
        pages = resp.json()["pages"]
        assert len(pages) == 1
        assert pages[0]["filename"] == "index.html"
        assert pages[0]["content"].lstrip().lower().startswith("<!doctype html")
        assert "<body" in pages[0]["content"]

    def test_pages_stored_on_session(self, client: TestClient, store: InMemorySessionStore):
        resp = client.post(
            "/api/v1/generate",
            json={
                "query": "bakery in Leeds",
                "page_count": 2,
                "session_id": "gen-1",
                "structure": [
                    {"title": "Home", "filename": "index.html"},
                    {"title": "About", "filename": "about.html"},
                ],
            },
        )
        assert resp.status_code == 200
        session = store.get("gen-1")
        assert [p.filename for p in session.pages] == ["index.html", "about.html"]
        assert session.structure[1].title == "About"
        assert session.status_log == ["Generated 2 page(s)"]

    def test_empty_query(self, client: TestClient):
        resp = client.post("/api/v1/generate", json={"query": "  "})
        assert resp.status_code == 400

    def test_page_count_too_large(self, client: TestClient):
        resp = client.post("/api/v1/generate", json={"query": "bakery", "page_count": 11})
        assert resp.status_code == 400

    def test_provider_not_configured(self, app: FastAPI, settings: Settings, services: Services):
        no_key = settings.model_copy(update={"anthropic_api_key": ""})
        app.state.services = replace(services, generator=SiteGenerator(LLMClient(no_key)))
        resp = TestClient(app).post("/api/v1/generate", json={"query": "bakery in Leeds"})
        assert resp.status_code == 503
