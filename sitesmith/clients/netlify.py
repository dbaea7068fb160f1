"""Client for the Netlify API: site creation and ZIP deploys.

A deploy is a single ZIP upload to ``/sites/{id}/deploys``; Netlify serves
it on ``https://{name}.netlify.app`` with automatic TLS.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from typing_extensions import TypedDict

from sitesmith.errors import NotConfiguredError, UpstreamError

logger = structlog.get_logger()


class NetlifySite(TypedDict):
    id: str
    name: str
    url: str


class NetlifyDeploy(TypedDict):
    id: str
    url: str
    state: str


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(data, dict):
        errors = data.get("errors")
        if isinstance(errors, dict):
            return "; ".join(f"{k} {', '.join(map(str, v))}" for k, v in errors.items())
        return str(data.get("message") or data)
    return str(data)


class NetlifyClient:
    """Netlify API client authenticated with a personal access token."""

    name = "netlify"

    def __init__(self, token: str = "", timeout: float = 120.0) -> None:
        self.token = token
        self.base_url = "https://api.netlify.com/api/v1"
        self.timeout = timeout

    @property
    def is_available(self) -> bool:
        return bool(self.token)

    def _headers(self, content_type: str = "application/json") -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": content_type,
        }

    async def _request(
        self, method: str, path: str, content_type: str = "application/json", **kwargs: Any
    ) -> httpx.Response:
        if not self.is_available:
            raise NotConfiguredError("Netlify")
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.request(
                method, f"{self.base_url}{path}", headers=self._headers(content_type), **kwargs
            )
        if resp.is_error:
            raise UpstreamError(self.name, resp.status_code, _error_message(resp))
        return resp

    async def create_site(self, name: str, custom_domain: str = "") -> NetlifySite:
        """Create a site. Raises UpstreamError(422) when *name* is taken."""
        payload: dict[str, str] = {"name": name}
        if custom_domain:
            payload["custom_domain"] = custom_domain
        resp = await self._request("POST", "/sites", json=payload)
        data = resp.json()
        logger.info("Netlify site created", name=name)
        return {
            "id": str(data["id"]),
            "name": str(data.get("name", name)),
            "url": str(data.get("ssl_url") or data.get("url") or f"https://{name}.netlify.app"),
        }

    async def deploy_zip(self, site_id: str, archive: bytes) -> NetlifyDeploy:
        resp = await self._request(
            "POST", f"/sites/{site_id}/deploys", content_type="application/zip", content=archive
        )
        data = resp.json()
        logger.info("Netlify deploy uploaded", site_id=site_id, bytes=len(archive))
        return {
            "id": str(data.get("id", "")),
            "url": str(data.get("ssl_url") or data.get("deploy_ssl_url") or data.get("url") or ""),
            "state": str(data.get("state", "")),
        }

    async def get_site(self, site_id: str) -> dict[str, Any]:
        resp = await self._request("GET", f"/sites/{site_id}")
        data: dict[str, Any] = resp.json()
        return data
