"""Deployment status polling.

Each poll re-reads every signal from scratch and persists the most advanced
state seen so far:

    unconfigured -> purchased -> deployed -> dns_configured -> https_ready

``failed`` is terminal. A signal that cannot be read this time counts as not
observed, so a flaky provider never moves a session backwards.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog

from sitesmith.config import GITHUB_PAGES_IPV4
from sitesmith.errors import SitesmithError
from sitesmith.metrics import status_transitions_total
from sitesmith.models.deployment import StatusSignals
from sitesmith.models.session import DeploymentState
from sitesmith.sessions import require_session

if TYPE_CHECKING:
    from sitesmith.models.session import Session
    from sitesmith.protocols import SessionStore
    from sitesmith.services import Services

logger = structlog.get_logger()

_SIGNAL_ERRORS = (SitesmithError, httpx.HTTPError, KeyError, ValueError)


class StatusPoller:
    """Re-evaluates hosting and DNS signals for a session and saves the result."""

    def __init__(self, services: Services, store: SessionStore):
        self.services = services
        self.store = store

    async def _github_signals(self, session: Session) -> dict[str, bool]:
        github = self.services.github
        try:
            pages = await github.get_pages(session.repo_name)
        except _SIGNAL_ERRORS as exc:
            logger.warning("Pages status unavailable", repo=session.repo_name, error=str(exc))
            return {}
        if pages is None:
            return {}
        built = pages["status"] == "built"
        cname_match = bool(session.domain) and pages["cname"].lower() == session.domain
        return {
            "provider_verified": cname_match
            and (pages["protected_domain_state"] == "verified" or built),
            "build_complete": built,
            "https_enforced": pages["https_enforced"]
            or pages["https_certificate_state"] == "approved",
        }

    async def _netlify_signals(self, session: Session) -> dict[str, bool]:
        try:
            site = await self.services.netlify.get_site(session.site_id)
        except _SIGNAL_ERRORS as exc:
            logger.warning("Netlify site status unavailable", site_id=session.site_id, error=str(exc))
            return {}
        deploy = site.get("published_deploy") or {}
        signals = {
            "build_complete": deploy.get("state") == "ready",
            "https_enforced": bool(site.get("ssl_url")),
        }
        domain = session.served_domain
        if domain:
            # Netlify reports the custom domain as its SSL URL once the certificate is live
            signals["provider_verified"] = (site.get("custom_domain") or "").lower() == domain and (
                site.get("ssl_url") or ""
            ).lower().startswith(f"https://{domain}")
        return signals

    async def _resolve(self, hostname: str, record_type: str) -> list[str]:
        try:
            return await self.services.resolver.resolve(hostname, record_type)
        except _SIGNAL_ERRORS as exc:
            logger.warning("DNS lookup failed", host=hostname, type=record_type, error=str(exc))
            return []

    async def collect_signals(self, session: Session) -> StatusSignals:
        values: dict[str, bool] = {}
        if session.hosting_target == "github" and session.repo_name:
            values.update(await self._github_signals(session))
        elif session.hosting_target == "netlify" and session.site_id:
            values.update(await self._netlify_signals(session))

        apex: list[str] = []
        www = ""
        if session.served_domain and session.hosting_target == "github":
            owner = (session.hosting_owner or self.services.github.owner).lower()
            apex = await self._resolve(session.domain, "A")
            cnames = await self._resolve(f"www.{session.domain}", "CNAME")
            www = cnames[0] if cnames else ""
            values["resolver_verified"] = bool(set(apex) & set(GITHUB_PAGES_IPV4)) and www.startswith(
                f"{owner}.github.io"
            )
        return StatusSignals(**values, apex_addresses=apex, www_cname=www)

    def apply(self, session: Session, signals: StatusSignals) -> Session:
        """Fold *signals* into *session* without ever moving it backwards."""
        if session.failed or not session.deployed:
            return session
        # Without a bound custom domain the provider URL is the address, so DNS is implied.
        # A confirmation from an earlier poll stands even when this poll's lookups fail.
        dns_ok = session.dns_configured or (signals.dns_configured if session.served_domain else True)
        https_ok = dns_ok and signals.build_complete

        observed = DeploymentState.DEPLOYED
        if https_ok:
            observed = DeploymentState.HTTPS_READY
        elif dns_ok:
            observed = DeploymentState.DNS_CONFIGURED

        updated = session.advance(
            observed,
            dns_configured=session.dns_configured or dns_ok,
            https_ready=session.https_ready or https_ok,
        )
        if updated.state is not session.state:
            status_transitions_total.labels(state=updated.state.value).inc()
            logger.info("Status advanced", previous=session.state, state=updated.state)
            updated = updated.log(f"Status: {updated.state.value}")
        return updated

    async def poll(self, session_id: str) -> Session:
        session = require_session(self.store, session_id)
        if session.failed or not session.deployed:
            return session
        signals = await self.collect_signals(session)
        updated = self.apply(session, signals)
        self.store.set(updated)
        return updated
