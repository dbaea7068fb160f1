"""Enable GitHub Pages serving for a deployed repository."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import structlog

from sitesmith.errors import SitesmithError
from sitesmith.models.deployment import ServingResult
from sitesmith.steps.base import AbstractStep, StepContext, register_step

if TYPE_CHECKING:
    from sitesmith.clients import GitHubClient
    from sitesmith.models.session import Session

logger = structlog.get_logger()


async def enable_serving(github: GitHubClient, repo: str, domain: str = "") -> ServingResult:
    """Turn on Pages for *repo*; on any failure report the default Pages URL."""
    try:
        url = await github.enable_pages(repo, cname=domain)
    except (SitesmithError, httpx.HTTPError) as exc:
        logger.warning("Enabling Pages failed, using default URL", repo=repo, error=str(exc))
        return ServingResult(enabled=False, url=github.pages_url(repo))
    logger.info("Pages enabled", repo=repo, url=url)
    return ServingResult(
        enabled=True,
        url=github.pages_url(repo),
        custom_url=f"https://{domain}/" if domain else "",
    )


async def nudge_domain_binding(github: GitHubClient, repo: str, domain: str, delay: float) -> bool:
    """Rewrite ``CNAME`` in a second commit so GitHub re-checks the custom domain."""
    await asyncio.sleep(delay)
    try:
        await github.commit_files(repo, {"CNAME": domain}, "Re-apply custom domain", keep_existing=True)
    except (SitesmithError, httpx.HTTPError) as exc:
        logger.warning("CNAME nudge failed", repo=repo, domain=domain, error=str(exc))
        return False
    logger.info("CNAME nudged", repo=repo, domain=domain)
    return True


@register_step
class EnableServingStep(AbstractStep):
    name = "enable_serving"
    fatal = False

    def should_skip(self, session: Session) -> bool:
        return session.hosting_target != "github" or not session.repo_name

    async def run(self, ctx: StepContext) -> Session:
        session = ctx.session
        result = await enable_serving(ctx.services.github, session.repo_name, session.domain)
        if session.domain and ctx.settings.nudge_delay_seconds > 0:
            await nudge_domain_binding(
                ctx.services.github, session.repo_name, session.domain, ctx.settings.nudge_delay_seconds
            )
        message = "Pages enabled" if result.enabled else "Pages not enabled yet"
        return session.log(f"{message}: {result.url}").model_copy(
            update={"pages_url": result.url}
        )
