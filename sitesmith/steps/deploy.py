"""Deploy step: publish the session's pages to GitHub Pages or Netlify."""

from __future__ import annotations

import io
import zipfile
from typing import TYPE_CHECKING

import structlog

from sitesmith.domains import hosting_unit_name, with_random_suffix
from sitesmith.errors import UpstreamError, ValidationError
from sitesmith.links import netlify_slug, rewrite_links
from sitesmith.models.deployment import HostingDeployment
from sitesmith.models.session import DeploymentState
from sitesmith.steps.base import AbstractStep, StepContext, register_step

if TYPE_CHECKING:
    from sitesmith.clients import GitHubClient, NetlifyClient
    from sitesmith.models.session import Session

logger = structlog.get_logger()

GITHUB_NAME_LIMIT = 64
NETLIFY_NAME_LIMIT = 40
NETLIFY_NAME_ATTEMPTS = 10


def site_files(session: Session) -> dict[str, str]:
    """Filename → HTML for every page, with the first page served as ``index.html``."""
    if not session.pages:
        raise ValidationError("Session has no generated pages")
    home = session.pages[0].filename
    pages = [session.pages[0].model_copy(update={"filename": "index.html"}), *session.pages[1:]]
    # Links to the first page must follow it to index.html
    structure = [
        entry.model_copy(update={"filename": "index.html"}) if i == 0 or entry.filename == home else entry
        for i, entry in enumerate(session.structure)
    ]
    pages = rewrite_links(pages, structure or None)
    return {page.filename: page.content for page in pages}


def build_zip(files: dict[str, str]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for filename, content in files.items():
            zf.writestr(filename, content)
    return buf.getvalue()


async def _create_repo(github: GitHubClient, name: str, description: str) -> str:
    """Create *name*, retrying once with a random suffix if it is taken."""
    try:
        await github.create_repo(name, description)
        return name
    except UpstreamError as exc:
        if exc.status_code != 422:
            raise
        retry_name = with_random_suffix(name, max_length=GITHUB_NAME_LIMIT)
        logger.info("Repository name taken, retrying", name=name, retry_name=retry_name)
        await github.create_repo(retry_name, description)
        return retry_name


async def deploy_to_github(session: Session, github: GitHubClient) -> HostingDeployment:
    """Push pages, ``.nojekyll`` and ``CNAME`` to the session's repository in one commit."""
    files = site_files(session)
    files[".nojekyll"] = ""
    if session.domain:
        files["CNAME"] = session.domain

    if session.repo_name and await github.repo_exists(session.repo_name):
        name = session.repo_name
        logger.info("Reusing repository", repo=name)
    else:
        name = session.repo_name or hosting_unit_name(
            session.domain, session.business_name, GITHUB_NAME_LIMIT
        )
        description = f"Website for {session.domain or session.business_name or name}"
        name = await _create_repo(github, name, description)

    commit_sha = await github.commit_files(name, files, "Deploy site")
    return HostingDeployment(
        target="github",
        owner=github.owner,
        name=name,
        repo_url=github.repo_url(name),
        default_url=github.pages_url(name),
        commit_sha=commit_sha,
        files=sorted(files),
    )


async def deploy_to_netlify(session: Session, netlify: NetlifyClient) -> HostingDeployment:
    """Upload the pages as a ZIP, creating a uniquely named site on first deploy."""
    files = site_files(session)
    site_id = session.site_id
    site_url = session.pages_url
    name = session.repo_name
    if not site_id:
        base = session.business_name or session.domain.replace(".", "-") or f"site-{session.id}"
        custom_domain = session.domain if session.domain_purchased else ""
        for attempt in range(NETLIFY_NAME_ATTEMPTS):
            slug = netlify_slug(base, attempt, NETLIFY_NAME_LIMIT)
            try:
                site = await netlify.create_site(slug, custom_domain)
            except UpstreamError as exc:
                if exc.status_code == 422:
                    logger.info("Netlify site name taken", name=slug, attempt=attempt + 1)
                    continue
                raise
            site_id, site_url, name = site["id"], site["url"], site["name"]
            break
        else:
            raise UpstreamError(
                "netlify", 422, f"Could not create a unique site name after {NETLIFY_NAME_ATTEMPTS} attempts"
            )

    deploy = await netlify.deploy_zip(site_id, build_zip(files))
    return HostingDeployment(
        target="netlify",
        name=name,
        site_id=site_id,
        default_url=site_url or deploy["url"],
        commit_sha=deploy["id"],
        files=sorted(files),
    )


def record_deployment(session: Session, deployment: HostingDeployment) -> Session:
    session = session.log(f"Deployed to {deployment.target}: {deployment.default_url}")
    session = session.advance(
        DeploymentState.DEPLOYED,
        deployed=True,
        hosting_target=deployment.target,
        hosting_owner=deployment.owner,
        repo_name=deployment.name,
        repo_url=deployment.repo_url,
        site_id=deployment.site_id,
        pages_url=deployment.default_url,
    )
    domain = session.served_domain
    return session.model_copy(update={"custom_url": f"https://{domain}/" if domain else ""})


@register_step
class DeployGitHubStep(AbstractStep):
    name = "deploy_github"

    async def run(self, ctx: StepContext) -> Session:
        deployment = await deploy_to_github(ctx.session, ctx.services.github)
        return record_deployment(ctx.session, deployment)


@register_step
class DeployNetlifyStep(AbstractStep):
    name = "deploy_netlify"

    async def run(self, ctx: StepContext) -> Session:
        deployment = await deploy_to_netlify(ctx.session, ctx.services.netlify)
        return record_deployment(ctx.session, deployment)
