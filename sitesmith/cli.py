"""Click CLI entry point for Sitesmith."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import NoReturn

import click

from sitesmith.config import Settings
from sitesmith.errors import SitesmithError
from sitesmith.logging import configure_logging
from sitesmith.models.session import DeploymentType
from sitesmith.retry import RetryExhaustedError


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Sitesmith: generate, pay for, and publish small static websites."""
    ctx.ensure_object(dict)
    settings = Settings()
    log_level = "DEBUG" if verbose else settings.log_level
    configure_logging(log_level=log_level, log_format=settings.log_format)
    ctx.obj["settings"] = settings


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to API_HOST)")
@click.option("--port", default=None, type=int, help="Port (defaults to API_PORT)")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the HTTP API."""
    import uvicorn

    settings = ctx.obj["settings"]
    uvicorn.run(
        "sitesmith.api.app:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
    )


@cli.command("check-domain")
@click.argument("domain")
@click.pass_context
def check_domain(ctx: click.Context, domain: str) -> None:
    """Check whether DOMAIN can be registered."""
    from sitesmith.services import build_registrar
    from sitesmith.steps.domain import check_domain_availability

    settings = ctx.obj["settings"]
    try:
        result = asyncio.run(
            check_domain_availability(build_registrar(settings), domain, settings)
        )
    except (SitesmithError, RetryExhaustedError) as exc:
        _fail(str(exc))
    state = "available" if result.available else "not available"
    click.echo(f"{result.domain}: {state}")


@cli.command()
@click.argument("domain")
@click.option("--years", default=1, type=int, help="Registration period (1-5)")
@click.pass_context
def price(ctx: click.Context, domain: str, years: int) -> None:
    """Estimate the registration price of DOMAIN."""
    from sitesmith.domains import require_valid_domain
    from sitesmith.pricing import domain_price_pence

    settings = ctx.obj["settings"]
    try:
        pence = domain_price_pence(require_valid_domain(domain), years)
    except SitesmithError as exc:
        _fail(str(exc))
    click.echo(f"{domain} for {years} year(s): {pence / 100:.2f} {settings.currency.upper()}")


@cli.command()
@click.argument("query")
@click.option("--pages", "page_count", default=1, type=int, help="Number of pages (1-10)")
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("site"),
    help="Directory to write the HTML files into",
)
@click.pass_context
def generate(ctx: click.Context, query: str, page_count: int, out_dir: Path) -> None:
    """Generate a website for QUERY and write it to disk."""
    from sitesmith.generation import SiteGenerator
    from sitesmith.llm import LLMClient

    settings = ctx.obj["settings"]
    generator = SiteGenerator(LLMClient(settings), max_page_count=settings.max_page_count)
    try:
        pages = asyncio.run(generator.generate(query, page_count))
    except SitesmithError as exc:
        _fail(str(exc))
    out_dir.mkdir(parents=True, exist_ok=True)
    for page in pages:
        (out_dir / page.filename).write_text(page.content, encoding="utf-8")
        click.echo(f"  wrote {out_dir / page.filename}")


@cli.command()
@click.argument("session_id")
@click.option(
    "--type",
    "deployment_type",
    type=click.Choice([t.value for t in DeploymentType if t is not DeploymentType.ZIP_DOWNLOAD]),
    required=True,
    help="Hosting option to deploy",
)
@click.pass_context
def deploy(ctx: click.Context, session_id: str, deployment_type: str) -> None:
    """Run the deployment pipeline for a stored session."""
    from sitesmith.orchestrator import DeploymentPipeline
    from sitesmith.services import build_services
    from sitesmith.sessions import build_session_store

    settings = ctx.obj["settings"]
    pipeline = DeploymentPipeline(settings, build_services(settings), build_session_store(settings))
    try:
        session = asyncio.run(pipeline.run(session_id, deployment_type))
    except (SitesmithError, RetryExhaustedError) as exc:
        _fail(str(exc))
    click.echo(f"Session {session.id}: {session.state.value} {session.pages_url}")


@cli.command()
@click.argument("session_id")
@click.option("--json", "as_json", is_flag=True, help="Print the full session as JSON")
@click.pass_context
def status(ctx: click.Context, session_id: str, as_json: bool) -> None:
    """Poll hosting and DNS signals for a stored session."""
    from sitesmith.services import build_services
    from sitesmith.sessions import build_session_store
    from sitesmith.status import StatusPoller

    settings = ctx.obj["settings"]
    poller = StatusPoller(build_services(settings), build_session_store(settings))
    try:
        session = asyncio.run(poller.poll(session_id))
    except SitesmithError as exc:
        _fail(str(exc))
    if as_json:
        click.echo(json.dumps(session.model_dump(mode="json", exclude={"pages"}), indent=2))
        return
    click.echo(f"Session {session.id}: {session.state.value}")
    click.echo(f"  deployed={session.deployed} dns_configured={session.dns_configured} https_ready={session.https_ready}")
    if session.failed:
        click.echo(f"  failed at {session.failed_step}: {session.error}")
    for line in session.status_log[-5:]:
        click.echo(f"  - {line}")
