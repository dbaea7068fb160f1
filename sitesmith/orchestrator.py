"""Pipeline orchestrator: runs a session through the steps for its deployment type."""

from __future__ import annotations

import time as time_mod
import uuid
from typing import TYPE_CHECKING

import structlog

from sitesmith.domains import require_valid_domain
from sitesmith.errors import NotConfiguredError, ValidationError
from sitesmith.metrics import step_duration_seconds, step_executions_total
from sitesmith.models.session import DeploymentType
from sitesmith.sessions import require_session
from sitesmith.steps.base import StepContext, get_step_registry

if TYPE_CHECKING:
    from sitesmith.config import Settings
    from sitesmith.models.session import Session
    from sitesmith.protocols import SessionStore
    from sitesmith.services import Services

logger = structlog.get_logger()

PIPELINES: dict[DeploymentType, tuple[str, ...]] = {
    DeploymentType.ZIP_DOWNLOAD: (),
    DeploymentType.GITHUB_HOSTED: ("deploy_github", "enable_serving"),
    DeploymentType.NETLIFY: ("deploy_netlify",),
    DeploymentType.FULL_HOSTING: (
        "purchase_domain",
        "configure_dns",
        "deploy_github",
        "enable_serving",
    ),
}


class DeploymentPipeline:
    """Runs the registered steps for a deployment type against one session.

    Every step sees the session as left by the previous one and the store is
    written after each step, so a failure leaves completed work recorded.
    """

    def __init__(self, settings: Settings, services: Services, store: SessionStore):
        self.settings = settings
        self.services = services
        self.store = store
        # Ensure steps are imported and registered
        import sitesmith.steps  # noqa: F401

    def preflight(self, session: Session, deployment_type: DeploymentType) -> None:
        """Reject a run that cannot succeed before any provider is called."""
        if deployment_type is DeploymentType.ZIP_DOWNLOAD:
            return
        if not session.pages:
            raise ValidationError("Session has no generated pages")
        if deployment_type is DeploymentType.FULL_HOSTING:
            require_valid_domain(session.domain)
            if not self.services.registrar.is_available:
                raise NotConfiguredError(self.services.registrar.name.capitalize())
        if deployment_type is DeploymentType.NETLIFY:
            if not self.services.netlify.is_available:
                raise NotConfiguredError("Netlify")
        elif not self.services.github.is_available:
            raise NotConfiguredError("GitHub")

    async def run(self, session_id: str, deployment_type: DeploymentType | str) -> Session:
        """Run every step for *deployment_type*; raises after marking the session failed."""
        deployment_type = DeploymentType(deployment_type)
        correlation_id = uuid.uuid4().hex[:12]
        with structlog.contextvars.bound_contextvars(session_id=session_id):
            session = require_session(self.store, session_id).resume()
            self.preflight(session, deployment_type)
            session = session.model_copy(update={"deployment_type": deployment_type})
            self.store.set(session)

            registry = get_step_registry()
            logger.info("Pipeline start", deployment_type=deployment_type.value)
            for name in PIPELINES[deployment_type]:
                step = registry[name]
                if step.should_skip(session):
                    logger.info("Step skipped", step=name)
                    continue
                if step.is_complete(session):
                    logger.info("Step already complete, skipping", step=name)
                    continue

                ctx = StepContext(
                    settings=self.settings,
                    services=self.services,
                    session=session,
                    correlation_id=correlation_id,
                )
                logger.info("Running step", step=name)
                t0 = time_mod.monotonic()
                try:
                    session = await step.run(ctx)
                except Exception as exc:
                    step_executions_total.labels(step_name=name, status="error").inc()
                    if not step.fatal:
                        logger.warning("Non-fatal step failed", step=name, error=str(exc))
                        continue
                    logger.error("Step failed", step=name, error=str(exc))
                    self.store.set(session.mark_failed(name, str(exc)))
                    raise
                step_duration_seconds.labels(step_name=name).observe(time_mod.monotonic() - t0)
                step_executions_total.labels(step_name=name, status="success").inc()
                self.store.set(session)

            logger.info("Pipeline complete", deployment_type=deployment_type.value, state=session.state)
            return session
