"""Session model: server-side accumulator of one user's generation and deployment."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DeploymentType(StrEnum):
    ZIP_DOWNLOAD = "zip-download"
    GITHUB_HOSTED = "github-hosted"
    NETLIFY = "netlify"
    FULL_HOSTING = "full-hosting"


class DeploymentState(StrEnum):
    UNCONFIGURED = "unconfigured"
    PURCHASED = "purchased"
    DEPLOYED = "deployed"
    DNS_CONFIGURED = "dns_configured"
    HTTPS_READY = "https_ready"
    FAILED = "failed"

    @property
    def rank(self) -> int:
        return _STATE_ORDER.index(self) if self in _STATE_ORDER else len(_STATE_ORDER)

    @property
    def is_terminal(self) -> bool:
        return self is DeploymentState.FAILED

    def advance_to(self, observed: DeploymentState) -> DeploymentState:
        """Return the more advanced of *self* and *observed*; FAILED absorbs."""
        if self.is_terminal:
            return self
        if observed.is_terminal:
            return observed
        return observed if observed.rank > self.rank else self


_STATE_ORDER = (
    DeploymentState.UNCONFIGURED,
    DeploymentState.PURCHASED,
    DeploymentState.DEPLOYED,
    DeploymentState.DNS_CONFIGURED,
    DeploymentState.HTTPS_READY,
)


class GeneratedPage(BaseModel):
    """One static HTML document."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content: str


class PageStructure(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    filename: str


class Session(BaseModel):
    """Everything the browser client has accumulated for one site."""

    model_config = ConfigDict(frozen=True)

    id: str
    steps: dict[str, Any] = Field(default_factory=dict)
    pages: list[GeneratedPage] = Field(default_factory=list)
    structure: list[PageStructure] = Field(default_factory=list)
    business_name: str = ""
    domain: str = ""
    domain_duration: int = 1
    deployment_type: DeploymentType | None = None

    # Progress flags (only ever flip False -> True)
    paid: bool = False
    domain_purchased: bool = False
    dns_records_installed: bool = False
    deployed: bool = False
    dns_configured: bool = False
    https_ready: bool = False
    state: DeploymentState = DeploymentState.UNCONFIGURED
    error: str = ""
    failed_step: str = ""

    # Deployment record
    domain_status: str = ""
    hosting_target: str = ""
    hosting_owner: str = ""
    repo_name: str = ""
    repo_url: str = ""
    site_id: str = ""
    pages_url: str = ""
    custom_url: str = ""

    status_log: list[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def failed(self) -> bool:
        return self.state is DeploymentState.FAILED

    @property
    def served_domain(self) -> str:
        """Custom domain bound to the hosting, or "" when only the provider URL serves the site.

        GitHub deploys always carry a ``CNAME`` for the session's domain; Netlify
        sites are only given a custom domain once it has been bought.
        """
        if self.hosting_target == "netlify" and not self.domain_purchased:
            return ""
        return self.domain

    def log(self, message: str) -> Session:
        """Return a copy with *message* appended to the status log."""
        return self.model_copy(
            update={"status_log": [*self.status_log, message], "updated_at": _utcnow()}
        )

    def advance(self, observed: DeploymentState, **changes: Any) -> Session:
        """Return a copy moved to the more advanced state, applying *changes*."""
        return self.model_copy(
            update={**changes, "state": self.state.advance_to(observed), "updated_at": _utcnow()}
        )

    def mark_failed(self, step: str, error: str) -> Session:
        return self.model_copy(
            update={
                "state": DeploymentState.FAILED,
                "failed_step": step,
                "error": error,
                "status_log": [*self.status_log, f"{step} failed: {error}"],
                "updated_at": _utcnow(),
            }
        )

    def resume(self) -> Session:
        """Clear a failure so an explicit pipeline re-run can continue.

        The state is rebuilt from the progress flags, so completed work such as
        a domain purchase is not repeated.
        """
        if not self.failed:
            return self
        if self.https_ready:
            state = DeploymentState.HTTPS_READY
        elif self.dns_configured:
            state = DeploymentState.DNS_CONFIGURED
        elif self.deployed:
            state = DeploymentState.DEPLOYED
        elif self.domain_purchased:
            state = DeploymentState.PURCHASED
        else:
            state = DeploymentState.UNCONFIGURED
        return self.model_copy(
            update={"state": state, "error": "", "failed_step": "", "updated_at": _utcnow()}
        )
