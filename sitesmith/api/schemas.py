"""API request/response schemas (separate from domain models)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sitesmith.models.session import DeploymentType, GeneratedPage, PageStructure, Session

# --- Requests ---


class StoreStepRequest(BaseModel):
    session_id: str = Field(min_length=1)
    step: str = Field(min_length=1)
    content: Any


class GenerateRequest(BaseModel):
    query: str
    page_count: int = 1
    session_id: str = ""
    structure: list[PageStructure] = Field(default_factory=list)


class DomainCheckRequest(BaseModel):
    domain: str


class DomainPriceRequest(BaseModel):
    domain: str
    duration: int = 1


class DomainPurchaseRequest(BaseModel):
    session_id: str = Field(min_length=1)
    domain: str
    duration: int = 1


class DnsRequest(BaseModel):
    session_id: str = Field(min_length=1)


class CheckoutRequest(BaseModel):
    session_id: str = Field(min_length=1)
    type: DeploymentType
    business_name: str = ""
    domain: str = ""
    duration: int = 1
    email: str = ""


class DeployRequest(BaseModel):
    session_id: str = Field(min_length=1)
    business_name: str = ""


# --- Responses ---


class HealthResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    status: str
    version: str
    store_connected: bool


class ConfigCheckResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    registrar: str
    configured: dict[str, bool]


class SuccessResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True


class StepsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    steps: dict[str, Any]


class StatusLogResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    status_log: list[str]


class GenerateResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    pages: list[GeneratedPage]


class DomainCheckResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    domain: str
    available: bool
    price: float | None = None
    currency: str = ""


class DomainPriceResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    domain: str
    duration: int
    price_pence: int
    currency: str


class DomainPurchaseResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    domain: str
    duration: int
    status: str
    domain_purchased: bool


class DnsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    domain: str
    dns_records_installed: bool


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    id: str
    url: str
    amount: int


class WebhookResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool = True
    received: str


class SessionStatusResponse(BaseModel):
    """Deployment status as reported to the polling client."""

    model_config = ConfigDict(frozen=True)

    success: bool = True
    session_id: str
    state: str
    failed: bool
    error: str = ""
    failed_step: str = ""
    domain: str = ""
    domain_purchased: bool = False
    deployed: bool = False
    dns_configured: bool = False
    https_ready: bool = False
    hosting_target: str = ""
    repo_name: str = ""
    repo_url: str = ""
    pages_url: str = ""
    custom_url: str = ""
    status_log: list[str] = Field(default_factory=list)

    @classmethod
    def from_session(cls, session: Session) -> SessionStatusResponse:
        return cls(
            session_id=session.id,
            state=session.state.value,
            failed=session.failed,
            error=session.error,
            failed_step=session.failed_step,
            domain=session.domain,
            domain_purchased=session.domain_purchased,
            deployed=session.deployed,
            dns_configured=session.dns_configured,
            https_ready=session.https_ready,
            hosting_target=session.hosting_target,
            repo_name=session.repo_name,
            repo_url=session.repo_url,
            pages_url=session.pages_url,
            custom_url=session.custom_url,
            status_log=list(session.status_log),
        )
