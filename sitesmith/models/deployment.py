"""Results returned by the domain, DNS, deploy and serving steps."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DomainAvailability(BaseModel):
    model_config = ConfigDict(frozen=True)

    domain: str
    available: bool
    price: float | None = None
    currency: str = ""


class DomainPurchase(BaseModel):
    """Registrar outcome for an ensure-owned purchase."""

    model_config = ConfigDict(frozen=True)

    domain: str
    years: int = 1
    registrar: str = ""
    # "purchased" or "already_owned"
    status: str = "purchased"
    order_id: str = ""


class DnsRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    # "@" for the apex
    name: str
    data: str
    ttl: int = 1800


class DnsConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    domain: str
    a_records: list[str] = Field(default_factory=list)
    aaaa_records: list[str] = Field(default_factory=list)
    www_cname: str = ""
    deleted: list[str] = Field(default_factory=list)


class HostingDeployment(BaseModel):
    """Where a session's pages now live."""

    model_config = ConfigDict(frozen=True)

    target: str
    owner: str = ""
    name: str = ""
    repo_url: str = ""
    site_id: str = ""
    default_url: str = ""
    commit_sha: str = ""
    files: list[str] = Field(default_factory=list)


class ServingResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool
    url: str
    custom_url: str = ""


class StatusSignals(BaseModel):
    """What one status poll observed, before merging with persisted state."""

    model_config = ConfigDict(frozen=True)

    provider_verified: bool = False
    resolver_verified: bool = False
    build_complete: bool = False
    https_enforced: bool = False
    apex_addresses: list[str] = Field(default_factory=list)
    www_cname: str = ""

    @property
    def dns_configured(self) -> bool:
        return self.provider_verified or self.resolver_verified
