"""Re-exports all Pydantic models."""

from sitesmith.models.deployment import (
    DnsConfiguration,
    DnsRecord,
    DomainAvailability,
    DomainPurchase,
    HostingDeployment,
    ServingResult,
    StatusSignals,
)
from sitesmith.models.session import (
    DeploymentState,
    DeploymentType,
    GeneratedPage,
    PageStructure,
    Session,
)

__all__ = [
    "DeploymentState",
    "DeploymentType",
    "DnsConfiguration",
    "DnsRecord",
    "DomainAvailability",
    "DomainPurchase",
    "GeneratedPage",
    "HostingDeployment",
    "PageStructure",
    "ServingResult",
    "Session",
    "StatusSignals",
]
