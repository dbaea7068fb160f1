"""Import all steps to trigger registration."""

from sitesmith.steps.deploy import DeployGitHubStep, DeployNetlifyStep  # noqa: F401
from sitesmith.steps.dns import ConfigureDnsStep  # noqa: F401
from sitesmith.steps.domain import PurchaseDomainStep  # noqa: F401
from sitesmith.steps.serving import EnableServingStep  # noqa: F401
