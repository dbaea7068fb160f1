"""Checkout prices for each deployment option, in pence."""

from __future__ import annotations

from sitesmith.domains import require_valid_years, tld_of
from sitesmith.models.session import DeploymentType

TLD_PRICES_PENCE: dict[str, int] = {
    "org": 500,
    "xyz": 650,
    "com": 800,
    "co.uk": 700,
    "uk": 700,
    "net": 1000,
    "co": 1499,
    "ltd": 300,
    "ai": 2999,
    "io": 4999,
}
DEFAULT_TLD_PRICE_PENCE = 1599

PRODUCTS: dict[DeploymentType, tuple[str, int]] = {
    DeploymentType.ZIP_DOWNLOAD: ("ZIP File Download", 0),
    DeploymentType.GITHUB_HOSTED: ("GitHub Hosting + Support", 0),
    DeploymentType.NETLIFY: ("Netlify Hosting", 0),
    DeploymentType.FULL_HOSTING: ("Full Hosting + Custom Domain", 0),
}

# Stripe rejects GBP charges below its per-currency minimum.
MINIMUM_CHARGE_PENCE = 50


def domain_price_pence(domain: str, years: int = 1) -> int:
    years = require_valid_years(years)
    return TLD_PRICES_PENCE.get(tld_of(domain), DEFAULT_TLD_PRICE_PENCE) * years


def checkout_amount_pence(
    deployment_type: DeploymentType, domain: str = "", years: int = 1
) -> int:
    _name, base = PRODUCTS[deployment_type]
    total = base
    if deployment_type is DeploymentType.FULL_HOSTING:
        total += domain_price_pence(domain, years)
    return max(total, MINIMUM_CHARGE_PENCE)
