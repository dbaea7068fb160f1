"""Client for the GoDaddy Domains API.

Availability, purchase, ownership lookup and per-record DNS management.
OTE (test) environment unless ``production`` is set.
API docs: https://developer.godaddy.com/doc/endpoint/domains
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx
import structlog

from sitesmith.errors import NotConfiguredError, UpstreamError
from sitesmith.models.deployment import DomainAvailability, DomainPurchase

if TYPE_CHECKING:
    from sitesmith.config import RegistrantContact
    from sitesmith.models.deployment import DnsRecord

logger = structlog.get_logger()

PRODUCTION_URL = "https://api.godaddy.com"
OTE_URL = "https://api.ote-godaddy.com"

# GoDaddy reports prices in micro-units of the account currency
_PRICE_DIVISOR = 1_000_000


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(data, dict):
        return str(data.get("message") or data.get("code") or data)
    return str(data)


class GoDaddyClient:
    """GoDaddy registrar client."""

    name = "godaddy"

    def __init__(
        self,
        api_key: str = "",
        api_secret: str = "",
        contact: RegistrantContact | None = None,
        production: bool = False,
        timeout: float = 30.0,
        client_ip: str = "127.0.0.1",
    ) -> None:
        self.api_key = api_key
        self.api_secret = api_secret
        self.contact = contact
        self.base_url = PRODUCTION_URL if production else OTE_URL
        self.timeout = timeout
        self.client_ip = client_ip

    @property
    def is_available(self) -> bool:
        return bool(self.api_key and self.api_secret)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"sso-key {self.api_key}:{self.api_secret}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _require_credentials(self) -> None:
        if not self.is_available:
            raise NotConfiguredError("GoDaddy")

    async def _request(self, method: str, path: str, **kwargs: object) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(
                method, f"{self.base_url}{path}", headers=self._headers(), **kwargs
            )

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_error:
            raise UpstreamError(self.name, resp.status_code, _error_message(resp))

    async def check_availability(self, domain: str) -> DomainAvailability:
        """Check whether *domain* can be registered."""
        self._require_credentials()
        resp = await self._request(
            "GET", "/v1/domains/available", params={"domain": domain, "checkType": "FULL"}
        )
        self._raise_for_status(resp)
        data = resp.json()
        price = data.get("price")
        return DomainAvailability(
            domain=domain,
            available=bool(data.get("available")),
            price=price / _PRICE_DIVISOR if isinstance(price, int | float) else None,
            currency=str(data.get("currency", "")),
        )

    async def owns_domain(self, domain: str) -> bool:
        """True when *domain* is already registered to this account."""
        self._require_credentials()
        resp = await self._request("GET", f"/v1/domains/{domain}")
        if resp.status_code == 404:
            return False
        self._raise_for_status(resp)
        return True

    def _contact_payload(self) -> dict[str, object]:
        c = self.contact
        if c is None:
            return {}
        return {
            "nameFirst": c.first_name,
            "nameLast": c.last_name,
            "organization": c.organization,
            "email": c.email,
            "phone": c.phone,
            "addressMailing": {
                "address1": c.address1,
                "city": c.city,
                "state": c.state,
                "postalCode": c.postal_code,
                "country": c.country,
            },
        }

    async def purchase_domain(self, domain: str, years: int) -> DomainPurchase:
        """Submit a purchase. Raises UpstreamError on any rejection."""
        self._require_credentials()
        contact = self._contact_payload()
        payload = {
            "domain": domain,
            "consent": {
                "agreedAt": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
                "agreedBy": self.client_ip,
                "agreementKeys": ["DNRA"],
            },
            "contactAdmin": contact,
            "contactRegistrant": contact,
            "contactTech": contact,
            "contactBilling": contact,
            "period": years,
            "privacy": False,
            "renewAuto": True,
        }
        resp = await self._request("POST", "/v1/domains/purchase", json=payload)
        self._raise_for_status(resp)
        data = resp.json()
        logger.info("GoDaddy domain purchased", domain=domain, years=years)
        return DomainPurchase(
            domain=domain,
            years=years,
            registrar=self.name,
            status="purchased",
            order_id=str(data.get("orderId", "")),
        )

    async def delete_records(self, domain: str, record_type: str, host: str) -> None:
        self._require_credentials()
        resp = await self._request("DELETE", f"/v1/domains/{domain}/records/{record_type}/{host}")
        self._raise_for_status(resp)

    async def add_records(self, domain: str, records: list[DnsRecord]) -> None:
        self._require_credentials()
        payload = [{"type": r.type, "name": r.name, "data": r.data, "ttl": r.ttl} for r in records]
        resp = await self._request("PATCH", f"/v1/domains/{domain}/records", json=payload)
        self._raise_for_status(resp)
        logger.info("GoDaddy DNS records added", domain=domain, count=len(records))
