"""Client for the Namecheap XML API.

Every call is a GET with ApiUser/ApiKey/UserName/ClientIp plus a Command.
Responses are XML in the ``http://api.namecheap.com/xml.response`` namespace
with ``Status="OK"`` or ``Status="ERROR"`` and an ``<Errors>`` list.
The ClientIp must be whitelisted on the Namecheap account.
API docs: https://www.namecheap.com/support/api/methods/
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING

import httpx
import structlog

from sitesmith.domains import split_domain
from sitesmith.errors import NotConfiguredError, UpstreamError
from sitesmith.models.deployment import DnsRecord, DomainAvailability, DomainPurchase

if TYPE_CHECKING:
    from sitesmith.config import RegistrantContact

logger = structlog.get_logger()

PRODUCTION_URL = "https://api.namecheap.com/xml.response"
SANDBOX_URL = "https://api.sandbox.namecheap.com/xml.response"

_NS = {"nc": "http://api.namecheap.com/xml.response"}

# Namecheap error numbers meaning "the domain is not in this account"
_NOT_IN_ACCOUNT = {"2019166", "2016166", "2030166"}


class NamecheapClient:
    """Namecheap registrar client."""

    name = "namecheap"

    def __init__(
        self,
        api_user: str = "",
        api_key: str = "",
        client_ip: str = "",
        contact: RegistrantContact | None = None,
        sandbox: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self.api_user = api_user
        self.api_key = api_key
        self.client_ip = client_ip
        self.contact = contact
        self.base_url = SANDBOX_URL if sandbox else PRODUCTION_URL
        self.timeout = timeout

    @property
    def is_available(self) -> bool:
        return bool(self.api_user and self.api_key and self.client_ip)

    def _auth_params(self, command: str) -> dict[str, str]:
        return {
            "ApiUser": self.api_user,
            "ApiKey": self.api_key,
            "UserName": self.api_user,
            "ClientIp": self.client_ip,
            "Command": command,
        }

    async def _call(self, command: str, **params: str) -> ET.Element:
        """Run *command* and return the CommandResponse element.

        Raises UpstreamError for HTTP errors and ``Status="ERROR"`` replies.
        """
        if not self.is_available:
            raise NotConfiguredError("Namecheap")
        query = {**self._auth_params(command), **params}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(self.base_url, params=query)
        if resp.is_error:
            raise UpstreamError(self.name, resp.status_code, resp.text or resp.reason_phrase)

        try:
            root = ET.fromstring(resp.content)
        except ET.ParseError as exc:
            raise UpstreamError(self.name, 502, f"Malformed XML response: {exc}") from exc

        if root.get("Status", "").upper() == "ERROR":
            error = root.find("nc:Errors/nc:Error", _NS)
            message = (error.text or "").strip() if error is not None else "Unknown error"
            number = error.get("Number", "") if error is not None else ""
            # Namecheap answers HTTP 200 for application errors; report them as 400
            raise UpstreamError(self.name, 400, f"{message} (#{number})" if number else message)

        command_response = root.find("nc:CommandResponse", _NS)
        if command_response is None:
            raise UpstreamError(self.name, 502, "Response has no CommandResponse")
        return command_response

    async def check_availability(self, domain: str) -> DomainAvailability:
        resp = await self._call("namecheap.domains.check", DomainList=domain)
        result = resp.find("nc:DomainCheckResult", _NS)
        if result is None:
            raise UpstreamError(self.name, 502, "Response has no DomainCheckResult")
        price = result.get("PremiumRegistrationPrice")
        return DomainAvailability(
            domain=domain,
            available=result.get("Available", "").lower() == "true",
            price=float(price) if price and result.get("IsPremiumName") == "true" else None,
            currency="USD",
        )

    async def owns_domain(self, domain: str) -> bool:
        try:
            resp = await self._call("namecheap.domains.getInfo", DomainName=domain)
        except UpstreamError as exc:
            if exc.status_code == 400 and any(n in exc.message for n in _NOT_IN_ACCOUNT):
                return False
            raise
        info = resp.find("nc:DomainGetInfoResult", _NS)
        return info is not None and info.get("IsOwner", "true").lower() == "true"

    def _contact_params(self) -> dict[str, str]:
        c = self.contact
        if c is None:
            return {}
        fields = {
            "FirstName": c.first_name,
            "LastName": c.last_name,
            "OrganizationName": c.organization,
            "Address1": c.address1,
            "City": c.city,
            "StateProvince": c.state,
            "PostalCode": c.postal_code,
            "Country": c.country,
            "Phone": c.phone,
            "EmailAddress": c.email,
        }
        params = {}
        for role in ("Registrant", "Tech", "Admin", "AuxBilling"):
            for key, value in fields.items():
                params[f"{role}{key}"] = value
        return params

    async def purchase_domain(self, domain: str, years: int) -> DomainPurchase:
        resp = await self._call(
            "namecheap.domains.create",
            DomainName=domain,
            Years=str(years),
            AddFreeWhoisguard="yes",
            WGEnabled="yes",
            **self._contact_params(),
        )
        result = resp.find("nc:DomainCreateResult", _NS)
        if result is None or result.get("Registered", "").lower() != "true":
            raise UpstreamError(self.name, 400, "Registration failed")
        logger.info("Namecheap domain purchased", domain=domain, years=years)
        return DomainPurchase(
            domain=domain,
            years=years,
            registrar=self.name,
            status="purchased",
            order_id=result.get("OrderID", ""),
        )

    async def get_hosts(self, domain: str) -> list[DnsRecord]:
        sld, tld = split_domain(domain)
        resp = await self._call("namecheap.domains.dns.getHosts", SLD=sld, TLD=tld)
        hosts = resp.findall("nc:DomainDNSGetHostsResult/nc:host", _NS)
        return [
            DnsRecord(
                type=h.get("Type", ""),
                name=h.get("Name", ""),
                data=h.get("Address", ""),
                ttl=int(h.get("TTL", "1800")),
            )
            for h in hosts
        ]

    async def set_hosts(self, domain: str, records: list[DnsRecord]) -> None:
        """Replace the full host list. Namecheap has no per-record write."""
        sld, tld = split_domain(domain)
        params: dict[str, str] = {"SLD": sld, "TLD": tld}
        for i, r in enumerate(records, start=1):
            params[f"HostName{i}"] = r.name
            params[f"RecordType{i}"] = r.type
            params[f"Address{i}"] = r.data
            params[f"TTL{i}"] = str(r.ttl)
        resp = await self._call("namecheap.domains.dns.setHosts", **params)
        result = resp.find("nc:DomainDNSSetHostsResult", _NS)
        if result is None or result.get("IsSuccess", "").lower() != "true":
            raise UpstreamError(self.name, 400, "setHosts was not applied")

    async def delete_records(self, domain: str, record_type: str, host: str) -> None:
        hosts = await self.get_hosts(domain)
        kept = [h for h in hosts if not (h.type == record_type and h.name == host)]
        if len(kept) == len(hosts):
            raise UpstreamError(self.name, 404, f"No {record_type} record for {host}")
        await self.set_hosts(domain, kept)

    async def add_records(self, domain: str, records: list[DnsRecord]) -> None:
        hosts = await self.get_hosts(domain)
        await self.set_hosts(domain, [*hosts, *records])
        logger.info("Namecheap DNS records added", domain=domain, count=len(records))
