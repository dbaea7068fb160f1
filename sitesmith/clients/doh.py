"""DNS-over-HTTPS resolver (JSON wire format).

Status polling resolves public DNS through a DoH endpoint rather than the
host resolver, so answers reflect what the internet sees and can be
mocked like any other HTTP call.
"""

from __future__ import annotations

import httpx
import structlog

from sitesmith.errors import UpstreamError

logger = structlog.get_logger()

RECORD_TYPES = {"A": 1, "CNAME": 5, "AAAA": 28}


class DoHResolver:
    """Resolver for the ``application/dns-json`` API (Cloudflare, Google)."""

    name = "doh"

    def __init__(self, url: str = "https://cloudflare-dns.com/dns-query", timeout: float = 10.0) -> None:
        self.url = url
        self.timeout = timeout

    async def resolve(self, hostname: str, record_type: str = "A") -> list[str]:
        """Answers of *record_type* for *hostname*, trailing dots stripped.

        NXDOMAIN and empty answers return an empty list.
        """
        type_code = RECORD_TYPES[record_type]
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.get(
                self.url,
                params={"name": hostname, "type": record_type},
                headers={"Accept": "application/dns-json"},
            )
        if resp.is_error:
            raise UpstreamError(self.name, resp.status_code, resp.text or resp.reason_phrase)
        data = resp.json()
        answers = [
            str(a.get("data", "")).rstrip(".").lower()
            for a in data.get("Answer") or []
            if a.get("type") == type_code
        ]
        logger.debug("DoH answer", hostname=hostname, type=record_type, answers=answers)
        return answers
