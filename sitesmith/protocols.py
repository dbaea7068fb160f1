"""Port interfaces (Protocols) the pipeline is wired against."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sitesmith.models.deployment import DnsRecord, DomainAvailability, DomainPurchase
    from sitesmith.models.session import Session


@runtime_checkable
class SessionStore(Protocol):
    """Key-value persistence for sessions."""

    def get(self, session_id: str) -> Session | None: ...
    def set(self, session: Session) -> None: ...
    def delete(self, session_id: str) -> bool: ...
    def ping(self) -> bool: ...


@runtime_checkable
class LLMPort(Protocol):
    """Interface for plain-text generation."""

    @property
    def is_available(self) -> bool: ...

    async def generate_text(
        self,
        prompt: str,
        system: str = "",
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str: ...


@runtime_checkable
class RegistrarPort(Protocol):
    """Domain registrar: availability, purchase and DNS record management."""

    name: str

    @property
    def is_available(self) -> bool: ...

    async def check_availability(self, domain: str) -> DomainAvailability: ...
    async def owns_domain(self, domain: str) -> bool: ...
    async def purchase_domain(self, domain: str, years: int) -> DomainPurchase: ...
    async def delete_records(self, domain: str, record_type: str, host: str) -> None: ...
    async def add_records(self, domain: str, records: list[DnsRecord]) -> None: ...
