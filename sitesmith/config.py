"""Application configuration via pydantic-settings."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

GITHUB_PAGES_IPV4 = (
    "185.199.108.153",
    "185.199.109.153",
    "185.199.110.153",
    "185.199.111.153",
)

GITHUB_PAGES_IPV6 = (
    "2606:50c0:8000::153",
    "2606:50c0:8001::153",
    "2606:50c0:8002::153",
    "2606:50c0:8003::153",
)


class RegistrantContact(BaseSettings):
    """Fixed registrant details sent with every domain purchase."""

    model_config = SettingsConfigDict(env_prefix="REGISTRANT_", extra="ignore")

    first_name: str = "Site"
    last_name: str = "Owner"
    organization: str = "Sitesmith"
    email: str = "domains@sitesmith.example"
    phone: str = "+44.1234567890"
    address1: str = "1 High Street"
    city: str = "London"
    state: str = "London"
    postal_code: str = "SW1A1AA"
    country: str = "GB"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Generation
    anthropic_api_key: str = ""
    llm_model: str = "claude-sonnet-4-5-20250929"
    llm_max_tokens: int = 8192
    llm_temperature: float = 0.7
    max_page_count: int = 10

    # Payments
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    currency: str = "gbp"
    checkout_success_url: str = "https://sitesmith.example/payment-success.html"
    checkout_full_hosting_success_url: str = "https://sitesmith.example/fullhosting.html"
    checkout_cancel_url: str = "https://sitesmith.example/payment-cancelled.html"

    # Registrar selection
    registrar: Literal["namecheap", "godaddy"] = "namecheap"

    # Namecheap
    namecheap_api_user: str = ""
    namecheap_api_key: str = ""
    namecheap_client_ip: str = ""
    namecheap_sandbox: bool = True

    # GoDaddy
    godaddy_api_key: str = ""
    godaddy_api_secret: str = ""
    godaddy_production: bool = False

    registrant: RegistrantContact = Field(default_factory=RegistrantContact)

    # Hosting
    github_token: str = ""
    github_username: str = ""
    netlify_token: str = ""
    nudge_delay_seconds: float = 0.0

    # DNS-over-HTTPS resolver used by status polling
    doh_url: str = "https://cloudflare-dns.com/dns-query"

    # Retry policy for read-only calls
    max_retries: int = 3
    retry_base_delay: float = 1.0
    http_timeout: float = 30.0

    # Session store
    session_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    session_ttl_seconds: int = 0

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    @property
    def registrar_configured(self) -> bool:
        if self.registrar == "godaddy":
            return bool(self.godaddy_api_key and self.godaddy_api_secret)
        return bool(self.namecheap_api_user and self.namecheap_api_key and self.namecheap_client_ip)

    @property
    def github_configured(self) -> bool:
        return bool(self.github_token and self.github_username)
