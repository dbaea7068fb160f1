"""Exception taxonomy shared by steps, clients and the API layer."""

from __future__ import annotations


class SitesmithError(Exception):
    """Base class for errors raised by sitesmith itself."""


class ValidationError(SitesmithError, ValueError):
    """Request rejected before any network call was made."""


class SessionNotFoundError(SitesmithError, LookupError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id!r} not found")
        self.session_id = session_id


class NotConfiguredError(SitesmithError):
    """A provider credential required for this operation is missing."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"{provider} credentials are not configured")
        self.provider = provider


class UpstreamError(SitesmithError):
    """A third-party provider rejected a request.

    Carries the provider's HTTP status and message so the API layer can
    surface them unchanged.
    """

    def __init__(self, provider: str, status_code: int, message: str) -> None:
        super().__init__(f"{provider} error {status_code}: {message}")
        self.provider = provider
        self.status_code = status_code
        self.message = message

    @property
    def is_transient(self) -> bool:
        return self.status_code >= 500 or self.status_code == 429
