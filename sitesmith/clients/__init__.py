"""API clients for external services.

Each client follows the same pattern:
- Accepts credentials in __init__
- Exposes an `is_available` property (True when credentials are set)
- Raises NotConfiguredError before any network call when they are not
- Uses httpx.AsyncClient per call and raises UpstreamError on provider errors
"""

from sitesmith.clients.doh import DoHResolver
from sitesmith.clients.github import GitHubClient
from sitesmith.clients.godaddy import GoDaddyClient
from sitesmith.clients.namecheap import NamecheapClient
from sitesmith.clients.netlify import NetlifyClient
from sitesmith.clients.stripe_checkout import StripeCheckoutClient

__all__ = [
    "DoHResolver",
    "GitHubClient",
    "GoDaddyClient",
    "NamecheapClient",
    "NetlifyClient",
    "StripeCheckoutClient",
]
