"""Domain name validation and hosting-unit naming."""

from __future__ import annotations

import re
import secrets
import string

from sitesmith.errors import ValidationError

MAX_DOMAIN_LENGTH = 253
MAX_LABEL_LENGTH = 63
MIN_YEARS = 1
MAX_YEARS = 5

_LABEL_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")
_TLD_RE = re.compile(r"^[a-z]{2,63}$")

# Second-level registries the registrars sell under; the SLD sits left of these.
MULTI_LABEL_SUFFIXES = frozenset(
    {
        "co.uk",
        "org.uk",
        "me.uk",
        "ltd.uk",
        "plc.uk",
        "net.uk",
        "com.au",
        "net.au",
        "org.au",
        "co.nz",
        "org.nz",
        "co.za",
        "com.br",
        "co.in",
        "co.jp",
    }
)


def normalize_domain(domain: str | None) -> str:
    return (domain or "").strip().lower()


def is_valid_domain(domain: str | None) -> bool:
    """Syntactic check only; says nothing about registrability."""
    if not domain or domain != domain.strip():
        return False
    d = domain.lower()
    if len(d) > MAX_DOMAIN_LENGTH or "--" in d:
        return False
    labels = d.split(".")
    if len(labels) < 2:
        return False
    for label in labels:
        if not label or len(label) > MAX_LABEL_LENGTH or not _LABEL_RE.match(label):
            return False
    return bool(_TLD_RE.match(labels[-1]))


def require_valid_domain(domain: str | None) -> str:
    """Normalize *domain* and raise ValidationError when it is malformed."""
    d = normalize_domain(domain)
    if not is_valid_domain(d):
        raise ValidationError(f"Invalid domain: {domain!r}")
    return d


def require_valid_years(years: int | str | None) -> int:
    try:
        value = int(years if years is not None else MIN_YEARS)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid duration: {years!r}") from None
    if not MIN_YEARS <= value <= MAX_YEARS:
        raise ValidationError(f"Duration must be {MIN_YEARS}-{MAX_YEARS} years, got {value}")
    return value


def split_domain(domain: str) -> tuple[str, str]:
    """Split into (sld, tld), keeping multi-label suffixes such as ``co.uk`` whole."""
    labels = normalize_domain(domain).split(".")
    if len(labels) >= 3 and ".".join(labels[-2:]) in MULTI_LABEL_SUFFIXES:
        return labels[-3], ".".join(labels[-2:])
    return labels[-2], labels[-1]


def tld_of(domain: str) -> str:
    return split_domain(domain)[1]


def slugify(value: str, max_length: int = 64) -> str:
    """Lowercase, ``[a-z0-9-]`` only, collapsed and trimmed hyphens."""
    slug = re.sub(r"[^a-z0-9-]", "-", value.lower())
    slug = re.sub(r"-+", "-", slug).strip("-")
    return slug[:max_length].rstrip("-")


def hosting_unit_name(domain: str = "", business_name: str = "", max_length: int = 64) -> str:
    """Deterministic repository/site name for a session.

    The domain wins over the business name so two sessions buying different
    domains never share a repository.
    """
    if domain:
        base = slugify(normalize_domain(domain).replace(".", "-"), max_length)
    else:
        base = slugify(business_name, max_length)
    return base or "site"


def with_random_suffix(name: str, max_length: int = 64, length: int = 4) -> str:
    alphabet = string.ascii_lowercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(length))
    return f"{name[: max_length - length - 1].rstrip('-')}-{suffix}"
