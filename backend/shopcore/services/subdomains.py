"""
Subdomain and custom-domain rules.

These are creation-time gates only; resolution never consults the reserved
list.
"""
import re

from shopcore.core.exceptions import ValidationError

SUBDOMAIN_MIN_LENGTH = 3
SUBDOMAIN_MAX_LENGTH = 30
SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")
DOMAIN_PATTERN = re.compile(
    r"^(?=.{4,253}$)([a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}$"
)

RESERVED_SUBDOMAINS = frozenset({
    "www", "admin", "superadmin", "api", "app", "mail", "smtp", "ftp",
    "cpanel", "webmail", "ns1", "ns2", "test", "demo", "staging", "dev",
    "blog", "shop", "store", "help", "support", "status", "cdn", "static",
    "images", "assets", "files", "media", "download", "uploads",
})


def normalize_subdomain(value: str) -> str:
    return value.strip().lower()


def subdomain_problem(subdomain: str) -> tuple[str, str] | None:
    """Return ``(reason, message)`` if the normalized subdomain is unusable."""
    if len(subdomain) < SUBDOMAIN_MIN_LENGTH:
        return "too_short", f"Subdomain must be at least {SUBDOMAIN_MIN_LENGTH} characters"
    if len(subdomain) > SUBDOMAIN_MAX_LENGTH:
        return "too_long", f"Subdomain must be at most {SUBDOMAIN_MAX_LENGTH} characters"
    if not SUBDOMAIN_PATTERN.match(subdomain):
        return (
            "invalid_format",
            "Subdomain may contain only lowercase letters, digits and inner hyphens",
        )
    if subdomain in RESERVED_SUBDOMAINS:
        return "reserved", "This subdomain is reserved"
    return None


def validate_subdomain(value: str) -> str:
    """Normalize and validate a subdomain for creation."""
    subdomain = normalize_subdomain(value)
    problem = subdomain_problem(subdomain)
    if problem:
        raise ValidationError("subdomain", problem[1])
    return subdomain


def normalize_domain(value: str | None) -> str | None:
    """Lowercase a custom domain and strip scheme, path, port and trailing dot.

    Empty input means "no custom domain".
    """
    if value is None:
        return None
    domain = value.strip().lower()
    if not domain:
        return None
    if "://" in domain:
        domain = domain.split("://", 1)[1]
    domain = domain.split("/", 1)[0].split(":", 1)[0].rstrip(".")
    if not DOMAIN_PATTERN.match(domain):
        raise ValidationError("custom_domain", "Invalid domain name")
    return domain
