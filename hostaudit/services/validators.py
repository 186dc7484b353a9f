"""URL validation utilities."""

import re
from urllib.parse import urlparse

from hostaudit.errors.exceptions import ValidationError

_HOSTNAME_RE = re.compile(r"^[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_IPV4_RE = re.compile(r"^\d+\.\d+\.\d+\.\d+$")


def validate_url(url: str) -> str:
    """
    Validate and normalize URL.
    Returns normalized URL or raises ValidationError.
    """
    if not url:
        raise ValidationError("URL is required and must be a non-empty string")

    # Remove leading/trailing whitespace
    url = url.strip()

    # Add protocol if missing (only if no protocol at all)
    if "://" not in url:
        url = f"https://{url}"

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise ValidationError(f"Invalid URL format: {str(e)}") from e

    if parsed.scheme not in ("http", "https"):
        raise ValidationError("URL must use http or https protocol")

    if not parsed.netloc:
        raise ValidationError("URL must include a valid domain")

    # Basic domain validation (must have at least one dot, no spaces)
    if "." not in parsed.netloc or " " in parsed.netloc:
        raise ValidationError("URL domain appears to be invalid")

    hostname = parsed.netloc.split(":")[0] if ":" in parsed.netloc else parsed.netloc

    if ":" in parsed.netloc:
        port_str = parsed.netloc.split(":")[-1]
        try:
            port = int(port_str)
        except ValueError as e:
            raise ValidationError(f"Invalid port: {port_str}") from e
        if not (1 <= port <= 65535):
            raise ValidationError(f"Port {port} is out of valid range (1-65535)")

    if hostname in ("localhost", "127.0.0.1", "0.0.0.0") or _IPV4_RE.match(hostname):
        pass
    elif not _HOSTNAME_RE.match(hostname):
        raise ValidationError("URL domain format appears invalid")

    return url


def extract_domain(url: str) -> str:
    """
    Reduce a URL (or bare domain) to the registrable host used by SEO providers.

    Strips protocol, ``www.`` prefix, path, query, fragment and port, and
    lowercases the result.
    """
    domain = url.strip().lower()
    domain = re.sub(r"^https?://", "", domain)
    domain = re.sub(r"^www\.", "", domain)
    domain = re.split(r"[/?#]", domain, maxsplit=1)[0]
    domain = domain.split(":")[0]
    if not domain:
        raise ValidationError(f"Cannot extract a domain from {url!r}")
    return domain
