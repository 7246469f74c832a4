"""Input hardening helpers shared by endpoints and services."""

from __future__ import annotations

import hmac
import ipaddress
import re
from urllib.parse import urlparse


_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")

_BLOCKED_HOSTS = frozenset({"localhost", "metadata.google.internal"})


def sanitize_string(value: str, max_length: int = 1000) -> str:
    """Trim, truncate and strip control characters (keeps tabs and newlines)."""
    return _CONTROL_CHARS.sub("", value.strip()[:max_length])


def is_valid_external_url(url: str) -> bool:
    """Reject non-HTTP(S) URLs and URLs pointing at local or private hosts."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False

    hostname = parsed.hostname.lower()
    if hostname in _BLOCKED_HOSTS or hostname.endswith(".localhost"):
        return False
    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return True
    return not (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_unspecified
        or address.is_reserved
    )


def secure_compare(a: str, b: str) -> bool:
    """Constant-time string comparison."""
    return hmac.compare_digest(a.encode(), b.encode())
