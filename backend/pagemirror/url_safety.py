"""Best-effort block list for URLs the service is willing to render."""

import re
from urllib.parse import urlparse

ALLOWED_SCHEMES = ("http", "https")
BLOCKED_PREFIXES = ("127.", "192.168.", "10.")


def _is_private_172(hostname: str) -> bool:
    if not hostname.startswith("172."):
        return False
    labels = hostname.split(".")
    # Leading digits only, so "20abc" counts as 20
    digits = re.match(r"\d+", labels[1]) if len(labels) > 1 else None
    if digits is None:
        return False
    second = int(digits.group())
    return 16 <= second <= 31


def is_url_safe(url: str) -> bool:
    """
    True if `url` is http(s) and its host is not an obvious private address.

    Only hostname patterns are checked. DNS rebinding, IPv6 loopback and
    redirects to private hosts are not caught.
    """
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
        # Out-of-range or non-numeric ports only raise when read
        parsed.port
    except (ValueError, TypeError, AttributeError):
        return False

    if parsed.scheme not in ALLOWED_SCHEMES or not hostname:
        return False

    if (
        hostname == "localhost"
        or hostname.startswith(BLOCKED_PREFIXES)
        or _is_private_172(hostname)
    ):
        return False
    return True
