"""
Rewrite relative resource references in an HTML document to absolute URLs.

Regex based, not a parser: markup the patterns don't recognise is left as-is.
"""

import re
from urllib.parse import quote, urljoin, urlparse

# Each pattern captures (prefix, url, suffix); only the middle group changes.
RESOURCE_PATTERNS = [
    re.compile(r"""(<img[^>]+src=["'])([^"']+)(["'][^>]*>)""", re.IGNORECASE),
    re.compile(r"""(<link[^>]+href=["'])([^"']+)(["'][^>]*>)""", re.IGNORECASE),
    re.compile(r"""(<script[^>]+src=["'])([^"']+)(["'][^>]*>)""", re.IGNORECASE),
    re.compile(r"""(url\(["']?)([^"')]+)(["']?\))""", re.IGNORECASE),
]

WEB_SCHEMES = ("http", "https")
# Characters left as-is when percent-encoding a resolved URL, as in an href
HREF_SAFE_CHARS = ":/?#[]@!$&'()*+,;=%~"


def _parse_base(base_url: str):
    parsed = urlparse(base_url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"Not an absolute URL: {base_url!r}")
    return parsed


def _absolutize(match: re.Match, base_url: str, web_base: bool) -> str:
    prefix, url, suffix = match.group(1), match.group(2), match.group(3)
    if url.startswith("http") or url.startswith("//"):
        return match.group(0)
    try:
        if web_base:
            # Browsers treat backslashes as path separators in http(s) URLs
            url = url.replace("\\", "/")
        absolute = urljoin(base_url, url)
        if urlparse(absolute).scheme in WEB_SCHEMES:
            absolute = quote(absolute, safe=HREF_SAFE_CHARS)
    except ValueError:
        return match.group(0)
    return prefix + absolute + suffix


def process_resource_urls(html: str, base_url: str) -> str:
    """
    Resolve img/script src, link href and CSS url() values against `base_url`.

    Never raises. If `base_url` isn't an absolute URL the document comes back
    untouched; a single reference that fails to resolve is kept verbatim.
    """
    try:
        base = _parse_base(base_url)
    except (ValueError, TypeError, AttributeError):
        return html

    web_base = base.scheme in WEB_SCHEMES
    processed = html
    for pattern in RESOURCE_PATTERNS:
        processed = pattern.sub(lambda m: _absolutize(m, base_url, web_base), processed)
    return processed
