"""Shared utility functions for service layer."""
import re
from urllib.parse import parse_qsl, urlencode, urlsplit

# Opinionated: "www." and "m." (mobile) prefixes point at the same site
_HOST_PREFIX = re.compile(r"^(www|m)\.")


def _strip_host(url: str) -> str:
    """Lowercased host of a URL without user/password/port or www/m prefix."""
    try:
        host = urlsplit(url).hostname or ""
    except ValueError:
        return ""
    return _HOST_PREFIX.sub("", host)


def normalize_url(url: str) -> str:
    """
    Aggressively normalize a URL into a deduplication key.

    - remove scheme, user/password, port and fragment
    - lowercase the host and drop a leading "www." or "m."
    - remove utm_* query parameters
    - sort the remaining query parameters by key
    - trim "/" from both ends

    Example:
        https://user:pw@www.Example.com:8080/path/?b=2&utm_source=x&a=1#top
        -> example.com/path/?a=1&b=2
    """
    parts = urlsplit(url)
    query_params = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if not key.startswith("utm_")
    ]
    # Stable sort: repeated keys keep their relative order
    query_params.sort(key=lambda item: item[0])

    normalized = _strip_host(url) + parts.path
    if query_params:
        normalized += "?" + urlencode(query_params)
    return normalized.strip("/")


def calculate_domain(url: str) -> str:
    """Domain of a URL with "www." / "m." removed, or "" if the URL has no host."""
    return _strip_host(url)
