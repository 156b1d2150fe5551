"""
URL canonicalisation helpers used as the crawler's identity/dedup key.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import SplitResult, quote, urlsplit, urlunsplit

__all__ = ("normalize_url", "url_origin")

_DEFAULT_PORTS = {"http": 80, "https": 443}

# characters left as-is when re-quoting; existing %XX escapes are kept
_PATH_SAFE = "/%:@!$&'()*+,;=[]|^\\"
_QUERY_SAFE = _PATH_SAFE + "?`{}"


def _split(url: str) -> Optional[SplitResult]:
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a non-numeric or out-of-range port
        if parts.hostname:
            _ascii_host(parts.hostname)
    except (TypeError, ValueError, AttributeError):
        return None
    if not parts.scheme or not parts.netloc or not parts.hostname:
        return None
    return parts


def _ascii_host(hostname: str) -> str:
    """Punycode an internationalised host name; UnicodeError is a ValueError."""
    if hostname.isascii():
        return hostname
    return hostname.encode("idna").decode("ascii")


def _host_port(parts: SplitResult) -> str:
    host = _ascii_host(parts.hostname or "")
    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    if port is not None and port != _DEFAULT_PORTS.get(parts.scheme.lower()):
        host = f"{host}:{port}"
    return host


def normalize_url(url: str) -> str:
    """
    Canonical form of an absolute URL.

    The fragment is dropped, trailing slashes are removed from the path unless
    the path is just ``/``, scheme and host are lower-cased and a default port
    is dropped. Non-ASCII host names are IDNA-encoded and non-ASCII or unsafe
    characters in path and query are percent-encoded, so ``/café`` and
    ``/caf%C3%A9`` are the same page. Malformed input is returned unchanged.
    """
    parts = _split(url)
    if parts is None:
        return url
    netloc = _host_port(parts)
    userinfo = parts.netloc.rpartition("@")[0] if "@" in parts.netloc else ""
    if userinfo:
        netloc = f"{userinfo}@{netloc}"
    path = quote(parts.path, safe=_PATH_SAFE).rstrip("/") or "/"
    query = quote(parts.query, safe=_QUERY_SAFE)
    return urlunsplit((parts.scheme.lower(), netloc, path, query, ""))


def url_origin(url: str) -> Optional[str]:
    """Return ``scheme://host[:port]`` for *url*, or None when it is malformed."""
    parts = _split(url)
    if parts is None:
        return None
    return f"{parts.scheme.lower()}://{_host_port(parts)}"
