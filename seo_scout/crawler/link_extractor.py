"""
Link resolution and internal/external classification for SEO Scout.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional
from urllib.parse import urljoin, urlsplit

from seo_scout.crawler.urls import normalize_url, url_origin
from seo_scout.logger import logger

__all__ = ("ExtractedLinks", "resolve_href", "extract_links")

_SKIP_PREFIXES = ("#", "mailto:", "tel:")


@dataclass(slots=True)
class ExtractedLinks:
    """Links of one page, in document order (duplicates kept)."""

    internal: List[str] = field(default_factory=list)
    external: List[str] = field(default_factory=list)


def resolve_href(href: str, page_url: str, start_url: str) -> Optional[str]:
    """
    Turn an ``href`` into an absolute URL.

    ``//host/path`` takes the start URL's scheme, ``/path`` is joined to the
    start origin, anything else is relative to *page_url*. Returns None for
    fragment-only, ``mailto:`` and ``tel:`` targets.
    """
    raw = href.strip()
    if not raw or raw.lower().startswith(_SKIP_PREFIXES):
        return None
    if raw.lower().startswith(("http://", "https://")):
        return raw
    if raw.startswith("//"):
        return f"{urlsplit(start_url).scheme}:{raw}"
    if raw.startswith("/"):
        return f"{url_origin(start_url)}{raw}"
    return urljoin(page_url, raw)


def extract_links(
    hrefs: Iterable[str],
    page_url: str,
    start_url: str,
    follow_external: bool = False,
) -> ExtractedLinks:
    """
    Resolve and classify every href found on *page_url*.

    Internal links are normalized; external ones are kept only when
    *follow_external* is set. Malformed hrefs are logged and dropped.
    """
    origin = url_origin(start_url)
    links = ExtractedLinks()
    for href in hrefs:
        try:
            absolute = resolve_href(href, page_url, start_url)
        except ValueError as exc:
            logger.warning("Invalid URL: %s (%s)", href, exc)
            continue
        if absolute is None:
            continue
        scheme = absolute.partition(":")[0].lower()
        if scheme not in ("http", "https"):
            logger.debug("Skipping non-HTTP link %s on %s", absolute, page_url)
            continue
        link_origin = url_origin(absolute)
        if link_origin is None:
            logger.warning("Invalid URL: %s on %s", href, page_url)
            continue
        if link_origin == origin:
            links.internal.append(normalize_url(absolute))
        elif follow_external:
            links.external.append(absolute)
    return links
