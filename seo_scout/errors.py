"""
Exception hierarchy for SEO Scout.

Only :class:`JobError` ever reaches the caller of a crawl; page-level
:class:`FetchError` is converted into a degraded page result by the crawl loop.
"""
from __future__ import annotations

__all__ = ("SeoScoutError", "JobError", "FetchError")


class SeoScoutError(Exception):
    """Base class for all SEO Scout errors."""


class JobError(SeoScoutError, ValueError):
    """The crawl job is invalid and was rejected before any request was made."""


class FetchError(SeoScoutError):
    """A single page could not be fetched (network failure, timeout, bad URL)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
