"""
Data models for the SEO Scout crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

__all__ = ("Severity", "Issue", "FetchResult", "PageResult")


class Severity(str, Enum):
    """Issue severity, ordered from worst to mildest."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True, slots=True)
class Issue:
    """A single rule violation found on a page."""

    kind: str
    severity: Severity
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.kind, "severity": self.severity.value, "message": self.message}


@dataclass(slots=True)
class FetchResult:
    """Raw HTTP response of one GET. ``body`` is None for non-HTML content."""

    url: str
    status_code: int
    content_type: str
    body: Optional[str]
    load_time_ms: int

    @property
    def is_html(self) -> bool:
        return self.body is not None


@dataclass(slots=True)
class PageResult:
    """Everything the crawl learned about one visited URL."""

    url: str
    status_code: int = 0
    title: str = ""
    meta_description: str = ""
    h1: List[str] = field(default_factory=list)
    h2_count: int = 0
    h3_count: int = 0
    word_count: int = 0
    internal_links: List[str] = field(default_factory=list)
    external_links: List[str] = field(default_factory=list)
    image_count: int = 0
    images_missing_alt: int = 0
    canonical: Optional[str] = None
    robots_meta: Optional[str] = None
    has_viewport: bool = False
    load_time_ms: int = 0
    content_type: str = ""
    issues: List[Issue] = field(default_factory=list)

    @classmethod
    def failed(cls, url: str, reason: str) -> PageResult:
        """Degraded result for a page that could not be fetched."""
        return cls(
            url=url,
            issues=[Issue("crawl", Severity.CRITICAL, f"Failed to crawl: {reason}")],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "statusCode": self.status_code,
            "title": self.title,
            "metaDescription": self.meta_description,
            "h1": list(self.h1),
            "h2Count": self.h2_count,
            "h3Count": self.h3_count,
            "wordCount": self.word_count,
            "internalLinks": list(self.internal_links),
            "externalLinks": list(self.external_links),
            "imageCount": self.image_count,
            "imagesMissingAlt": self.images_missing_alt,
            "canonical": self.canonical,
            "robotsMeta": self.robots_meta,
            "hasViewport": self.has_viewport,
            "loadTimeMs": self.load_time_ms,
            "contentType": self.content_type,
            "issues": [issue.to_dict() for issue in self.issues],
        }
