"""seo_scout.analyzer: on-page SEO rules.

The rule table below is the whole definition of page quality: each rule is
evaluated independently and a page usually collects several issues.

======================  ==========================================  =========
Signal                  Condition                                   Severity
======================  ==========================================  =========
title                   missing                                     high
                        shorter than 30 chars                       medium
                        longer than 60 chars                        low
meta description        missing                                     medium
                        shorter than 120 chars                      low
h1                      none                                        high
                        more than one                               medium
content                 fewer than 300 words                        medium
images                  any ``<img>`` without ``alt``               medium
robots meta             contains ``noindex`` or ``nofollow``        high
viewport                missing                                     high
load time               over 5000 ms                                high
                        over 3000 ms                                medium
======================  ==========================================  =========
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from seo_scout.crawler.models import Issue, Severity
from seo_scout.parser.html_signals import HtmlSignals, RegexSignals

__all__ = ("PageAnalysis", "analyze", "analyze_signals", "SignalsFactory")

SignalsFactory = Callable[[str], HtmlSignals]

TITLE_MIN = 30
TITLE_MAX = 60
META_DESCRIPTION_MIN = 120
THIN_CONTENT_WORDS = 300
SLOW_LOAD_MS = 3000
VERY_SLOW_LOAD_MS = 5000


@dataclass(slots=True)
class PageAnalysis:
    title: str = ""
    meta_description: str = ""
    h1: List[str] = field(default_factory=list)
    h2_count: int = 0
    h3_count: int = 0
    word_count: int = 0
    image_count: int = 0
    images_missing_alt: int = 0
    canonical: Optional[str] = None
    robots_meta: Optional[str] = None
    has_viewport: bool = False
    issues: List[Issue] = field(default_factory=list)


def _title_issues(title: str) -> List[Issue]:
    if not title:
        return [Issue("title", Severity.HIGH, "Missing title tag")]
    if len(title) < TITLE_MIN:
        return [Issue("title", Severity.MEDIUM, f"Title too short ({len(title)} chars, recommend 30-60)")]
    if len(title) > TITLE_MAX:
        return [Issue("title", Severity.LOW, f"Title too long ({len(title)} chars, recommend 30-60)")]
    return []


def _meta_description_issues(description: str) -> List[Issue]:
    if not description:
        return [Issue("meta_description", Severity.MEDIUM, "Missing meta description")]
    if len(description) < META_DESCRIPTION_MIN:
        return [
            Issue(
                "meta_description",
                Severity.LOW,
                f"Meta description too short ({len(description)} chars)",
            )
        ]
    return []


def _h1_issues(h1: List[str]) -> List[Issue]:
    if not h1:
        return [Issue("h1", Severity.HIGH, "Missing H1 tag")]
    if len(h1) > 1:
        return [Issue("h1", Severity.MEDIUM, f"Multiple H1 tags found ({len(h1)})")]
    return []


def _load_time_issues(load_time_ms: int) -> List[Issue]:
    if load_time_ms > VERY_SLOW_LOAD_MS:
        return [Issue("performance", Severity.HIGH, f"Slow load time: {load_time_ms}ms")]
    if load_time_ms > SLOW_LOAD_MS:
        return [Issue("performance", Severity.MEDIUM, f"Slow load time: {load_time_ms}ms")]
    return []


def analyze_signals(signals: HtmlSignals, load_time_ms: int) -> PageAnalysis:
    """Apply the rule table to already extracted *signals*."""
    page = PageAnalysis(
        title=signals.title,
        meta_description=signals.meta_description,
        h1=list(signals.h1_texts),
        h2_count=signals.heading_count(2),
        h3_count=signals.heading_count(3),
        word_count=len(signals.visible_text.split()),
        image_count=len(signals.images),
        images_missing_alt=sum(1 for has_alt in signals.images if not has_alt),
        canonical=signals.canonical,
        robots_meta=signals.robots_meta,
        has_viewport=signals.has_viewport,
    )

    issues = page.issues
    issues += _title_issues(page.title)
    issues += _meta_description_issues(page.meta_description)
    issues += _h1_issues(page.h1)
    if page.word_count < THIN_CONTENT_WORDS:
        issues.append(
            Issue("content", Severity.MEDIUM, f"Thin content ({page.word_count} words, recommend 300+)")
        )
    if page.images_missing_alt:
        issues.append(
            Issue("images", Severity.MEDIUM, f"{page.images_missing_alt} images missing alt text")
        )
    robots = (page.robots_meta or "").lower()
    if "noindex" in robots or "nofollow" in robots:
        issues.append(
            Issue("robots", Severity.HIGH, f"Page has restrictive robots meta: {page.robots_meta}")
        )
    if not page.has_viewport:
        issues.append(Issue("mobile", Severity.HIGH, "Missing viewport meta tag"))
    issues += _load_time_issues(load_time_ms)
    return page


def analyze(html: str, load_time_ms: int, signals: SignalsFactory = RegexSignals) -> PageAnalysis:
    """Extract signals from *html* with *signals* and analyze them."""
    return analyze_signals(signals(html), load_time_ms)
