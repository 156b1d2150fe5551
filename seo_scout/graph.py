"""seo_scout.graph: internal link graph, orphan detection and link metrics."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from seo_scout.crawler.models import PageResult
from seo_scout.crawler.urls import normalize_url

__all__ = (
    "LinkGraph",
    "PageLinkMetrics",
    "LinkAnalysis",
    "build_link_graph",
    "find_orphans",
    "analyze_link_graph",
)

LinkGraph = Dict[str, List[str]]

DAMPING = 0.85
ITERATIONS = 10


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round like ``Math.round`` (halves go up), not banker's rounding."""
    scale = 10**ndigits
    return int(value * scale + 0.5) / scale if value >= 0 else -round_half_up(-value, ndigits)


@dataclass(slots=True)
class PageLinkMetrics:
    url: str
    inbound_links: int = 0
    outbound_links: int = 0
    depth: Optional[int] = None
    link_score: float = 1.0
    is_orphaned: bool = False
    is_hub: bool = False
    is_authority: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "inboundLinks": self.inbound_links,
            "outboundLinks": self.outbound_links,
            "depth": self.depth,
            "linkScore": self.link_score,
            "isOrphaned": self.is_orphaned,
            "isHub": self.is_hub,
            "isAuthority": self.is_authority,
        }


@dataclass(slots=True)
class LinkAnalysis:
    """Link structure of the crawled part of a site."""

    pages: Dict[str, PageLinkMetrics] = field(default_factory=dict)
    total_links: int = 0
    avg_inbound_links: float = 0.0
    avg_outbound_links: float = 0.0
    max_depth: int = 0
    avg_depth: float = 0.0

    @property
    def orphans(self) -> List[PageLinkMetrics]:
        return [p for p in self.pages.values() if p.is_orphaned]

    @property
    def hubs(self) -> List[PageLinkMetrics]:
        return [p for p in self.pages.values() if p.is_hub]

    @property
    def authorities(self) -> List[PageLinkMetrics]:
        return [p for p in self.pages.values() if p.is_authority]

    def top_pages(self, limit: int = 10) -> List[PageLinkMetrics]:
        return sorted(self.pages.values(), key=lambda p: p.link_score, reverse=True)[:limit]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "totalPages": len(self.pages),
                "totalLinks": self.total_links,
                "orphanedPages": len(self.orphans),
                "hubPages": len(self.hubs),
                "authorityPages": len(self.authorities),
                "avgInboundLinks": self.avg_inbound_links,
                "avgOutboundLinks": self.avg_outbound_links,
                "maxDepth": self.max_depth,
                "avgDepth": self.avg_depth,
            },
            "pages": [p.to_dict() for p in self.pages.values()],
            "orphanedPages": [{"url": p.url, "depth": p.depth} for p in self.orphans],
            "hubs": [
                {"url": p.url, "outboundLinks": p.outbound_links, "linkScore": p.link_score} for p in self.hubs
            ],
            "authorities": [
                {"url": p.url, "inboundLinks": p.inbound_links, "linkScore": p.link_score}
                for p in self.authorities
            ],
            "topPages": [
                {"url": p.url, "linkScore": p.link_score, "inboundLinks": p.inbound_links}
                for p in self.top_pages()
            ],
        }


def build_link_graph(results: Iterable[PageResult]) -> LinkGraph:
    """Map every crawled URL to the internal URLs it links to."""
    return {page.url: list(page.internal_links) for page in results}


def find_orphans(results: Sequence[PageResult], start_url: str) -> List[PageResult]:
    """
    Pages that no *other* crawled page links to.

    The start page is never an orphan, even when nothing links back to it.
    """
    start = normalize_url(start_url)
    linked_from: Dict[str, set[str]] = {}
    for page in results:
        for target in page.internal_links:
            linked_from.setdefault(target, set()).add(page.url)
    orphans = []
    for page in results:
        if page.url == start:
            continue
        if linked_from.get(page.url, set()) - {page.url}:
            continue
        orphans.append(page)
    return orphans


def _depths(graph: Mapping[str, List[str]], start: str) -> Dict[str, int]:
    depths: Dict[str, int] = {}
    queue = deque([(start, 0)])
    while queue:
        url, depth = queue.popleft()
        if url in depths or url not in graph:
            continue
        depths[url] = depth
        for linked in graph[url]:
            if linked not in depths:
                queue.append((linked, depth + 1))
    return depths


def _page_rank(graph: Mapping[str, List[str]], pages: Dict[str, PageLinkMetrics]) -> None:
    n = len(pages)
    sources = {url: set(links) for url, links in graph.items()}
    for _ in range(ITERATIONS):
        scores: Dict[str, float] = {}
        for url in pages:
            score = (1 - DAMPING) / n
            for from_url, targets in sources.items():
                source = pages.get(from_url)
                if url in targets and source is not None and source.outbound_links > 0:
                    score += DAMPING * (source.link_score / source.outbound_links)
            scores[url] = score
        for url, score in scores.items():
            pages[url].link_score = score

    high = max(p.link_score for p in pages.values())
    low = min(p.link_score for p in pages.values())
    for page in pages.values():
        if high > low:
            page.link_score = int(round_half_up((page.link_score - low) / (high - low) * 100))
        else:
            page.link_score = 50


def analyze_link_graph(graph: Mapping[str, List[str]], start_url: str) -> LinkAnalysis:
    """
    Inbound/outbound counts, click depth, a PageRank-style 0-100 score and
    hub/authority flags for every page of *graph*.
    """
    start = normalize_url(start_url)
    pages = {url: PageLinkMetrics(url=url, outbound_links=len(links)) for url, links in graph.items()}
    analysis = LinkAnalysis(pages=pages, total_links=sum(len(links) for links in graph.values()))
    if not pages:
        return analysis

    for links in graph.values():
        for target in links:
            if target in pages:
                pages[target].inbound_links += 1

    for url, depth in _depths(graph, start).items():
        pages[url].depth = depth

    _page_rank(graph, pages)

    n = len(pages)
    avg_out = sum(p.outbound_links for p in pages.values()) / n
    avg_in = sum(p.inbound_links for p in pages.values()) / n
    for page in pages.values():
        page.is_orphaned = page.inbound_links == 0 and page.url != start
        page.is_hub = page.outbound_links > avg_out * 2
        page.is_authority = page.inbound_links > avg_in * 2

    reached = [p.depth for p in pages.values() if p.depth is not None]
    analysis.avg_inbound_links = round_half_up(avg_in, 1)
    analysis.avg_outbound_links = round_half_up(avg_out, 1)
    analysis.max_depth = max(reached, default=0)
    analysis.avg_depth = round_half_up(sum(reached) / n, 1)
    return analysis
