# File: seo_scout/aggregator.py
"""seo_scout.aggregator: сводная статистика и итоговый отчёт обхода."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from seo_scout.crawler.models import PageResult, Severity
from seo_scout.crawler.urls import normalize_url
from seo_scout.graph import (
    LinkAnalysis,
    LinkGraph,
    analyze_link_graph,
    build_link_graph,
    find_orphans,
    round_half_up,
)

__all__ = ("CrawlSummary", "CrawlReport", "aggregate", "build_report", "PREVIEW_SIZE")

#: number of page results returned to the caller in the preview payload
PREVIEW_SIZE = 20


@dataclass(slots=True)
class CrawlSummary:
    """Сводка по всем страницам обхода."""

    total_pages: int = 0
    pages_with_issues: int = 0
    avg_word_count: int = 0
    avg_load_time_ms: int = 0
    orphaned_page_count: int = 0
    total_issues: int = 0
    issue_breakdown: Dict[str, int] = field(
        default_factory=lambda: {severity.value: 0 for severity in Severity}
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalPages": self.total_pages,
            "pagesWithIssues": self.pages_with_issues,
            "avgWordCount": self.avg_word_count,
            "avgLoadTimeMs": self.avg_load_time_ms,
            "orphanedPageCount": self.orphaned_page_count,
            "totalIssues": self.total_issues,
            "issueBreakdown": dict(self.issue_breakdown),
        }


@dataclass(slots=True)
class CrawlReport:
    """Результаты обхода сайта: страницы, сироты, сводка и граф ссылок."""

    start_url: str
    results: List[PageResult] = field(default_factory=list)
    orphaned_pages: List[PageResult] = field(default_factory=list)
    summary: CrawlSummary = field(default_factory=CrawlSummary)
    link_graph: LinkGraph = field(default_factory=dict)
    link_metrics: LinkAnalysis = field(default_factory=LinkAnalysis)
    skipped_urls: List[str] = field(default_factory=list)

    def to_dict(self, preview: Optional[int] = PREVIEW_SIZE) -> Dict[str, Any]:
        """
        Payload for the caller.

        With *preview* set only the first *preview* results are included;
        ``preview=None`` returns everything plus the link graph and metrics.
        """
        results = self.results if preview is None else self.results[:preview]
        data: Dict[str, Any] = {
            "summary": self.summary.to_dict(),
            "results": [page.to_dict() for page in results],
            "orphanedPages": [page.to_dict() for page in self.orphaned_pages],
        }
        if preview is None:
            data["startUrl"] = self.start_url
            data["linkGraph"] = {url: list(links) for url, links in self.link_graph.items()}
            data["linkMetrics"] = self.link_metrics.to_dict()
            data["skippedUrls"] = list(self.skipped_urls)
        return data

    def json(self, *, pretty: bool = False, preview: Optional[int] = PREVIEW_SIZE) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.to_dict(preview), ensure_ascii=False, indent=2 if pretty else None)


def aggregate(results: Sequence[PageResult], orphaned_pages: Sequence[PageResult]) -> CrawlSummary:
    """Single pass over *results*; averages are 0 for an empty crawl."""
    summary = CrawlSummary(total_pages=len(results), orphaned_page_count=len(orphaned_pages))
    words = load_time = 0
    for page in results:
        words += page.word_count
        load_time += page.load_time_ms
        if page.issues:
            summary.pages_with_issues += 1
        summary.total_issues += len(page.issues)
        for issue in page.issues:
            summary.issue_breakdown[issue.severity.value] += 1
    if results:
        summary.avg_word_count = int(round_half_up(words / len(results)))
        summary.avg_load_time_ms = int(round_half_up(load_time / len(results)))
    return summary


def build_report(
    start_url: str,
    results: Sequence[PageResult],
    skipped_urls: Sequence[str] = (),
) -> CrawlReport:
    """Собирает все части отчёта в CrawlReport после завершения обхода."""
    start = normalize_url(start_url)
    orphans = find_orphans(results, start)
    graph = build_link_graph(results)
    return CrawlReport(
        start_url=start,
        results=list(results),
        orphaned_pages=orphans,
        summary=aggregate(results, orphans),
        link_graph=graph,
        link_metrics=analyze_link_graph(graph, start),
        skipped_urls=list(skipped_urls),
    )
