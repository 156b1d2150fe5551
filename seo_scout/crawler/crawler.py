from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, List, Optional, Set, Tuple

from aiohttp import ClientSession, ClientTimeout

from seo_scout.analyzer import PageAnalysis, SignalsFactory, analyze_signals
from seo_scout.config import CrawlerSettings, CrawlJob
from seo_scout.crawler.fetcher import Fetcher
from seo_scout.crawler.frontier import Frontier
from seo_scout.crawler.link_extractor import ExtractedLinks, extract_links
from seo_scout.crawler.models import PageResult
from seo_scout.errors import FetchError
from seo_scout.parser.html_parser import SoupSignals
from seo_scout.parser.html_signals import RegexSignals

__all__ = ("AsyncCrawler", "signals_factory")

_PARSERS: Dict[str, SignalsFactory] = {"regex": RegexSignals, "soup": SoupSignals}


def signals_factory(name: str) -> SignalsFactory:
    try:
        return _PARSERS[name]
    except KeyError:
        raise ValueError(f"unknown parser {name!r}") from None


class AsyncCrawler:
    """
    Ограниченный обход сайта в ширину с SEO-анализом каждой страницы.

    Всё состояние обхода (frontier, результаты) принадлежит экземпляру;
    два краулера можно запускать одновременно.
    """

    def __init__(self, job: CrawlJob, settings: Optional[CrawlerSettings] = None) -> None:
        self.job = job
        self.settings = settings or CrawlerSettings()
        self.frontier = Frontier(str(job.start_url))
        self.start_url: str = self.frontier.start_url
        self.results: List[PageResult] = []
        self.skipped_urls: List[str] = []
        self.session: Optional[ClientSession] = None
        self.logger = logging.getLogger("SeoScout")
        self._signals = signals_factory(self.settings.parser)
        self._fetcher: Optional[Fetcher] = None
        self._order: Dict[str, int] = {}
        self._rate_lock = asyncio.Lock()
        self._last_request_ts = 0.0

    async def __aenter__(self) -> AsyncCrawler:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.settings.timeout),
            headers={"User-Agent": self.settings.user_agent},
            raise_for_status=False,
        )
        self._fetcher = Fetcher(self.session, self.settings)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self) -> List[PageResult]:
        """Run the crawl to completion and return page results in BFS order."""
        if self._fetcher is None:
            raise RuntimeError("Session not initialized")
        self.logger.info("Starting crawl from %s (max %d pages)", self.start_url, self.job.max_pages)
        start = time.monotonic()
        pending: Set[asyncio.Task[Optional[PageResult]]] = set()
        try:
            while True:
                while len(pending) < self.settings.concurrency and self.frontier.visited_count < self.job.max_pages:
                    url = self.frontier.next()
                    if url is None:
                        break
                    self._order[url] = len(self._order)
                    self.logger.info("Crawling %s (%d/%d)", url, self.frontier.visited_count, self.job.max_pages)
                    pending.add(asyncio.create_task(self._visit(url), name=url))
                if not pending:
                    break
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    self._collect(task.get_name(), task.result())
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        self.results.sort(key=lambda page: self._order[page.url])
        duration = time.monotonic() - start
        self.logger.info(
            "Finished: %d pages in %.2f s (%d non-HTML skipped, %d left in queue)",
            len(self.results),
            duration,
            len(self.skipped_urls),
            len(self.frontier),
        )
        return self.results

    def _collect(self, url: str, page: Optional[PageResult]) -> None:
        if page is None:
            self.skipped_urls.append(url)
            return
        self.results.append(page)
        for link in page.internal_links:
            if self.frontier.offer(link):
                self.logger.debug("Queued %s", link)

    async def _visit(self, url: str) -> Optional[PageResult]:
        assert self._fetcher is not None
        await self._wait_for_rate_limit()
        try:
            fetched = await self._fetcher.fetch(url)
        except FetchError as exc:
            self.logger.warning("Error crawling %s: %s", url, exc.reason)
            return PageResult.failed(url, exc.reason)

        if not fetched.is_html:
            self.logger.debug("Skipping %s: content type %r", url, fetched.content_type)
            return None

        try:
            # CPU-bound parsing runs in a worker thread, not on the event loop
            analysis, links = await asyncio.to_thread(
                self._analyze, url, fetched.body or "", fetched.load_time_ms
            )
        except Exception as exc:
            self.logger.exception("Analysis failed for %s", url)
            return PageResult.failed(url, f"analysis error: {exc}")

        return PageResult(
            url=url,
            status_code=fetched.status_code,
            title=analysis.title,
            meta_description=analysis.meta_description,
            h1=analysis.h1,
            h2_count=analysis.h2_count,
            h3_count=analysis.h3_count,
            word_count=analysis.word_count,
            internal_links=links.internal,
            external_links=links.external,
            image_count=analysis.image_count,
            images_missing_alt=analysis.images_missing_alt,
            canonical=analysis.canonical,
            robots_meta=analysis.robots_meta,
            has_viewport=analysis.has_viewport,
            load_time_ms=fetched.load_time_ms,
            content_type=fetched.content_type,
            issues=analysis.issues,
        )

    def _analyze(self, url: str, html: str, load_time_ms: int) -> Tuple[PageAnalysis, ExtractedLinks]:
        signals = self._signals(html)
        analysis = analyze_signals(signals, load_time_ms)
        links = extract_links(signals.anchor_hrefs, url, self.start_url, self.job.follow_external)
        return analysis, links

    async def _wait_for_rate_limit(self) -> None:
        async with self._rate_lock:
            now = time.monotonic()
            wait = self.settings.delay - (now - self._last_request_ts)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request_ts = time.monotonic()
