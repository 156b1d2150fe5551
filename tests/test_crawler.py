# File: tests/test_crawler.py
# Crawl-loop tests against real local aiohttp applications
from __future__ import annotations

import asyncio
import threading
from collections.abc import AsyncIterator
from typing import Dict

import pytest
import pytest_asyncio
from aiohttp import web

from conftest import make_html
import seo_scout.crawler.crawler as crawler_module
from seo_scout.config import CrawlerSettings, CrawlJob
from seo_scout.crawler.crawler import AsyncCrawler
from seo_scout.crawler.models import Severity
from seo_scout.engine import crawl_async


# --------------------------------------------------------------------------- #
#                               Helper utilities                              #
# --------------------------------------------------------------------------- #


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


def site_app(pages: Dict[str, str], hits: Dict[str, int] | None = None) -> web.Application:
    """Application serving *pages* (path -> HTML) and counting requests per path."""
    app = web.Application()

    def handler(path: str, html: str):
        async def handle(_):
            if hits is not None:
                hits[path] = hits.get(path, 0) + 1
            return web.Response(text=html, content_type="text/html")

        return handle

    for path, html in pages.items():
        app.router.add_get(path, handler(path, html))
    return app


async def run_crawler(job: CrawlJob, settings: CrawlerSettings) -> AsyncCrawler:
    async with AsyncCrawler(job, settings) as crawler:
        await asyncio.wait_for(crawler.crawl(), timeout=15)
    return crawler


# --------------------------------------------------------------------------- #
#                            Test-server fixtures                             #
# --------------------------------------------------------------------------- #


@pytest_asyncio.fixture
async def three_page_site(unused_tcp_port: int) -> AsyncIterator[str]:
    app = site_app(
        {
            "/": make_html(links=["/b", "/c"]),
            "/b": make_html(),
            "/c": make_html(links=["/"]),
        }
    )
    async for url in _serve_app(app, unused_tcp_port):
        yield url


@pytest_asyncio.fixture
async def wide_site(unused_tcp_port: int) -> AsyncIterator[str]:
    pages = {"/": make_html(links=[f"/page{i}" for i in range(1, 11)])}
    pages.update({f"/page{i}": make_html() for i in range(1, 11)})
    async for url in _serve_app(site_app(pages), unused_tcp_port):
        yield url


# --------------------------------------------------------------------------- #
#                                   Tests                                     #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_three_page_site_has_no_orphans(three_page_site: str, fast_settings):
    report = await crawl_async(CrawlJob(start_url=three_page_site), fast_settings)

    assert [p.url for p in report.results] == [
        f"{three_page_site}/",
        f"{three_page_site}/b",
        f"{three_page_site}/c",
    ]
    assert report.orphaned_pages == []
    assert report.summary.total_pages == 3
    assert report.summary.orphaned_page_count == 0
    assert report.results[0].internal_links == [f"{three_page_site}/b", f"{three_page_site}/c"]
    assert all(p.issues == [] for p in report.results)
    assert report.link_graph[f"{three_page_site}/c"] == [f"{three_page_site}/"]


@pytest.mark.asyncio()
async def test_max_pages_one_follows_no_links(wide_site: str, fast_settings):
    crawler = await run_crawler(CrawlJob(start_url=wide_site, max_pages=1), fast_settings)

    assert [p.url for p in crawler.results] == [f"{wide_site}/"]
    assert len(crawler.results[0].internal_links) == 10
    assert crawler.frontier.visited_count == 1


@pytest.mark.asyncio()
@pytest.mark.parametrize("concurrency", [1, 4])
async def test_max_pages_is_hard_cap(wide_site: str, concurrency: int):
    settings = CrawlerSettings(timeout=2.0, delay=0.0, concurrency=concurrency)
    report = await crawl_async(CrawlJob(start_url=wide_site, max_pages=5), settings)

    urls = [p.url for p in report.results]
    assert len(urls) == 5
    assert len(set(urls)) == 5
    assert urls[0] == f"{wide_site}/"


@pytest.mark.asyncio()
async def test_duplicate_links_fetched_once(unused_tcp_port: int, fast_settings):
    hits: Dict[str, int] = {}
    app = site_app(
        {
            "/": make_html(links=["/a", "/a/", "/a#top", "a", "/b"]),
            "/a": make_html(links=["/", "/b", "/b/"]),
            "/b": make_html(links=["/a"]),
        },
        hits,
    )
    async for base in _serve_app(app, unused_tcp_port):
        report = await crawl_async(CrawlJob(start_url=f"{base}/#start"), fast_settings)

    assert hits == {"/": 1, "/a": 1, "/b": 1}
    assert [p.url for p in report.results] == [f"{base}/", f"{base}/a", f"{base}/b"]


@pytest.mark.asyncio()
async def test_server_error_page_is_still_analyzed(unused_tcp_port: int, fast_settings):
    app = web.Application()

    async def broken(_):
        return web.Response(status=500, text="<html><title>Oops</title></html>", content_type="text/html")

    app.router.add_get("/", broken)
    async for base in _serve_app(app, unused_tcp_port):
        report = await crawl_async(CrawlJob(start_url=base), fast_settings)

    (page,) = report.results
    assert page.status_code == 500
    assert page.title == "Oops"
    assert ("title", Severity.MEDIUM) in [(i.kind, i.severity) for i in page.issues]
    assert page.content_type.startswith("text/html")


@pytest.mark.asyncio()
async def test_unreachable_start_url_yields_degraded_result(unused_tcp_port: int, fast_settings):
    # nothing listens on the port: connection refused
    report = await crawl_async(CrawlJob(start_url=f"http://127.0.0.1:{unused_tcp_port}/"), fast_settings)

    (page,) = report.results
    assert page.url == f"http://127.0.0.1:{unused_tcp_port}/"
    assert page.status_code == 0
    assert len(page.issues) == 1
    assert page.issues[0].severity is Severity.CRITICAL
    assert page.issues[0].kind == "crawl"
    assert report.orphaned_pages == []
    assert report.summary.issue_breakdown["critical"] == 1
    assert report.summary.avg_word_count == 0


@pytest.mark.asyncio()
async def test_failed_page_does_not_abort_crawl(unused_tcp_port: int):
    app = web.Application()

    async def root(_):
        return web.Response(text=make_html(links=["/slow", "/ok"]), content_type="text/html")

    async def slow(_):
        await asyncio.sleep(1.0)
        return web.Response(text=make_html(), content_type="text/html")

    async def ok(_):
        return web.Response(text=make_html(), content_type="text/html")

    app.router.add_get("/", root)
    app.router.add_get("/slow", slow)
    app.router.add_get("/ok", ok)

    settings = CrawlerSettings(timeout=0.3, delay=0.0)
    async for base in _serve_app(app, unused_tcp_port):
        report = await crawl_async(CrawlJob(start_url=base), settings)

    by_url = {p.url: p for p in report.results}
    assert set(by_url) == {f"{base}/", f"{base}/slow", f"{base}/ok"}
    assert by_url[f"{base}/slow"].status_code == 0
    assert "timed out" in by_url[f"{base}/slow"].issues[0].message
    assert by_url[f"{base}/ok"].status_code == 200


@pytest.mark.asyncio()
async def test_non_html_is_visited_but_not_reported(unused_tcp_port: int, fast_settings):
    app = web.Application()
    hits = {"pdf": 0}

    async def root(_):
        return web.Response(
            text=make_html(links=["/guide.pdf", "/guide.pdf", "/about"]), content_type="text/html"
        )

    async def pdf(_):
        hits["pdf"] += 1
        return web.Response(body=b"%PDF-1.4", content_type="application/pdf")

    async def about(_):
        return web.Response(text=make_html(links=["/guide.pdf"]), content_type="text/html")

    app.router.add_get("/", root)
    app.router.add_get("/guide.pdf", pdf)
    app.router.add_get("/about", about)

    async for base in _serve_app(app, unused_tcp_port):
        crawler = await run_crawler(CrawlJob(start_url=base), fast_settings)

    assert [p.url for p in crawler.results] == [f"{base}/", f"{base}/about"]
    assert crawler.skipped_urls == [f"{base}/guide.pdf"]
    assert crawler.frontier.visited_count == len(crawler.results) + len(crawler.skipped_urls)
    assert hits["pdf"] == 1


@pytest.mark.asyncio()
async def test_external_links_recorded_but_never_crawled(unused_tcp_port: int, fast_settings):
    app = site_app({"/": make_html(links=["https://other.example/x", "/in"]), "/in": make_html()})
    async for base in _serve_app(app, unused_tcp_port):
        following = await crawl_async(CrawlJob(start_url=base, follow_external=True), fast_settings)
        default = await crawl_async(CrawlJob(start_url=base), fast_settings)

    assert following.results[0].external_links == ["https://other.example/x"]
    assert [p.url for p in following.results] == [f"{base}/", f"{base}/in"]
    assert default.results[0].external_links == []


@pytest.mark.asyncio()
async def test_self_linking_page_reached_through_another_is_not_orphan(unused_tcp_port: int, fast_settings):
    app = site_app(
        {
            "/": make_html(links=["/a"]),
            "/a": make_html(links=["/hidden"]),
            "/hidden": make_html(links=["/hidden"]),
        }
    )
    async for base in _serve_app(app, unused_tcp_port):
        report = await crawl_async(CrawlJob(start_url=base), fast_settings)

    assert report.orphaned_pages == []
    assert report.link_metrics.pages[f"{base}/hidden"].depth == 2


@pytest.mark.asyncio()
async def test_user_agent_header_sent(unused_tcp_port: int):
    seen = []
    app = web.Application()

    async def root(request):
        seen.append(request.headers.get("User-Agent"))
        return web.Response(text=make_html(), content_type="text/html")

    app.router.add_get("/", root)
    async for base in _serve_app(app, unused_tcp_port):
        await crawl_async(CrawlJob(start_url=base), CrawlerSettings(delay=0.0))

    assert seen == ["SEO-Crawler-Bot/1.0"]


@pytest.mark.asyncio()
async def test_crawl_timeout_cancels_whole_crawl(unused_tcp_port: int):
    app = web.Application()

    async def slow(_):
        await asyncio.sleep(1.0)
        return web.Response(text=make_html(), content_type="text/html")

    app.router.add_get("/", slow)
    settings = CrawlerSettings(timeout=5.0, delay=0.0, crawl_timeout=0.2)
    async for base in _serve_app(app, unused_tcp_port):
        with pytest.raises(asyncio.TimeoutError):
            await crawl_async(CrawlJob(start_url=base), settings)


@pytest.mark.asyncio()
async def test_soup_parser_backend(three_page_site: str):
    settings = CrawlerSettings(timeout=2.0, delay=0.0, parser="soup")
    report = await crawl_async(CrawlJob(start_url=three_page_site), settings)
    assert report.summary.total_pages == 3
    assert report.orphaned_pages == []


@pytest.mark.asyncio()
async def test_crawl_requires_session():
    crawler = AsyncCrawler(CrawlJob(start_url="http://example.com"))
    with pytest.raises(RuntimeError):
        await crawler.crawl()


@pytest.mark.asyncio()
async def test_encoded_and_unicode_paths_are_one_page(unused_tcp_port: int, fast_settings):
    hits: Dict[str, int] = {}
    app = web.Application()

    async def any_page(request):
        hits[request.path] = hits.get(request.path, 0) + 1
        links = ["/café", "/caf%C3%A9"] if request.path == "/" else []
        return web.Response(text=make_html(links=links), content_type="text/html")

    app.router.add_get("/{tail:.*}", any_page)
    async for base in _serve_app(app, unused_tcp_port):
        report = await crawl_async(CrawlJob(start_url=base), fast_settings)

    assert [p.url for p in report.results] == [f"{base}/", f"{base}/caf%C3%A9"]
    assert hits == {"/": 1, "/café": 1}
    assert report.orphaned_pages == []


@pytest.mark.asyncio()
async def test_analysis_runs_off_event_loop(three_page_site: str, fast_settings, monkeypatch):
    loop_thread = threading.get_ident()
    analysis_threads = []
    original = crawler_module.analyze_signals

    def recording(signals, load_time_ms):
        analysis_threads.append(threading.get_ident())
        return original(signals, load_time_ms)

    monkeypatch.setattr(crawler_module, "analyze_signals", recording)
    report = await crawl_async(CrawlJob(start_url=three_page_site), fast_settings)

    assert report.summary.total_pages == 3
    assert len(analysis_threads) == 3
    assert loop_thread not in analysis_threads


@pytest.mark.asyncio()
async def test_analysis_error_yields_degraded_result(three_page_site: str, fast_settings, monkeypatch):
    def broken(signals, load_time_ms):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(crawler_module, "analyze_signals", broken)
    report = await crawl_async(CrawlJob(start_url=three_page_site), fast_settings)

    (page,) = report.results
    assert page.status_code == 0
    assert page.issues[0].message == "Failed to crawl: analysis error: parser exploded"
