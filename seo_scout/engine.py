# File: seo_scout/engine.py
"""seo_scout.engine: точка входа для запуска обхода и сборки отчёта."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Union

from seo_scout.aggregator import CrawlReport, build_report
from seo_scout.config import CrawlerSettings, CrawlJob, ScoutConfig, load_config
from seo_scout.crawler.crawler import AsyncCrawler
from seo_scout.logger import logger

__all__ = ["Engine", "crawl", "crawl_async"]

JobLike = Union[CrawlJob, Mapping[str, Any]]


def _as_job(job: JobLike) -> CrawlJob:
    return job if isinstance(job, CrawlJob) else CrawlJob.parse(job)


async def crawl_async(job: JobLike, settings: Optional[CrawlerSettings] = None) -> CrawlReport:
    """
    Обходит сайт и возвращает CrawlReport.

    Ошибки задания (JobError) возникают до первого запроса. Если задан
    ``settings.crawl_timeout``, по его истечении обход отменяется и
    TimeoutError пробрасывается вызывающему без частичного отчёта.
    """
    job = _as_job(job)
    settings = settings or CrawlerSettings()

    async def _runner() -> CrawlReport:
        async with AsyncCrawler(job, settings) as crawler:
            results = await crawler.crawl()
            return build_report(crawler.start_url, results, crawler.skipped_urls)

    if settings.crawl_timeout is None:
        return await _runner()
    try:
        return await asyncio.wait_for(_runner(), timeout=settings.crawl_timeout)
    except asyncio.TimeoutError:
        logger.error("Crawl did not finish within %s seconds", settings.crawl_timeout)
        raise


def crawl(job: JobLike, settings: Optional[CrawlerSettings] = None) -> CrawlReport:
    """Синхронная обёртка над :func:`crawl_async` (запускает свой event loop)."""
    return asyncio.run(crawl_async(job, settings))


class Engine:
    """Фасад для CLI и тестов: конфигурация, запуск обхода и отчёт."""

    @staticmethod
    def load_config(path: Optional[str]) -> ScoutConfig:
        """Загружает конфиг из YAML/JSON."""
        return load_config(path)

    def __init__(self, job: JobLike, settings: Optional[CrawlerSettings] = None) -> None:
        self.job = _as_job(job)
        self.settings = settings or CrawlerSettings()

    def run(self) -> CrawlReport:
        """Запускает обход и возвращает отчёт."""
        logger.info("Starting crawl…")
        try:
            return crawl(self.job, self.settings)
        except Exception as exc:
            logger.error("Crawl failed: %s", exc)
            raise
