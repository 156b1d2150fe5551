"""
SEO Scout package initializer.
Defines package version and exposes the crawl entry points.
"""
__version__ = "0.1.0"

from seo_scout.aggregator import CrawlReport, CrawlSummary
from seo_scout.config import CrawlerSettings, CrawlJob
from seo_scout.crawler.models import Issue, PageResult, Severity
from seo_scout.engine import Engine, crawl, crawl_async
from seo_scout.errors import FetchError, JobError, SeoScoutError

__all__ = [
    "__version__",
    "crawl",
    "crawl_async",
    "Engine",
    "CrawlJob",
    "CrawlerSettings",
    "CrawlReport",
    "CrawlSummary",
    "PageResult",
    "Issue",
    "Severity",
    "SeoScoutError",
    "JobError",
    "FetchError",
]
