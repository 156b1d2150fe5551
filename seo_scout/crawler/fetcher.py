"""
Fetcher module: one HTTP GET per page with a bounded timeout.
"""
from __future__ import annotations

import asyncio
import time

from aiohttp import ClientError, ClientSession, ClientTimeout

from seo_scout.config import CrawlerSettings
from seo_scout.crawler.models import FetchResult
from seo_scout.errors import FetchError

__all__ = ("Fetcher",)


class Fetcher:
    """Fetches pages through a shared session. No retries."""

    def __init__(self, session: ClientSession, settings: CrawlerSettings) -> None:
        self.session = session
        self.settings = settings
        self._timeout = ClientTimeout(total=settings.timeout)

    async def fetch(self, url: str) -> FetchResult:
        """
        GET *url* and return its response.

        Non-HTML responses come back with ``body=None``. Any transport-level
        failure raises :class:`FetchError`.
        """
        started = time.monotonic()
        try:
            async with self.session.get(url, timeout=self._timeout) as resp:
                load_time_ms = round((time.monotonic() - started) * 1000)
                content_type = resp.headers.get("Content-Type", "")
                if "text/html" not in content_type.lower():
                    return FetchResult(url, resp.status, content_type, None, load_time_ms)
                body = await resp.text(errors="replace")
        except asyncio.TimeoutError as exc:
            raise FetchError(url, f"timed out after {self.settings.timeout:g}s") from exc
        except (ClientError, ValueError) as exc:
            raise FetchError(url, str(exc) or exc.__class__.__name__) from exc
        return FetchResult(url, resp.status, content_type, body, load_time_ms)
