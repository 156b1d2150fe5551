"""
Crawl frontier: FIFO queue of URLs to visit plus visited/enqueued guards.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Optional, Set

from seo_scout.crawler.urls import normalize_url

__all__ = ("Frontier",)


class Frontier:
    """
    Breadth-first frontier keyed by normalized URL.

    ``next()`` marks a URL visited as it hands it out, so a URL is never
    returned twice; ``offer()`` ignores URLs that are visited or already queued.
    """

    def __init__(self, start_url: str) -> None:
        self.start_url = normalize_url(start_url)
        self._queue: Deque[str] = deque([self.start_url])
        self._enqueued: Set[str] = {self.start_url}
        self.visited: Set[str] = set()

    def next(self) -> Optional[str]:
        while self._queue:
            url = self._queue.popleft()
            self._enqueued.discard(url)
            if url in self.visited:
                continue
            self.visited.add(url)
            return url
        return None

    def offer(self, url: str) -> bool:
        """Enqueue *url* unless it was already visited or queued."""
        norm = normalize_url(url)
        if norm in self.visited or norm in self._enqueued:
            return False
        self._queue.append(norm)
        self._enqueued.add(norm)
        return True

    def mark_visited(self, url: str) -> None:
        self.visited.add(normalize_url(url))

    @property
    def visited_count(self) -> int:
        return len(self.visited)

    def __len__(self) -> int:
        return len(self._queue)

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and normalize_url(url) in self._enqueued
