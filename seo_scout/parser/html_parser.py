"""BeautifulSoup implementation of :class:`~seo_scout.parser.html_signals.HtmlSignals`.

Unlike the regex backend it copes with attributes in any order, unquoted
values and nested markup, at the cost of building a full parse tree.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from functools import cached_property
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from seo_scout.parser.html_signals import collapse_whitespace

__all__: Sequence[str] = ("SoupSignals",)


def _meta_named(name: str) -> dict[str, re.Pattern[str]]:
    return {"name": re.compile(rf"^{name}$", re.I)}


class SoupSignals:
    """Parse-tree extraction via ``html.parser``."""

    def __init__(self, html: str) -> None:
        self.html = html
        self.soup = BeautifulSoup(html, "html.parser")

    def _meta_content(self, name: str) -> Optional[str]:
        tag = self.soup.find("meta", attrs=_meta_named(name))
        if not isinstance(tag, Tag):
            return None
        content = tag.get("content")
        return content if isinstance(content, str) else None

    @cached_property
    def title(self) -> str:
        tag = self.soup.find("title")
        return tag.get_text(strip=True) if tag else ""

    @cached_property
    def meta_description(self) -> str:
        return (self._meta_content("description") or "").strip()

    @cached_property
    def h1_texts(self) -> List[str]:
        return [h.get_text(strip=True) for h in self.soup.find_all("h1")]

    def heading_count(self, level: int) -> int:
        return len(self.soup.find_all(f"h{level}"))

    @cached_property
    def visible_text(self) -> str:
        # work on a copy: decompose() mutates the tree
        soup = BeautifulSoup(self.html, "html.parser")
        for element in soup(["script", "style"]):
            element.decompose()
        return collapse_whitespace(soup.get_text(" "))

    @cached_property
    def anchor_hrefs(self) -> List[str]:
        hrefs: List[str] = []
        for tag in self.soup.find_all("a", href=True):
            if not isinstance(tag, Tag):
                continue
            href = tag.get("href")
            if isinstance(href, str) and href:
                hrefs.append(href)
        return hrefs

    @cached_property
    def images(self) -> List[bool]:
        return [img.has_attr("alt") for img in self.soup.find_all("img")]

    @cached_property
    def canonical(self) -> Optional[str]:
        tag = self.soup.find("link", rel="canonical", href=True)
        if not isinstance(tag, Tag):
            return None
        href = tag.get("href")
        return href if isinstance(href, str) else None

    @cached_property
    def robots_meta(self) -> Optional[str]:
        return self._meta_content("robots")

    @cached_property
    def has_viewport(self) -> bool:
        return self.soup.find("meta", attrs=_meta_named("viewport")) is not None
