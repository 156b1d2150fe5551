"""HTML signal extraction for the page analyzer.

:class:`HtmlSignals` is the narrow interface the analyzer and link extractor
read from. Two implementations exist:

* :class:`RegexSignals`: ad hoc regular expressions over the raw markup.
  Fragile with unusual attribute order or quoting, but it is the established
  behaviour and stays the default.
* :class:`~seo_scout.parser.html_parser.SoupSignals`: BeautifulSoup based.

Both are cheap to construct; every signal is computed lazily and cached.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from functools import cached_property
from typing import List, Optional, Protocol, runtime_checkable

__all__: Sequence[str] = ("HtmlSignals", "RegexSignals", "collapse_whitespace")

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.I | re.S)
_META_DESC_RE = re.compile(r"""<meta\s+name=["']description["']\s+content=["']([^"']*)["']""", re.I)
_H1_RE = re.compile(r"<h1[^>]*>(.*?)</h1>", re.I | re.S)
_TAG_RE = re.compile(r"<[^>]+>")
_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.I)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.I)
_WS_RE = re.compile(r"\s+")
_ANCHOR_RE = re.compile(r"""<a[^>]+href=["']([^"']+)["'][^>]*>""", re.I)
_IMG_RE = re.compile(r"<img[^>]+>", re.I)
_ALT_RE = re.compile(r"""alt=["'][^"']*["']""", re.I)
_CANONICAL_RE = re.compile(r"""<link[^>]+rel=["']canonical["'][^>]+href=["']([^"']+)["']""", re.I)
_ROBOTS_RE = re.compile(r"""<meta[^>]+name=["']robots["'][^>]+content=["']([^"']+)["']""", re.I)
_VIEWPORT_RE = re.compile(r"""<meta[^>]+name=["']viewport["']""", re.I)


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


@runtime_checkable
class HtmlSignals(Protocol):
    """SEO-relevant signals of one HTML document."""

    @property
    def title(self) -> str: ...

    @property
    def meta_description(self) -> str: ...

    @property
    def h1_texts(self) -> List[str]: ...

    def heading_count(self, level: int) -> int: ...

    @property
    def visible_text(self) -> str: ...

    @property
    def anchor_hrefs(self) -> List[str]: ...

    @property
    def images(self) -> List[bool]:
        """One entry per ``<img>``; True when the tag carries an ``alt``."""
        ...

    @property
    def canonical(self) -> Optional[str]: ...

    @property
    def robots_meta(self) -> Optional[str]: ...

    @property
    def has_viewport(self) -> bool: ...


class RegexSignals:
    """Regular-expression extraction over the raw markup."""

    def __init__(self, html: str) -> None:
        self.html = html

    @cached_property
    def title(self) -> str:
        match = _TITLE_RE.search(self.html)
        return match.group(1).strip() if match else ""

    @cached_property
    def meta_description(self) -> str:
        match = _META_DESC_RE.search(self.html)
        return match.group(1).strip() if match else ""

    @cached_property
    def h1_texts(self) -> List[str]:
        return [_TAG_RE.sub("", inner).strip() for inner in _H1_RE.findall(self.html)]

    def heading_count(self, level: int) -> int:
        return len(re.findall(rf"<h{level}[^>]*>", self.html, re.I))

    @cached_property
    def visible_text(self) -> str:
        text = _SCRIPT_RE.sub("", self.html)
        text = _STYLE_RE.sub("", text)
        return collapse_whitespace(_TAG_RE.sub(" ", text))

    @cached_property
    def anchor_hrefs(self) -> List[str]:
        return _ANCHOR_RE.findall(self.html)

    @cached_property
    def images(self) -> List[bool]:
        return [bool(_ALT_RE.search(tag)) for tag in _IMG_RE.findall(self.html)]

    @cached_property
    def canonical(self) -> Optional[str]:
        match = _CANONICAL_RE.search(self.html)
        return match.group(1) if match else None

    @cached_property
    def robots_meta(self) -> Optional[str]:
        match = _ROBOTS_RE.search(self.html)
        return match.group(1) if match else None

    @cached_property
    def has_viewport(self) -> bool:
        return bool(_VIEWPORT_RE.search(self.html))
