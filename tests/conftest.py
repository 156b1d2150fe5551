# File: tests/conftest.py
from typing import Iterable, Optional

import pytest

from seo_scout.config import CrawlerSettings
from seo_scout.crawler.models import Issue, PageResult

#: 36 characters, inside the recommended 30-60 window
GOOD_TITLE = "Family Meal Planning Made Simple Now"
#: 128 characters, above the 120 character minimum
GOOD_DESCRIPTION = (
    "Plan balanced weekly meals for the whole family, build grocery lists in seconds "
    "and keep picky eaters happy with tested recipes."
)


def make_html(
    *,
    title: Optional[str] = GOOD_TITLE,
    description: Optional[str] = GOOD_DESCRIPTION,
    h1: Iterable[str] = ("Welcome",),
    words: int = 320,
    links: Iterable[str] = (),
    images: str = "",
    viewport: bool = True,
    head_extra: str = "",
) -> str:
    """
    Build a page that passes every SEO rule unless told otherwise.
    """
    head = []
    if title is not None:
        head.append(f"<title>{title}</title>")
    if description is not None:
        head.append(f'<meta name="description" content="{description}">')
    if viewport:
        head.append('<meta name="viewport" content="width=device-width, initial-scale=1">')
    head.append(head_extra)
    body = "".join(f"<h1>{text}</h1>" for text in h1)
    body += "<p>" + " ".join(["word"] * words) + "</p>"
    body += "".join(f'<a href="{href}">link</a>' for href in links)
    body += images
    return f"<html><head>{''.join(head)}</head><body>{body}</body></html>"


def make_result(url: str, links: Iterable[str] = (), issues: Iterable[Issue] = (), **kwargs) -> PageResult:
    return PageResult(url=url, status_code=200, internal_links=list(links), issues=list(issues), **kwargs)


@pytest.fixture()
def fast_settings() -> CrawlerSettings:
    """
    Crawler settings for local test servers: no politeness delay, short timeout.
    """
    return CrawlerSettings(timeout=2.0, delay=0.0, user_agent="TestAgent/1.0")


@pytest.fixture()
def clean_html() -> str:
    return make_html()
