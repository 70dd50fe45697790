"""Navigator: polite page loading and link extraction for one jurisdiction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, NamedTuple, Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from code_index.normalization.text_cleaner import clean_label
from code_index.utils.rate_limiter import IntervalLimiter

from .fetchers import BaseFetcher

logger = logging.getLogger(__name__)


class Link(NamedTuple):
    """An anchor's cleaned text and absolute URL."""

    text: str
    url: str


@dataclass
class Page:
    """A successfully loaded page."""

    url: str
    html: str
    final_url: str = ""
    _soup: Optional[BeautifulSoup] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if not self.final_url:
            self.final_url = self.url

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(self.html, "html.parser")
        return self._soup


@dataclass(frozen=True)
class NavigationFailure:
    """A page load that timed out or errored; yields no links."""

    url: str
    reason: str


PageHandle = Union[Page, NavigationFailure]
LinkPredicate = Callable[[str, str], bool]


class Navigator:
    """Open pages through a fetcher, spacing navigations by a minimum interval.

    Navigation errors never propagate: open() returns a NavigationFailure,
    which extract_links() treats as a page with no links.

    Args:
        fetcher: Page loader (browser or HTTP).
        limiter: Spacing between this navigator's navigations.
        label: Name used in log messages (usually the jurisdiction).
    """

    def __init__(
        self,
        fetcher: BaseFetcher,
        limiter: IntervalLimiter | None = None,
        label: str = "",
    ):
        self.fetcher = fetcher
        self.limiter = limiter or IntervalLimiter(0)
        self.label = label
        self.navigations = 0
        self.failures = 0

    def open(self, url: str, wait_for: str | None = None) -> PageHandle:
        """Load url; returns a Page or a NavigationFailure."""
        self.limiter.wait()
        self.navigations += 1
        logger.debug("[%s] Opening %s", self.label, url)
        try:
            html, final_url = self.fetcher.fetch(url, wait_for=wait_for)
        except Exception as e:
            self.failures += 1
            logger.warning("[%s] Navigation failed for %s: %s", self.label, url, e)
            return NavigationFailure(url=url, reason=str(e) or e.__class__.__name__)
        return Page(url=url, html=html or "", final_url=final_url or url)

    def soup(self, handle: PageHandle) -> BeautifulSoup | None:
        """Parsed document for a page, or None for a failure."""
        if isinstance(handle, NavigationFailure):
            return None
        return handle.soup

    def extract_links(
        self,
        handle: PageHandle,
        predicate: LinkPredicate | None = None,
    ) -> list[Link]:
        """Return de-duplicated (text, absolute url) pairs accepted by predicate."""
        soup = self.soup(handle)
        if soup is None:
            return []
        return links_from_soup(soup, handle.final_url, predicate)


def links_from_soup(
    soup: BeautifulSoup,
    base_url: str,
    predicate: LinkPredicate | None = None,
) -> list[Link]:
    """Collect anchor links from soup in document order."""
    links = []
    seen = set()
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href or href.lower().startswith(("#", "javascript:", "mailto:")):
            continue
        text = clean_label(a.get_text(" "))
        if not text:
            continue
        url = urljoin(base_url, href)
        if url in seen:
            continue
        if predicate is not None and not predicate(text, url):
            continue
        seen.add(url)
        links.append(Link(text, url))
    return links
