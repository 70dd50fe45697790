"""Base platform adapter and canonical data structures for code crawling."""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional
from urllib.parse import urlparse

from ..navigation.navigator import Link, LinkPredicate, Navigator
from ..normalization.categorizer import tag_list
from ..settings import PlatformSettings

logger = logging.getLogger(__name__)


@dataclass
class Jurisdiction:
    """One registry entry: a city or county and where its code is published."""

    name: str
    county: str
    platform: Optional[str]
    base_url: str
    source_platform: str = ""
    options: dict = field(default_factory=dict)


@dataclass
class Chapter:
    """A chapter-level entry (leaf)."""

    name: str
    url: str
    categories: list[str] = field(default_factory=list)


@dataclass
class Title:
    """A title, or a code volume when is_code_type is set."""

    name: str
    url: str
    categories: list[str] = field(default_factory=list)
    chapters: list[Chapter] = field(default_factory=list)
    is_code_type: bool = False


@dataclass
class JurisdictionResult:
    """The table of contents collected for one jurisdiction in one run."""

    city: str
    county: str
    platform: str
    base_url: str
    titles: list[Title] = field(default_factory=list)
    scraped: Optional[datetime] = None

    def __post_init__(self):
        if self.scraped is None:
            self.scraped = datetime.now(timezone.utc)

    @property
    def chapter_count(self) -> int:
        return sum(len(t.chapters) for t in self.titles)


def make_chapter(link: Link) -> Chapter:
    return Chapter(name=link.text, url=link.url, categories=tag_list(link.text))


def make_title(
    link: Link,
    chapters: Iterable[Chapter] = (),
    is_code_type: bool = False,
    category_text: str | None = None,
) -> Title:
    """Build a Title; categories come from category_text when given, else the name."""
    return Title(
        name=link.text,
        url=link.url,
        categories=tag_list(category_text if category_text is not None else link.text),
        chapters=list(chapters),
        is_code_type=is_code_type,
    )


def same_site(url: str, root_url: str) -> bool:
    """True when url is on the same host as root_url."""
    return urlparse(url).netloc.lower() == urlparse(root_url).netloc.lower()


class BaseAdapter(abc.ABC):
    """Abstract base class for all platform adapters.

    Subclasses implement discover(); titles are appended to self.collected as
    they are finished so a cancelled crawl can keep them.
    """

    platform: str = ""

    def __init__(self, navigator: Navigator, settings: PlatformSettings):
        self.navigator = navigator
        self.settings = settings
        self.collected: list[Title] = []
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def max_titles(self) -> int:
        return self.settings.max_titles

    @property
    def max_chapters(self) -> int:
        return self.settings.max_chapters

    def normalize_url(self, jurisdiction: Jurisdiction) -> str:
        """Entry URL for the jurisdiction; platforms append default paths here."""
        return jurisdiction.base_url

    @abc.abstractmethod
    def discover(self, jurisdiction: Jurisdiction) -> list[Title]:
        """Produce the annotated Title -> Chapter tree for one jurisdiction."""

    def crawl(self, jurisdiction: Jurisdiction) -> JurisdictionResult:
        """Run discover() and wrap the titles in a JurisdictionResult."""
        self.logger.info("Starting discovery for %s", jurisdiction.name)
        titles = self.discover(jurisdiction)
        result = self.partial_result(jurisdiction)
        result.titles = list(titles)
        self.logger.info(
            "Discovered %d titles, %d chapters for %s (%d pages, %d failed)",
            len(result.titles),
            result.chapter_count,
            jurisdiction.name,
            self.navigator.navigations,
            self.navigator.failures,
        )
        return result

    def partial_result(self, jurisdiction: Jurisdiction) -> JurisdictionResult:
        """Result holding whatever has been collected so far."""
        return JurisdictionResult(
            city=jurisdiction.name,
            county=jurisdiction.county,
            platform=self.platform,
            base_url=jurisdiction.base_url,
            titles=list(self.collected),
        )

    def _record(self, title: Title) -> Title:
        self.collected.append(title)
        return title

    def chapters_from(
        self,
        url: str,
        predicate: LinkPredicate,
        exclude_url: str | None = None,
        wait_for: str | None = None,
        unique_names: bool = False,
    ) -> list[Chapter]:
        """Navigate to url and return its first max_chapters chapter links.

        A failed navigation yields an empty list.
        """
        page = self.navigator.open(url, wait_for=wait_for)
        links = self.navigator.extract_links(page, predicate)
        chapters = []
        names = set()
        for link in links:
            if exclude_url and link.url.rstrip("/") == exclude_url.rstrip("/"):
                continue
            if unique_names:
                if link.text in names:
                    continue
                names.add(link.text)
            chapters.append(make_chapter(link))
            if len(chapters) >= self.max_chapters:
                break
        return chapters

    def walk_titles(
        self,
        title_links: list[Link],
        chapter_predicate: LinkPredicate,
        unique_names: bool = False,
        wait_for: str | None = None,
    ) -> list[Title]:
        """Visit the first max_titles title links and collect their chapters.

        A title whose page fails or raises is still recorded, with no chapters.
        """
        titles = []
        for link in title_links[: self.max_titles]:
            self.logger.debug("Processing: %s", link.text[:60])
            try:
                chapters = self.chapters_from(
                    link.url,
                    chapter_predicate,
                    exclude_url=link.url,
                    wait_for=wait_for,
                    unique_names=unique_names,
                )
            except Exception as e:
                self.logger.warning("Error processing title %s: %s", link.text[:60], e)
                chapters = []
            titles.append(self._record(make_title(link, chapters)))
        return titles
