"""Adapter for sites with an explicit title index page (municipal.codes style).

The index page links every title as ``/<CODE>/<number>`` with the number and
display name in ``.num`` / ``.name`` child elements. Each title page is then
visited for its chapter links.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

from .base import BaseAdapter, Jurisdiction, Title, make_title, same_site
from ..navigation.navigator import Link, LinkPredicate, Page
from ..normalization.text_cleaner import clean_label

TITLE_PATH = re.compile(r"^/(?P<code>[^/]+)/(?P<num>\d+)/?$")


def code_of(url: str) -> str:
    """First path segment of url ('BMC' for https://x.municipal.codes/BMC)."""
    segments = [s for s in urlparse(url).path.split("/") if s]
    return segments[0] if segments else ""


def chapter_links_for(code: str, site_url: str) -> LinkPredicate:
    prefix = f"/{code}/" if code else "/"

    def predicate(text: str, url: str) -> bool:
        path = urlparse(url).path
        return (
            same_site(url, site_url)
            and path.startswith(prefix)
            and not TITLE_PATH.match(path)
            and 5 < len(text) < 200
        )

    return predicate


class StaticTreeAdapter(BaseAdapter):
    """Titles from the numbered index, chapters from each title page."""

    platform = "static-tree"

    def normalize_url(self, jurisdiction: Jurisdiction) -> str:
        url = jurisdiction.base_url
        code = jurisdiction.options.get("code") or self.settings.default_path
        if code and urlparse(url).path.strip("/") == "":
            url = url.rstrip("/") + "/" + code.strip("/")
        return url

    def title_index(self, page: Page, code: str) -> list[tuple[str, str, str]]:
        """(number, name, url) for each title linked from the index page."""
        soup = self.navigator.soup(page)
        if soup is None:
            return []

        entries = []
        seen = set()
        for a in soup.find_all("a", href=True):
            url = urljoin(page.final_url, a["href"])
            match = TITLE_PATH.match(urlparse(url).path)
            if not match or (code and match.group("code") != code) or url in seen:
                continue
            name_el = a.select_one(".name")
            num_el = a.select_one(".num")
            name = clean_label(name_el.get_text(" ") if name_el else a.get_text(" "))
            num = clean_label(num_el.get_text(" ")) if num_el else match.group("num")
            if not name:
                continue
            seen.add(url)
            entries.append((num or match.group("num"), name, url))
        return entries

    def discover(self, jurisdiction: Jurisdiction) -> list[Title]:
        root_url = self.normalize_url(jurisdiction)
        code = jurisdiction.options.get("code") or code_of(root_url)

        root = self.navigator.open(root_url)
        index = self.title_index(root, code) if isinstance(root, Page) else []
        self.logger.debug("Found %d titles", len(index))

        predicate = chapter_links_for(code, root_url)
        titles = []
        for num, name, url in index[: self.max_titles]:
            self.logger.debug("Processing Title %s: %s", num, name)
            link = Link(f"Title {num} - {name}", url)
            try:
                chapters = self.chapters_from(url, predicate, exclude_url=url, unique_names=True)
            except Exception as e:
                self.logger.warning("Error scraping Title %s: %s", num, e)
                chapters = []
            titles.append(self._record(make_title(link, chapters, category_text=name)))
        return titles
