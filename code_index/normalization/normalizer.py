"""Build, merge, and persist the municipal code cache document."""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from code_index.adapters.base import Chapter, JurisdictionResult, Title
from code_index.taxonomy import TAXONOMY

logger = logging.getLogger(__name__)

DESCRIPTION = "Municipal code table of contents by jurisdiction, tagged by topic"


def _iso(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment else None


def chapter_to_dict(chapter: Chapter) -> dict:
    return {
        "name": chapter.name,
        "url": chapter.url,
        "categories": list(chapter.categories),
    }


def title_to_dict(title: Title) -> dict:
    node = {"name": title.name, "url": title.url}
    if title.is_code_type:
        node["isCodeType"] = True
    node["categories"] = list(title.categories)
    node["chapters"] = [chapter_to_dict(c) for c in title.chapters]
    return node


def result_to_dict(result: JurisdictionResult) -> dict:
    return {
        "city": result.city,
        "county": result.county,
        "platform": result.platform,
        "baseUrl": result.base_url,
        "titles": [title_to_dict(t) for t in result.titles],
        "scraped": _iso(result.scraped),
    }


def build_stats(cities: dict, now: datetime) -> dict:
    """Aggregate counts over every city in the cache, not only this run's."""
    entries = [entry for entry in cities.values() if isinstance(entry, dict)]
    titles_of = [entry.get("titles") or [] for entry in entries]
    return {
        "citiesWithContent": sum(1 for titles in titles_of if titles),
        "totalCities": len(entries),
        "totalTitles": sum(len(titles) for titles in titles_of),
        "totalChapters": sum(
            len(title.get("chapters") or []) for titles in titles_of for title in titles
        ),
        "lastUpdated": _iso(now),
    }


def merge_results(
    previous: dict | None,
    results: Iterable[JurisdictionResult],
    now: datetime | None = None,
) -> dict:
    """Return a new cache document with results replacing their cities' entries.

    Cities not in results are carried over unchanged; previous is not mutated.
    """
    now = now or datetime.now(timezone.utc)
    cities = copy.deepcopy((previous or {}).get("cities") or {})
    for result in results:
        cities[result.city] = result_to_dict(result)

    return {
        "generated": _iso(now),
        "description": DESCRIPTION,
        "taxonomy": copy.deepcopy(TAXONOMY),
        "cities": cities,
        "stats": build_stats(cities, now),
    }


def load_cache(path: Path) -> dict | None:
    """Read the previous cache; None when it is missing or unreadable."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable cache %s: %s", path, e)
        return None
    if not isinstance(data, dict) or not isinstance(data.get("cities", {}), dict):
        logger.warning("Ignoring cache %s with unexpected layout", path)
        return None
    cities = data.get("cities", {})
    for name in [n for n, entry in cities.items() if not isinstance(entry, dict)]:
        logger.warning("Dropping malformed cache entry for %s", name)
        del cities[name]
    logger.info("Loaded previous cache with %d cities", len(data.get("cities", {})))
    return data


def dump_cache(cache: dict) -> str:
    return json.dumps(cache, indent=2, ensure_ascii=False)


def write_cache(cache: dict, path: Path) -> int:
    """Atomically write the cache document; return its size in bytes."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    body = dump_cache(cache).encode("utf-8")

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(body)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.info("Wrote %s (%d KB)", path, round(len(body) / 1024))
    return len(body)
