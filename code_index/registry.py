"""Load the jurisdiction registry produced upstream."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from code_index.adapters.base import Jurisdiction
from code_index.settings import PLATFORMS, CrawlSettings

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Raised when the registry is missing, malformed, or a lookup fails."""


def resolve_platform(name: str | None, settings: CrawlSettings) -> str | None:
    """Map an upstream platform name onto a crawler platform (None if unknown)."""
    if not name:
        return None
    if name in PLATFORMS:
        return name
    return settings.platform_aliases.get(name)


def load_registry(path: Path, settings: CrawlSettings) -> list[Jurisdiction]:
    """Read the registry JSON and return its crawlable jurisdictions in order.

    Accepts either ``{"codes": [...]}`` or a bare list of entries with
    name, county, platform and municipalCodeUrl. Per-city overrides from the
    settings replace platform and URL and attach adapter options.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise RegistryError(f"Registry not found: {path}") from e
    except (OSError, ValueError) as e:
        raise RegistryError(f"Cannot parse registry {path}: {e}") from e

    entries = data.get("codes") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise RegistryError(f"Registry {path} has no list of codes")

    jurisdictions = []
    for raw in entries:
        if not isinstance(raw, dict):
            logger.warning("Skipping malformed registry entry: %r", raw)
            continue
        jurisdiction = _to_jurisdiction(raw, settings)
        if jurisdiction is not None:
            jurisdictions.append(jurisdiction)

    if not jurisdictions:
        raise RegistryError(f"Registry {path} has no usable entries")
    logger.info("Loaded %d jurisdictions from %s", len(jurisdictions), path)
    return jurisdictions


def _to_jurisdiction(raw: dict, settings: CrawlSettings) -> Jurisdiction | None:
    name = raw.get("name")
    if not name:
        logger.warning("Skipping registry entry without a name: %r", raw)
        return None

    override = dict(settings.overrides.get(name, {}) or {})
    source_platform = raw.get("platform") or ""
    url = override.pop("url", None) or raw.get("municipalCodeUrl") or raw.get("url")
    if not url:
        logger.warning("Skipping %s: no municipalCodeUrl", name)
        return None

    platform_name = override.pop("platform", None) or source_platform
    platform = resolve_platform(platform_name, settings)
    if platform is None:
        logger.debug("%s: no crawler for platform %r", name, platform_name)

    return Jurisdiction(
        name=name,
        county=raw.get("county", ""),
        platform=platform,
        base_url=url,
        source_platform=source_platform,
        options=override,
    )
