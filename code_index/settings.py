"""Crawl configuration loaded from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent / "config"
DEFAULT_CONFIG = CONFIG_DIR / "crawl.yaml"

PLATFORMS = ("tree-nav", "multi-book", "flat-list", "title-chapter-html", "static-tree")
FETCHER_KINDS = ("browser", "http")


class SettingsError(ValueError):
    """Raised when the crawl configuration is missing or malformed."""


@dataclass
class PlatformSettings:
    """Per-platform crawl options."""

    fetcher: str = "browser"
    max_titles: int = 30
    max_chapters: int = 50
    default_path: str = ""
    wait_for: Optional[str] = None
    code_volume_sources: list[str] = field(default_factory=list)


@dataclass
class CrawlSettings:
    """Everything a crawl run reads from configuration."""

    registry_path: str = "public/api/municipal-codes.json"
    output_path: str = "public/data/municipal-codes-content.json"
    navigation_interval: float = 0.3
    jurisdiction_interval: float = 2.0
    timeout: float = 45
    settle: float = 1.5
    user_agent: Optional[str] = None
    max_titles: int = 30
    max_chapters: int = 50
    platforms: dict[str, PlatformSettings] = field(default_factory=dict)
    platform_aliases: dict[str, str] = field(default_factory=dict)
    priority: list[str] = field(default_factory=list)
    overrides: dict[str, dict] = field(default_factory=dict)

    def for_platform(self, platform: str) -> PlatformSettings:
        """Settings for platform, falling back to the global limits."""
        found = self.platforms.get(platform)
        if found is not None:
            return found
        return PlatformSettings(max_titles=self.max_titles, max_chapters=self.max_chapters)


def load_settings(path: Path | None = None) -> CrawlSettings:
    """Read crawl settings from YAML (the packaged crawl.yaml by default)."""
    path = Path(path) if path else DEFAULT_CONFIG
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise SettingsError(f"Cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError(f"Config {path} must be a mapping")
    return settings_from_dict(data)


def settings_from_dict(data: dict) -> CrawlSettings:
    nav = data.get("navigation", {}) or {}
    limits = data.get("limits", {}) or {}
    max_titles = int(limits.get("max_titles", 30))
    max_chapters = int(limits.get("max_chapters", 50))

    platforms = {}
    for name, cfg in (data.get("platforms", {}) or {}).items():
        if name not in PLATFORMS:
            raise SettingsError(f"Unknown platform in config: {name}")
        cfg = cfg or {}
        fetcher = cfg.get("fetcher", "browser")
        if fetcher not in FETCHER_KINDS:
            raise SettingsError(f"Unknown fetcher '{fetcher}' for platform {name}")
        platforms[name] = PlatformSettings(
            fetcher=fetcher,
            max_titles=int(cfg.get("max_titles", max_titles)),
            max_chapters=int(cfg.get("max_chapters", max_chapters)),
            default_path=cfg.get("default_path", "") or "",
            wait_for=cfg.get("wait_for"),
            code_volume_sources=list(cfg.get("code_volume_sources") or []),
        )

    aliases = dict(data.get("platform_aliases", {}) or {})
    for alias, target in aliases.items():
        if target not in PLATFORMS:
            raise SettingsError(f"Alias {alias} maps to unknown platform {target}")

    paths = data.get("paths", {}) or {}
    defaults = CrawlSettings()
    return CrawlSettings(
        registry_path=paths.get("registry", defaults.registry_path),
        output_path=paths.get("output", defaults.output_path),
        navigation_interval=float(nav.get("min_interval", defaults.navigation_interval)),
        jurisdiction_interval=float(nav.get("jurisdiction_interval", defaults.jurisdiction_interval)),
        timeout=float(nav.get("timeout", defaults.timeout)),
        settle=float(nav.get("settle", defaults.settle)),
        user_agent=nav.get("user_agent"),
        max_titles=max_titles,
        max_chapters=max_chapters,
        platforms=platforms,
        platform_aliases=aliases,
        priority=list(data.get("priority", []) or []),
        overrides=dict(data.get("overrides", {}) or {}),
    )
