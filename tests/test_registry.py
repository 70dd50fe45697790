"""Tests for registry loading and crawl settings."""

import json

import pytest

from code_index.registry import RegistryError, load_registry, resolve_platform
from code_index.settings import SettingsError, load_settings, settings_from_dict


@pytest.fixture
def crawl_settings():
    return settings_from_dict({
        "platform_aliases": {"municode": "tree-nav", "codepublishing": "title-chapter-html"},
        "overrides": {
            "Berkeley": {
                "platform": "static-tree",
                "url": "https://berkeley.municipal.codes/BMC",
                "code": "BMC",
            },
        },
    })


def _write(tmp_path, data):
    path = tmp_path / "registry.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestLoadRegistry:
    """Tests for load_registry()."""

    def test_codes_document(self, tmp_path, crawl_settings):
        path = _write(tmp_path, {"codes": [
            {"name": "Alameda", "county": "Alameda", "platform": "municode",
             "municipalCodeUrl": "https://library.municode.com/ca/alameda"},
        ]})
        [j] = load_registry(path, crawl_settings)
        assert j.platform == "tree-nav"
        assert j.source_platform == "municode"
        assert j.options == {}

    def test_bare_list_and_order(self, tmp_path, crawl_settings):
        path = _write(tmp_path, [
            {"name": "B", "platform": "codepublishing", "municipalCodeUrl": "https://b.example/"},
            {"name": "A", "platform": "codepublishing", "municipalCodeUrl": "https://a.example/"},
        ])
        assert [j.name for j in load_registry(path, crawl_settings)] == ["B", "A"]

    def test_override_replaces_platform_and_url(self, tmp_path, crawl_settings):
        path = _write(tmp_path, {"codes": [
            {"name": "Berkeley", "county": "Alameda", "platform": "codepublishing",
             "municipalCodeUrl": "https://www.codepublishing.com/CA/Berkeley/"},
        ]})
        [j] = load_registry(path, crawl_settings)
        assert j.platform == "static-tree"
        assert j.base_url == "https://berkeley.municipal.codes/BMC"
        assert j.options == {"code": "BMC"}
        assert j.source_platform == "codepublishing"

    def test_unknown_platform_kept_without_adapter(self, tmp_path, crawl_settings):
        path = _write(tmp_path, {"codes": [
            {"name": "X", "platform": "ecode360", "municipalCodeUrl": "https://x.example/"},
        ]})
        [j] = load_registry(path, crawl_settings)
        assert j.platform is None

    def test_entries_without_url_skipped(self, tmp_path, crawl_settings):
        path = _write(tmp_path, {"codes": [
            {"name": "NoUrl", "platform": "municode"},
            {"name": "Ok", "platform": "municode", "municipalCodeUrl": "https://ok.example/"},
        ]})
        assert [j.name for j in load_registry(path, crawl_settings)] == ["Ok"]

    @pytest.mark.parametrize("content", ["{broken", json.dumps({"codes": "nope"}), json.dumps({"codes": []})])
    def test_malformed_registry(self, tmp_path, crawl_settings, content):
        path = tmp_path / "registry.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(RegistryError):
            load_registry(path, crawl_settings)

    def test_registry_not_utf8(self, tmp_path, crawl_settings):
        path = tmp_path / "registry.json"
        path.write_bytes(b'{"codes": ["\xff\xfe"]}')
        with pytest.raises(RegistryError, match="Cannot parse"):
            load_registry(path, crawl_settings)

    def test_missing_registry(self, tmp_path, crawl_settings):
        with pytest.raises(RegistryError, match="not found"):
            load_registry(tmp_path / "absent.json", crawl_settings)

    def test_resolve_platform(self, crawl_settings):
        assert resolve_platform("flat-list", crawl_settings) == "flat-list"
        assert resolve_platform("municode", crawl_settings) == "tree-nav"
        assert resolve_platform("", crawl_settings) is None


class TestSettings:
    """Tests for the YAML settings layer."""

    def test_packaged_config(self):
        settings = load_settings()
        assert settings.navigation_interval == pytest.approx(0.3)
        assert settings.jurisdiction_interval == pytest.approx(2.0)
        assert settings.for_platform("static-tree").max_titles == 100
        assert settings.for_platform("title-chapter-html").fetcher == "http"
        assert settings.for_platform("flat-list").code_volume_sources == ["amlegal"]
        assert len(settings.overrides["San Francisco"]["volumes"]) == 19
        assert "Berkeley" in settings.priority
        assert settings.overrides["Palo Alto"]["code_volumes"] is False

    def test_platform_falls_back_to_global_limits(self):
        settings = settings_from_dict({"limits": {"max_titles": 7, "max_chapters": 9}})
        assert settings.for_platform("tree-nav").max_titles == 7
        assert settings.for_platform("tree-nav").max_chapters == 9

    def test_unknown_fetcher(self):
        with pytest.raises(SettingsError):
            settings_from_dict({"platforms": {"tree-nav": {"fetcher": "curl"}}})

    def test_alias_to_unknown_platform(self):
        with pytest.raises(SettingsError):
            settings_from_dict({"platform_aliases": {"municode": "somewhere"}})

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "crawl.yaml"
        path.write_text("navigation: [unclosed", encoding="utf-8")
        with pytest.raises(SettingsError):
            load_settings(path)
