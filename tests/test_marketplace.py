"""Tests for marketplace catalog and plugin manifest readers."""

import pytest

from ccpm.core.config import MarketplaceConfig
from ccpm.core.errors import CatalogError
from ccpm.core.marketplace import (
    is_plugin_dir,
    list_catalog_marketplaces,
    list_marketplace_dirs,
    list_plugin_dirs,
    load_all_catalogs,
    load_catalog,
    load_plugin_manifest,
    parse_repo_from_remote,
    read_plugin_manifest,
)


class TestParseRepoFromRemote:
    """Tests for GitHub remote URL parsing."""

    @pytest.mark.parametrize(
        "remote, expected",
        [
            ("git@github.com:plinde/claude-plugins.git", "plinde/claude-plugins"),
            ("https://github.com/plinde/claude-plugins.git", "plinde/claude-plugins"),
            ("https://github.com/plinde/claude-plugins", "plinde/claude-plugins"),
            ("git@github.com:org/repo", "org/repo"),
            ("  https://github.com/org/repo.git\n", "org/repo"),
        ],
    )
    def test_github_forms(self, remote, expected):
        assert parse_repo_from_remote(remote) == expected

    @pytest.mark.parametrize("remote", ["not-a-url", "https://gitlab.com/org/repo", ""])
    def test_other_hosts_are_empty(self, remote):
        assert parse_repo_from_remote(remote) == ""

    def test_output_is_stable_when_re_embedded(self):
        repo = "plinde/claude-plugins"
        for template in (
            "git@github.com:{}",
            "git@github.com:{}.git",
            "https://github.com/{}",
            "https://github.com/{}.git",
        ):
            assert parse_repo_from_remote(template.format(repo)) == repo


class TestCatalog:
    """Tests for marketplace.json loading."""

    def test_load_catalog(self, make_marketplace):
        mp_dir = make_marketplace(
            "plinde-plugins",
            catalog={
                "name": "plinde-plugins",
                "owner": {"name": "plinde"},
                "metadata": None,
                "plugins": [
                    {"name": "trivy", "description": "Scanner", "version": "1.0.0",
                     "source": "./trivy", "keywords": None},
                    {"name": "snyk", "source": {"source": "github", "repo": "a/b"}},
                ],
            },
        )
        catalog = load_catalog(mp_dir)
        assert catalog.owner.name == "plinde"
        assert catalog.plugin_names() == ["trivy", "snyk"]
        assert catalog.get_plugin("trivy").description == "Scanner"
        assert catalog.get_plugin("trivy").keywords == []
        assert catalog.get_plugin("missing") is None

    def test_missing_catalog_raises(self, tmp_path):
        with pytest.raises(CatalogError):
            load_catalog(tmp_path)

    def test_plugin_without_name_raises(self, make_marketplace):
        mp_dir = make_marketplace("bad", catalog={"plugins": [{"description": "x"}]})
        with pytest.raises(CatalogError):
            load_catalog(mp_dir)

    def test_load_all_catalogs_skips_failures(self, make_marketplace, marketplaces_dir):
        make_marketplace("good", catalog={"name": "good", "plugins": []})
        make_marketplace("no-catalog")
        config = MarketplaceConfig(
            marketplaces={"a/good": "good", "a/none": "no-catalog", "a/absent": "absent"}
        )
        loaded = load_all_catalogs(config)
        assert list(loaded) == ["good"]
        assert loaded["good"].repo == "a/good"
        assert loaded["good"].path == marketplaces_dir / "good"
        assert list_catalog_marketplaces() == ["good"]


class TestPluginDirs:
    """Tests for plugin directory listing and plugin.json reading."""

    def test_lists_only_manifest_dirs(self, make_marketplace):
        mp_dir = make_marketplace(
            "mp",
            {"trivy": {"name": "trivy"}, "snyk": {"name": "snyk"}},
            catalog={"plugins": []},
        )
        (mp_dir / "docs").mkdir()
        (mp_dir / "README.md").write_text("hi", encoding="utf-8")
        assert list_plugin_dirs(mp_dir) == ["snyk", "trivy"]
        assert is_plugin_dir(mp_dir / "trivy")
        assert not is_plugin_dir(mp_dir / "docs")

    def test_manifest_reading(self, make_marketplace):
        mp_dir = make_marketplace(
            "mp", {"trivy": {"name": "trivy", "description": "Scanner", "version": "1.2.0"}}
        )
        manifest = load_plugin_manifest(mp_dir, "trivy")
        assert manifest.version == "1.2.0"

        (mp_dir / "trivy" / ".claude-plugin" / "plugin.json").write_text("{", encoding="utf-8")
        with pytest.raises(CatalogError):
            load_plugin_manifest(mp_dir, "trivy")
        lenient = read_plugin_manifest(mp_dir, "trivy")
        assert lenient.name == "trivy"
        assert lenient.description == ""

    def test_marketplace_dirs_sorted(self, make_marketplace, marketplaces_dir):
        assert list_marketplace_dirs() == []
        make_marketplace("zeta")
        make_marketplace("alpha")
        (marketplaces_dir / "stray.txt").write_text("", encoding="utf-8")
        assert list_marketplace_dirs() == ["alpha", "zeta"]
