"""Tests for plugin search across marketplace clones."""

from ccpm.core.installed import InstalledPlugins
from ccpm.core.search import search_plugins


def test_matches_name_or_description(make_marketplace):
    make_marketplace(
        "mp1",
        {
            "trivy": {"name": "trivy", "description": "Container scanner", "version": "1.0.0"},
            "docs": {"name": "docs", "description": "Writes documentation"},
        },
    )
    make_marketplace(
        "mp2",
        {"snyk": {"name": "snyk", "description": "Dependency SCANNER"}},
    )
    installed = InstalledPlugins.model_validate({"plugins": {"snyk@mp2": [{}]}})

    results = search_plugins("scan", installed)

    assert [result.plugin_id for result in results] == ["snyk@mp2", "trivy@mp1"]
    assert results[0].installed is True
    assert results[1].installed is False
    assert results[1].version == "1.0.0"


def test_sorted_by_name_then_alias(make_marketplace):
    make_marketplace("zeta", {"trivy": {"name": "trivy"}})
    make_marketplace("alpha", {"trivy": {"name": "trivy"}})
    results = search_plugins("TRI", InstalledPlugins())
    assert [(r.name, r.alias) for r in results] == [("trivy", "alpha"), ("trivy", "zeta")]


def test_unreadable_manifest_still_matches_by_name(make_marketplace):
    mp_dir = make_marketplace("mp", {"trivy": {}})
    (mp_dir / "trivy" / ".claude-plugin" / "plugin.json").write_text("{oops", encoding="utf-8")
    results = search_plugins("triv", InstalledPlugins())
    assert [r.name for r in results] == ["trivy"]
    assert results[0].description == ""


def test_missing_root_is_empty(ccpm_home):
    assert search_plugins("anything", InstalledPlugins()) == []
