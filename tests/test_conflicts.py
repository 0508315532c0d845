"""Tests for naming-conflict detection."""

from ccpm.core.config import MarketplaceConfig
from ccpm.core.conflicts import check_conflicts, find_alias_conflicts, find_duplicate_plugins
from ccpm.core.installed import InstalledPlugins


def _inventory(*ids):
    return InstalledPlugins.model_validate({"plugins": {i: [{"scope": "user"}] for i in ids}})


def test_duplicates_across_marketplaces():
    installed = _inventory("trivy@b", "trivy@a", "snyk@a", "malformed")
    assert find_duplicate_plugins(installed) == {"trivy": ["trivy@a", "trivy@b"]}


def test_alias_matching_plugin_name_ignores_case():
    installed = _inventory("Trivy@plinde-plugins", "snyk@psec")
    config = MarketplaceConfig(marketplaces={"x/trivy": "trivy", "p/plugins": "plinde-plugins"})
    conflicts = find_alias_conflicts(config, installed)
    assert len(conflicts) == 1
    assert conflicts[0].alias == "trivy"
    assert conflicts[0].repo == "x/trivy"
    assert conflicts[0].plugin_ids == ["Trivy@plinde-plugins"]


def test_report_counts_both_kinds():
    installed = _inventory("trivy@a", "trivy@b")
    config = MarketplaceConfig(marketplaces={"x/trivy": "trivy"})
    report = check_conflicts(config, installed)
    assert report.count == 2


def test_clean_setup_has_no_conflicts():
    report = check_conflicts(
        MarketplaceConfig(marketplaces={"a/a": "alpha"}), _inventory("trivy@alpha")
    )
    assert report.count == 0
