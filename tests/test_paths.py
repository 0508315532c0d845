"""Tests for standard filesystem locations."""

from pathlib import Path

from ccpm.core.paths import (
    config_dir,
    config_path,
    host_state_dir,
    installed_manifest_path,
    marketplace_dir,
    marketplaces_root,
)


def test_xdg_config_home_wins(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    assert config_dir() == tmp_path / "xdg"
    assert config_path() == tmp_path / "xdg" / "ccpm.yaml"


def test_falls_back_to_home_config(monkeypatch, tmp_path):
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert config_path() == tmp_path / ".config" / "ccpm.yaml"


def test_relative_fallback_without_home(monkeypatch):
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("HOME", raising=False)
    assert config_dir() == Path(".config")
    assert host_state_dir() == Path(".claude")


def test_host_state_layout(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert marketplaces_root() == tmp_path / ".claude" / "plugins" / "marketplaces"
    assert installed_manifest_path() == tmp_path / ".claude" / "plugins" / "installed_plugins.json"
    assert marketplace_dir("plinde-plugins") == marketplaces_root() / "plinde-plugins"
