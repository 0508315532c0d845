"""Pytest configuration and fixtures for all tests."""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest

from ccpm.core.claude_cli import CommandResult


class FakeGit:
    """Scripted git backend keyed by marketplace directory name.

    ``heads[alias]`` is a list of hashes returned by successive
    ``head_hash`` calls; the last one repeats.
    """

    def __init__(self) -> None:
        self.heads: Dict[str, List[str]] = {}
        self.remotes: Dict[str, str] = {}
        self.diffs: Dict[str, List[str]] = {}
        self.short: Dict[str, str] = {}
        self.times: Dict[str, str] = {}
        self.diff_calls: List[tuple] = []

    def head_hash(self, directory) -> str:
        sequence = self.heads.get(Path(directory).name)
        if not sequence:
            return ""
        value = sequence[0]
        if len(sequence) > 1:
            sequence.pop(0)
        return value

    def short_hash(self, directory) -> str:
        return self.short.get(Path(directory).name, "")

    def relative_time(self, directory) -> str:
        return self.times.get(Path(directory).name, "")

    def remote_origin(self, directory) -> Optional[str]:
        return self.remotes.get(Path(directory).name)

    def changed_paths(self, directory, old_hash: str, new_hash: str) -> List[str]:
        self.diff_calls.append((Path(directory).name, old_hash, new_hash))
        return list(self.diffs.get(Path(directory).name, []))


class FakeHost:
    """Records host CLI calls; IDs or aliases in ``failing`` return exit 1."""

    def __init__(self, failing: Iterable[str] = ()) -> None:
        self.failing = set(failing)
        self.calls: List[tuple] = []

    def _result(self, *args: str) -> CommandResult:
        self.calls.append(args)
        code = 1 if args[-1] in self.failing else 0
        return CommandResult(args, code)

    def marketplace_update(self, alias: str) -> CommandResult:
        return self._result("marketplace", "update", alias)

    def plugin_install(self, plugin_id: str) -> CommandResult:
        return self._result("install", plugin_id)

    def plugin_uninstall(self, plugin_id: str) -> CommandResult:
        return self._result("uninstall", plugin_id)

    def plugin_reinstall(self, plugin_id: str) -> CommandResult:
        return self._result("reinstall", plugin_id)


@pytest.fixture
def ccpm_home(tmp_path, monkeypatch):
    """Point HOME and XDG_CONFIG_HOME at fresh directories under tmp_path."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("CCPM_LOG_DIR", raising=False)
    return home


@pytest.fixture
def marketplaces_dir(ccpm_home):
    return ccpm_home / ".claude" / "plugins" / "marketplaces"


@pytest.fixture
def make_marketplace(marketplaces_dir):
    """Create a marketplace clone with plugin directories.

    ``plugins`` maps plugin name to the plugin.json payload.
    """

    def _make(
        alias: str,
        plugins: Optional[Dict[str, dict]] = None,
        *,
        git: bool = True,
        catalog: Optional[dict] = None,
    ) -> Path:
        mp_dir = marketplaces_dir / alias
        mp_dir.mkdir(parents=True, exist_ok=True)
        if git:
            (mp_dir / ".git").mkdir(exist_ok=True)
        for name, manifest in (plugins or {}).items():
            meta = mp_dir / name / ".claude-plugin"
            meta.mkdir(parents=True, exist_ok=True)
            (meta / "plugin.json").write_text(json.dumps(manifest), encoding="utf-8")
        if catalog is not None:
            meta = mp_dir / ".claude-plugin"
            meta.mkdir(parents=True, exist_ok=True)
            (meta / "marketplace.json").write_text(json.dumps(catalog), encoding="utf-8")
        return mp_dir

    return _make


@pytest.fixture
def write_installed(ccpm_home):
    """Write ``installed_plugins.json`` from a mapping of ID -> record overrides."""

    def _write(plugins: Dict[str, dict]) -> Path:
        path = ccpm_home / ".claude" / "plugins" / "installed_plugins.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "version": 2,
            "plugins": {
                plugin_id: [dict({"scope": "user"}, **record)]
                for plugin_id, record in plugins.items()
            },
        }
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fake_git():
    return FakeGit()


@pytest.fixture
def fake_host():
    return FakeHost()


@pytest.fixture
def make_host():
    """Build a FakeHost whose listed IDs or aliases fail."""
    return FakeHost
