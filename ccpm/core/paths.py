"""Standard filesystem locations used by ccpm.

All helpers are pure functions of the process environment; none of them
touch the filesystem.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILE_NAME = "ccpm.yaml"
HOST_STATE_DIR_NAME = ".claude"
MARKETPLACES_SUBDIR = Path("plugins") / "marketplaces"
INSTALLED_PLUGINS_FILE = Path("plugins") / "installed_plugins.json"


def _home() -> str:
    return os.environ.get("HOME", "").strip()


def config_dir() -> Path:
    """Return ``$XDG_CONFIG_HOME``, else ``~/.config``, else ``.config``."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "").strip()
    if xdg:
        return Path(xdg)
    home = _home()
    if home:
        return Path(home) / ".config"
    return Path(".config")


def config_path() -> Path:
    """Default location of the ccpm config file."""
    return config_dir() / CONFIG_FILE_NAME


def host_state_dir() -> Path:
    """Claude's state directory (``~/.claude``)."""
    home = _home()
    if home:
        return Path(home) / HOST_STATE_DIR_NAME
    return Path(HOST_STATE_DIR_NAME)


def marketplaces_root() -> Path:
    """Directory holding one git clone per marketplace alias."""
    return host_state_dir() / MARKETPLACES_SUBDIR


def installed_manifest_path() -> Path:
    """Claude's record of installed plugins."""
    return host_state_dir() / INSTALLED_PLUGINS_FILE


def marketplace_dir(alias: str) -> Path:
    return marketplaces_root() / alias
