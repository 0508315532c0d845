"""Read-only view of Claude's installed-plugin manifest.

Claude records installs in ``~/.claude/plugins/installed_plugins.json``::

    {
      "version": 2,
      "plugins": {
        "trivy@plinde-plugins": [
          {"scope": "user", "installPath": "...", "version": "1.2.0",
           "installedAt": "...", "lastUpdated": "...",
           "gitCommitSha": "3f9c2e1...", "isLocal": false}
        ]
      }
    }

The first record for an ID is the current install.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ccpm.core.errors import InventoryError, PluginIdError
from ccpm.core.paths import installed_manifest_path
from ccpm.utils.log import get_logger

logger = get_logger()

MANIFEST_VERSION = 2
SHORT_SHA_LENGTH = 7


@dataclass(frozen=True)
class PluginId:
    """A parsed ``name@alias`` identifier."""

    name: str
    alias: str
    full: str

    @classmethod
    def parse(cls, value: str) -> "PluginId":
        """Split on the first ``@``; the full form is kept verbatim."""
        name, sep, alias = value.partition("@")
        if not sep:
            raise PluginIdError(value)
        return cls(name=name, alias=alias, full=value)

    @classmethod
    def join(cls, name: str, alias: str) -> "PluginId":
        return cls(name=name, alias=alias, full=f"{name}@{alias}")

    def __str__(self) -> str:
        return self.full


def parse_plugin_id(value: str) -> PluginId:
    return PluginId.parse(value)


def is_qualified(value: str) -> bool:
    """True when ``value`` already names a marketplace (``name@alias``)."""
    return "@" in value


class PluginInstall(BaseModel):
    """One installation record."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    scope: str = ""
    install_path: str = Field(default="", alias="installPath")
    version: str = ""
    installed_at: Optional[datetime] = Field(default=None, alias="installedAt")
    last_updated: Optional[datetime] = Field(default=None, alias="lastUpdated")
    git_commit_sha: str = Field(default="", alias="gitCommitSha")
    is_local: bool = Field(default=False, alias="isLocal")

    @field_validator("scope", "install_path", "version", "git_commit_sha", mode="before")
    @classmethod
    def _null_string(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("installed_at", "last_updated", mode="before")
    @classmethod
    def _blank_timestamp(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def short_sha(self) -> str:
        return self.git_commit_sha[:SHORT_SHA_LENGTH]


class InstalledPlugins(BaseModel):
    """Installed plugins keyed by fully-qualified plugin ID."""

    model_config = ConfigDict(extra="allow")

    version: int = MANIFEST_VERSION
    plugins: Dict[str, List[PluginInstall]] = Field(default_factory=dict)

    def get(self, plugin_id: str) -> Optional[PluginInstall]:
        """Current install record for ``plugin_id``, or None when absent."""
        installs = self.plugins.get(plugin_id)
        if not installs:
            return None
        return installs[0]

    def contains(self, plugin_id: str) -> bool:
        return self.get(plugin_id) is not None

    def all(self) -> List[str]:
        return list(self.plugins)

    def parsed_ids(self) -> List[PluginId]:
        """All IDs that parse as ``name@alias``; malformed keys are skipped."""
        parsed: List[PluginId] = []
        for raw in self.plugins:
            try:
                parsed.append(PluginId.parse(raw))
            except PluginIdError:
                logger.debug("[installed] Skipping malformed plugin ID", extra={"id": raw})
        return parsed

    def plugins_for_alias(self, alias: str) -> List[str]:
        return [pid.name for pid in self.parsed_ids() if pid.alias == alias]

    def by_alias(self) -> Dict[str, List[str]]:
        grouped: Dict[str, List[str]] = {}
        for pid in self.parsed_ids():
            grouped.setdefault(pid.alias, []).append(pid.name)
        return grouped

    def by_name(self) -> Dict[str, List[str]]:
        """Full IDs grouped by bare plugin name."""
        grouped: Dict[str, List[str]] = {}
        for pid in self.parsed_ids():
            grouped.setdefault(pid.name, []).append(pid.full)
        return grouped

    def aliases_for_name(self, name: str) -> List[str]:
        """Aliases of the marketplaces that installed exactly ``name``."""
        return [pid.alias for pid in self.parsed_ids() if pid.name == name]

    def ids_named(self, name: str) -> List[str]:
        """Full IDs whose bare name equals ``name`` ignoring case, sorted."""
        lowered = name.lower()
        return sorted(pid.full for pid in self.parsed_ids() if pid.name.lower() == lowered)

    def matching(self, pattern: str) -> List[str]:
        """Sorted IDs whose bare name matches ``pattern``.

        ``pattern`` is a case-insensitive regular expression; when it does not
        compile it is used as a case-insensitive substring instead.
        """
        try:
            regex: Optional[re.Pattern[str]] = re.compile(pattern, re.IGNORECASE)
        except re.error:
            regex = None
        needle = pattern.lower()
        matches: List[str] = []
        for pid in self.parsed_ids():
            if regex is not None:
                if regex.search(pid.name):
                    matches.append(pid.full)
            elif needle in pid.name.lower():
                matches.append(pid.full)
        return sorted(matches)

    def count(self) -> int:
        return len(self.plugins)


def load_installed(path: Optional[Union[str, Path]] = None) -> InstalledPlugins:
    """Load the installed-plugin manifest; a missing file is an empty inventory."""
    target = Path(path) if path else installed_manifest_path()
    try:
        text = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("[installed] Manifest not found", extra={"path": str(target)})
        return InstalledPlugins()
    except (OSError, UnicodeDecodeError) as exc:
        raise InventoryError(f"reading installed plugins: {exc}") from exc

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InventoryError(f"parsing installed plugins: {exc}") from exc
    if not isinstance(payload, dict):
        raise InventoryError("parsing installed plugins: root must be an object")
    if payload.get("plugins") is None:
        payload["plugins"] = {}

    try:
        installed = InstalledPlugins.model_validate(payload)
    except ValidationError as exc:
        raise InventoryError(f"parsing installed plugins: {exc}") from exc
    logger.debug(
        "[installed] Loaded manifest",
        extra={"path": str(target), "plugin_count": installed.count()},
    )
    return installed
