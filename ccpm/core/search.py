"""Search plugins across the local marketplace clones."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ccpm.core.installed import InstalledPlugins, PluginId
from ccpm.core.marketplace import list_marketplace_dirs, list_plugin_dirs, read_plugin_manifest
from ccpm.core.paths import marketplaces_root


@dataclass(frozen=True)
class SearchResult:
    name: str
    alias: str
    version: str
    description: str
    installed: bool

    @property
    def plugin_id(self) -> str:
        return PluginId.join(self.name, self.alias).full


def search_plugins(
    query: str,
    installed: InstalledPlugins,
    root: Optional[Path] = None,
) -> List[SearchResult]:
    """Case-insensitive substring match on plugin directory names and descriptions.

    Results are sorted by plugin name, then marketplace alias.
    """
    base = root or marketplaces_root()
    needle = query.lower()
    results: List[SearchResult] = []
    for alias in list_marketplace_dirs(base):
        mp_dir = base / alias
        for name in list_plugin_dirs(mp_dir):
            manifest = read_plugin_manifest(mp_dir, name)
            if needle not in name.lower() and needle not in manifest.description.lower():
                continue
            results.append(
                SearchResult(
                    name=name,
                    alias=alias,
                    version=manifest.version,
                    description=manifest.description,
                    installed=installed.contains(PluginId.join(name, alias).full),
                )
            )
    results.sort(key=lambda item: (item.name, item.alias))
    return results
