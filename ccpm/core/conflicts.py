"""Naming-conflict checks across installed plugins and marketplace aliases."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from ccpm.core.config import MarketplaceConfig
from ccpm.core.installed import InstalledPlugins


@dataclass(frozen=True)
class AliasConflict:
    alias: str
    repo: str
    plugin_ids: List[str]


@dataclass
class ConflictReport:
    duplicates: Dict[str, List[str]] = field(default_factory=dict)
    alias_conflicts: List[AliasConflict] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.duplicates) + len(self.alias_conflicts)


def find_duplicate_plugins(installed: InstalledPlugins) -> Dict[str, List[str]]:
    """Bare names installed from two or more marketplaces, with their sorted IDs."""
    return {
        name: sorted(ids)
        for name, ids in sorted(installed.by_name().items())
        if len(ids) > 1
    }


def find_alias_conflicts(
    config: MarketplaceConfig, installed: InstalledPlugins
) -> List[AliasConflict]:
    """Configured aliases that equal an installed plugin's bare name (ignoring case)."""
    conflicts: List[AliasConflict] = []
    for repo in sorted(config.repos()):
        alias = config.marketplaces[repo]
        matching = installed.ids_named(alias)
        if matching:
            conflicts.append(AliasConflict(alias=alias, repo=repo, plugin_ids=matching))
    return conflicts


def check_conflicts(config: MarketplaceConfig, installed: InstalledPlugins) -> ConflictReport:
    return ConflictReport(
        duplicates=find_duplicate_plugins(installed),
        alias_conflicts=find_alias_conflicts(config, installed),
    )
