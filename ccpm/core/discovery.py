"""Import marketplaces that Claude has cloned but ccpm does not know about."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ccpm.core.config import MarketplaceConfig
from ccpm.core.errors import MarketplacesRootMissingError
from ccpm.core.marketplace import list_marketplace_dirs, parse_repo_from_remote
from ccpm.core.paths import marketplaces_root
from ccpm.core.protocols import GitBackend
from ccpm.utils.log import get_logger

logger = get_logger()


class DiscoveryStatus(str, Enum):
    IMPORTED = "imported"
    NO_REMOTE = "no_remote"
    UNPARSEABLE = "unparseable"
    ALREADY_CONFIGURED = "already_configured"
    ALIAS_TAKEN = "alias_taken"


@dataclass(frozen=True)
class DiscoveredMarketplace:
    alias: str
    status: DiscoveryStatus
    repo: str = ""
    remote: str = ""
    existing_repo: str = ""


@dataclass
class DiscoveryResult:
    entries: List[DiscoveredMarketplace] = field(default_factory=list)

    @property
    def discovered(self) -> int:
        return len(self.entries)

    @property
    def imported(self) -> int:
        return sum(1 for entry in self.entries if entry.status == DiscoveryStatus.IMPORTED)


def discover_marketplaces(
    config: MarketplaceConfig,
    git: GitBackend,
    root: Optional[Path] = None,
) -> DiscoveryResult:
    """Add every clone under the marketplace root whose repo is not yet configured.

    Mutates ``config`` in memory only; the caller saves it.
    """
    base = root or marketplaces_root()
    if not base.is_dir():
        raise MarketplacesRootMissingError(f"no marketplaces directory found at {base}")

    result = DiscoveryResult()
    for alias in list_marketplace_dirs(base):
        remote = git.remote_origin(base / alias)
        if not remote:
            result.entries.append(DiscoveredMarketplace(alias, DiscoveryStatus.NO_REMOTE))
            continue

        repo = parse_repo_from_remote(remote)
        if not repo:
            result.entries.append(
                DiscoveredMarketplace(alias, DiscoveryStatus.UNPARSEABLE, remote=remote)
            )
            continue

        if config.get_alias(repo):
            result.entries.append(
                DiscoveredMarketplace(
                    alias, DiscoveryStatus.ALREADY_CONFIGURED, repo=repo, remote=remote
                )
            )
            continue

        existing_repo = config.get_repo(alias)
        if existing_repo:
            result.entries.append(
                DiscoveredMarketplace(
                    alias,
                    DiscoveryStatus.ALIAS_TAKEN,
                    repo=repo,
                    remote=remote,
                    existing_repo=existing_repo,
                )
            )
            continue

        config.add_marketplace(repo, alias)
        logger.info("[discover] Imported marketplace", extra={"alias": alias, "repo": repo})
        result.entries.append(
            DiscoveredMarketplace(alias, DiscoveryStatus.IMPORTED, repo=repo, remote=remote)
        )
    return result
