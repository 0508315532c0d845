"""Marketplace update/upgrade engine.

Claude gives no machine-readable account of what ``plugin marketplace
update`` changed, so the engine reconstructs it: record the clone's HEAD,
run the update, record HEAD again, and intersect the name-only diff between
the two commits with the plugin directories present on disk. ``update``
reports that set; ``upgrade`` reinstalls each member of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from ccpm.core.config import MarketplaceConfig
from ccpm.core.errors import UnknownMarketplaceError
from ccpm.core.installed import PluginId
from ccpm.core.marketplace import is_plugin_dir
from ccpm.core.paths import marketplaces_root
from ccpm.core.protocols import GitBackend, HostBackend
from ccpm.utils.log import get_logger
from ccpm.utils.output import Printer, dim, green, plain, red, yellow

logger = get_logger()


@dataclass
class UpdateSummary:
    """Aggregate outcome of one update/upgrade run."""

    up_to_date: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed_updates: List[str] = field(default_factory=list)
    changed: Dict[str, List[str]] = field(default_factory=dict)
    upgraded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    planned: List[str] = field(default_factory=list)

    @property
    def available(self) -> int:
        """Number of changed plugins across all marketplaces."""
        return sum(len(names) for names in self.changed.values())

    @property
    def any_changes(self) -> bool:
        return any(self.changed.values())


def resolve_target_aliases(config: MarketplaceConfig, repos: Sequence[str]) -> List[str]:
    """Map ``org/name`` arguments to aliases, or return every configured alias.

    Explicit repos keep the caller's order; the fallback list is sorted.
    """
    if repos:
        aliases: List[str] = []
        for repo in repos:
            alias = config.get_alias(repo)
            if not alias:
                raise UnknownMarketplaceError(
                    f"unknown marketplace '{repo}'\n"
                    f"Run 'ccpm discover' or add it with: ccpm add {repo} <alias>"
                )
            aliases.append(alias)
        return aliases

    if not config.marketplaces:
        raise UnknownMarketplaceError(
            "no marketplaces configured\n"
            "Run 'ccpm discover' to import installed marketplaces\n"
            "Or add one with: ccpm add <org/repo> <alias>"
        )
    return config.aliases()


def changed_plugin_names(paths: Iterable[str], marketplace_path: Path) -> List[str]:
    """Top-level plugin directories touched by ``paths``.

    Only first path segments that still hold a ``.claude-plugin`` directory
    count, which drops top-level files and removed plugins.
    """
    segments = set()
    for raw in paths:
        line = raw.strip()
        if not line:
            continue
        segments.add(line.split("/", 1)[0])
    return sorted(seg for seg in segments if is_plugin_dir(marketplace_path / seg))


def changed_plugins(
    git: GitBackend, marketplace_path: Path, old_hash: str, new_hash: str
) -> List[str]:
    paths = git.changed_paths(marketplace_path, old_hash, new_hash)
    return changed_plugin_names(paths, marketplace_path)


class MarketplaceUpdater:
    """Runs the per-marketplace fetch/diff/reinstall procedure."""

    def __init__(
        self,
        git: GitBackend,
        host: HostBackend,
        printer: Printer,
        *,
        dry_run: bool = False,
        root: Optional[Path] = None,
    ) -> None:
        self.git = git
        self.host = host
        self.printer = printer
        self.dry_run = dry_run
        self.root = root

    def run(self, aliases: Sequence[str], *, reinstall: bool) -> UpdateSummary:
        summary = UpdateSummary()
        for alias in aliases:
            self._process(alias, reinstall=reinstall, summary=summary)
        logger.info(
            "[upgrade] Finished marketplace run",
            extra={
                "reinstall": reinstall,
                "dry_run": self.dry_run,
                "marketplaces": len(aliases),
                "changed": summary.available,
                "upgraded": len(summary.upgraded),
                "failed": len(summary.failed),
            },
        )
        return summary

    def _process(self, alias: str, *, reinstall: bool, summary: UpdateSummary) -> None:
        out = self.printer
        mp_dir = (self.root or marketplaces_root()) / alias

        if not mp_dir.exists():
            out.line(f"  {dim(alias)}: not installed, skipping")
            summary.skipped.append(alias)
            return

        old_hash = self.git.head_hash(mp_dir)
        if not old_hash:
            out.line(f"  {yellow(alias)}: not a git repo, skipping")
            summary.skipped.append(alias)
            return

        out.line(f"  {plain(alias)}... ", end="")

        if not self.dry_run:
            result = self.host.marketplace_update(alias)
            if not result.ok:
                logger.warning(
                    "[upgrade] marketplace update exited non-zero",
                    extra={"alias": alias, "returncode": result.returncode},
                )
                if not reinstall:
                    out.line(red("failed"))
                    summary.failed_updates.append(alias)
                    return

        new_hash = self.git.head_hash(mp_dir)
        if old_hash == new_hash:
            out.line(dim("up to date"))
            summary.up_to_date.append(alias)
            return

        names = changed_plugins(self.git, mp_dir, old_hash, new_hash)
        summary.changed[alias] = names
        logger.debug(
            "[upgrade] Marketplace advanced",
            extra={"alias": alias, "old": old_hash, "new": new_hash, "plugins": names},
        )
        if not names:
            out.line(dim("no plugin changes" if reinstall else "updated (no plugin changes)"))
            return

        if not reinstall:
            out.line(green(f"{len(names)} plugin(s) can be upgraded"))
            for name in names:
                out.line(f"    {dim(name)}")
            return

        out.line(green(f"{len(names)} plugin(s) to upgrade"))
        for name in names:
            plugin_id = PluginId.join(name, alias).full
            out.line(f"    {plain(name)}... ", end="")
            if self.dry_run:
                out.line("would reinstall")
                summary.planned.append(plugin_id)
                continue
            result = self.host.plugin_reinstall(plugin_id)
            if result.ok:
                out.line(green("upgraded"))
                summary.upgraded.append(plugin_id)
            else:
                out.line(red("failed"))
                summary.failed.append(plugin_id)
