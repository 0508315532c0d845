"""Commands that act on plugins: search, update, upgrade, reinstall, uninstall, check-conflicts."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

import click

from ccpm.cli.context import CcpmContext, global_options, pass_ccpm
from ccpm.core.claude_cli import CommandResult
from ccpm.core.conflicts import check_conflicts
from ccpm.core.errors import PluginResolutionError, UnknownMarketplaceError
from ccpm.core.installed import InstalledPlugins
from ccpm.core.paths import marketplaces_root
from ccpm.core.resolver import resolve_plugin_id
from ccpm.core.search import search_plugins
from ccpm.core.upgrade import MarketplaceUpdater, resolve_target_aliases
from ccpm.utils.log import get_logger
from ccpm.utils.output import blue, dim, green, plain, red, yellow

logger = get_logger()

DRY_RUN_BANNER = "DRY RUN MODE - no changes will be made"

REINSTALL_USAGE = (
    "Usage: ccpm reinstall <plugin@marketplace> [plugin@marketplace...]\n"
    "       ccpm reinstall --all <marketplace-alias>"
)


def _target_aliases(ccpm: CcpmContext, repos: Sequence[str]) -> List[str]:
    try:
        return resolve_target_aliases(ccpm.config, repos)
    except UnknownMarketplaceError as exc:
        raise click.ClickException(str(exc)) from exc


def _print_dry_run_banner(ccpm: CcpmContext) -> None:
    if ccpm.dry_run:
        ccpm.printer.text(DRY_RUN_BANNER)
        ccpm.printer.blank()


@click.command(name="search")
@global_options
@click.argument("query")
@pass_ccpm
def search_cmd(ccpm: CcpmContext, query: str) -> None:
    """Search plugins in local marketplace repos.

    Matches plugin names and descriptions (case-insensitive). Use -v to
    show descriptions in the results.
    """
    out = ccpm.printer
    out.info(f"=== Searching for '{query}' ===")
    out.blank()

    if not marketplaces_root().is_dir():
        out.text("No marketplaces found.")
        return

    results = search_plugins(query, ccpm.load_installed_lenient())
    if not results:
        out.text("No plugins found matching your query.")
        return

    for result in results:
        line = f"  {blue(result.name)}@{plain(result.alias)}"
        if result.version:
            line += " " + dim(f"v{result.version}")
        if result.installed:
            line += " " + green("[installed]")
        out.line(line)
        if ccpm.verbose and result.description:
            out.line(f"    {dim(result.description)}")

    out.blank()
    out.line(f"Found {green(len(results))} plugin(s)")


@click.command(name="update")
@global_options
@click.argument("repos", nargs=-1)
@pass_ccpm
def update_cmd(ccpm: CcpmContext, repos: Tuple[str, ...]) -> None:
    """Fetch latest marketplace catalogs and show available upgrades.

    \b
    Examples:
      ccpm update                        # all marketplaces
      ccpm update plinde/claude-plugins  # one marketplace
    """
    aliases = _target_aliases(ccpm, repos)
    out = ccpm.printer
    out.info("=== Fetching marketplace updates ===")
    out.blank()

    # Update never writes, so it ignores --dry-run.
    updater = MarketplaceUpdater(ccpm.git, ccpm.host, out)
    summary = updater.run(aliases, reinstall=False)

    out.blank()
    if summary.available == 0:
        out.line(dim("All plugins up to date."))
    else:
        out.warning(
            f"{summary.available} plugin(s) can be upgraded. Run 'ccpm upgrade' to install."
        )


@click.command(name="upgrade")
@global_options
@click.argument("repos", nargs=-1)
@pass_ccpm
def upgrade_cmd(ccpm: CcpmContext, repos: Tuple[str, ...]) -> None:
    """Fetch marketplaces and reinstall plugins that changed.

    \b
    Examples:
      ccpm upgrade                        # all marketplaces
      ccpm upgrade plinde/claude-plugins  # one marketplace
      ccpm --dry-run upgrade              # show what would be upgraded
    """
    aliases = _target_aliases(ccpm, repos)
    out = ccpm.printer
    _print_dry_run_banner(ccpm)
    out.info("=== Upgrading plugins ===")
    out.blank()

    updater = MarketplaceUpdater(ccpm.git, ccpm.host, out, dry_run=ccpm.dry_run)
    summary = updater.run(aliases, reinstall=True)

    out.blank()
    if not summary.any_changes:
        out.line(dim("All plugins up to date."))
    elif ccpm.dry_run:
        out.warning("Dry run complete. Run without --dry-run to apply changes.")
    elif summary.failed:
        out.warning(
            f"Done. Upgraded {len(summary.upgraded)}, failed {len(summary.failed)}."
        )
    else:
        out.success(f"Done! Upgraded {len(summary.upgraded)} plugin(s).")


def _apply_to_plugins(
    ccpm: CcpmContext,
    specs: Sequence[str],
    installed: InstalledPlugins,
    action: Callable[[str], CommandResult],
    *,
    done_word: str,
    dry_run_word: str,
) -> Tuple[int, int]:
    """Resolve each spec and run ``action`` on it; returns (succeeded, failed)."""
    out = ccpm.printer
    succeeded = 0
    failed = 0
    for spec in specs:
        try:
            plugin_id = resolve_plugin_id(spec, installed).full
        except PluginResolutionError as exc:
            out.line(f"  {red('✗')} {plain(spec)} - {plain(exc)}")
            failed += 1
            continue

        out.line(f"  {plain(plugin_id)}... ", end="")
        if ccpm.dry_run:
            out.text(dry_run_word)
            succeeded += 1
            continue

        result = action(plugin_id)
        if result.ok:
            out.line(green(done_word))
            succeeded += 1
        else:
            logger.warning(
                "[cli] Host command failed",
                extra={"plugin_id": plugin_id, "returncode": result.returncode},
            )
            out.line(red("failed"))
            failed += 1
    return succeeded, failed


@click.command(name="reinstall")
@global_options
@click.argument("specs", nargs=-1)
@click.option(
    "--all",
    "all_alias",
    default=None,
    metavar="ALIAS",
    help="Reinstall every installed plugin from a marketplace.",
)
@pass_ccpm
def reinstall_cmd(ccpm: CcpmContext, specs: Tuple[str, ...], all_alias: Optional[str]) -> None:
    """Reinstall specific plugin(s).

    Each plugin is uninstalled and installed again. A bare name is accepted
    when it is installed from exactly one marketplace.

    \b
    Examples:
      ccpm reinstall trivy@plinde-plugins
      ccpm reinstall trivy@plinde-plugins snyk@elastic-psec-plugins
      ccpm reinstall --all plinde-plugins
    """
    out = ccpm.printer
    if all_alias:
        names = sorted(ccpm.load_installed().plugins_for_alias(all_alias))
        if not names:
            out.warning(f"No plugins installed from {all_alias}")
            return
        targets: List[str] = [f"{name}@{all_alias}" for name in names]
    else:
        if not specs:
            raise click.ClickException(f"no plugins specified\n{REINSTALL_USAGE}")
        targets = list(specs)

    _print_dry_run_banner(ccpm)
    out.info("=== Reinstalling plugins ===")
    out.blank()

    succeeded, failed = _apply_to_plugins(
        ccpm,
        targets,
        ccpm.load_installed_lenient(),
        ccpm.host.plugin_reinstall,
        done_word="reinstalled",
        dry_run_word="would reinstall",
    )

    out.blank()
    if failed:
        out.warning(f"Done. Reinstalled {succeeded}, failed {failed}.")
        raise click.ClickException(f"failed to reinstall {failed} plugin(s)")
    out.success(f"Done! Reinstalled {succeeded} plugin(s).")


@click.command(name="uninstall")
@global_options
@click.argument("specs", nargs=-1, required=True)
@pass_ccpm
def uninstall_cmd(ccpm: CcpmContext, specs: Tuple[str, ...]) -> None:
    """Uninstall specific plugin(s).

    \b
    Examples:
      ccpm uninstall trivy@plinde-plugins
      ccpm uninstall trivy@plinde-plugins snyk@elastic-psec-plugins
    """
    out = ccpm.printer
    _print_dry_run_banner(ccpm)
    out.info("=== Uninstalling plugins ===")
    out.blank()

    succeeded, failed = _apply_to_plugins(
        ccpm,
        specs,
        ccpm.load_installed_lenient(),
        ccpm.host.plugin_uninstall,
        done_word="uninstalled",
        dry_run_word="would uninstall",
    )

    out.blank()
    if failed:
        out.warning(f"Done. Uninstalled {succeeded}, failed {failed}.")
        raise click.ClickException(f"failed to uninstall {failed} plugin(s)")
    out.success(f"Done! Uninstalled {succeeded} plugin(s).")


@click.command(name="check-conflicts")
@global_options
@pass_ccpm
def check_conflicts_cmd(ccpm: CcpmContext) -> None:
    """Check for naming conflicts between marketplaces and plugins.

    \b
    Detects:
      - plugins installed from multiple marketplaces
      - marketplace aliases that match installed plugin names
    """
    out = ccpm.printer
    out.info("=== Checking for Naming Conflicts ===")
    out.blank()

    report = check_conflicts(ccpm.config, ccpm.load_installed())
    none_found = f"  {green('✓')} None found"

    out.info("Plugins in multiple marketplaces:")
    if report.duplicates:
        for name, ids in report.duplicates.items():
            out.line(f"  {yellow('⚠')} {plain(name)}:")
            for plugin_id in ids:
                out.text(f"      - {plugin_id}")
    else:
        out.line(none_found)
    out.blank()

    out.info("Marketplace aliases matching plugin names:")
    if report.alias_conflicts:
        for conflict in report.alias_conflicts:
            out.line(
                f"  {yellow('⚠')} Marketplace alias '{plain(conflict.alias)}' conflicts with:"
            )
            for plugin_id in conflict.plugin_ids:
                out.text(f"      - {plugin_id}")
    else:
        out.line(none_found)
    out.blank()

    out.info("=== Summary ===")
    if report.count == 0:
        out.success("No conflicts detected.")
        return
    out.warning(f"{report.count} conflict(s) found.")
    out.text("Use explicit 'plugin@marketplace' format to avoid ambiguity.")
    raise click.ClickException(f"{report.count} conflict(s) found")


__all__ = [
    "check_conflicts_cmd",
    "reinstall_cmd",
    "search_cmd",
    "uninstall_cmd",
    "update_cmd",
    "upgrade_cmd",
]
