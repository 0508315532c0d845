"""Commands that manage the repo -> alias mapping and show marketplaces."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ccpm.cli.context import CcpmContext, global_options, pass_ccpm
from ccpm.core.discovery import DiscoveryStatus, discover_marketplaces
from ccpm.core.errors import CatalogError, MarketplacesRootMissingError
from ccpm.core.installed import InstalledPlugins, PluginId
from ccpm.core.marketplace import load_catalog
from ccpm.core.paths import config_path, marketplace_dir
from ccpm.utils.output import blue, dim, green, plain, red, yellow


def _is_repo(value: str) -> bool:
    org, sep, name = value.partition("/")
    return bool(sep and org and name and "/" not in name)


@click.command(name="add")
@global_options
@click.argument("repo")
@click.argument("alias")
@pass_ccpm
def add_cmd(ccpm: CcpmContext, repo: str, alias: str) -> None:
    """Add a marketplace mapping.

    \b
    Example:
      ccpm add plinde/claude-plugins plinde-plugins
    """
    out = ccpm.printer
    if not _is_repo(repo):
        raise click.ClickException(
            f"invalid repo format: {repo} (expected org/name)\n"
            "Usage: ccpm add <org/repo> <alias>"
        )
    alias = alias.strip()
    if not alias:
        raise click.ClickException("alias must not be empty\nUsage: ccpm add <org/repo> <alias>")

    existing_repo = ccpm.config.get_repo(alias)
    if existing_repo and existing_repo != repo:
        raise click.ClickException(
            f"alias '{alias}' is already used by {existing_repo}\n"
            f"Remove it first with: ccpm remove {existing_repo}"
        )

    conflicts = ccpm.load_installed_lenient().ids_named(alias)
    if conflicts:
        out.warning(f"Alias '{alias}' matches installed plugin(s):")
        for plugin_id in conflicts:
            out.text(f"  - {plugin_id}")
        out.text(f"This may cause confusion when using 'ccpm list {alias}'.")
        out.blank()

    ccpm.config.add_marketplace(repo, alias)
    ccpm.save_config()
    out.success(f"Added {repo} -> {alias}")


@click.command(name="remove")
@global_options
@click.argument("repo")
@pass_ccpm
def remove_cmd(ccpm: CcpmContext, repo: str) -> None:
    """Remove a marketplace mapping.

    \b
    Example:
      ccpm remove plinde/claude-plugins
    """
    if not ccpm.config.get_alias(repo):
        raise click.ClickException(
            f"marketplace not found: {repo}\nUsage: ccpm remove <org/repo>"
        )
    ccpm.config.remove_marketplace(repo)
    ccpm.save_config()
    ccpm.printer.success(f"Removed {repo}")


@click.command(name="discover")
@global_options
@pass_ccpm
def discover_cmd(ccpm: CcpmContext) -> None:
    """Discover and import installed marketplaces.

    Scans the marketplaces directory and adds every clone whose org/repo
    (taken from its git remote) is not in the config yet.
    """
    out = ccpm.printer
    out.info("=== Discovering Installed Marketplaces ===")
    out.blank()

    try:
        result = discover_marketplaces(ccpm.config, ccpm.git)
    except MarketplacesRootMissingError as exc:
        raise click.ClickException(str(exc)) from exc

    for entry in result.entries:
        alias = plain(entry.alias)
        if entry.status == DiscoveryStatus.NO_REMOTE:
            out.line(f"  {yellow('⚠')}  {alias} {dim('(no git remote, skipping)')}")
        elif entry.status == DiscoveryStatus.UNPARSEABLE:
            out.line(
                f"  {yellow('⚠')}  {alias} {dim(f'(could not parse repo from: {entry.remote})')}"
            )
        elif entry.status == DiscoveryStatus.ALREADY_CONFIGURED:
            out.line(f"  {dim('✓')}  {alias} {dim(f'({entry.repo} already configured)')}")
        elif entry.status == DiscoveryStatus.ALIAS_TAKEN:
            out.line(
                f"  {yellow('⚠')}  {alias} "
                f"{dim(f'(alias already used by {entry.existing_repo}, skipping {entry.repo})')}"
            )
        else:
            out.line(f"  {green('+')}  {alias} {dim(f'({entry.repo})')}")

    if result.imported > 0:
        ccpm.save_config()

    out.blank()
    out.line(
        f"Discovered {result.discovered} marketplace(s), imported {green(result.imported)} new."
    )


@click.command(name="config")
@global_options
@pass_ccpm
def config_cmd(ccpm: CcpmContext) -> None:
    """Show config file path and contents."""
    out = ccpm.printer
    path = ccpm.config.path
    out.label("Config file", path)
    if ccpm.config_override and not ccpm.config.is_default:
        out.warning(f"(overridden from default: {config_path()})")
    out.blank()

    if not path.exists():
        out.status_label(
            "Status", "not created yet (will be created on first 'add' or 'discover')", False
        )
        return
    out.status_label("Status", "exists", True)

    try:
        contents = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise click.ClickException(f"reading config: {exc}") from exc
    out.label("Contents", "")
    out.text(contents, end="")


def _format_install(installed: InstalledPlugins, plugin_id: str) -> str:
    info = installed.get(plugin_id)
    parts = []
    if info is not None and info.version:
        parts.append(dim(f"v{info.version}"))
    if info is not None and info.short_sha:
        parts.append(dim(f"@{info.short_sha}"))
    return " ".join(parts)


def _marketplace_git_info(ccpm: CcpmContext, mp_dir: Path) -> str:
    if not (mp_dir / ".git").exists():
        return ""
    short = ccpm.git.short_hash(mp_dir)
    if not short:
        return ""
    when = ccpm.git.relative_time(mp_dir)
    return f"{short} ({when})" if when else short


def _print_marketplace_detail(
    ccpm: CcpmContext,
    alias: str,
    repo: str,
    installed: InstalledPlugins,
    *,
    show_catalog: bool = False,
) -> None:
    out = ccpm.printer
    mp_dir = marketplace_dir(alias)
    is_cloned = mp_dir.exists()
    status = green("installed") if is_cloned else red("not installed")
    out.line(f"  {blue(alias)} ({plain(repo)}) [{status}]")

    if is_cloned:
        git_info = _marketplace_git_info(ccpm, mp_dir)
        if git_info:
            out.line(f"    {dim('@ ' + git_info)}")
        if show_catalog:
            try:
                catalog = load_catalog(mp_dir)
            except CatalogError:
                pass
            else:
                out.line(f"    {dim(f'catalog: {len(catalog.plugins)} plugin(s) available')}")

    names = sorted(installed.plugins_for_alias(alias))
    if not names:
        out.line(f"    {dim('(no plugins installed)')}")
    else:
        for name in names:
            details = _format_install(installed, PluginId.join(name, alias).full)
            out.line(f"    {dim('└─')} {plain(name)} {details}".rstrip())
    out.blank()


def _list_plugins_by_pattern(ccpm: CcpmContext, pattern: str) -> None:
    out = ccpm.printer
    installed = ccpm.load_installed()
    out.info(f"Installed plugins matching '{pattern}':")
    out.blank()

    matches = installed.matching(pattern)
    if not matches:
        out.line(f"  {dim('(no plugins found)')}")
        return

    for plugin_id in matches:
        parsed = PluginId.parse(plugin_id)
        details = _format_install(installed, plugin_id)
        out.line(f"  {blue(parsed.name)}@{plain(parsed.alias)} {details}".rstrip())
        info = installed.get(plugin_id)
        if ccpm.verbose and info is not None:
            if info.scope:
                out.line(f"    {dim(f'scope: {info.scope}')}")
            if info.install_path:
                out.line(f"    {dim(f'path: {info.install_path}')}")
            if info.last_updated:
                out.line(f"    {dim(f'updated: {info.last_updated.isoformat()}')}")

    out.blank()
    out.line(
        f"Found {green(len(matches))} installed plugin(s) matching '{plain(pattern)}'"
    )


@click.command(name="list")
@global_options
@click.argument("alias_or_repo", required=False)
@click.option(
    "--plugins",
    "plugins_pattern",
    default=None,
    metavar="PATTERN",
    help="List installed plugins whose name matches PATTERN (regex).",
)
@pass_ccpm
def list_cmd(ccpm: CcpmContext, alias_or_repo: Optional[str], plugins_pattern: Optional[str]) -> None:
    """List marketplaces and installed plugins.

    With an alias (or org/repo), shows only that marketplace.
    """
    if plugins_pattern:
        _list_plugins_by_pattern(ccpm, plugins_pattern)
        return

    out = ccpm.printer
    installed = ccpm.load_installed()

    if alias_or_repo:
        alias = alias_or_repo
        repo = ccpm.config.get_repo(alias_or_repo)
        if not repo:
            mapped = ccpm.config.get_alias(alias_or_repo)
            if not mapped:
                raise click.ClickException(f"marketplace not found: {alias_or_repo}")
            alias, repo = mapped, alias_or_repo
        out.info(f"Marketplace: {alias}")
        out.blank()
        _print_marketplace_detail(ccpm, alias, repo, installed, show_catalog=True)
        return

    out.info("Configured marketplaces:")
    out.blank()
    for repo in sorted(ccpm.config.repos()):
        _print_marketplace_detail(ccpm, ccpm.config.marketplaces[repo], repo, installed)


__all__ = ["add_cmd", "config_cmd", "discover_cmd", "list_cmd", "remove_cmd"]
