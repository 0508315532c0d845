"""Per-invocation state shared by every ccpm command."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import click

from ccpm.core.config import MarketplaceConfig
from ccpm.core.errors import ConfigError, InventoryError
from ccpm.core.installed import InstalledPlugins, load_installed
from ccpm.core.protocols import GitBackend, HostBackend
from ccpm.utils.log import get_logger
from ccpm.utils.output import Printer

logger = get_logger()


@dataclass
class CcpmContext:
    printer: Printer
    git: GitBackend
    host: HostBackend
    verbose: bool = False
    dry_run: bool = False
    config_override: Optional[str] = None
    _config: Optional[MarketplaceConfig] = field(default=None, repr=False)

    @property
    def config(self) -> MarketplaceConfig:
        """The marketplace config, loaded on first use."""
        if self._config is None:
            try:
                self._config = MarketplaceConfig.load(self.config_override)
            except ConfigError as exc:
                raise click.ClickException(f"loading config: {exc}") from exc
            logger.debug(
                "[cli] Using config",
                extra={"config": str(self._config.path), "dry_run": self.dry_run},
            )
        return self._config

    def use_config_file(self, path: str) -> None:
        self.config_override = path
        self._config = None

    def save_config(self) -> None:
        try:
            self.config.save()
        except ConfigError as exc:
            raise click.ClickException(f"saving config: {exc}") from exc

    def load_installed(self) -> InstalledPlugins:
        """Inventory for commands that cannot work without it."""
        try:
            return load_installed()
        except InventoryError as exc:
            raise click.ClickException(f"loading installed plugins: {exc}") from exc

    def load_installed_lenient(self) -> InstalledPlugins:
        """Inventory for commands that can degrade to an empty one."""
        try:
            return load_installed()
        except InventoryError as exc:
            logger.warning("[cli] Ignoring unreadable installed plugins: %s", exc)
            return InstalledPlugins()


pass_ccpm = click.make_pass_decorator(CcpmContext)


def _set_config(ctx: click.Context, _param: click.Parameter, value: Optional[str]) -> None:
    ccpm = ctx.find_object(CcpmContext)
    if ccpm is not None and value:
        ccpm.use_config_file(value)


def _set_verbose(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    ccpm = ctx.find_object(CcpmContext)
    if ccpm is not None and value:
        ccpm.verbose = True


def _set_dry_run(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    ccpm = ctx.find_object(CcpmContext)
    if ccpm is not None and value:
        ccpm.dry_run = True


def _set_no_color(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    ccpm = ctx.find_object(CcpmContext)
    if ccpm is not None and value:
        ccpm.printer = Printer(no_color=True)


CONFIG_HELP = "Config file (default: $XDG_CONFIG_HOME/ccpm.yaml)."
VERBOSE_HELP = "Verbose output"
DRY_RUN_HELP = "Show what would be done without making changes"
NO_COLOR_HELP = "Disable colored output"


def global_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Accept the root group's flags after the subcommand name as well."""
    options = [
        click.option(
            "--config",
            type=click.Path(dir_okay=False),
            default=None,
            expose_value=False,
            callback=_set_config,
            help=CONFIG_HELP,
        ),
        click.option(
            "-v", "--verbose", is_flag=True, expose_value=False, callback=_set_verbose, help=VERBOSE_HELP
        ),
        click.option(
            "--dry-run", is_flag=True, expose_value=False, callback=_set_dry_run, help=DRY_RUN_HELP
        ),
        click.option(
            "--no-color", is_flag=True, expose_value=False, callback=_set_no_color, help=NO_COLOR_HELP
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func
