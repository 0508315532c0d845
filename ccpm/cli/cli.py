"""Entry point for the ccpm command line."""

from __future__ import annotations

import sys
from typing import Optional

import click

from ccpm import __version__
from ccpm.cli.context import (
    CONFIG_HELP,
    DRY_RUN_HELP,
    NO_COLOR_HELP,
    VERBOSE_HELP,
    CcpmContext,
)
from ccpm.cli.marketplace_cli import add_cmd, config_cmd, discover_cmd, list_cmd, remove_cmd
from ccpm.cli.plugin_cli import (
    check_conflicts_cmd,
    reinstall_cmd,
    search_cmd,
    uninstall_cmd,
    update_cmd,
    upgrade_cmd,
)
from ccpm.core.claude_cli import ClaudeCli
from ccpm.utils.git_utils import GitClient
from ccpm.utils.log import enable_file_logging_from_env, get_logger
from ccpm.utils.output import Printer

logger = get_logger()


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="ccpm")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help=CONFIG_HELP,
)
@click.option("-v", "--verbose", is_flag=True, help=VERBOSE_HELP)
@click.option("--dry-run", is_flag=True, help=DRY_RUN_HELP)
@click.option("--no-color", is_flag=True, help=NO_COLOR_HELP)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: Optional[str],
    verbose: bool,
    dry_run: bool,
    no_color: bool,
) -> None:
    """ccpm - Claude Code Plugin Manager.

    Manages marketplace repo -> alias mappings and bulk plugin operations
    on top of the claude CLI.

    Global flags may also be given after the subcommand name.
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    logger.debug("[cli] Starting command", extra={"command": ctx.invoked_subcommand})
    # The config is loaded lazily so a --config given after the subcommand still applies.
    ctx.obj = CcpmContext(
        printer=Printer(no_color=no_color),
        git=GitClient(),
        host=ClaudeCli(),
        verbose=verbose,
        dry_run=dry_run,
        config_override=config_file,
    )


cli.add_command(add_cmd)
cli.add_command(remove_cmd)
cli.add_command(discover_cmd)
cli.add_command(config_cmd)
cli.add_command(list_cmd)
cli.add_command(search_cmd)
cli.add_command(update_cmd)
cli.add_command(upgrade_cmd)
cli.add_command(reinstall_cmd)
cli.add_command(uninstall_cmd)
cli.add_command(check_conflicts_cmd)


def main() -> None:
    """Main entry point; every command-level error exits 1, Ctrl-C exits 130."""
    enable_file_logging_from_env()
    try:
        code = cli.main(prog_name="ccpm", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        logger.debug("[cli] Command failed: %s", exc.format_message())
        sys.exit(1)
    except click.Abort as exc:
        # click re-raises Ctrl-C as Abort, chained from the KeyboardInterrupt.
        if isinstance(exc.__cause__, KeyboardInterrupt):
            click.echo("Interrupted", err=True)
            sys.exit(130)
        click.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(code if isinstance(code, int) else 0)


if __name__ == "__main__":
    main()
