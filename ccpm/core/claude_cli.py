"""Thin wrapper around the ``claude plugin`` subcommands.

ccpm never parses Claude's output: silent runs discard stdio and only the
exit code is surfaced.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Sequence, Tuple

from ccpm.utils.log import get_logger

logger = get_logger()

CLAUDE_BINARY = "claude"
# Shell convention for "command not found".
EXIT_COMMAND_MISSING = 127
EXIT_RUN_FAILED = 1


@dataclass(frozen=True)
class CommandResult:
    args: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ClaudeCli:
    """Invokes the host ``claude`` binary as a child process."""

    def __init__(self, binary: str = CLAUDE_BINARY) -> None:
        self.binary = binary

    def _invoke(self, args: Sequence[str], *, capture: bool) -> CommandResult:
        command = [self.binary, *args]
        output_target = subprocess.PIPE if capture else subprocess.DEVNULL
        try:
            completed = subprocess.run(
                command,
                stdin=subprocess.DEVNULL,
                stdout=output_target,
                stderr=output_target,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.warning("[claude] '%s' not found on PATH", self.binary)
            return CommandResult(tuple(args), EXIT_COMMAND_MISSING)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning(
                "[claude] Failed to run %s: %s: %s",
                " ".join(command),
                type(exc).__name__,
                exc,
            )
            return CommandResult(tuple(args), EXIT_RUN_FAILED)

        logger.debug(
            "[claude] Command finished",
            extra={"command": command, "returncode": completed.returncode},
        )
        return CommandResult(
            tuple(args),
            completed.returncode,
            completed.stdout or "",
            completed.stderr or "",
        )

    def run(self, *args: str) -> CommandResult:
        """Run ``claude <args>`` capturing stdout and stderr."""
        return self._invoke(args, capture=True)

    def run_silent(self, *args: str) -> CommandResult:
        """Run ``claude <args>`` discarding all output."""
        return self._invoke(args, capture=False)

    def marketplace_update(self, alias: str) -> CommandResult:
        return self.run_silent("plugin", "marketplace", "update", alias)

    def plugin_install(self, plugin_id: str) -> CommandResult:
        return self.run_silent("plugin", "install", plugin_id)

    def plugin_uninstall(self, plugin_id: str) -> CommandResult:
        return self.run_silent("plugin", "uninstall", plugin_id)

    def plugin_reinstall(self, plugin_id: str) -> CommandResult:
        """Uninstall then install; only the install's exit status counts."""
        uninstall = self.plugin_uninstall(plugin_id)
        if not uninstall.ok:
            logger.debug(
                "[claude] Ignoring uninstall failure before reinstall",
                extra={"plugin_id": plugin_id, "returncode": uninstall.returncode},
            )
        return self.plugin_install(plugin_id)
