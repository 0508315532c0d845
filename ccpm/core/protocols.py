"""Protocols (ports) for the external programs ccpm drives."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Protocol, Union

if TYPE_CHECKING:
    from ccpm.core.claude_cli import CommandResult


class GitBackend(Protocol):
    """Reads commit and remote information from a local clone."""

    def head_hash(self, directory: Union[str, Path]) -> str: ...
    def short_hash(self, directory: Union[str, Path]) -> str: ...
    def relative_time(self, directory: Union[str, Path]) -> str: ...
    def remote_origin(self, directory: Union[str, Path]) -> Optional[str]: ...
    def changed_paths(
        self, directory: Union[str, Path], old_hash: str, new_hash: str
    ) -> List[str]: ...


class HostBackend(Protocol):
    """Runs ``claude plugin ...`` subcommands."""

    def marketplace_update(self, alias: str) -> CommandResult: ...
    def plugin_install(self, plugin_id: str) -> CommandResult: ...
    def plugin_uninstall(self, plugin_id: str) -> CommandResult: ...
    def plugin_reinstall(self, plugin_id: str) -> CommandResult: ...
