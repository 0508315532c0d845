"""Git utilities for ccpm.

Every helper shells out to ``git -C <dir> ...`` and reports failure as an
empty result rather than raising; callers decide whether an empty hash or
remote means "skip".
"""

import subprocess
from pathlib import Path
from typing import List, Optional, Union

from ccpm.utils.log import get_logger

logger = get_logger()

PathLike = Union[str, Path]


def _run_git(directory: PathLike, *args: str) -> Optional[str]:
    """Run a git command in ``directory`` and return stdout, or None on failure."""
    command = ["git", "-C", str(directory), *args]
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
        )
    except (subprocess.SubprocessError, FileNotFoundError, OSError) as exc:
        logger.debug(
            "[git] Failed to run git: %s: %s",
            type(exc).__name__,
            exc,
            extra={"command": command},
        )
        return None
    if result.returncode != 0:
        logger.debug(
            "[git] Command exited non-zero",
            extra={
                "command": command,
                "returncode": result.returncode,
                "stderr": result.stderr.strip(),
            },
        )
        return None
    return result.stdout


def get_head_hash(directory: PathLike) -> str:
    """Full HEAD commit hash, or an empty string when it cannot be read."""
    output = _run_git(directory, "rev-parse", "HEAD")
    return output.strip() if output else ""


def get_short_hash(directory: PathLike) -> str:
    output = _run_git(directory, "rev-parse", "--short", "HEAD")
    return output.strip() if output else ""


def get_relative_commit_time(directory: PathLike) -> str:
    """Committer date of HEAD in git's relative form (e.g. ``3 days ago``)."""
    output = _run_git(directory, "log", "-1", "--format=%cr")
    return output.strip() if output else ""


def get_remote_origin(directory: PathLike) -> Optional[str]:
    """URL of the ``origin`` remote, or None when there is no such remote."""
    output = _run_git(directory, "remote", "get-url", "origin")
    if output is None:
        return None
    return output.strip() or None


def get_changed_paths(directory: PathLike, old_hash: str, new_hash: str) -> List[str]:
    """Paths touched between two commits (``git diff --name-only``)."""
    output = _run_git(directory, "diff", "--name-only", old_hash, new_hash)
    if not output:
        return []
    return [line.strip() for line in output.splitlines() if line.strip()]


class GitClient:
    """Production git backend used by the CLI."""

    def head_hash(self, directory: PathLike) -> str:
        return get_head_hash(directory)

    def short_hash(self, directory: PathLike) -> str:
        return get_short_hash(directory)

    def relative_time(self, directory: PathLike) -> str:
        return get_relative_commit_time(directory)

    def remote_origin(self, directory: PathLike) -> Optional[str]:
        return get_remote_origin(directory)

    def changed_paths(self, directory: PathLike, old_hash: str, new_hash: str) -> List[str]:
        return get_changed_paths(directory, old_hash, new_hash)
