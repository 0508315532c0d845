"""Tests for git utilities.

Tests cover:
- get_head_hash / get_short_hash: HEAD commit lookup
- get_relative_commit_time: committer date in relative form
- get_remote_origin: origin URL lookup
- get_changed_paths: name-only diff between two commits
- GitClient: the backend wrapper used by the CLI
"""

import os
import shutil
import subprocess

import pytest

from ccpm.utils.git_utils import (
    GitClient,
    get_changed_paths,
    get_head_hash,
    get_relative_commit_time,
    get_remote_origin,
    get_short_hash,
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def _git(repo, *args):
    subprocess.run(
        ["git", "-C", str(repo), *args],
        capture_output=True,
        check=True,
        env={
            "GIT_AUTHOR_NAME": "Test",
            "GIT_AUTHOR_EMAIL": "test@example.com",
            "GIT_COMMITTER_NAME": "Test",
            "GIT_COMMITTER_EMAIL": "test@example.com",
            "HOME": str(repo),
            "PATH": os.environ.get("PATH", ""),
        },
    )


def _commit_file(repo, relative, content):
    target = repo / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    _git(repo, "add", "-A")
    _git(repo, "commit", "-q", "-m", f"update {relative}")


@pytest.fixture
def repo(tmp_path):
    path = tmp_path / "repo"
    path.mkdir()
    _git(path, "init", "-q")
    _commit_file(path, "README.md", "hello\n")
    return path


@requires_git
class TestHeadHash:
    """Tests for HEAD lookups."""

    def test_returns_full_hash(self, repo):
        head = get_head_hash(repo)
        assert len(head) == 40
        assert get_short_hash(repo)
        assert head.startswith(get_short_hash(repo))

    def test_empty_for_non_repo(self, tmp_path):
        assert get_head_hash(tmp_path) == ""
        assert get_short_hash(tmp_path) == ""

    def test_relative_time(self, repo):
        assert "ago" in get_relative_commit_time(repo)


@requires_git
class TestRemoteOrigin:
    """Tests for get_remote_origin."""

    def test_returns_configured_origin(self, repo):
        _git(repo, "remote", "add", "origin", "git@github.com:plinde/claude-plugins.git")
        assert get_remote_origin(repo) == "git@github.com:plinde/claude-plugins.git"

    def test_none_without_origin(self, repo):
        assert get_remote_origin(repo) is None


@requires_git
class TestChangedPaths:
    """Tests for get_changed_paths."""

    def test_lists_paths_between_commits(self, repo):
        old = get_head_hash(repo)
        _commit_file(repo, "trivy/.claude-plugin/plugin.json", "{}")
        _commit_file(repo, "snyk/README.md", "x")
        new = get_head_hash(repo)
        assert sorted(get_changed_paths(repo, old, new)) == [
            "snyk/README.md",
            "trivy/.claude-plugin/plugin.json",
        ]

    def test_same_commit_is_empty(self, repo):
        head = get_head_hash(repo)
        assert get_changed_paths(repo, head, head) == []

    def test_bad_revision_is_empty(self, repo):
        assert get_changed_paths(repo, "deadbeef", "cafebabe") == []


class TestGitUnavailable:
    """Failures to spawn git are reported as empty results."""

    def test_missing_binary(self, tmp_path, monkeypatch):
        def mock_run(*args, **kwargs):
            raise FileNotFoundError("git not found")

        monkeypatch.setattr("subprocess.run", mock_run)
        client = GitClient()
        assert client.head_hash(tmp_path) == ""
        assert client.remote_origin(tmp_path) is None
        assert client.changed_paths(tmp_path, "a", "b") == []
        assert client.relative_time(tmp_path) == ""

    def test_invokes_git_with_directory(self, tmp_path, monkeypatch):
        seen = []

        def mock_run(command, **kwargs):
            seen.append(command)
            return subprocess.CompletedProcess(command, 0, stdout="abc123\n", stderr="")

        monkeypatch.setattr("subprocess.run", mock_run)
        assert GitClient().head_hash(tmp_path) == "abc123"
        assert seen == [["git", "-C", str(tmp_path), "rev-parse", "HEAD"]]
