"""Shared fixtures: throwaway git repositories."""

import shutil
import subprocess
from pathlib import Path

import pytest


def git(repo: Path, *args: str) -> str:
    """Run git in repo, fail the test on error, return stdout."""
    result = subprocess.run(
        ["git", "-C", str(repo), *args],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, f"git {' '.join(args)} failed: {result.stderr}"
    return result.stdout


def commit_all(repo: Path, message: str = "commit") -> None:
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "-m", message)


@pytest.fixture
def repo(tmp_path):
    """Empty repository on branch main with a committer configured."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    path = tmp_path / "repo"
    path.mkdir()
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    git(path, "config", "user.name", "Test User")
    git(path, "config", "user.email", "test@example.com")
    git(path, "config", "commit.gpgsign", "false")
    git(path, "config", "core.autocrlf", "false")
    return path


@pytest.fixture
def repo_with_file(repo):
    """Repository with one committed five-line file, a.txt."""
    (repo / "a.txt").write_text("one\ntwo\nthree\nfour\nfive\n")
    commit_all(repo, "initial")
    return repo


@pytest.fixture
def remote_pair(repo_with_file, tmp_path):
    """(repo, clone): repo_with_file pushed to a bare origin, plus a second clone of it."""
    bare = tmp_path / "origin.git"
    git(tmp_path, "init", "-q", "--bare", str(bare))
    git(bare, "symbolic-ref", "HEAD", "refs/heads/main")
    git(repo_with_file, "remote", "add", "origin", str(bare))
    git(repo_with_file, "push", "-q", "-u", "origin", "main")

    clone = tmp_path / "clone"
    git(tmp_path, "clone", "-q", str(bare), str(clone))
    git(clone, "config", "user.name", "Other User")
    git(clone, "config", "user.email", "other@example.com")
    git(clone, "config", "commit.gpgsign", "false")
    return repo_with_file, clone
