"""Whole-file staging and commits."""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from gitdesk.git.invocation import run_classified
from gitdesk.git.models import OperationResult
from gitdesk.git.runner import run_git

logger = logging.getLogger(__name__)


@dataclass
class CommitMessage:
    subject: str
    body: str


def _has_head(repo: Path) -> bool:
    return run_git(["rev-parse", "--verify", "-q", "HEAD"], repo).success


def stage_file(repo: Path, path: str) -> OperationResult:
    """Stage path as it is on disk; a deleted file is removed from the index."""
    result = run_classified(repo, "add", ["-A", "--", path], conflict_query=False)
    if result.success:
        return result.with_message(f"Staged {path}")
    return result


def unstage_file(repo: Path, path: str) -> OperationResult:
    """Reset path in the index to HEAD (or drop it before the first commit)."""
    if _has_head(repo):
        args = ["reset", "-q", "HEAD", "--", path]
    else:
        args = ["rm", "--cached", "-q", "--", path]
    result = run_classified(repo, args[0], args[1:], conflict_query=False)
    if result.success:
        return result.with_message(f"Unstaged {path}")
    return result


def discard_file(repo: Path, path: str, is_untracked: bool = False) -> OperationResult:
    """
    Throw away working-tree changes to path.

    Untracked files (or directories) are deleted from disk. Tracked files are
    restored from HEAD, which also resets their staged content.
    """
    if is_untracked:
        full_path = repo / path
        try:
            if full_path.is_dir():
                shutil.rmtree(full_path)
            else:
                full_path.unlink()
        except OSError as e:
            logger.info(f"Could not remove untracked {path}: {e}")
            return OperationResult.failed(f"Failed to remove {path}: {e}")
        logger.info(f"Removed untracked {path}")
        return OperationResult.ok(f"Removed {path}")

    result = run_classified(repo, "checkout", ["HEAD", "--", path], conflict_query=False)
    if not result.success:
        return result.with_message(f"Failed to discard changes: {result.message}")
    return OperationResult.ok(f"Discarded changes in {path}")


def commit(repo: Path, message: str, amend: bool = False) -> OperationResult:
    """
    Commit the index with message, optionally amending HEAD.

    On success the message is git's summary line when files were created or
    deleted, otherwise git's full output.
    """
    args = ["-m", message]
    if amend:
        args.append("--amend")
    result = run_classified(
        repo, "commit", args, {"GIT_TERMINAL_PROMPT": "0"}, conflict_query=False
    )
    if not result.success:
        return result
    output = result.message
    if "create mode" in output or "delete mode" in output:
        return result.with_message(output.splitlines()[0])
    return result.with_message(output or "Commit created successfully")


def get_last_commit_message(repo: Path) -> CommitMessage | None:
    """Subject and body of HEAD's message, None before the first commit."""
    result = run_git(["log", "-1", "--format=%B"], repo)
    if not result.success:
        return None
    subject, _, body = result.stdout.partition("\n")
    return CommitMessage(subject=subject.strip(), body=body.strip())
