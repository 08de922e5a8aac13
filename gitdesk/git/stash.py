"""Git stash operations."""

from dataclasses import dataclass
from pathlib import Path

from gitdesk.git.invocation import run_classified
from gitdesk.git.models import OperationResult
from gitdesk.git.runner import run_git

STASH_FORMAT = "%gd|%gs|%ct"
NO_LOCAL_CHANGES = "No local changes to save"
# Prefixes git writes at the start of a stash subject, before "<branch>:"
BRANCH_PREFIXES = ("WIP on ", "On ", "index on ")


@dataclass
class StashInfo:
    index: int
    id: str  # e.g. "stash@{0}"
    message: str
    branch: str
    timestamp: int

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "id": self.id,
            "message": self.message,
            "branch": self.branch,
            "timestamp": self.timestamp,
        }


def stash_ref(index: int) -> str:
    return f"stash@{{{index}}}"


def branch_from_stash_message(message: str) -> str:
    """
    Branch a stash was made on, from its subject.

    Example:
        "WIP on main: abc1234 commit message" -> "main"
        "On feature/x: custom message" -> "feature/x"
    """
    for prefix in BRANCH_PREFIXES:
        if message.startswith(prefix):
            rest = message[len(prefix):]
            colon = rest.find(":")
            if colon >= 0:
                return rest[:colon]
    return ""


def list_stashes(repo: Path) -> list[StashInfo]:
    """All stashes, newest first. Empty if none or on error."""
    result = run_git(["stash", "list", f"--format={STASH_FORMAT}"], repo)
    if not result.success:
        return []

    stashes = []
    for index, line in enumerate(result.stdout.splitlines()):
        parts = line.split("|")
        if len(parts) < 3:
            continue
        # Subjects may contain "|"; the id is first and the timestamp last
        stash_id, timestamp = parts[0], parts[-1]
        message = "|".join(parts[1:-1])
        try:
            ts = int(timestamp)
        except ValueError:
            ts = 0
        stashes.append(StashInfo(
            index=index,
            id=stash_id,
            message=message,
            branch=branch_from_stash_message(message),
            timestamp=ts,
        ))
    return stashes


def stash_save(
    repo: Path,
    message: str | None = None,
    include_untracked: bool = False,
    keep_index: bool = False,
) -> OperationResult:
    args = ["push"]
    if include_untracked:
        args.append("-u")
    if keep_index:
        args.append("--keep-index")
    if message and message.strip():
        args += ["-m", message]

    result = run_classified(repo, "stash", args, conflict_query=False)
    if NO_LOCAL_CHANGES in result.message:
        # git exits 0 here, but nothing was saved
        return OperationResult.failed(NO_LOCAL_CHANGES)
    if result.success:
        return result.with_message("Stash saved successfully")
    return result


def stash_apply(repo: Path, index: int = 0) -> OperationResult:
    result = run_classified(repo, "stash", ["apply", stash_ref(index)])
    if result.success:
        return result.with_message("Stash applied successfully")
    if result.conflicting_files:
        return result.with_message(
            f"Stash applied with conflicts. Resolve conflicts and commit.\n{result.message}"
        )
    return result


def stash_pop(repo: Path, index: int = 0) -> OperationResult:
    result = run_classified(repo, "stash", ["pop", stash_ref(index)])
    if result.success:
        return result.with_message("Stash popped successfully")
    if result.conflicting_files:
        return result.with_message(
            "Stash popped with conflicts. Resolve conflicts and commit. "
            f"The stash was not dropped.\n{result.message}"
        )
    return result


def stash_drop(repo: Path, index: int = 0) -> OperationResult:
    ref = stash_ref(index)
    result = run_classified(repo, "stash", ["drop", ref], conflict_query=False)
    if result.success:
        return result.with_message(f"Stash {ref} dropped")
    return result
