"""Merge and rebase operations."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from gitdesk.git.invocation import run_classified
from gitdesk.git.models import ErrorType, OperationResult

NO_MERGE_TO_ABORT = "no merge to abort"
NO_REBASE_IN_PROGRESS = "no rebase in progress"


class MergeStrategy(Enum):
    """How a branch is merged into the current one."""

    DEFAULT = "default"  # fast-forward when possible
    NO_FF = "no-ff"
    SQUASH = "squash"

    @classmethod
    def parse(cls, value: str) -> "MergeStrategy":
        try:
            return cls(value.replace("_", "-"))
        except ValueError:
            raise ValueError(f"Unknown merge type: {value}") from None

    @property
    def flags(self) -> list[str]:
        return {
            "default": [],
            "no-ff": ["--no-ff"],
            "squash": ["--squash"],
        }[self.value]

    @property
    def success_note(self) -> str:
        if self is MergeStrategy.SQUASH:
            return "Squash merge completed. Changes are staged but not committed."
        return "Merge completed successfully."


@dataclass
class RebaseOptions:
    preserve_merges: bool = False
    autostash: bool = False


def merge(repo: Path, source_branch: str, strategy: MergeStrategy = MergeStrategy.DEFAULT) -> OperationResult:
    """Merge source_branch into the checked-out branch."""
    result = run_classified(repo, "merge", [*strategy.flags, source_branch])
    if result.success:
        return result.with_message(f"{strategy.success_note}\n{result.message}".strip())
    if result.error_type is ErrorType.MERGE_CONFLICT:
        return result.with_message(
            f"Merge conflicts detected. Resolve conflicts and commit.\n{result.message}"
        )
    return result


def merge_abort(repo: Path) -> OperationResult:
    result = run_classified(repo, "merge", ["--abort"], conflict_query=False)
    if result.success:
        return result.with_message("Merge aborted successfully.")
    if NO_MERGE_TO_ABORT in result.message.lower():
        return result.with_message("No merge in progress to abort.")
    return result


def rebase(repo: Path, onto: str, options: RebaseOptions | None = None) -> OperationResult:
    """
    Rebase the checked-out branch onto another.

    On conflict the rebase is left in progress; the result names the
    unmerged paths and the caller resolves, then continues or aborts.
    """
    options = options or RebaseOptions()
    args = []
    if options.preserve_merges:
        args.append("--rebase-merges")
    if options.autostash:
        args.append("--autostash")
    args.append(onto)

    result = run_classified(repo, "rebase", args)
    if result.success:
        if result.message == "Already up to date, nothing to rebase.":
            return result
        return result.with_message(f"Rebase onto '{onto}' completed successfully.")
    if result.error_type is ErrorType.REBASE_CONFLICT:
        return result.with_message(
            "Rebase conflicts detected. Please resolve conflicts and run 'git rebase --continue'."
        )
    return result


def rebase_abort(repo: Path) -> OperationResult:
    result = run_classified(repo, "rebase", ["--abort"], conflict_query=False)
    if result.success:
        return result.with_message("Rebase aborted successfully.")
    if NO_REBASE_IN_PROGRESS in result.message.lower():
        return result.with_message("No rebase in progress to abort.")
    return result


def rebase_continue(repo: Path) -> OperationResult:
    """Continue after conflicts are resolved. Commit messages are kept as-is."""
    result = run_classified(repo, "rebase", ["--continue"], {"GIT_EDITOR": "true"})
    if result.success:
        return result.with_message("Rebase continued successfully.")
    if NO_REBASE_IN_PROGRESS in result.message.lower():
        return result.with_message("No rebase in progress.")
    return result
