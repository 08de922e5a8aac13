"""Git branch operations."""

import logging
from pathlib import Path

from gitdesk.git.invocation import InvocationContext, run_classified
from gitdesk.git.models import OperationResult
from gitdesk.git.runner import run_git
from gitdesk.git.stash import NO_LOCAL_CHANGES

logger = logging.getLogger(__name__)

SWITCHED_PHRASES = ("Switched to", "Cambiado a")


def get_current_branch(repo: Path) -> str | None:
    """Get the current branch name, or None if detached HEAD."""
    result = run_git(["branch", "--show-current"], repo)
    if result.success:
        return result.stdout.strip() or None
    return None


def branch_exists(repo: Path, branch: str) -> bool:
    """Check if a branch exists."""
    result = run_git(["show-ref", "--verify", f"refs/heads/{branch}"], repo)
    return result.success


def _switched_message(result: OperationResult, default: str) -> OperationResult:
    if not result.success:
        return result
    if any(p in result.message for p in SWITCHED_PHRASES):
        return result
    return result.with_message(default)


def checkout(repo: Path, branch: str) -> OperationResult:
    """Switch to an existing branch."""
    result = run_classified(repo, "checkout", [branch])
    return _switched_message(result, f"Switched to branch '{branch}'")


def checkout_track(repo: Path, local_branch: str, remote_branch: str) -> OperationResult:
    """Create local_branch tracking remote_branch and switch to it."""
    result = run_classified(repo, "checkout", ["-b", local_branch, "--track", remote_branch])
    return _switched_message(
        result,
        f"Branch '{local_branch}' set up to track remote branch '{remote_branch}'",
    )


def checkout_with_stash(repo: Path, branch: str, restore_changes: bool = True) -> OperationResult:
    """
    Stash local changes (untracked included), switch, and optionally pop.

    If the switch fails the stash is popped back so nothing is left behind.
    If the final pop fails the switch still counts as done; the changes stay
    in the stash and the message says so.
    """
    stash = run_classified(
        repo, "stash", ["push", "-u", "-m", f"Auto-stash before switching to {branch}"]
    )
    if not stash.success:
        return stash.with_message(f"Failed to stash changes: {stash.message}")
    if NO_LOCAL_CHANGES in stash.message:
        return checkout(repo, branch)

    switched = run_classified(repo, "checkout", [branch])
    if not switched.success:
        restore = run_git(["stash", "pop"], repo)
        if not restore.success:
            logger.warning(f"Could not restore auto-stash after failed checkout: {restore.stderr.strip()}")
            return switched.with_message(
                f"Checkout failed (changes remain in stash): {switched.message}"
            )
        return switched.with_message(f"Checkout failed (stash restored): {switched.message}")

    if not restore_changes:
        return OperationResult.ok(f"Switched to '{branch}' (changes saved in stash)")

    popped = run_classified(repo, "stash", ["pop"])
    if not popped.success:
        logger.info(f"Auto-stash pop after switching to {branch} failed: {popped.message}")
        return OperationResult.ok(
            f"Switched to '{branch}' but failed to restore changes. "
            f"Your changes are in stash. Error: {popped.message}"
        )
    return OperationResult.ok(f"Switched to '{branch}' and restored changes")


def create_branch(repo: Path, name: str, start_point: str = "HEAD", checkout: bool = False) -> OperationResult:
    if checkout:
        result = run_classified(repo, "checkout", ["-b", name, start_point])
        return _switched_message(result, f"Switched to a new branch '{name}'")
    result = run_classified(repo, "branch", [name, start_point])
    if result.success:
        return result.with_message(f"Branch '{name}' created")
    return result


def delete_branch(
    repo: Path,
    name: str,
    force: bool = False,
    remote: str | None = None,
    context: InvocationContext | None = None,
) -> OperationResult:
    """Delete a local branch, and the same branch on remote if one is given."""
    result = run_classified(repo, "branch", ["-D" if force else "-d", name], conflict_query=False)
    if not result.success:
        if "not fully merged" in result.message:
            return result.with_message(
                f"Branch '{name}' is not fully merged. Use force delete to remove it anyway."
            )
        return result

    if not remote:
        return OperationResult.ok(f"Branch '{name}' deleted")

    pushed = run_classified(
        repo, "push", [remote, "--delete", name], network=True, context=context, conflict_query=False
    )
    if not pushed.success:
        return pushed.with_message(
            f"Local branch deleted but failed to delete remote branch: {pushed.message}"
        )
    return OperationResult.ok(f"Branch '{name}' deleted (local and remote)")


def rename_branch(
    repo: Path,
    old_name: str,
    new_name: str,
    remote: str | None = None,
    context: InvocationContext | None = None,
) -> OperationResult:
    """
    Rename a local branch, and on remote too if one is given.

    The remote rename pushes new_name and then deletes old_name there. The
    message says how far it got if either push fails.
    """
    result = run_classified(repo, "branch", ["-m", old_name, new_name], conflict_query=False)
    if not result.success:
        return result
    if not remote:
        return OperationResult.ok(f"Branch '{old_name}' renamed to '{new_name}'")

    pushed = run_classified(
        repo, "push", [remote, new_name], network=True, context=context, conflict_query=False
    )
    if not pushed.success:
        return pushed.with_message(
            f"Local branch renamed but failed to push to remote: {pushed.message}"
        )
    deleted = run_classified(
        repo, "push", [remote, "--delete", old_name], network=True, context=context, conflict_query=False
    )
    if not deleted.success:
        return deleted.with_message(
            f"Branch renamed and pushed, but failed to delete old remote branch: {deleted.message}"
        )
    return OperationResult.ok(f"Branch '{old_name}' renamed to '{new_name}' (local and remote)")


def create_tag(
    repo: Path,
    name: str,
    start_point: str = "HEAD",
    message: str | None = None,
    push_to_remotes: bool = False,
    context: InvocationContext | None = None,
) -> OperationResult:
    """Lightweight tag, or annotated when message is non-blank."""
    if message and message.strip():
        args = ["-a", name, start_point, "-m", message]
    else:
        args = [name, start_point]
    result = run_classified(repo, "tag", args, conflict_query=False)
    if not result.success:
        return result
    if not push_to_remotes:
        return OperationResult.ok(f"Tag '{name}' created")

    pushed = run_classified(repo, "push", ["--tags"], network=True, context=context, conflict_query=False)
    if not pushed.success:
        return pushed.with_message(f"Tag '{name}' created but push failed: {pushed.message}")
    return OperationResult.ok(f"Tag '{name}' created and pushed")


def fast_forward(
    repo: Path,
    branch: str,
    remote: str = "origin",
    context: InvocationContext | None = None,
) -> OperationResult:
    """
    Fast-forward branch to remote/branch without switching to it.

    The checked-out branch is updated with merge --ff-only; any other branch
    is moved directly by fetching remote's branch into it.
    """
    if get_current_branch(repo) == branch:
        fetched = run_classified(repo, "fetch", [remote, branch], network=True, context=context)
        if not fetched.success:
            return fetched
        merged = run_classified(repo, "merge", ["--ff-only", f"{remote}/{branch}"])
        if not merged.success:
            if "not possible to fast-forward" in merged.message.lower():
                return merged.with_message(
                    f"Cannot fast-forward '{branch}': branches have diverged"
                )
            return merged
        return OperationResult.ok(f"Fast-forwarded '{branch}' from '{remote}/{branch}'")

    fetched = run_classified(
        repo, "fetch", [remote, f"{branch}:{branch}"], network=True, context=context
    )
    if not fetched.success:
        if "non-fast-forward" in fetched.message:
            return fetched.with_message(
                f"Cannot fast-forward '{branch}': local branch has commits not in remote"
            )
        return fetched
    return OperationResult.ok(f"Fast-forwarded '{branch}' from '{remote}/{branch}'")
