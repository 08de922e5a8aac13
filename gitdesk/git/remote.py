"""Git remote operations."""

from dataclasses import dataclass
from pathlib import Path

from gitdesk.git.invocation import InvocationContext, run_classified
from gitdesk.git.models import OperationResult
from gitdesk.git.runner import run_git


@dataclass
class FetchOptions:
    remote: str | None = None
    all: bool = False
    prune: bool = False


@dataclass
class PullOptions:
    remote: str = "origin"
    branch: str | None = None
    rebase: bool = False
    autostash: bool = False


@dataclass
class PushOptions:
    remote: str = "origin"
    branch: str | None = None
    remote_branch: str | None = None
    push_tags: bool = False
    force_with_lease: bool = False
    set_upstream: bool = False


def has_remote(repo: Path) -> bool:
    """Check if repo has any remotes configured."""
    result = run_git(["remote"], repo)
    return bool(result.stdout.strip())


def get_remotes(repo: Path) -> list[str]:
    result = run_git(["remote"], repo)
    return [r.strip() for r in result.stdout.splitlines() if r.strip()]


def _default_message(result: OperationResult, message: str) -> OperationResult:
    """Swap in message when git succeeded without printing anything."""
    if result.success and not result.message:
        return result.with_message(message)
    return result


def fetch(
    repo: Path,
    options: FetchOptions | None = None,
    context: InvocationContext | None = None,
) -> OperationResult:
    """Fetch from one remote (origin by default) or all of them."""
    options = options or FetchOptions()
    args = []
    if options.prune:
        args.append("--prune")
    if options.all:
        args.append("--all")
    else:
        args.append(options.remote or "origin")
    result = run_classified(repo, "fetch", args, network=True, context=context)
    return _default_message(result, "Fetch completed")


def pull(
    repo: Path,
    options: PullOptions | None = None,
    context: InvocationContext | None = None,
) -> OperationResult:
    """
    Pull from a remote.

    Merge vs rebase is always stated explicitly so divergent branches fail
    with a classified error instead of git's configuration hint.
    """
    options = options or PullOptions()
    args = ["--rebase" if options.rebase else "--no-rebase"]
    if options.autostash:
        args.append("--autostash")
    args.append(options.remote)
    if options.branch:
        args.append(options.branch)
    result = run_classified(repo, "pull", args, network=True, context=context)
    return _default_message(result, "Pull completed")


def push(
    repo: Path,
    options: PushOptions | None = None,
    context: InvocationContext | None = None,
) -> OperationResult:
    """Push to a remote. git reports progress on stderr even on success."""
    options = options or PushOptions()
    args = []
    if options.force_with_lease:
        args.append("--force-with-lease")
    if options.push_tags:
        args.append("--tags")
    if options.set_upstream:
        args.append("-u")
    args.append(options.remote)
    if options.branch:
        args.append(f"{options.branch}:{options.remote_branch or options.branch}")
    result = run_classified(repo, "push", args, network=True, context=context)
    return _default_message(result, "Push completed successfully")


def add_remote(repo: Path, name: str, url: str) -> OperationResult:
    result = run_classified(repo, "remote", ["add", name, url], conflict_query=False)
    if result.success:
        return result.with_message(f"Remote '{name}' added successfully")
    return result


def check_remote_connection(
    repo: Path,
    url: str,
    context: InvocationContext | None = None,
) -> OperationResult:
    """Check that url is reachable and readable with ls-remote."""
    result = run_classified(
        repo,
        "ls-remote",
        ["--exit-code", "--heads", url],
        network=True,
        context=context,
        conflict_query=False,
    )
    if result.success:
        return result.with_message("Connection successful")
    return result
