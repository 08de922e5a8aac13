"""Run a git subcommand and classify its outcome.

This is the single path every higher-level operation (pull, push, checkout,
merge, rebase, stash, git-flow) takes. Operations differ only in the
arguments they pass and in cosmetic success messages.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from gitdesk.git.classify import classify
from gitdesk.git.diff import get_conflicted_files
from gitdesk.git.errors import SubprocessLaunchError
from gitdesk.git.models import OperationResult
from gitdesk.git.phrases import DEFAULT_PHRASES, PhraseBook
from gitdesk.git.runner import NETWORK_ENV, run_git
from gitdesk.workflow.fsm import InvocationFSM

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvocationContext:
    """Settings threaded explicitly through every classified invocation.

    Built once from configuration (see gitdesk.lib.config) and passed along;
    nothing here is global.
    """
    network_env: dict[str, str] = field(default_factory=lambda: dict(NETWORK_ENV))
    phrases: PhraseBook = DEFAULT_PHRASES


DEFAULT_CONTEXT = InvocationContext()


def run_classified(
    repo: Path,
    subcommand: str,
    args: list[str] | None = None,
    env_overrides: dict[str, str] | None = None,
    *,
    network: bool = False,
    context: InvocationContext | None = None,
    conflict_query: bool = True,
    timeout: float | None = None,
) -> OperationResult:
    """
    Run `git <subcommand> <args>` in repo and return its classified result.

    Args:
        repo: Repository path
        subcommand: Git subcommand (e.g., "pull")
        args: Arguments after the subcommand
        env_overrides: Extra environment, applied last
        network: Disable interactive prompts (GIT_TERMINAL_PROMPT=0, batch ssh)
        context: Network environment and phrase tables; defaults if None
        conflict_query: Ask git for unmerged paths when a conflict is reported
        timeout: Optional timeout in seconds; none by default

    Returns:
        OperationResult. A non-zero git exit is a normal return value.

    Raises:
        SubprocessLaunchError: If git could not be started
    """
    context = context or DEFAULT_CONTEXT
    cmd_args = [subcommand] + list(args or [])
    env: dict[str, str] = {}
    if network:
        env.update(context.network_env)
    if env_overrides:
        env.update(env_overrides)

    fsm = InvocationFSM(subcommand)
    fsm.launch()
    try:
        result = run_git(cmd_args, repo, timeout=timeout, env=env or None)
    except SubprocessLaunchError:
        fsm.launch_failed()
        raise

    conflicted_paths = (lambda: get_conflicted_files(repo)) if conflict_query else None
    classified = classify(
        result.returncode,
        result.stdout,
        result.stderr,
        phrases=context.phrases,
        conflicted_paths=conflicted_paths,
    )
    state = fsm.finish(classified)

    if classified.success:
        logger.debug(f"git {subcommand} succeeded in {repo}")
    else:
        error = classified.error_type.value if classified.error_type else "unclassified"
        logger.info(f"git {subcommand} in {repo}: {state.value} ({error})")
    return classified
