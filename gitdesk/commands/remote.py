"""
gd fetch / pull / push / trust-host
"""

from pathlib import Path

from gitdesk.commands.output import emit_result
from gitdesk.git.invocation import InvocationContext
from gitdesk.git.remote import FetchOptions, PullOptions, PushOptions, fetch, pull, push
from gitdesk.git.ssh import add_known_host


def cmd_fetch(args, repo: Path, context: InvocationContext) -> int:
    options = FetchOptions(remote=args.remote, all=args.all, prune=args.prune)
    return emit_result(fetch(repo, options, context=context))


def cmd_pull(args, repo: Path, context: InvocationContext) -> int:
    options = PullOptions(
        remote=args.remote,
        branch=args.branch,
        rebase=args.rebase,
        autostash=args.autostash,
    )
    return emit_result(pull(repo, options, context=context))


def cmd_push(args, repo: Path, context: InvocationContext) -> int:
    options = PushOptions(
        remote=args.remote,
        branch=args.branch,
        remote_branch=args.remote_branch,
        push_tags=args.tags,
        force_with_lease=args.force_with_lease,
        set_upstream=args.set_upstream,
    )
    return emit_result(push(repo, options, context=context))


def cmd_trust_host(args) -> int:
    """Accept an SSH host reported by a ssh_verification result."""
    return emit_result(add_known_host(args.host))
