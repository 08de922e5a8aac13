"""
gd checkout / merge / rebase
"""

from pathlib import Path

from gitdesk.commands.output import emit_error, emit_result
from gitdesk.git.branch import checkout, checkout_track, checkout_with_stash
from gitdesk.git.merge import (
    MergeStrategy,
    RebaseOptions,
    merge,
    merge_abort,
    rebase,
    rebase_abort,
    rebase_continue,
)


def cmd_checkout(args, repo: Path) -> int:
    if args.track:
        return emit_result(checkout_track(repo, args.branch, args.track))
    if args.stash:
        return emit_result(checkout_with_stash(repo, args.branch, restore_changes=not args.keep_stash))
    return emit_result(checkout(repo, args.branch))


def cmd_merge(args, repo: Path) -> int:
    if args.abort:
        return emit_result(merge_abort(repo))
    if not args.branch:
        return emit_error("merge needs a branch (or --abort)")
    try:
        strategy = MergeStrategy.parse(args.strategy)
    except ValueError as e:
        return emit_error(str(e))
    return emit_result(merge(repo, args.branch, strategy))


def cmd_rebase(args, repo: Path) -> int:
    if args.abort:
        return emit_result(rebase_abort(repo))
    if args.cont:
        return emit_result(rebase_continue(repo))
    if not args.onto:
        return emit_error("rebase needs a branch to rebase onto (or --abort / --continue)")
    options = RebaseOptions(preserve_merges=args.rebase_merges, autostash=args.autostash)
    return emit_result(rebase(repo, args.onto, options))
