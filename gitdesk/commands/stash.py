"""
gd stash - list, save, apply, pop and drop stashes.
"""

from pathlib import Path

from gitdesk.commands.output import emit_json, emit_result
from gitdesk.git.stash import list_stashes, stash_apply, stash_drop, stash_pop, stash_save


def cmd_stash_list(args, repo: Path) -> int:
    emit_json([s.to_dict() for s in list_stashes(repo)])
    return 0


def cmd_stash_save(args, repo: Path) -> int:
    return emit_result(stash_save(
        repo,
        message=args.message,
        include_untracked=args.include_untracked,
        keep_index=args.keep_index,
    ))


def cmd_stash_apply(args, repo: Path) -> int:
    return emit_result(stash_apply(repo, args.index))


def cmd_stash_pop(args, repo: Path) -> int:
    return emit_result(stash_pop(repo, args.index))


def cmd_stash_drop(args, repo: Path) -> int:
    return emit_result(stash_drop(repo, args.index))
