#!/usr/bin/env python3
"""gitdesk CLI entrypoint."""

import sys
import argparse
import logging
from pathlib import Path

from gitdesk.lib.config import load_config
from gitdesk.lib.validate import ValidationError
from gitdesk.git.errors import GitError
from gitdesk.git.models import ComparisonMode
from gitdesk.commands import diff as cmd_diff_module
from gitdesk.commands import remote as cmd_remote_module
from gitdesk.commands import branch as cmd_branch_module
from gitdesk.commands import stash as cmd_stash_module
from gitdesk.commands import flow as cmd_flow_module
from gitdesk.commands.output import emit_error

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_repo(args) -> Path:
    """Repository from --repo, defaulting to the working directory."""
    return Path(args.repo).resolve()


def get_context(args):
    """Invocation context built from the loaded config."""
    return args.config_obj.invocation_context()


def setup_logging(args, config) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif config.log_level:
        level = getattr(logging, config.log_level.upper())
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def cmd_diff(args):
    return cmd_diff_module.cmd_diff(args, get_repo(args))


def cmd_hunk(args):
    return cmd_diff_module.cmd_hunk(args, get_repo(args))


def cmd_fetch(args):
    return cmd_remote_module.cmd_fetch(args, get_repo(args), get_context(args))


def cmd_pull(args):
    return cmd_remote_module.cmd_pull(args, get_repo(args), get_context(args))


def cmd_push(args):
    return cmd_remote_module.cmd_push(args, get_repo(args), get_context(args))


def cmd_trust_host(args):
    return cmd_remote_module.cmd_trust_host(args)


def cmd_checkout(args):
    return cmd_branch_module.cmd_checkout(args, get_repo(args))


def cmd_merge(args):
    return cmd_branch_module.cmd_merge(args, get_repo(args))


def cmd_rebase(args):
    return cmd_branch_module.cmd_rebase(args, get_repo(args))


def cmd_stash_list(args):
    return cmd_stash_module.cmd_stash_list(args, get_repo(args))


def cmd_stash_save(args):
    return cmd_stash_module.cmd_stash_save(args, get_repo(args))


def cmd_stash_apply(args):
    return cmd_stash_module.cmd_stash_apply(args, get_repo(args))


def cmd_stash_pop(args):
    return cmd_stash_module.cmd_stash_pop(args, get_repo(args))


def cmd_stash_drop(args):
    return cmd_stash_module.cmd_stash_drop(args, get_repo(args))


def cmd_flow_config(args):
    return cmd_flow_module.cmd_flow_config(args, get_repo(args))


def cmd_flow_init(args):
    return cmd_flow_module.cmd_flow_init(args, get_repo(args))


def cmd_flow_start(args):
    return cmd_flow_module.cmd_flow_start(args, get_repo(args))


def cmd_flow_finish(args):
    return cmd_flow_module.cmd_flow_finish(args, get_repo(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='gd', description='gitdesk git engine CLI')
    parser.add_argument('--repo', '-C', default='.', help='Repository path (default: current directory)')
    parser.add_argument('--config', type=Path, help='Config file (default: $GITDESK_CONFIG or ~/.config/gitdesk/config.yaml)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging to stderr')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # gd diff
    p_diff = subparsers.add_parser('diff', help='Show one file as DiffInfo JSON')
    p_diff.add_argument('path', help='File path relative to the repository root')
    p_diff.add_argument('--mode', '-m', choices=[m.value for m in ComparisonMode],
                        default=ComparisonMode.WORKING_TREE.value, help='What to compare')
    p_diff.add_argument('--commit', help='Commit to compare with its parent (--mode commit)')
    p_diff.add_argument('--content', action='store_true', help='Include full old/new content')
    p_diff.set_defaults(func=cmd_diff)

    # gd stage-hunk / unstage-hunk / discard-hunk
    for operation, help_text in [
        ('stage', 'Apply a hunk to the index'),
        ('unstage', 'Remove a hunk from the index'),
        ('discard', 'Revert a hunk in the working tree'),
    ]:
        p_hunk = subparsers.add_parser(f'{operation}-hunk', help=help_text)
        p_hunk.add_argument('path', help='File path relative to the repository root')
        p_hunk.add_argument('--hunk', help='Hunk JSON file (default: read stdin)')
        p_hunk.set_defaults(func=cmd_hunk, operation=operation)

    # gd fetch
    p_fetch = subparsers.add_parser('fetch', help='Fetch from a remote')
    p_fetch.add_argument('remote', nargs='?', help='Remote (default: origin)')
    p_fetch.add_argument('--all', action='store_true', help='Fetch all remotes')
    p_fetch.add_argument('--prune', action='store_true', help='Prune deleted remote branches')
    p_fetch.set_defaults(func=cmd_fetch)

    # gd pull
    p_pull = subparsers.add_parser('pull', help='Pull from a remote')
    p_pull.add_argument('remote', nargs='?', default='origin')
    p_pull.add_argument('branch', nargs='?')
    p_pull.add_argument('--rebase', action='store_true', help='Rebase instead of merge')
    p_pull.add_argument('--autostash', action='store_true')
    p_pull.set_defaults(func=cmd_pull)

    # gd push
    p_push = subparsers.add_parser('push', help='Push to a remote')
    p_push.add_argument('remote', nargs='?', default='origin')
    p_push.add_argument('branch', nargs='?')
    p_push.add_argument('--remote-branch', help='Remote branch name (default: same as branch)')
    p_push.add_argument('--tags', action='store_true')
    p_push.add_argument('--force-with-lease', action='store_true')
    p_push.add_argument('--set-upstream', '-u', action='store_true')
    p_push.set_defaults(func=cmd_push)

    # gd trust-host
    p_trust = subparsers.add_parser('trust-host', help='Add an SSH host to known_hosts')
    p_trust.add_argument('host')
    p_trust.set_defaults(func=cmd_trust_host)

    # gd checkout
    p_checkout = subparsers.add_parser('checkout', help='Switch branches')
    p_checkout.add_argument('branch')
    p_checkout.add_argument('--track', metavar='REMOTE_BRANCH', help='Create branch tracking REMOTE_BRANCH')
    p_checkout.add_argument('--stash', action='store_true', help='Stash local changes first and restore them after')
    p_checkout.add_argument('--keep-stash', action='store_true', help='With --stash: leave changes in the stash')
    p_checkout.set_defaults(func=cmd_checkout)

    # gd merge
    p_merge = subparsers.add_parser('merge', help='Merge a branch into the current one')
    p_merge.add_argument('branch', nargs='?')
    p_merge.add_argument('--strategy', default='default', choices=['default', 'no-ff', 'squash'])
    p_merge.add_argument('--abort', action='store_true', help='Abort the merge in progress')
    p_merge.set_defaults(func=cmd_merge)

    # gd rebase
    p_rebase = subparsers.add_parser('rebase', help='Rebase the current branch')
    p_rebase.add_argument('onto', nargs='?')
    p_rebase.add_argument('--rebase-merges', action='store_true')
    p_rebase.add_argument('--autostash', action='store_true')
    p_rebase.add_argument('--abort', action='store_true')
    p_rebase.add_argument('--continue', dest='cont', action='store_true')
    p_rebase.set_defaults(func=cmd_rebase)

    # gd stash
    p_stash = subparsers.add_parser('stash', help='Manage stashes')
    stash_sub = p_stash.add_subparsers(dest='stash_command', required=True)

    p_stash_list = stash_sub.add_parser('list', help='List stashes')
    p_stash_list.set_defaults(func=cmd_stash_list)

    p_stash_save = stash_sub.add_parser('save', help='Stash local changes')
    p_stash_save.add_argument('--message', '-m')
    p_stash_save.add_argument('--include-untracked', '-u', action='store_true')
    p_stash_save.add_argument('--keep-index', action='store_true')
    p_stash_save.set_defaults(func=cmd_stash_save)

    for name, func in [('apply', cmd_stash_apply), ('pop', cmd_stash_pop), ('drop', cmd_stash_drop)]:
        p = stash_sub.add_parser(name, help=f'{name.capitalize()} a stash')
        p.add_argument('index', nargs='?', type=int, default=0, help='Stash index (default: 0)')
        p.set_defaults(func=func)

    # gd flow
    p_flow = subparsers.add_parser('flow', help='git-flow branching')
    flow_sub = p_flow.add_subparsers(dest='flow_command', required=True)

    p_flow_config = flow_sub.add_parser('config', help='Show git-flow settings')
    p_flow_config.set_defaults(func=cmd_flow_config)

    p_flow_init = flow_sub.add_parser('init', help='Initialize git-flow')
    p_flow_init.add_argument('--master', default='master')
    p_flow_init.add_argument('--develop', default='develop')
    p_flow_init.add_argument('--feature-prefix', default='feature/')
    p_flow_init.add_argument('--release-prefix', default='release/')
    p_flow_init.add_argument('--hotfix-prefix', default='hotfix/')
    p_flow_init.add_argument('--version-tag-prefix', default='')
    p_flow_init.set_defaults(func=cmd_flow_init)

    p_flow_start = flow_sub.add_parser('start', help='Start a feature, release or hotfix')
    p_flow_start.add_argument('kind', help='feature, release or hotfix')
    p_flow_start.add_argument('name')
    p_flow_start.add_argument('--base', help='Start from this branch instead of the default')
    p_flow_start.set_defaults(func=cmd_flow_start)

    p_flow_finish = flow_sub.add_parser('finish', help='Finish a feature, release or hotfix')
    p_flow_finish.add_argument('kind', help='feature, release or hotfix')
    p_flow_finish.add_argument('name')
    p_flow_finish.add_argument('--keep-branch', action='store_true', help='Do not delete the branch')
    p_flow_finish.set_defaults(func=cmd_flow_finish)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ValidationError as e:
        return emit_error(f"Invalid config: {e}")
    setup_logging(args, config)
    args.config_obj = config

    try:
        return args.func(args)
    except GitError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        return emit_error(str(e))


if __name__ == '__main__':
    sys.exit(main())
