"""
gd flow - git-flow init / start / finish / config.
"""

from pathlib import Path

from gitdesk.commands.output import emit_error, emit_json, emit_result
from gitdesk.git.flow import FlowConfig, FlowKind, flow_finish, flow_init, flow_start, get_flow_config


def cmd_flow_config(args, repo: Path) -> int:
    emit_json(get_flow_config(repo).to_dict())
    return 0


def cmd_flow_init(args, repo: Path) -> int:
    config = FlowConfig(
        master_branch=args.master,
        develop_branch=args.develop,
        feature_prefix=args.feature_prefix,
        release_prefix=args.release_prefix,
        hotfix_prefix=args.hotfix_prefix,
        version_tag_prefix=args.version_tag_prefix,
    )
    return emit_result(flow_init(repo, config))


def cmd_flow_start(args, repo: Path) -> int:
    try:
        kind = FlowKind.parse(args.kind)
    except ValueError as e:
        return emit_error(str(e))
    return emit_result(flow_start(repo, kind, args.name, base=args.base))


def cmd_flow_finish(args, repo: Path) -> int:
    try:
        kind = FlowKind.parse(args.kind)
    except ValueError as e:
        return emit_error(str(e))
    return emit_result(flow_finish(repo, kind, args.name, delete_branch=not args.keep_branch))
