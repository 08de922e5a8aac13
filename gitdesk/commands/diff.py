"""
gd diff / stage-hunk / unstage-hunk / discard-hunk
"""

import sys
from pathlib import Path

from gitdesk.commands.output import emit_error, emit_json
from gitdesk.git.diff import build_diff
from gitdesk.git.errors import GitError
from gitdesk.git.models import ComparisonMode, Hunk
from gitdesk.git.patch import discard_hunk, stage_hunk, unstage_hunk
from gitdesk.lib.validate import ValidationError, load_json

# operation -> (function, past tense for the message)
HUNK_OPERATIONS = {
    "stage": (stage_hunk, "staged"),
    "unstage": (unstage_hunk, "unstaged"),
    "discard": (discard_hunk, "discarded"),
}


def cmd_diff(args, repo: Path) -> int:
    """Print the DiffInfo for one file."""
    mode = ComparisonMode(args.mode)
    if mode is ComparisonMode.COMMIT and not args.commit:
        return emit_error("--commit is required with --mode commit")
    try:
        info = build_diff(repo, mode, args.path, commit=args.commit, with_content=args.content)
    except GitError as e:
        return emit_error(str(e))
    emit_json(info.to_dict())
    return 0


def read_hunk(args) -> Hunk:
    """Hunk JSON from --hunk FILE, or stdin."""
    if args.hunk:
        text = Path(args.hunk).read_text()
    else:
        text = sys.stdin.read()
    return Hunk.from_dict(load_json(text, "hunk"))


def cmd_hunk(args, repo: Path) -> int:
    """Apply one hunk operation (args.operation) to args.path."""
    try:
        hunk = read_hunk(args)
    except (ValidationError, OSError, ValueError) as e:
        return emit_error(str(e))

    operation, done = HUNK_OPERATIONS[args.operation]
    try:
        operation(repo, args.path, hunk)
    except (GitError, ValueError) as e:
        return emit_error(str(e))
    emit_json({"success": True, "message": f"Hunk {done} in {args.path}"})
    return 0
