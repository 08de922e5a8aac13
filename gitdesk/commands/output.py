"""
JSON output shared by the gd commands.

Everything a command prints to stdout is one JSON document so a UI process
can parse it; diagnostics go to stderr.
"""

import json
import sys

from gitdesk.git.models import OperationResult


def emit_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def emit_result(result: OperationResult) -> int:
    """Print an OperationResult, return the process exit code for it."""
    emit_json(result.to_dict())
    return 0 if result.success else 1


def emit_error(message: str) -> int:
    print(f"ERROR: {message}", file=sys.stderr)
    return 2
