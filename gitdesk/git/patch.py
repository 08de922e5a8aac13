"""Stage, unstage and discard single hunks.

A hunk is serialised into a one-file, one-hunk patch and fed to
`git apply` with zero-context tolerance. git apply is all-or-nothing: a
hunk either applies completely or the index and working tree are left as
they were.
"""

import logging
import os
from enum import Enum
from pathlib import Path

from gitdesk.git.diff import is_binary_content, read_blob
from gitdesk.git.errors import BinaryUnsupportedError, PatchApplyError
from gitdesk.git.models import Hunk
from gitdesk.git.runner import run_git

logger = logging.getLogger(__name__)

DEFAULT_MODE = "100644"
EXECUTABLE_MODE = "100755"
NO_NEWLINE_MARKER = "\\ No newline at end of file"

STAGE_FLAGS = ["--cached", "--unidiff-zero"]
UNSTAGE_FLAGS = ["--cached", "--reverse", "--unidiff-zero"]
DISCARD_FLAGS = ["--reverse", "--unidiff-zero"]


class FileHeader(Enum):
    """Which file-level header a hunk patch carries."""

    MODIFIED = "modified"
    NEW = "new"
    DELETED = "deleted"


C_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\v": "\\v",
    "\f": "\\f",
    "\r": "\\r",
    '"': '\\"',
    "\\": "\\\\",
}


def _needs_quoting(ch: str) -> bool:
    return ch in C_ESCAPES or ord(ch) < 0x20 or ord(ch) == 0x7F


def quote_path(prefix: str, path: str) -> str:
    """
    prefix + path as it appears in a patch header.

    Names containing control characters, a double quote or a backslash are
    C-quoted the way git writes them ("a/ta\\tb.txt"); git apply reads
    unquoted names only up to the first tab.
    """
    name = prefix + path
    if not any(_needs_quoting(ch) for ch in name):
        return name
    out = []
    for ch in name:
        if ch in C_ESCAPES:
            out.append(C_ESCAPES[ch])
        elif _needs_quoting(ch):
            out.append(f"\\{ord(ch):03o}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def serialize_hunk(
    path: str,
    hunk: Hunk,
    header: FileHeader = FileHeader.MODIFIED,
    mode: str = DEFAULT_MODE,
) -> str:
    """
    Render one hunk as a patch git apply accepts.

    Line content may or may not end in a terminator; trailing CR/LF is
    stripped and exactly one newline written, so the patch is never
    double-terminated.
    """
    old_name, new_name = quote_path("a/", path), quote_path("b/", path)
    out = [f"diff --git {old_name} {new_name}"]
    if header is FileHeader.NEW:
        out += [f"new file mode {mode}", "--- /dev/null", f"+++ {new_name}"]
    elif header is FileHeader.DELETED:
        out += [f"deleted file mode {mode}", f"--- {old_name}", "+++ /dev/null"]
    else:
        out += [f"--- {old_name}", f"+++ {new_name}"]
    out.append(hunk.header)

    for line in hunk.lines:
        out.append(line.line_type.prefix + line.content.rstrip("\r\n"))
        if line.no_newline_at_eof:
            out.append(NO_NEWLINE_MARKER)
    return "\n".join(out) + "\n"


# ============================================================
# Target state lookups
# ============================================================


def _index_entry(repo: Path, path: str) -> str | None:
    """Mode of path in the index, None if not staged."""
    result = run_git(["ls-files", "-s", "--", path], repo)
    line = result.stdout.strip()
    if not result.success or not line:
        return None
    return line.split()[0]


def _head_entry(repo: Path, path: str) -> str | None:
    """Mode of path in HEAD, None if absent (or no commits yet)."""
    result = run_git(["ls-tree", "HEAD", "--", path], repo)
    line = result.stdout.strip()
    if not result.success or not line:
        return None
    return line.split()[0]


def _working_mode(repo: Path, path: str) -> str | None:
    full_path = repo / path
    if not full_path.is_file():
        return None
    return EXECUTABLE_MODE if os.access(full_path, os.X_OK) else DEFAULT_MODE


def _creates_file(hunk: Hunk) -> bool:
    return hunk.old_start == 0 and hunk.old_lines == 0


def _deletes_file(hunk: Hunk) -> bool:
    return hunk.new_start == 0 and hunk.new_lines == 0


def _choose_header(
    hunk: Hunk,
    old_mode: str | None,
    new_mode: str | None,
) -> tuple[FileHeader, str]:
    """Header for a patch whose old side has old_mode and new side new_mode."""
    if _creates_file(hunk) and old_mode is None:
        return FileHeader.NEW, new_mode or DEFAULT_MODE
    if _deletes_file(hunk) and new_mode is None:
        return FileHeader.DELETED, old_mode or DEFAULT_MODE
    return FileHeader.MODIFIED, DEFAULT_MODE


def _working_head(repo: Path, path: str) -> bytes | None:
    full_path = repo / path
    if not full_path.is_file():
        return None
    with open(full_path, "rb") as f:
        return f.read(8000)


def _check_text(repo: Path, path: str, cached: bool) -> None:
    """Refuse binary targets: the index blob for --cached patches, else the file on disk."""
    if cached:
        data = read_blob(repo, ":", path)
        if data is None:
            data = _working_head(repo, path)
    else:
        data = _working_head(repo, path)
        if data is None:
            data = read_blob(repo, ":", path)
    if is_binary_content(data or b""):
        raise BinaryUnsupportedError(f"Cannot apply a text hunk to binary file {path}")


def _apply(repo: Path, operation: str, path: str, patch: str, flags: list[str]) -> None:
    logger.debug(f"Applying {operation} patch for {path}:\n{patch}")
    result = run_git(["apply", *flags], repo, input_text=patch)
    if not result.success:
        stderr = result.stderr.strip()
        logger.info(f"git apply ({operation}) rejected hunk in {path}: {stderr}")
        raise PatchApplyError(operation, path, stderr)


def _prepare(repo: Path, path: str, hunk: Hunk, cached: bool) -> None:
    if not hunk.lines:
        raise ValueError("Hunk has no lines")
    _check_text(repo, path, cached)


# ============================================================
# Operations
# ============================================================


def stage_hunk(repo: Path, path: str, hunk: Hunk) -> None:
    """
    Apply a working-tree hunk to the index.

    Line content is written LF-terminated, so a CRLF file is staged with LF
    endings and its working-tree diff keeps showing the line-ending change.

    Raises:
        PatchApplyError: Hunk no longer matches the index; refresh the diff
        BinaryUnsupportedError: File is binary
        ValueError: Hunk has no lines
    """
    _prepare(repo, path, hunk, cached=True)
    header, mode = _choose_header(hunk, _index_entry(repo, path), _working_mode(repo, path))
    _apply(repo, "stage", path, serialize_hunk(path, hunk, header, mode), STAGE_FLAGS)
    logger.info(f"Staged hunk {hunk.header} in {path}")


def unstage_hunk(repo: Path, path: str, hunk: Hunk) -> None:
    """
    Reverse-apply a staged hunk to the index.

    Raises:
        PatchApplyError: Hunk no longer matches the index; refresh the diff
        BinaryUnsupportedError: File is binary
        ValueError: Hunk has no lines
    """
    _prepare(repo, path, hunk, cached=True)
    header, mode = _choose_header(hunk, _head_entry(repo, path), _index_entry(repo, path))
    _apply(repo, "unstage", path, serialize_hunk(path, hunk, header, mode), UNSTAGE_FLAGS)
    logger.info(f"Unstaged hunk {hunk.header} in {path}")


def discard_hunk(repo: Path, path: str, hunk: Hunk) -> None:
    """
    Reverse-apply a working-tree hunk to the working tree. The index is untouched.

    Raises:
        PatchApplyError: Hunk no longer matches the file; refresh the diff
        BinaryUnsupportedError: File is binary
        ValueError: Hunk has no lines
    """
    _prepare(repo, path, hunk, cached=False)
    header, mode = _choose_header(hunk, _index_entry(repo, path), _working_mode(repo, path))
    _apply(repo, "discard", path, serialize_hunk(path, hunk, header, mode), DISCARD_FLAGS)
    logger.info(f"Discarded hunk {hunk.header} in {path}")
