"""Git diff operations.

build_diff() turns one file's change into a DiffInfo. Tracked comparisons
are computed by `git diff` and walked with unidiff; untracked and deleted
files are read directly, since git has no structural diff for them.
"""

import logging
from pathlib import Path, PurePosixPath

from unidiff import PatchSet
from unidiff.constants import LINE_TYPE_NO_NEWLINE
from unidiff.errors import UnidiffParseError

from gitdesk.git.errors import DiffParseError, GitIoError, NotFoundError
from gitdesk.git.models import (
    BinaryKind,
    ComparisonMode,
    DiffInfo,
    DiffLine,
    Hunk,
    LineType,
)
from gitdesk.git.runner import run_git, run_git_bytes

logger = logging.getLogger(__name__)

CONTEXT_LINES = 3
# Same heuristic git uses: a NUL in the first 8000 bytes means binary
BINARY_SNIFF_BYTES = 8000

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "bmp", "webp", "svg", "ico"}
PDF_EXTENSIONS = {"pdf"}

_LINE_TYPES = {
    "+": LineType.ADD,
    "-": LineType.DELETE,
    " ": LineType.CONTEXT,
}


def get_diff_names(repo: Path, ref: str = "HEAD") -> list[str]:
    """Get list of changed file names vs a ref."""
    result = run_git(["diff", "--name-only", ref], repo)
    return [f.strip() for f in result.stdout.splitlines() if f.strip()]


def get_conflicted_files(repo: Path) -> list[str]:
    """Get list of files with unresolved conflicts."""
    result = run_git(["diff", "--name-only", "--diff-filter=U"], repo)
    return [f.strip() for f in result.stdout.splitlines() if f.strip()]


# ============================================================
# Content helpers
# ============================================================


def is_binary_content(data: bytes) -> bool:
    return b"\0" in data[:BINARY_SNIFF_BYTES]


def binary_kind_for(path: str) -> BinaryKind:
    """Rendering hint from the file extension alone."""
    ext = PurePosixPath(path).suffix.lower().lstrip(".")
    if ext in IMAGE_EXTENSIONS:
        return BinaryKind.IMAGE
    if ext in PDF_EXTENSIONS:
        return BinaryKind.PDF
    return BinaryKind.OTHER


def decode_text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def read_working_file(repo: Path, path: str) -> bytes:
    """Read a file from the working tree."""
    full_path = repo / path
    try:
        return full_path.read_bytes()
    except FileNotFoundError as e:
        raise NotFoundError(f"File not found in working tree: {path}") from e
    except OSError as e:
        raise GitIoError(f"Failed to read {path}: {e}") from e


def read_blob(repo: Path, rev: str, path: str) -> bytes | None:
    """Read path at rev (":" + path for the index). None if absent there."""
    object_name = f":{path}" if rev == ":" else f"{rev}:{path}"
    result = run_git_bytes(["cat-file", "blob", object_name], repo)
    if not result.success:
        return None
    return result.stdout


def commit_exists(repo: Path, commit: str) -> bool:
    result = run_git(["rev-parse", "--verify", "-q", f"{commit}^{{commit}}"], repo)
    return result.success


def empty_tree(repo: Path) -> str:
    """Object id of the empty tree in this repository's hash format."""
    result = run_git(["hash-object", "-t", "tree", "--stdin"], repo, input_text="")
    return result.stdout.strip()


def parent_of(repo: Path, commit: str) -> str:
    """First parent of commit, or the empty tree for a root commit."""
    result = run_git(["rev-parse", "--verify", "-q", f"{commit}^"], repo)
    if result.success and result.stdout.strip():
        return result.stdout.strip()
    return empty_tree(repo)


def split_lines(text: str) -> list[str]:
    """Split file text into lines without terminators.

    A trailing newline does not start an extra line; CR of CRLF is dropped.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.rstrip("\r") for line in lines]


# ============================================================
# Direct-read modes
# ============================================================


def _binary_info(path: str, data: bytes) -> DiffInfo:
    return DiffInfo(
        file_path=path,
        is_binary=True,
        binary_kind=binary_kind_for(path),
        file_size=len(data),
    )


def diff_untracked(repo: Path, path: str) -> DiffInfo:
    """Whole file as one added hunk."""
    data = read_working_file(repo, path)
    if is_binary_content(data):
        return _binary_info(path, data)

    text = decode_text(data)
    lines = split_lines(text)
    hunks = []
    if lines:
        hunks.append(Hunk(
            old_start=0,
            old_lines=0,
            new_start=1,
            new_lines=len(lines),
            lines=[
                DiffLine(content=f"{line}\n", line_type=LineType.ADD, new_line_no=i)
                for i, line in enumerate(lines, start=1)
            ],
        ))
        _mark_missing_newline(hunks[0], text)
    return DiffInfo(file_path=path, hunks=hunks, file_size=len(data), new_content=text)


def diff_deleted(repo: Path, path: str) -> DiffInfo:
    """Whole HEAD blob as one deleted hunk."""
    data = read_blob(repo, "HEAD", path)
    if data is None:
        raise NotFoundError(f"{path} not found in HEAD")
    if is_binary_content(data):
        return _binary_info(path, data)

    text = decode_text(data)
    lines = split_lines(text)
    hunks = []
    if lines:
        hunks.append(Hunk(
            old_start=1,
            old_lines=len(lines),
            new_start=0,
            new_lines=0,
            lines=[
                DiffLine(content=f"{line}\n", line_type=LineType.DELETE, old_line_no=i)
                for i, line in enumerate(lines, start=1)
            ],
        ))
        _mark_missing_newline(hunks[0], text)
    return DiffInfo(file_path=path, hunks=hunks, file_size=len(data), old_content=text)


def _mark_missing_newline(hunk: Hunk, text: str) -> None:
    if text and not text.endswith("\n"):
        hunk.lines[-1].no_newline_at_eof = True


# ============================================================
# Tracked modes
# ============================================================


def parse_hunks(diff_text: str) -> tuple[list[Hunk], bool]:
    """
    Walk unified diff text for a single file.

    Returns:
        (hunks, is_binary) - is_binary when git reported "Binary files differ"

    Raises:
        DiffParseError: If the text is not a unified diff
    """
    try:
        patch_set = PatchSet(diff_text)
    except UnidiffParseError as e:
        raise DiffParseError(f"Could not parse diff output: {e}") from e

    hunks: list[Hunk] = []
    is_binary = False
    for patched_file in patch_set:
        if patched_file.is_binary_file:
            is_binary = True
            continue
        for source_hunk in patched_file:
            hunk = Hunk(
                old_start=source_hunk.source_start,
                old_lines=source_hunk.source_length,
                new_start=source_hunk.target_start,
                new_lines=source_hunk.target_length,
            )
            for line in source_hunk:
                if line.line_type == LINE_TYPE_NO_NEWLINE:
                    if hunk.lines:
                        hunk.lines[-1].no_newline_at_eof = True
                    continue
                line_type = _LINE_TYPES.get(line.line_type)
                if line_type is None:
                    continue
                hunk.lines.append(DiffLine(
                    content=line.value,
                    line_type=line_type,
                    old_line_no=line.source_line_no,
                    new_line_no=line.target_line_no,
                ))
            hunks.append(hunk)
    return hunks, is_binary


def _sides(repo: Path, mode: ComparisonMode, path: str, commit: str | None) -> tuple[list[str], bytes | None, bytes | None]:
    """git diff arguments plus (old, new) content for the comparison."""
    if mode is ComparisonMode.WORKING_TREE:
        old = read_blob(repo, ":", path)
        try:
            new = read_working_file(repo, path)
        except NotFoundError:
            new = None
        if old is None and new is None:
            raise NotFoundError(f"{path} is neither in the index nor the working tree")
        return [], old, new

    if mode is ComparisonMode.STAGED:
        old = read_blob(repo, "HEAD", path)
        new = read_blob(repo, ":", path)
        if old is None and new is None:
            raise NotFoundError(f"{path} is neither in HEAD nor the index")
        return ["--cached"], old, new

    if not commit:
        raise ValueError("Commit comparison requires a commit")
    if not commit_exists(repo, commit):
        raise NotFoundError(f"Commit not found: {commit}")
    parent = parent_of(repo, commit)
    old = read_blob(repo, parent, path)
    new = read_blob(repo, commit, path)
    if old is None and new is None:
        raise NotFoundError(f"{path} not found in {commit} or its parent")
    return [parent, commit], old, new


def build_diff(
    repo: Path,
    mode: ComparisonMode,
    path: str,
    commit: str | None = None,
    with_content: bool = False,
) -> DiffInfo:
    """
    Build the diff of one file.

    Args:
        repo: Repository path
        mode: What to compare
        path: File path relative to the repository root
        commit: Commit to compare against its first parent (COMMIT mode only)
        with_content: Also return full old/new text for tracked modes

    Returns:
        DiffInfo. Binary files have zero hunks and is_binary set.

    Raises:
        NotFoundError: Path or commit does not exist where it is looked up
        GitIoError: Working-tree file could not be read
        DiffParseError: git produced output that is not a unified diff
    """
    if mode is ComparisonMode.UNTRACKED:
        return diff_untracked(repo, path)
    if mode is ComparisonMode.DELETED:
        return diff_deleted(repo, path)

    extra_args, old, new = _sides(repo, mode, path, commit)
    sniff = new if new is not None else old

    if sniff is not None and is_binary_content(sniff):
        logger.debug(f"{path} is binary by content")
        return _binary_info(path, sniff)

    result = run_git(
        ["-c", "core.quotePath=false", "diff", f"-U{CONTEXT_LINES}", "--no-color",
         "--no-ext-diff", *extra_args, "--", path],
        repo,
    )
    if not result.success:
        raise DiffParseError(f"git diff failed for {path}: {result.stderr.strip()}")

    hunks, reported_binary = parse_hunks(result.stdout)
    if reported_binary:
        return _binary_info(path, sniff or b"")

    info = DiffInfo(
        file_path=path,
        hunks=hunks,
        file_size=len(sniff) if sniff is not None else None,
    )
    if with_content:
        info.old_content = decode_text(old) if old is not None else None
        info.new_content = decode_text(new) if new is not None else None
    logger.debug(f"Diff {mode.value} {path}: {len(hunks)} hunk(s)")
    return info
