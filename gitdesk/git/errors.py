"""Exceptions raised by the git engine.

A git process that started and exited non-zero is not an exception: the
classifier turns it into an OperationResult. These are for everything else.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gitdesk.git.models import OperationResult


class GitError(Exception):
    """Base class for engine errors."""


class NotFoundError(GitError):
    """Path, blob or commit is not present where it was looked up."""


class GitIoError(GitError):
    """Reading a working-tree file failed."""


class BinaryUnsupportedError(GitError):
    """A text-only operation was asked to work on binary content."""


class SubprocessLaunchError(GitError):
    """The git (or ssh-keyscan) executable could not be started."""


class DiffParseError(GitError):
    """Diff output from git could not be parsed."""


class PatchApplyError(GitError):
    """git apply rejected a hunk patch. Nothing was modified.

    Usually means the hunk no longer matches the file: refresh the diff
    before retrying.
    """

    def __init__(self, operation: str, path: str, stderr: str):
        self.operation = operation
        self.path = path
        self.stderr = stderr
        super().__init__(f"Failed to {operation} hunk in {path}: {stderr}")


class ClassifiedFailure(GitError):
    """A failed OperationResult, raised on request via raise_for_result()."""

    def __init__(self, result: OperationResult):
        self.result = result
        self.error_type = result.error_type
        super().__init__(result.message)


class ConflictWithFiles(ClassifiedFailure):
    """A failed OperationResult that names conflicting files."""

    @property
    def files(self) -> list[str]:
        return list(self.result.conflicting_files or [])


def raise_for_result(result: OperationResult) -> OperationResult:
    """Return a successful result unchanged, raise for a failed one."""
    if result.success:
        return result
    if result.conflicting_files:
        raise ConflictWithFiles(result)
    raise ClassifiedFailure(result)
