"""Tests for gitdesk.git.errors module."""

import pytest

from gitdesk.git.errors import (
    ClassifiedFailure,
    ConflictWithFiles,
    GitError,
    PatchApplyError,
    raise_for_result,
)
from gitdesk.git.models import ErrorType, OperationResult


class TestRaiseForResult:
    """Opt-in exceptions for failed results."""

    def test_success_returned(self):
        result = OperationResult.ok("done")
        assert raise_for_result(result) is result

    def test_failure_raises(self):
        result = OperationResult.failed("fatal: nope", ErrorType.GENERIC_FAILURE)
        with pytest.raises(ClassifiedFailure) as exc_info:
            raise_for_result(result)
        assert exc_info.value.error_type is ErrorType.GENERIC_FAILURE
        assert str(exc_info.value) == "fatal: nope"
        assert not isinstance(exc_info.value, ConflictWithFiles)

    def test_conflict_raises_with_files(self):
        result = OperationResult.failed("conflict", ErrorType.MERGE_CONFLICT, ["a.txt", "b.txt"])
        with pytest.raises(ConflictWithFiles) as exc_info:
            raise_for_result(result)
        assert exc_info.value.files == ["a.txt", "b.txt"]

    def test_all_errors_share_base(self):
        assert issubclass(ClassifiedFailure, GitError)
        assert issubclass(PatchApplyError, GitError)


class TestPatchApplyError:
    """Message carries operation and path."""

    def test_message(self):
        error = PatchApplyError("unstage", "src/a.py", "error: patch failed")
        assert str(error) == "Failed to unstage hunk in src/a.py: error: patch failed"
        assert error.stderr == "error: patch failed"
