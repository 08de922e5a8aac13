"""Domain models for diffs, hunks and classified operation results.

All of these are built per call and thrown away after the response; nothing
here is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class LineType(Enum):
    """Type of line in a hunk."""

    ADD = "add"
    DELETE = "delete"
    CONTEXT = "context"

    @property
    def prefix(self) -> str:
        return {"add": "+", "delete": "-", "context": " "}[self.value]


@dataclass
class DiffLine:
    """A single line of a hunk.

    Attributes:
        content: Line text as reported by git, usually with its newline
        line_type: Added, deleted or context
        old_line_no: Line number in the old file (None for added lines)
        new_line_no: Line number in the new file (None for deleted lines)
        no_newline_at_eof: git printed "\\ No newline at end of file" after this line
    """

    content: str
    line_type: LineType
    old_line_no: int | None = None
    new_line_no: int | None = None
    no_newline_at_eof: bool = False

    def __post_init__(self):
        if isinstance(self.line_type, str):
            self.line_type = LineType(self.line_type)
        if self.line_type is LineType.ADD and self.old_line_no is not None:
            raise ValueError("Added line cannot carry an old line number")
        if self.line_type is LineType.DELETE and self.new_line_no is not None:
            raise ValueError("Deleted line cannot carry a new line number")

    @classmethod
    def from_dict(cls, data: dict) -> DiffLine:
        return cls(
            content=data["content"],
            line_type=LineType(data["line_type"]),
            old_line_no=data.get("old_line_no"),
            new_line_no=data.get("new_line_no"),
            no_newline_at_eof=data.get("no_newline_at_eof", False),
        )

    def to_dict(self) -> dict:
        data = {
            "content": self.content,
            "line_type": self.line_type.value,
            "old_line_no": self.old_line_no,
            "new_line_no": self.new_line_no,
        }
        if self.no_newline_at_eof:
            data["no_newline_at_eof"] = True
        return data


@dataclass
class Hunk:
    """A contiguous block of changes, with 1-based git-compatible ranges."""

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: list[DiffLine] = field(default_factory=list)

    @property
    def added(self) -> int:
        return sum(1 for line in self.lines if line.line_type is LineType.ADD)

    @property
    def removed(self) -> int:
        return sum(1 for line in self.lines if line.line_type is LineType.DELETE)

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_lines} +{self.new_start},{self.new_lines} @@"

    @classmethod
    def from_dict(cls, data: dict) -> Hunk:
        return cls(
            old_start=int(data["old_start"]),
            old_lines=int(data["old_lines"]),
            new_start=int(data["new_start"]),
            new_lines=int(data["new_lines"]),
            lines=[DiffLine.from_dict(line) for line in data.get("lines", [])],
        )

    def to_dict(self) -> dict:
        return {
            "old_start": self.old_start,
            "old_lines": self.old_lines,
            "new_start": self.new_start,
            "new_lines": self.new_lines,
            "lines": [line.to_dict() for line in self.lines],
        }


class BinaryKind(Enum):
    """How a UI should render a binary file. Extension based only."""

    IMAGE = "image"
    PDF = "pdf"
    OTHER = "other"


class ComparisonMode(Enum):
    """What a diff compares."""

    WORKING_TREE = "working_tree"  # index -> working tree
    STAGED = "staged"  # HEAD -> index
    COMMIT = "commit"  # first parent tree -> commit tree
    UNTRACKED = "untracked"  # nothing -> file on disk
    DELETED = "deleted"  # HEAD blob -> nothing

    @property
    def is_direct_read(self) -> bool:
        return self in (ComparisonMode.UNTRACKED, ComparisonMode.DELETED)


@dataclass
class DiffInfo:
    """One file's change between two comparison points."""

    file_path: str
    hunks: list[Hunk] = field(default_factory=list)
    is_binary: bool = False
    binary_kind: BinaryKind | None = None
    file_size: int | None = None
    old_content: str | None = None
    new_content: str | None = None

    def to_dict(self) -> dict:
        return {
            "file_path": self.file_path,
            "old_content": self.old_content,
            "new_content": self.new_content,
            "hunks": [h.to_dict() for h in self.hunks],
            "is_binary": self.is_binary,
            "binary_kind": self.binary_kind.value if self.binary_kind else None,
            "file_size": self.file_size,
        }


# ============================================================
# Operation results
# ============================================================


class ErrorType(Enum):
    """Closed set of failure categories assigned by the classifier."""

    HOST_KEY_FAILURE = "host_key_failure"
    AUTHENTICATION_FAILURE = "authentication_failure"
    REMOTE_ACCESS_FAILURE = "remote_access_failure"
    CONNECTION_REFUSED = "connection_refused"
    CONNECTION_TIMEOUT = "connection_timeout"
    HOST_NOT_FOUND = "host_not_found"
    CHECKOUT_WOULD_OVERWRITE = "checkout_would_overwrite"
    DIVERGENT_BRANCHES = "divergent_branches"
    MERGE_CONFLICT = "merge_conflict"
    REBASE_CONFLICT = "rebase_conflict"
    GENERIC_FAILURE = "generic_failure"

    @property
    def is_conflict(self) -> bool:
        return self in CONFLICT_ERROR_TYPES


CONFLICT_ERROR_TYPES = frozenset({
    ErrorType.CHECKOUT_WOULD_OVERWRITE,
    ErrorType.MERGE_CONFLICT,
    ErrorType.REBASE_CONFLICT,
})


class InvocationState(Enum):
    """Lifecycle of one classified git invocation."""

    START = "start"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    SSH_VERIFICATION_REQUIRED = "ssh_verification_required"
    CREDENTIAL_REQUIRED = "credential_required"
    CONFLICTED = "conflicted"
    FAILED = "failed"


@dataclass
class SshHostVerification:
    """Unknown SSH host the user must accept before retrying."""

    host: str
    key_type: str
    fingerprint: str


class CredentialKind(Enum):
    USERNAME = "username"
    PASSWORD = "password"
    PASSPHRASE = "passphrase"


@dataclass
class CredentialRequest:
    """Credential git asked for but could not prompt for."""

    kind: CredentialKind
    prompt: str
    host: str | None = None


@dataclass
class OperationResult:
    """Outcome of a git invocation reduced to one typed value.

    A successful result carries only a message. A failed result carries at
    most one of ssh_verification / credential_request.
    """

    success: bool
    message: str
    ssh_verification: SshHostVerification | None = None
    credential_request: CredentialRequest | None = None
    error_type: ErrorType | None = None
    conflicting_files: list[str] | None = None

    def __post_init__(self):
        if self.success and (
            self.ssh_verification is not None
            or self.credential_request is not None
            or self.error_type is not None
            or self.conflicting_files
        ):
            raise ValueError("Successful result cannot carry failure details")
        if self.ssh_verification is not None and self.credential_request is not None:
            raise ValueError("Result cannot require both SSH verification and a credential")

    @classmethod
    def ok(cls, message: str) -> OperationResult:
        return cls(success=True, message=message)

    @classmethod
    def failed(
        cls,
        message: str,
        error_type: ErrorType | None = None,
        conflicting_files: list[str] | None = None,
    ) -> OperationResult:
        return cls(
            success=False,
            message=message,
            error_type=error_type,
            conflicting_files=conflicting_files or None,
        )

    @property
    def state(self) -> InvocationState:
        """Terminal state this result represents."""
        if self.success:
            return InvocationState.SUCCEEDED
        if self.ssh_verification is not None:
            return InvocationState.SSH_VERIFICATION_REQUIRED
        if self.credential_request is not None:
            return InvocationState.CREDENTIAL_REQUIRED
        if self.error_type is not None and self.error_type.is_conflict:
            return InvocationState.CONFLICTED
        return InvocationState.FAILED

    def with_message(self, message: str) -> OperationResult:
        """Copy of this result with a different message."""
        return OperationResult(
            success=self.success,
            message=message,
            ssh_verification=self.ssh_verification,
            credential_request=self.credential_request,
            error_type=self.error_type,
            conflicting_files=self.conflicting_files,
        )

    def to_dict(self) -> dict:
        data: dict = {"success": self.success, "message": self.message}
        if self.ssh_verification is not None:
            data["ssh_verification"] = {
                "host": self.ssh_verification.host,
                "key_type": self.ssh_verification.key_type,
                "fingerprint": self.ssh_verification.fingerprint,
            }
        if self.credential_request is not None:
            data["credential_request"] = {
                "kind": self.credential_request.kind.value,
                "prompt": self.credential_request.prompt,
                "host": self.credential_request.host,
            }
        if self.error_type is not None:
            data["error_type"] = self.error_type.value
        if self.conflicting_files:
            data["conflicting_files"] = list(self.conflicting_files)
        return data
