"""Git engine for the gitdesk client.

Return type conventions:
- Functions returning OperationResult: a git command ran and its outcome was
  classified. A failed git command is a normal return value, never raised.
  Examples: fetch(), pull(), checkout(), merge(), stash_pop()
- DiffBuilder and HunkPatchEngine functions raise GitError subclasses:
  build_diff() -> NotFoundError / GitIoError / DiffParseError,
  stage_hunk() -> PatchApplyError / BinaryUnsupportedError
- Functions returning bool or parsed values return False / None / [] on failure.
  Examples: branch_exists(), get_current_branch(), list_stashes()
"""

from gitdesk.git.models import (
    LineType,
    DiffLine,
    Hunk,
    BinaryKind,
    ComparisonMode,
    DiffInfo,
    ErrorType,
    InvocationState,
    SshHostVerification,
    CredentialKind,
    CredentialRequest,
    OperationResult,
)
from gitdesk.git.errors import (
    GitError,
    NotFoundError,
    GitIoError,
    BinaryUnsupportedError,
    SubprocessLaunchError,
    DiffParseError,
    PatchApplyError,
    ClassifiedFailure,
    ConflictWithFiles,
    raise_for_result,
)
from gitdesk.git.diff import (
    build_diff,
    get_diff_names,
    get_conflicted_files,
)
from gitdesk.git.patch import (
    FileHeader,
    serialize_hunk,
    stage_hunk,
    unstage_hunk,
    discard_hunk,
)
from gitdesk.git.commit import (
    CommitMessage,
    stage_file,
    unstage_file,
    discard_file,
    commit,
    get_last_commit_message,
)
from gitdesk.git.classify import classify
from gitdesk.git.phrases import PhraseTable, PhraseBook, DEFAULT_PHRASES
from gitdesk.git.invocation import InvocationContext, run_classified
from gitdesk.git.remote import (
    FetchOptions,
    PullOptions,
    PushOptions,
    has_remote,
    get_remotes,
    fetch,
    pull,
    push,
    add_remote,
    check_remote_connection,
)
from gitdesk.git.branch import (
    get_current_branch,
    branch_exists,
    checkout,
    checkout_track,
    checkout_with_stash,
    create_branch,
    rename_branch,
    delete_branch,
    create_tag,
    fast_forward,
)
from gitdesk.git.merge import (
    MergeStrategy,
    RebaseOptions,
    merge,
    merge_abort,
    rebase,
    rebase_abort,
    rebase_continue,
)
from gitdesk.git.stash import (
    StashInfo,
    list_stashes,
    stash_save,
    stash_apply,
    stash_pop,
    stash_drop,
)
from gitdesk.git.flow import (
    FlowConfig,
    FlowKind,
    get_flow_config,
    flow_init,
    flow_start,
    flow_finish,
)
from gitdesk.git.ssh import add_known_host

__all__ = [
    # models
    "LineType",
    "DiffLine",
    "Hunk",
    "BinaryKind",
    "ComparisonMode",
    "DiffInfo",
    "ErrorType",
    "InvocationState",
    "SshHostVerification",
    "CredentialKind",
    "CredentialRequest",
    "OperationResult",
    # errors
    "GitError",
    "NotFoundError",
    "GitIoError",
    "BinaryUnsupportedError",
    "SubprocessLaunchError",
    "DiffParseError",
    "PatchApplyError",
    "ClassifiedFailure",
    "ConflictWithFiles",
    "raise_for_result",
    # diff
    "build_diff",
    "get_diff_names",
    "get_conflicted_files",
    # patch
    "FileHeader",
    "serialize_hunk",
    "stage_hunk",
    "unstage_hunk",
    "discard_hunk",
    # whole files / commits
    "CommitMessage",
    "stage_file",
    "unstage_file",
    "discard_file",
    "commit",
    "get_last_commit_message",
    # classification
    "classify",
    "PhraseTable",
    "PhraseBook",
    "DEFAULT_PHRASES",
    "InvocationContext",
    "run_classified",
    # remote
    "FetchOptions",
    "PullOptions",
    "PushOptions",
    "has_remote",
    "get_remotes",
    "fetch",
    "pull",
    "push",
    "add_remote",
    "check_remote_connection",
    # branch
    "get_current_branch",
    "branch_exists",
    "checkout",
    "checkout_track",
    "checkout_with_stash",
    "create_branch",
    "rename_branch",
    "delete_branch",
    "create_tag",
    "fast_forward",
    # merge / rebase
    "MergeStrategy",
    "RebaseOptions",
    "merge",
    "merge_abort",
    "rebase",
    "rebase_abort",
    "rebase_continue",
    # stash
    "StashInfo",
    "list_stashes",
    "stash_save",
    "stash_apply",
    "stash_pop",
    "stash_drop",
    # git-flow
    "FlowConfig",
    "FlowKind",
    "get_flow_config",
    "flow_init",
    "flow_start",
    "flow_finish",
    # ssh
    "add_known_host",
]
