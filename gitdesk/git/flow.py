"""git-flow branching model on top of plain git.

Configuration lives in the repository's git config under the keys the
git-flow extension uses, so repositories initialised by either tool work
with both.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from gitdesk.git.branch import branch_exists, get_current_branch
from gitdesk.git.invocation import run_classified
from gitdesk.git.models import OperationResult
from gitdesk.git.runner import run_git

logger = logging.getLogger(__name__)


@dataclass
class FlowConfig:
    initialized: bool = False
    master_branch: str = "master"
    develop_branch: str = "develop"
    feature_prefix: str = "feature/"
    release_prefix: str = "release/"
    hotfix_prefix: str = "hotfix/"
    version_tag_prefix: str = ""

    def to_dict(self) -> dict:
        return {
            "initialized": self.initialized,
            "master_branch": self.master_branch,
            "develop_branch": self.develop_branch,
            "feature_prefix": self.feature_prefix,
            "release_prefix": self.release_prefix,
            "hotfix_prefix": self.hotfix_prefix,
            "version_tag_prefix": self.version_tag_prefix,
        }


# git config key -> FlowConfig attribute
CONFIG_KEYS = {
    "gitflow.branch.master": "master_branch",
    "gitflow.branch.develop": "develop_branch",
    "gitflow.prefix.feature": "feature_prefix",
    "gitflow.prefix.release": "release_prefix",
    "gitflow.prefix.hotfix": "hotfix_prefix",
    "gitflow.prefix.versiontag": "version_tag_prefix",
}


class FlowKind(Enum):
    """Kind of git-flow branch, with everything that differs per kind."""

    FEATURE = "feature"
    RELEASE = "release"
    HOTFIX = "hotfix"

    @classmethod
    def parse(cls, value: str) -> "FlowKind":
        """Validate a kind name once, at the boundary."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown flow type: {value}") from None

    def prefix(self, config: FlowConfig) -> str:
        return getattr(config, f"{self.value}_prefix")

    def base_branch(self, config: FlowConfig) -> str:
        """Branch a new branch of this kind starts from."""
        if self is FlowKind.HOTFIX:
            return config.master_branch
        return config.develop_branch

    def merge_targets(self, config: FlowConfig) -> list[str]:
        if self is FlowKind.FEATURE:
            return [config.develop_branch]
        return [config.master_branch, config.develop_branch]

    @property
    def creates_tag(self) -> bool:
        return self is not FlowKind.FEATURE

    @property
    def tag_label(self) -> str:
        return self.value.capitalize()


def _config_get(repo: Path, key: str) -> str | None:
    result = run_git(["config", "--get", key], repo)
    if not result.success:
        return None
    return result.stdout.strip()


def get_flow_config(repo: Path) -> FlowConfig:
    """Read git-flow settings. Missing keys fall back to git-flow's defaults."""
    config = FlowConfig()
    config.initialized = _config_get(repo, "gitflow.branch.master") is not None
    for key, attr in CONFIG_KEYS.items():
        value = _config_get(repo, key)
        if value is not None:
            setattr(config, attr, value)
    return config


def flow_init(repo: Path, config: FlowConfig | None = None) -> OperationResult:
    """Write git-flow config and create the develop branch if it is missing."""
    config = config or FlowConfig()
    for key, attr in CONFIG_KEYS.items():
        result = run_classified(repo, "config", [key, getattr(config, attr)], conflict_query=False)
        if not result.success:
            return result.with_message(f"Failed to set {key}: {result.message}")

    if not branch_exists(repo, config.develop_branch):
        if not branch_exists(repo, config.master_branch):
            return OperationResult.failed(f"Production branch '{config.master_branch}' not found")
        result = run_classified(
            repo, "branch", [config.develop_branch, config.master_branch], conflict_query=False
        )
        if not result.success:
            return result

    return OperationResult.ok(
        f"Git Flow initialized with production branch '{config.master_branch}' "
        f"and development branch '{config.develop_branch}'"
    )


def flow_start(repo: Path, kind: FlowKind, name: str, base: str | None = None) -> OperationResult:
    """Create <prefix><name> from the kind's base branch (or base) and switch to it."""
    config = get_flow_config(repo)
    base_branch = base or kind.base_branch(config)
    branch_name = kind.prefix(config) + name

    result = run_classified(repo, "checkout", ["-b", branch_name, base_branch])
    if not result.success:
        return result
    return OperationResult.ok(f"Started {kind.value} '{name}' from '{base_branch}'")


def _with_progress(result: OperationResult, done: list[str], message: str) -> OperationResult:
    """Failure message listing the steps that already happened."""
    if done:
        message = f"{message} (completed: {'. '.join(done)})"
    return result.with_message(message)


def flow_finish(
    repo: Path,
    kind: FlowKind,
    name: str,
    delete_branch: bool = True,
) -> OperationResult:
    """
    Merge a flow branch into its targets, tag releases and hotfixes, clean up.

    Each target is checked out and merged with --no-ff. The first failing
    step stops the sequence; earlier steps are not rolled back and the
    failure message lists them.

    Args:
        repo: Repository path
        kind: Feature, release or hotfix
        name: Branch name without prefix (also the tag name)
        delete_branch: Delete the flow branch after merging

    Returns:
        OperationResult with the completed steps joined into the message
    """
    config = get_flow_config(repo)
    branch_name = kind.prefix(config) + name
    done: list[str] = []

    for target in kind.merge_targets(config):
        result = run_classified(repo, "checkout", [target])
        if not result.success:
            return _with_progress(result, done, f"Failed to checkout '{target}': {result.message}")

        merge_message = f"Merge {kind.value} '{name}' into {target}"
        result = run_classified(repo, "merge", ["--no-ff", "-m", merge_message, branch_name])
        if not result.success:
            if result.conflicting_files:
                message = (
                    f"Merge conflict while merging into '{target}'. "
                    "Please resolve conflicts manually."
                )
            else:
                message = f"Failed to merge into '{target}': {result.message}"
            return _with_progress(result, done, message)
        done.append(f"Merged into '{target}'")

    if kind.creates_tag:
        result = run_classified(repo, "checkout", [config.master_branch])
        if not result.success:
            return _with_progress(result, done, f"Failed to checkout '{config.master_branch}': {result.message}")
        tag_name = config.version_tag_prefix + name
        result = run_classified(
            repo, "tag", ["-a", tag_name, "-m", f"{kind.tag_label} {name}"], conflict_query=False
        )
        if result.success:
            done.append(f"Created tag '{tag_name}'")
        elif "already exists" in result.message:
            logger.info(f"Tag {tag_name} already exists, keeping it")
        else:
            return _with_progress(result, done, f"Could not create tag '{tag_name}': {result.message}")

    if delete_branch:
        result = run_classified(repo, "branch", ["-d", branch_name], conflict_query=False)
        if result.success:
            done.append(f"Deleted branch '{branch_name}'")
        else:
            result = run_classified(repo, "branch", ["-D", branch_name], conflict_query=False)
            if result.success:
                done.append(f"Deleted branch '{branch_name}' (force)")
            else:
                logger.warning(f"Could not delete {branch_name}: {result.message}")

    if get_current_branch(repo) != config.develop_branch:
        result = run_classified(repo, "checkout", [config.develop_branch])
        if not result.success:
            return _with_progress(result, done, f"Failed to checkout '{config.develop_branch}': {result.message}")

    return OperationResult.ok(". ".join(done))
