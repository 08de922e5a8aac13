"""Git command runner."""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from gitdesk.git.errors import SubprocessLaunchError

logger = logging.getLogger(__name__)

GIT_BINARY = "git"

# Network commands must never block on a prompt we cannot see.
# BatchMode makes ssh fail instead of asking; StrictHostKeyChecking=ask still
# prints the "authenticity of host" banner so the classifier can pick it up.
NETWORK_ENV = {
    "GIT_TERMINAL_PROMPT": "0",
    "GIT_SSH_COMMAND": "ssh -o BatchMode=yes -o StrictHostKeyChecking=ask",
}


@dataclass
class GitResult:
    """Result of a git command."""
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out


@dataclass
class GitBytesResult:
    """Result of a git command whose stdout is raw bytes (blob reads)."""
    returncode: int
    stdout: bytes
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


def _build_env(env: dict[str, str] | None) -> dict[str, str] | None:
    if not env:
        return None
    merged = os.environ.copy()
    merged.update(env)
    return merged


def run_git(
    args: list[str],
    cwd: Path,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
    input_text: str | None = None,
) -> GitResult:
    """
    Run a git command and capture its output.

    Args:
        args: Git command arguments (e.g., ["status", "--porcelain"])
        cwd: Repository the command runs in
        timeout: Optional timeout in seconds. None waits indefinitely.
        env: Environment overrides merged over the current environment
        input_text: Text piped to the command's stdin

    Returns:
        GitResult with returncode, stdout, stderr, and timed_out flag.
        Output that is not valid UTF-8 is decoded with replacement characters.

    Raises:
        SubprocessLaunchError: If git could not be started at all
    """
    cmd = [GIT_BINARY, "-C", str(cwd)] + args
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            env=_build_env(env),
            input=input_text,
        )
        return GitResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    except subprocess.TimeoutExpired:
        return GitResult(
            returncode=-1,
            stdout="",
            stderr=f"Command timed out after {timeout}s",
            timed_out=True,
        )
    except OSError as e:
        raise SubprocessLaunchError(f"Failed to execute {GIT_BINARY}: {e}") from e


def run_git_bytes(args: list[str], cwd: Path) -> GitBytesResult:
    """Run a git command and return stdout undecoded."""
    cmd = [GIT_BINARY, "-C", str(cwd)] + args
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True)
    except OSError as e:
        raise SubprocessLaunchError(f"Failed to execute {GIT_BINARY}: {e}") from e
    return GitBytesResult(
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr.decode("utf-8", errors="replace"),
    )
