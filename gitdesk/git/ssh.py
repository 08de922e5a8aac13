"""Resolve an SSH host verification result by trusting the host."""

import logging
import subprocess
from pathlib import Path

from gitdesk.git.errors import GitIoError, SubprocessLaunchError
from gitdesk.git.models import OperationResult

logger = logging.getLogger(__name__)

KEYSCAN_BINARY = "ssh-keyscan"
KEY_TYPES = "ed25519,rsa,ecdsa"


def default_known_hosts() -> Path:
    return Path.home() / ".ssh" / "known_hosts"


def add_known_host(
    host: str,
    known_hosts: Path | None = None,
    timeout: float | None = None,
) -> OperationResult:
    """
    Fetch host's public keys with ssh-keyscan and append them to known_hosts.

    After this succeeds the blocked network command can be issued again.

    Raises:
        SubprocessLaunchError: ssh-keyscan could not be started
        GitIoError: known_hosts could not be written
    """
    known_hosts = known_hosts or default_known_hosts()
    cmd = [KEYSCAN_BINARY, "-t", KEY_TYPES, host]
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return OperationResult.failed(f"Failed to scan host keys: timed out after {timeout}s")
    except OSError as e:
        raise SubprocessLaunchError(f"Failed to execute {KEYSCAN_BINARY}: {e}") from e

    if result.returncode != 0:
        return OperationResult.failed(f"Failed to scan host keys: {result.stderr.strip()}")

    host_keys = result.stdout
    if not host_keys.strip():
        return OperationResult.failed("No host keys found for this host")
    if not host_keys.endswith("\n"):
        host_keys += "\n"

    try:
        known_hosts.parent.mkdir(parents=True, exist_ok=True)
        with open(known_hosts, "a") as f:
            f.write(host_keys)
    except OSError as e:
        raise GitIoError(f"Failed to write {known_hosts}: {e}") from e

    logger.info(f"Added {host} to {known_hosts}")
    return OperationResult.ok(f"Host '{host}' added to known hosts")
