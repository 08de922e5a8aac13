"""Reduce a git process outcome to one OperationResult.

classify() is a pure function of (exit code, stdout, stderr). It never
raises for a failed git command: a non-zero exit is a normal, classified
return value. The decision is an ordered table, first match wins:

1. SSH host verification needed (stderr)
2. Credential prompt git could not show (stdout + stderr)
3. Exit 0: success, with "already up to date" idioms normalised
4. Otherwise failure, tagged by ERROR_RULES (also ordered, first match wins)

Wording comes from gitdesk.git.phrases so other locales are data, not code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from gitdesk.git.models import (
    CredentialKind,
    CredentialRequest,
    ErrorType,
    OperationResult,
    SshHostVerification,
)
from gitdesk.git.phrases import DEFAULT_PHRASES, PhraseBook

logger = logging.getLogger(__name__)

# OpenSSH output is not localized
SSH_AUTHENTICITY = "authenticity of host"
SSH_NOT_ESTABLISHED = "can't be established"
SSH_FINGERPRINT_LINE = "key fingerprint is"
FINGERPRINT_PREFIXES = ("SHA256:", "MD5:")

ConflictQuery = Callable[[], list[str]]


@dataclass(frozen=True)
class ProcessOutcome:
    """What a finished git process left behind."""
    returncode: int
    stdout: str
    stderr: str

    @property
    def combined(self) -> str:
        return f"{self.stdout}\n{self.stderr}"


# ============================================================
# Parsers
# ============================================================


def _first_quoted(text: str, after: str = "") -> str | None:
    """Text between the first pair of single quotes (after a marker, if given)."""
    start = 0
    if after:
        start = text.find(after)
        if start < 0:
            return None
        start += len(after)
    open_pos = text.find("'", start)
    if open_pos < 0:
        return None
    close_pos = text.find("'", open_pos + 1)
    if close_pos < 0:
        return None
    return text[open_pos + 1:close_pos]


def parse_ssh_host_verification(stderr: str) -> SshHostVerification | None:
    """Parse ssh's unknown-host banner.

    Example:
        The authenticity of host 'bitbucket.org (185.166.143.49)' can't be established.
        ED25519 key fingerprint is SHA256:ybgmFkzwOSotHTHLJgHO0QN8L0xErw6vd0VhFA9m3SM.

    Returns None unless both a host and a fingerprint are found.
    """
    if SSH_AUTHENTICITY not in stderr or SSH_NOT_ESTABLISHED not in stderr:
        return None

    quoted = _first_quoted(stderr, after=SSH_AUTHENTICITY)
    if not quoted:
        return None
    # "hostname (1.2.3.4)" -> "hostname"
    host = quoted.split(" ", 1)[0]

    key_type = ""
    fingerprint = ""
    for line in stderr.splitlines():
        if SSH_FINGERPRINT_LINE not in line:
            continue
        parts = line.split()
        if len(parts) >= 4:
            key_type = parts[0]
            for part in parts:
                if part.startswith(FINGERPRINT_PREFIXES):
                    fingerprint = part.rstrip(".")
                    break
        break

    if not host or not fingerprint:
        return None
    return SshHostVerification(host=host, key_type=key_type, fingerprint=fingerprint)


def parse_credential_request(
    output: str,
    phrases: PhraseBook = DEFAULT_PHRASES,
) -> CredentialRequest | None:
    """Detect a username, password or passphrase prompt in git's output."""
    lower = output.lower()
    prompt = output.strip()

    if any(p in lower for p in phrases.username_prompts):
        return CredentialRequest(
            kind=CredentialKind.USERNAME, prompt=prompt, host=_first_quoted(output)
        )
    if any(p in lower for p in phrases.password_prompts):
        return CredentialRequest(
            kind=CredentialKind.PASSWORD, prompt=prompt, host=_first_quoted(output)
        )
    if any(p in lower for p in phrases.passphrase_prompts):
        return CredentialRequest(kind=CredentialKind.PASSPHRASE, prompt=prompt)
    return None


def normalize_success_message(
    stdout: str,
    stderr: str,
    phrases: PhraseBook = DEFAULT_PHRASES,
) -> str:
    """Canonical message for "nothing to do" outcomes, else the trimmed output."""
    lower = f"{stdout}\n{stderr}".lower()
    for idiom, message in phrases.up_to_date:
        if idiom in lower:
            return message
    return stdout.strip() or stderr.strip()


def extract_conflicting_files(
    output: str,
    phrases: PhraseBook = DEFAULT_PHRASES,
) -> list[str]:
    """Collect file paths git names as blocking or conflicted.

    Two shapes are recognised:
    - a marker line ("...would be overwritten by checkout:") followed by one
      path per line until "Please ..." / "Aborting"
    - CONFLICT lines that name the path inline
    """
    markers = phrases.file_list_markers
    terminators = phrases.file_list_terminators
    files: list[str] = []
    in_file_list = False

    for line in output.splitlines():
        trimmed = line.strip()
        lower = trimmed.lower()

        if any(m in lower for m in markers):
            in_file_list = True
            continue

        if in_file_list:
            if lower.startswith(terminators):
                in_file_list = False
                continue
            if trimmed and not lower.startswith("error"):
                files.append(trimmed)
            continue

        for pattern in phrases.conflict_path_patterns:
            match = pattern.search(trimmed)
            if match:
                files.append(match.group(1).strip())
                break

    # Preserve order, drop duplicates
    return list(dict.fromkeys(files))


# ============================================================
# Error decision table
# ============================================================


@dataclass(frozen=True)
class ErrorRule:
    """One row of the failure decision table."""
    error_type: ErrorType
    # Conflict reports go to stdout; everything else is read from stderr
    include_stdout: bool = False

    def matches(self, outcome: ProcessOutcome, phrases: PhraseBook) -> bool:
        text = outcome.combined if self.include_stdout else outcome.stderr
        lower = text.lower()
        return any(p.lower() in lower for p in phrases.error_phrases(self.error_type))


# Order matters. Rebase conflicts print "CONFLICT (content): Merge conflict in"
# too, so the rebase row precedes the merge row.
ERROR_RULES: list[ErrorRule] = [
    ErrorRule(ErrorType.HOST_KEY_FAILURE),
    ErrorRule(ErrorType.AUTHENTICATION_FAILURE),
    ErrorRule(ErrorType.REMOTE_ACCESS_FAILURE),
    ErrorRule(ErrorType.CONNECTION_REFUSED),
    ErrorRule(ErrorType.CONNECTION_TIMEOUT),
    ErrorRule(ErrorType.HOST_NOT_FOUND),
    ErrorRule(ErrorType.CHECKOUT_WOULD_OVERWRITE),
    ErrorRule(ErrorType.DIVERGENT_BRANCHES),
    ErrorRule(ErrorType.REBASE_CONFLICT, include_stdout=True),
    ErrorRule(ErrorType.MERGE_CONFLICT, include_stdout=True),
    ErrorRule(ErrorType.GENERIC_FAILURE),
]


def detect_error_type(
    outcome: ProcessOutcome,
    phrases: PhraseBook = DEFAULT_PHRASES,
) -> ErrorType | None:
    """First ERROR_RULES row that matches, or None."""
    for rule in ERROR_RULES:
        if rule.matches(outcome, phrases):
            return rule.error_type
    return None


# ============================================================
# Classification steps
# ============================================================


def _ssh_step(outcome, phrases, conflicted_paths) -> OperationResult | None:
    verification = parse_ssh_host_verification(outcome.stderr)
    if verification is None:
        return None
    return OperationResult(
        success=False,
        message="SSH host verification required",
        ssh_verification=verification,
    )


def _credential_step(outcome, phrases, conflicted_paths) -> OperationResult | None:
    credential = parse_credential_request(outcome.combined, phrases)
    if credential is None:
        return None
    return OperationResult(
        success=False,
        message=credential.prompt,
        credential_request=credential,
    )


def _success_step(outcome, phrases, conflicted_paths) -> OperationResult | None:
    if outcome.returncode != 0:
        return None
    return OperationResult.ok(
        normalize_success_message(outcome.stdout, outcome.stderr, phrases)
    )


def _failure_step(outcome, phrases, conflicted_paths) -> OperationResult:
    error_type = detect_error_type(outcome, phrases)
    message = outcome.stderr.strip() or outcome.stdout.strip()

    files: list[str] = []
    if error_type is ErrorType.REBASE_CONFLICT and conflicted_paths is not None:
        files = conflicted_paths()
    if not files and error_type is not None and error_type.is_conflict:
        files = extract_conflicting_files(outcome.combined, phrases)
    if not files and error_type is ErrorType.MERGE_CONFLICT and conflicted_paths is not None:
        files = conflicted_paths()

    return OperationResult.failed(message, error_type=error_type, conflicting_files=files)


CLASSIFICATION_STEPS = [
    _ssh_step,
    _credential_step,
    _success_step,
    _failure_step,
]


def classify(
    returncode: int,
    stdout: str,
    stderr: str,
    phrases: PhraseBook = DEFAULT_PHRASES,
    conflicted_paths: ConflictQuery | None = None,
) -> OperationResult:
    """
    Classify a finished git process.

    Args:
        returncode: Process exit status
        stdout: Captured standard output
        stderr: Captured standard error
        phrases: Phrase tables to recognise (defaults to built-in locales)
        conflicted_paths: Optional query for currently unmerged paths; used
            in preference to parsing prose for rebase conflicts

    Returns:
        Exactly one OperationResult
    """
    outcome = ProcessOutcome(returncode=returncode, stdout=stdout, stderr=stderr)
    for step in CLASSIFICATION_STEPS:
        result = step(outcome, phrases, conflicted_paths)
        if result is not None:
            logger.debug(f"Classified exit {returncode} as {result.state.value}")
            return result
    # _failure_step always returns
    raise AssertionError("unreachable")
