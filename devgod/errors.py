"""
devgod error taxonomy.

Every failure that aborts a command is a DevgodError. The CLI prints
`message` and, when present, `hint` (the manual recovery step) and exits 1.
User-declined confirmations are not errors.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class DevgodError(Exception):
    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class NotARepoError(DevgodError):
    def __init__(self, message: str = "Not inside a git repository."):
        super().__init__(message, hint="cd into a git working copy and retry.")


# ---------------------------------------------------------------------------
# Input + format errors (validator layer)
# ---------------------------------------------------------------------------

class InputError(DevgodError):
    pass


class IntentProblem(str, Enum):
    EMPTY = "empty"
    NO_LETTERS = "no_letters"
    TOO_SHORT = "too_short"


class IntentError(InputError):
    def __init__(self, reason: IntentProblem, message: str):
        super().__init__(
            message,
            hint='Describe what you want to do, e.g. "fix login crash when password is empty".',
        )
        self.reason = reason


class FormatError(DevgodError):
    """Oracle output failed structural validation."""


class BranchProblem(str, Enum):
    EMPTY = "empty"
    TOO_SHORT = "too_short"
    MISSING_SLASH = "missing_slash"
    INVALID_PREFIX = "invalid_prefix"
    EMPTY_SLUG = "empty_slug"


class BranchNameError(FormatError):
    def __init__(self, reason: BranchProblem, raw: str):
        super().__init__(
            f"Model returned an invalid branch name ({reason.value}): {raw!r}",
            hint="Retry, or create the branch yourself with `git checkout -b <type>/<slug>`.",
        )
        self.reason = reason
        self.raw = raw


class SubjectProblem(str, Enum):
    EMPTY = "empty"
    BAD_SHAPE = "bad_shape"
    INVALID_TYPE = "invalid_type"
    TOO_LONG = "too_long"


class CommitSubjectError(FormatError):
    def __init__(self, reason: SubjectProblem, raw: str):
        super().__init__(
            f"Model returned an invalid commit subject ({reason.value}): {raw!r}",
            hint='Commit manually with `git commit -m "<type>: <description>"`.',
        )
        self.reason = reason
        self.raw = raw


class PRMetadataError(FormatError):
    def __init__(self, message: str, raw: str = ""):
        super().__init__(
            f"Could not parse PR metadata: {message}",
            hint="Retry `devgod pr`, or open the PR yourself with `gh pr create`.",
        )
        self.raw = raw


# ---------------------------------------------------------------------------
# State errors
# ---------------------------------------------------------------------------

class StateError(DevgodError):
    pass


class NoActiveTaskError(StateError):
    def __init__(self):
        super().__init__(
            "No active task found.",
            hint='Run `devgod git "your intent"` first.',
        )


# ---------------------------------------------------------------------------
# External collaborators
# ---------------------------------------------------------------------------

class ExternalToolError(DevgodError):
    def __init__(
        self,
        message: str,
        cmd: list[str] | None = None,
        returncode: int | None = None,
        output: str = "",
        hint: str | None = None,
    ):
        super().__init__(message, hint=hint)
        self.cmd = cmd or []
        self.returncode = returncode
        self.output = output


class ForgeUnavailableError(ExternalToolError):
    pass


class OracleError(DevgodError):
    def __init__(self, message: str):
        super().__init__(message, hint="Check that the model server is reachable and retry the command.")


# ---------------------------------------------------------------------------
# Policy + safety blocks
# ---------------------------------------------------------------------------

class PolicyBlock(DevgodError):
    def __init__(self, message: str, stat: Any = None, verdict: Any = None):
        super().__init__(
            message,
            hint="Split this work into smaller PRs (feature slices or logical chunks) and try again.",
        )
        self.stat = stat
        self.verdict = verdict


class SafetyBlock(DevgodError):
    def __init__(self, concern: Any):
        super().__init__(
            concern.message,
            hint="Remove the flagged content from the staged changes before committing.",
        )
        self.concern = concern
