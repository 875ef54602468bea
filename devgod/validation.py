"""
devgod Validator — the oracle trust boundary.

Pure functions that turn untrusted text (human intent, model output) into
values satisfying structural contracts, or raise a typed error.
"""

from __future__ import annotations

import json
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from devgod.errors import (
    BranchNameError,
    BranchProblem,
    CommitSubjectError,
    IntentError,
    IntentProblem,
    PRMetadataError,
    SubjectProblem,
)

ALLOWED_TYPES: tuple[str, ...] = ("feat", "fix", "chore", "refactor", "docs", "style", "test")

MIN_INTENT_LENGTH = 6
MIN_BRANCH_LENGTH = 5
MAX_SUBJECT_LENGTH = 60

_HAS_LETTER = re.compile(r"[^\W\d_]")
_SUBJECT_SHAPE = re.compile(r"^([a-z]+): (\S.*)$")


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

class CommitSubject(BaseModel):
    type: str
    description: str

    @property
    def text(self) -> str:
        return f"{self.type}: {self.description}"


class SafetyConcern(BaseModel):
    """The model refused to write a subject because the diff looks unsafe."""
    kind: Literal["secret", "binary", "other"]
    message: str


class PRMetadata(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str
    body: str
    reviewers: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Intent
# ---------------------------------------------------------------------------

def validate_intent(text: str | None) -> str:
    """Return the trimmed intent or raise IntentError."""
    intent = (text or "").strip()
    if not intent:
        raise IntentError(IntentProblem.EMPTY, "Intent cannot be empty.")

    # Blocks pure numbers like "30390359"
    if not _HAS_LETTER.search(intent):
        raise IntentError(
            IntentProblem.NO_LETTERS,
            f"Intent must contain at least one letter, got {intent!r}.",
        )

    if len(intent) < MIN_INTENT_LENGTH:
        raise IntentError(IntentProblem.TOO_SHORT, f"Intent too short: {intent!r}.")

    return intent


# ---------------------------------------------------------------------------
# Branch names
# ---------------------------------------------------------------------------

def validate_branch_name(raw: str | None) -> str:
    """
    Normalize a model-proposed branch name.

    Only whitespace and an echoed "branch:" label are corrected; anything
    else that breaks the <type>/<slug> convention is rejected.
    """
    branch = (raw or "").strip()
    if branch.lower().startswith("branch:"):
        branch = branch[len("branch:"):].strip()

    # Models sometimes append an explanation
    branch = branch.split("\n", 1)[0].strip()
    branch = branch.replace(" ", "-")

    if not branch:
        raise BranchNameError(BranchProblem.EMPTY, branch)
    if len(branch) < MIN_BRANCH_LENGTH:
        raise BranchNameError(BranchProblem.TOO_SHORT, branch)
    if "/" not in branch:
        raise BranchNameError(BranchProblem.MISSING_SLASH, branch)

    prefix, slug = branch.split("/", 1)
    if prefix not in ALLOWED_TYPES:
        raise BranchNameError(BranchProblem.INVALID_PREFIX, branch)
    if not slug:
        raise BranchNameError(BranchProblem.EMPTY_SLUG, branch)

    return branch


# ---------------------------------------------------------------------------
# Commit subjects
# ---------------------------------------------------------------------------

_SECRET_WORDS = ("secret", "password", "token", "api key", "private key", "credential", "sensitive")
_BINARY_WORDS = ("binary", "large", "lfs", "artifact", "media", "archive")


def _classify_warning(line: str) -> Literal["secret", "binary", "other"]:
    lowered = line.lower()
    if any(w in lowered for w in _SECRET_WORDS):
        return "secret"
    if any(w in lowered for w in _BINARY_WORDS):
        return "binary"
    return "other"


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


def _unquote(line: str) -> str:
    if len(line) >= 2 and line[0] == line[-1] and line[0] in "\"'`":
        return line[1:-1].strip()
    return line


def validate_commit_subject(raw: str | None) -> CommitSubject | SafetyConcern:
    """
    Turn a model reply into a commit subject or a safety concern.

    Enforces a single `<type>: <description>` line of at most 60 characters.
    A reply starting with "WARNING:" is surfaced as a SafetyConcern rather
    than committed.
    """
    line = _unquote(_first_line(raw or ""))
    if not line:
        raise CommitSubjectError(SubjectProblem.EMPTY, raw or "")

    if line.upper().startswith("WARNING:"):
        return SafetyConcern(kind=_classify_warning(line), message=line)

    match = _SUBJECT_SHAPE.match(line)
    if not match:
        raise CommitSubjectError(SubjectProblem.BAD_SHAPE, line)

    commit_type, description = match.group(1), match.group(2).strip()
    if commit_type not in ALLOWED_TYPES:
        raise CommitSubjectError(SubjectProblem.INVALID_TYPE, line)
    if len(line) > MAX_SUBJECT_LENGTH:
        raise CommitSubjectError(SubjectProblem.TOO_LONG, line)

    return CommitSubject(type=commit_type, description=description)


# ---------------------------------------------------------------------------
# PR metadata
# ---------------------------------------------------------------------------

def strip_code_fences(text: str) -> str:
    """Remove a leading ``` / ```json fence line and its closing fence."""
    text = text.strip()
    if not text.startswith("```"):
        return text

    lines = text.split("\n")
    if len(lines) < 2:
        return text

    lines = lines[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def parse_pr_metadata(raw: str | None) -> PRMetadata:
    content = strip_code_fences(raw or "")

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise PRMetadataError(f"invalid JSON ({e})", raw or "")

    if not isinstance(payload, dict):
        raise PRMetadataError("expected a JSON object", raw or "")

    try:
        meta = PRMetadata(**payload)
    except ValidationError as e:
        raise PRMetadataError(f"unexpected payload shape ({e.error_count()} errors)", raw or "")

    meta.title = meta.title.strip()
    meta.body = meta.body.strip()
    if not meta.title:
        raise PRMetadataError("empty title", raw or "")
    if not meta.body:
        raise PRMetadataError("empty body", raw or "")

    return meta
