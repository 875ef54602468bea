from __future__ import annotations

import os
import tempfile
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from devgod.errors import StateError

STATE_FILE_NAME = "devgod-state.json"


class ActiveTask(BaseModel):
    """The binding between a declared intent and the branch created for it."""
    model_config = ConfigDict(extra="ignore")

    intent: str = Field(min_length=1)
    branch: str = Field(min_length=1)
    suggested_subject: str = ""


class RepoState(BaseModel):
    """Persisted envelope: zero or one active task per repository."""
    model_config = ConfigDict(extra="ignore")

    active_task: ActiveTask | None = None

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)


class StateStore:
    """Loads and atomically saves the RepoState file inside the git dir."""

    def __init__(self, path: Path):
        self.path = path

    @classmethod
    def for_repo(cls, git) -> "StateStore":
        return cls(git.git_dir() / STATE_FILE_NAME)

    def load(self) -> RepoState:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return RepoState()
        except UnicodeDecodeError as e:
            raise StateError(f"Task state file is corrupt: {self.path} ({e.reason})", hint=self._reset_hint())
        except OSError as e:
            raise StateError(f"Could not read task state {self.path}: {e}")

        try:
            return RepoState.model_validate_json(raw)
        except ValidationError as e:
            raise StateError(
                f"Task state file is corrupt: {self.path} ({e.error_count()} errors)",
                hint=self._reset_hint(),
            )

    def _reset_hint(self) -> str:
        return f"Delete {self.path} and start a new task with `devgod git \"your intent\"`."

    def save(self, state: RepoState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".devgod-state-", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(state.to_json())
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StateError(f"Could not write task state {self.path}: {e}")

        logger.debug(f"[STATE] Saved {self.path}")
