"""
devgod Workspace — the git backend

Thin wrapper over the `git` CLI for the working copy devgod runs in.
Every failing command raises ExternalToolError with the captured output.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from loguru import logger

from devgod.errors import ExternalToolError
from devgod.size_guard import DiffStat, parse_numstat


def run_command(
    cmd: list[str],
    cwd: Path,
    check: bool = True,
    hint: str | None = None,
) -> subprocess.CompletedProcess:
    """Run a subprocess, capturing stdout/stderr as text."""
    logger.debug(f"[EXEC] {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise ExternalToolError(f"Command not found: {cmd[0]}", cmd=cmd, output=str(e), hint=hint)

    if check and result.returncode != 0:
        output = (result.stderr or result.stdout).strip()
        raise ExternalToolError(
            f"Command failed: {' '.join(cmd)}\n{output}",
            cmd=cmd,
            returncode=result.returncode,
            output=output,
            hint=hint,
        )
    return result


class GitRepo:
    """
    The working copy devgod operates on.
    """

    def __init__(self, path: Path | None = None):
        self.path = (path or Path.cwd()).resolve()

    # -- Repository discovery ----------------------------------------------

    def is_inside_repo(self) -> bool:
        try:
            result = run_command(["git", "rev-parse", "--is-inside-work-tree"], cwd=self.path, check=False)
        except ExternalToolError:
            return False
        return result.returncode == 0 and result.stdout.strip() == "true"

    def root(self) -> Path:
        return Path(self._git("rev-parse", "--show-toplevel").strip())

    def git_dir(self) -> Path:
        """The control-metadata directory (.git) of this working copy."""
        return Path(self._git("rev-parse", "--absolute-git-dir").strip())

    def current_branch(self) -> str:
        """Branch HEAD points at, even before its first commit. "HEAD" when detached."""
        result = run_command(["git", "symbolic-ref", "--short", "-q", "HEAD"], cwd=self.path, check=False)
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
        return self._git("rev-parse", "--abbrev-ref", "HEAD").strip()

    def ref_exists(self, ref: str) -> bool:
        result = run_command(
            ["git", "rev-parse", "--verify", "--quiet", ref], cwd=self.path, check=False
        )
        return result.returncode == 0

    def resolve_base(self, base: str, remote: str = "origin") -> str:
        """Prefer a local base branch, falling back to its remote-tracking ref."""
        if self.ref_exists(base):
            return base
        remote_ref = f"{remote}/{base}"
        if self.ref_exists(remote_ref):
            return remote_ref
        return base

    # -- Branches ----------------------------------------------------------

    def create_branch(self, name: str) -> None:
        self._git("checkout", "-b", name)
        logger.info(f"[GIT] Created and checked out {name}")

    def checkout(self, name: str) -> None:
        self._git("checkout", name, hint=f"Run `git checkout {name}` and retry.")
        logger.info(f"[GIT] Checked out {name}")

    def push(self, branch: str, remote: str = "origin") -> None:
        self._git(
            "push", "-u", remote, branch,
            hint=f"Run `git push -u {remote} {branch}` and retry.",
        )
        logger.info(f"[GIT] Pushed {branch} to {remote}")

    def remote_url(self, remote: str = "origin") -> str:
        return self._git("remote", "get-url", remote).strip()

    # -- Staging + commits -------------------------------------------------

    def has_changes(self) -> bool:
        return bool(self._git("status", "--porcelain").strip())

    def stage_all(self) -> None:
        self._git("add", "-A")

    def staged_diff(self) -> str:
        return self._git("diff", "--cached")

    def staged_summary(self) -> str:
        """Name-status (A/M/D/R) listing of staged changes."""
        return self._git("diff", "--cached", "--name-status")

    def commit(self, message: str) -> str:
        self._git("commit", "-m", message)
        sha = self._git("rev-parse", "HEAD").strip()
        logger.info(f"[GIT] Committed {sha[:8]}: {message}")
        return sha

    # -- Base..head comparisons --------------------------------------------

    def diff_stat(self, base: str, head: str) -> DiffStat:
        return parse_numstat(self._git("diff", "--numstat", f"{base}...{head}"))

    def diff_summary(self, base: str, head: str) -> str:
        return self._git("diff", "--name-status", f"{base}...{head}")

    # -- Internals ---------------------------------------------------------

    def _git(self, *args: str, hint: str | None = None) -> str:
        return run_command(["git", *args], cwd=self.path, hint=hint).stdout
