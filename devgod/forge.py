"""
devgod Forge — GitHub via the `gh` CLI

Branch and collaborator listing, auth checks, and PR creation.
Installation of gh itself is left to the user.
"""

from __future__ import annotations

import re
import shutil
import subprocess

from loguru import logger

from devgod.errors import ExternalToolError
from devgod.workspace import GitRepo, run_command

_REMOTE_PATTERNS = (
    re.compile(r"^git@github\.com:(?P<path>.+)$"),
    re.compile(r"^ssh://git@github\.com/(?P<path>.+)$"),
    re.compile(r"^https?://(?:[^@/]+@)?github\.com/(?P<path>.+)$"),
)


def parse_github_remote(url: str) -> tuple[str, str]:
    """Extract (owner, repo) from an ssh or http(s) GitHub remote URL."""
    url = url.strip()
    for pattern in _REMOTE_PATTERNS:
        match = pattern.match(url)
        if match:
            break
    else:
        raise ExternalToolError(f"Remote does not look like a GitHub URL: {url}")

    path = match.group("path").rstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]

    parts = path.split("/")
    if len(parts) != 2 or not all(parts):
        raise ExternalToolError(f"Unexpected GitHub repo path: {path}")
    return parts[0], parts[1]


def order_base_branches(branches: list[str], preferred: list[str]) -> list[str]:
    """Conventional base names first (in preferred order), the rest alphabetical."""
    unique = sorted({b.strip() for b in branches if b.strip()})
    head = [p for p in preferred if p in unique]
    tail = [b for b in unique if b not in head]
    return head + tail


def _lines(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


class GitHubForge:
    """Pull-request hosting through `gh`, scoped to one repository."""

    def __init__(self, git: GitRepo, remote: str = "origin"):
        self.git = git
        self.remote = remote
        self._owner_repo: tuple[str, str] | None = None

    # -- Availability ------------------------------------------------------

    def is_installed(self) -> bool:
        return shutil.which("gh") is not None

    def auth_status(self) -> tuple[bool, str]:
        """(authenticated, raw gh output)."""
        result = self._gh("auth", "status", check=False)
        output = (result.stdout + result.stderr).strip()
        return result.returncode == 0, output

    def login(self) -> None:
        """Run `gh auth login` attached to the user's terminal."""
        result = subprocess.run(["gh", "auth", "login"], cwd=self.git.path)
        if result.returncode != 0:
            raise ExternalToolError(
                "`gh auth login` failed.",
                cmd=["gh", "auth", "login"],
                returncode=result.returncode,
                hint="Run `gh auth login` yourself, then re-run `devgod pr`.",
            )

    # -- Repository metadata -----------------------------------------------

    def owner_repo(self) -> tuple[str, str]:
        if self._owner_repo is None:
            self._owner_repo = parse_github_remote(self.git.remote_url(self.remote))
        return self._owner_repo

    def list_branches(self) -> list[str]:
        owner, repo = self.owner_repo()
        output = self._gh("api", f"repos/{owner}/{repo}/branches", "--paginate", "--jq", ".[].name").stdout
        branches = _lines(output)
        logger.debug(f"[GH] {len(branches)} remote branches")
        return branches

    def list_collaborators(self) -> list[str]:
        owner, repo = self.owner_repo()
        output = self._gh("api", f"repos/{owner}/{repo}/collaborators", "--paginate", "--jq", ".[].login").stdout
        return _lines(output)

    def list_teams(self) -> list[str]:
        """Team handles as `org/slug`; only organisations have teams."""
        owner, _ = self.owner_repo()
        output = self._gh("api", f"orgs/{owner}/teams", "--paginate", "--jq", ".[].slug").stdout
        return [f"{owner}/{slug}" for slug in _lines(output)]

    # -- Pull requests -----------------------------------------------------

    def create_pull_request(
        self,
        title: str,
        body: str,
        base: str,
        head: str,
        reviewers: list[str],
    ) -> str:
        args = ["pr", "create", "--title", title, "--body", body, "--head", head]
        if base:
            args += ["--base", base]
        for reviewer in reviewers:
            args += ["--reviewer", reviewer]

        result = self._gh(*args, hint="Create the PR yourself with `gh pr create`.")
        url = result.stdout.strip().splitlines()[-1] if result.stdout.strip() else ""
        logger.info(f"[GH] PR created: {url}")
        return url

    def _gh(self, *args: str, check: bool = True, hint: str | None = None) -> subprocess.CompletedProcess:
        return run_command(["gh", *args], cwd=self.git.path, check=check, hint=hint)
