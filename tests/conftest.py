from __future__ import annotations

from pathlib import Path

import pytest

from devgod.config_loader import DevgodConfig
from devgod.controller import Controller
from devgod.errors import ExternalToolError
from devgod.router import RouterResponse
from devgod.size_guard import DiffStat


class FakeGit:
    def __init__(self, git_dir: Path):
        self.path = git_dir
        self._git_dir = git_dir
        self.inside = True
        self.branch = "main"
        self.dirty = False
        self.staged = ""
        self.summary = "M\tsrc/login.py"
        self.stat = DiffStat(files_changed=2, lines_added=20, lines_deleted=5)
        self.fail_checkout = False
        self.calls: list[tuple] = []

    def is_inside_repo(self) -> bool:
        return self.inside

    def git_dir(self) -> Path:
        return self._git_dir

    def current_branch(self) -> str:
        return self.branch

    def create_branch(self, name: str) -> None:
        self.calls.append(("create_branch", name))
        self.branch = name

    def checkout(self, name: str) -> None:
        self.calls.append(("checkout", name))
        if self.fail_checkout:
            raise ExternalToolError(f"Command failed: git checkout {name}")
        self.branch = name

    def has_changes(self) -> bool:
        return self.dirty

    def stage_all(self) -> None:
        self.calls.append(("stage_all",))

    def staged_diff(self) -> str:
        return self.staged

    def staged_summary(self) -> str:
        return self.summary

    def commit(self, message: str) -> str:
        self.calls.append(("commit", message))
        return "abc1234"

    def resolve_base(self, base: str, remote: str = "origin") -> str:
        return base

    def diff_stat(self, base: str, head: str) -> DiffStat:
        self.calls.append(("diff_stat", base, head))
        return self.stat

    def diff_summary(self, base: str, head: str) -> str:
        return self.summary

    def push(self, branch: str, remote: str = "origin") -> None:
        self.calls.append(("push", branch, remote))


class FakeRouter:
    def __init__(self, replies: dict[str, str] | None = None):
        self.replies = replies or {}
        self.calls: list[tuple[str, list[dict[str, str]]]] = []

    def complete(self, role: str, messages: list[dict[str, str]]) -> RouterResponse:
        self.calls.append((role, messages))
        return RouterResponse(content=self.replies[role], model=f"fake/{role}")

    def roles(self) -> list[str]:
        return [role for role, _ in self.calls]


class FakeForge:
    def __init__(self):
        self.installed = True
        self.authenticated = True
        self.branches = ["feature/x", "develop", "main"]
        self.collaborators = ["alice", "bob"]
        self.created: list[dict] = []

    def is_installed(self) -> bool:
        return self.installed

    def auth_status(self) -> tuple[bool, str]:
        return self.authenticated, "" if self.authenticated else "not logged in"

    def login(self) -> None:
        self.authenticated = True

    def list_branches(self) -> list[str]:
        return self.branches

    def list_collaborators(self) -> list[str]:
        return self.collaborators

    def list_teams(self) -> list[str]:
        raise ExternalToolError("Not Found")

    def create_pull_request(self, title, body, base, head, reviewers) -> str:
        self.created.append(
            {"title": title, "body": body, "base": base, "head": head, "reviewers": reviewers}
        )
        return "https://github.com/acme/app/pull/7"


class FakePrompter:
    def __init__(self, confirm: bool = True, base_index: int = 0, reviewers: list[str] | None = None):
        self.answer = confirm
        self.base_index = base_index
        self.reviewers = reviewers or []
        self.questions: list[str] = []

    def confirm(self, prompt: str) -> bool:
        self.questions.append(prompt)
        return self.answer

    def select_one(self, options: list[str], prompt: str) -> str:
        self.questions.append(prompt)
        return options[self.base_index]

    def select_many(self, options: list[str], prompt: str) -> list[str]:
        self.questions.append(prompt)
        return [o for o in self.reviewers if o in options]


@pytest.fixture
def fake_git(tmp_path: Path) -> FakeGit:
    git_dir = tmp_path / ".git"
    git_dir.mkdir()
    return FakeGit(git_dir)


@pytest.fixture
def fake_forge() -> FakeForge:
    return FakeForge()


@pytest.fixture
def make_controller(tmp_path: Path, fake_git: FakeGit, fake_forge: FakeForge):
    def _make(
        replies: dict[str, str] | None = None,
        prompter: FakePrompter | None = None,
        config: DevgodConfig | None = None,
        auto_approve: bool = False,
    ):
        router = FakeRouter(replies)
        controller = Controller(
            repo_path=tmp_path,
            config=config or DevgodConfig(),
            auto_approve=auto_approve,
            router=router,
            git=fake_git,
            forge=fake_forge,
            prompter=prompter or FakePrompter(),
        )
        return controller, router

    return _make
