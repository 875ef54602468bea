from typer.testing import CliRunner

from devgod import __version__
from devgod import cli
from devgod.cli import app
from devgod.errors import NoActiveTaskError

runner = CliRunner()


class StubController:
    calls: list[tuple] = []
    error: Exception | None = None

    def __init__(self, repo_path=None, auto_approve=False, **kwargs):
        self.auto_approve = auto_approve

    def _record(self, *call):
        StubController.calls.append(call)
        if StubController.error:
            raise StubController.error
        return {"status": "ok"}

    def start(self, intent):
        return self._record("start", intent, self.auto_approve)

    def finish(self):
        return self._record("finish", self.auto_approve)

    def create_pr(self):
        return self._record("create_pr", self.auto_approve)


def _stub(monkeypatch, error=None):
    StubController.calls = []
    StubController.error = error
    monkeypatch.setattr(cli, "Controller", StubController)


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"DEVGOD v{__version__}" in result.stdout


def test_git_with_intent_starts_task(monkeypatch):
    _stub(monkeypatch)
    result = runner.invoke(app, ["git", "fix", "login", "crash"])
    assert result.exit_code == 0
    assert StubController.calls == [("start", "fix login crash", False)]


def test_git_without_intent_finishes_task(monkeypatch):
    _stub(monkeypatch)
    result = runner.invoke(app, ["git", "--yes"])
    assert result.exit_code == 0
    assert StubController.calls == [("finish", True)]


def test_pr_command(monkeypatch):
    _stub(monkeypatch)
    result = runner.invoke(app, ["pr"])
    assert result.exit_code == 0
    assert StubController.calls == [("create_pr", False)]


def test_errors_exit_non_zero_with_hint(monkeypatch):
    _stub(monkeypatch, error=NoActiveTaskError())
    result = runner.invoke(app, ["git"])
    assert result.exit_code == 1
    assert "No active task found." in result.stdout
    assert "devgod git" in result.stdout


def test_status_reports_invalid_config(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DEVGOD_TIMEOUT", "soon")
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.stdout


def test_invalid_config_exits_non_zero(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DEVGOD_TIMEOUT", "soon")
    result = runner.invoke(app, ["pr"])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.stdout
