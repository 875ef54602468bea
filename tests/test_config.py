from pathlib import Path

import pytest
from pydantic import ValidationError

from devgod.config_loader import load_config


def test_defaults(monkeypatch):
    for name in ("DEVGOD_MODEL", "DEVGOD_API_BASE", "DEVGOD_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)

    config = load_config()
    assert config.routing.branch == "ollama_chat/llama3.1"
    assert config.size_guard.hard_files_max == 20
    assert config.pr.preferred_bases[:2] == ["main", "master"]
    assert config.pr.clear_task_after_pr is True
    assert config.pr.trust_suggested_reviewers is False


def test_repo_overrides_merge(tmp_path: Path):
    (tmp_path / ".devgod").mkdir()
    (tmp_path / ".devgod" / "config.yaml").write_text(
        "pr:\n  base_branch: develop\nsize_guard:\n  hard_lines_max: 800\n"
    )

    config = load_config(tmp_path)

    assert config.pr.base_branch == "develop"
    assert config.pr.remote == "origin"
    assert config.size_guard.hard_lines_max == 800
    assert config.size_guard.soft_lines_max == 200


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DEVGOD_MODEL", "openai/gpt-4o-mini")
    monkeypatch.setenv("DEVGOD_TIMEOUT", "15")

    config = load_config()

    assert config.routing.branch == config.routing.pr == "openai/gpt-4o-mini"
    assert config.oracle.timeout_seconds == 15.0


def test_bad_env_timeout_is_a_validation_error(monkeypatch):
    monkeypatch.setenv("DEVGOD_TIMEOUT", "soon")

    with pytest.raises(ValidationError):
        load_config()
