"""
Configuration loader for devgod.
Merges defaults with per-repo .devgod/config.yaml overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class RoutingConfig(BaseModel):
    branch: str = "ollama_chat/llama3.1"
    commit: str = "ollama_chat/llama3.1"
    pr: str = "ollama_chat/qwen2.5-coder:7b"


class OracleConfig(BaseModel):
    api_base: str | None = "http://localhost:11434"
    timeout_seconds: float = 60.0
    temperature: float = 0.2
    max_tokens: int = 1024


class SizeGuardConfig(BaseModel):
    ideal_lines_max: int = 50
    soft_files_max: int = 10
    soft_lines_max: int = 200
    hard_files_max: int = 20
    hard_lines_max: int = 400

    @model_validator(mode="after")
    def check_tiers(self) -> "SizeGuardConfig":
        if self.soft_files_max > self.hard_files_max:
            raise ValueError("size_guard.soft_files_max must not exceed hard_files_max")
        if self.soft_lines_max > self.hard_lines_max:
            raise ValueError("size_guard.soft_lines_max must not exceed hard_lines_max")
        return self


class PRConfig(BaseModel):
    base_branch: str | None = None
    remote: str = "origin"
    preferred_bases: list[str] = Field(
        default_factory=lambda: ["main", "master", "develop", "dev", "qa", "staging"]
    )
    include_teams: bool = True
    trust_suggested_reviewers: bool = False
    clear_task_after_pr: bool = True


class LimitsConfig(BaseModel):
    max_diff_chars: int = 12_000


class DevgodConfig(BaseModel):
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    size_guard: SizeGuardConfig = Field(default_factory=SizeGuardConfig)
    pr: PRConfig = Field(default_factory=PRConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}

    model = os.environ.get("DEVGOD_MODEL")
    if model:
        overrides["routing"] = {"branch": model, "commit": model, "pr": model}

    oracle: dict[str, Any] = {}
    if os.environ.get("DEVGOD_API_BASE"):
        oracle["api_base"] = os.environ["DEVGOD_API_BASE"]
    if os.environ.get("DEVGOD_TIMEOUT"):
        oracle["timeout_seconds"] = os.environ["DEVGOD_TIMEOUT"]
    if oracle:
        overrides["oracle"] = oracle

    return overrides


def load_config(repo_path: Path | None = None) -> DevgodConfig:
    """
    Load config by merging:
      1. Built-in defaults (devgod/config.yaml)
      2. Repo-level overrides (<repo>/.devgod/config.yaml)
      3. Environment variable overrides (DEVGOD_MODEL, DEVGOD_API_BASE, DEVGOD_TIMEOUT)
    """
    # 1. Built-in defaults
    with open(_DEFAULT_CONFIG_PATH, "r") as f:
        base: dict[str, Any] = yaml.safe_load(f) or {}

    # 2. Repo overrides
    if repo_path:
        repo_config = repo_path / ".devgod" / "config.yaml"
        if repo_config.exists():
            with open(repo_config, "r") as f:
                overrides: dict[str, Any] = yaml.safe_load(f) or {}
            base = _deep_merge(base, overrides)

    # 3. Env overrides
    base = _deep_merge(base, _env_overrides())

    return DevgodConfig(**base)
