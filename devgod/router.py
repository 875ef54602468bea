"""
devgod Router — Vendor-Agnostic Model Abstraction

Routes oracle calls through LiteLLM so agents never know
which model or server is backing them. No retries: a failed
call surfaces as OracleError and aborts the command.
"""

from __future__ import annotations

import time
from typing import Any

import litellm
from loguru import logger
from pydantic import BaseModel

from devgod.config_loader import DevgodConfig
from devgod.errors import OracleError


def _is_ollama_model(model: str) -> bool:
    return model.lower().startswith(("ollama/", "ollama_chat/"))


def _build_kwargs(
    model: str,
    messages: list[dict[str, str]],
    config: DevgodConfig,
) -> dict[str, Any]:
    """
    Build LiteLLM kwargs. The api_base only applies to local
    Ollama models; hosted providers resolve their own endpoints.
    """
    kwargs: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "stream": False,
        "timeout": config.oracle.timeout_seconds,
        "temperature": config.oracle.temperature,
        "max_tokens": config.oracle.max_tokens,
    }
    if config.oracle.api_base and _is_ollama_model(model):
        kwargs["api_base"] = config.oracle.api_base
    return kwargs


class RouterResponse(BaseModel):
    content: str
    model: str
    latency_ms: int = 0


class Router:
    """
    Agents call `router.complete(role, messages)`.
    The router resolves the model for the role and returns the reply text.
    """

    def __init__(self, config: DevgodConfig):
        self.config = config
        self._role_model_map = {
            "branch": config.routing.branch,
            "commit": config.routing.commit,
            "pr": config.routing.pr,
        }

        litellm.suppress_debug_info = True

    def resolve_model(self, role: str) -> str:
        model = self._role_model_map.get(role)
        if not model:
            raise ValueError(f"Unknown agent role: {role}. Known: {list(self._role_model_map)}")
        return model

    def complete(self, role: str, messages: list[dict[str, str]]) -> RouterResponse:
        """Send a single non-streaming chat completion.

        Args:
            role (str): Agent role name (branch, commit, pr).
            messages (list[dict[str, str]]): System + user chat messages.

        Returns:
            RouterResponse: The reply content, model used and latency.

        Raises:
            OracleError: On network failure, timeout, non-200 status or an
                undecodable response.
        """
        model = self.resolve_model(role)
        start = time.monotonic()

        logger.debug(f"[ROUTER] {role} → {model} ({len(messages)} messages)")

        try:
            response = litellm.completion(**_build_kwargs(model, messages, self.config))
            content = response.choices[0].message.content or ""
        except Exception as e:
            raise OracleError(f"Model call failed ({model}): {e}") from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug(f"[ROUTER] {role} complete — {elapsed_ms}ms, {len(content)} chars")

        return RouterResponse(content=content, model=model, latency_ms=elapsed_ms)
