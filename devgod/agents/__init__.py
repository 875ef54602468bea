"""
devgod Agent Roster

Each agent is:
  - A system prompt
  - A structured input template
  - A validator-backed parser for the reply

Agents are stateless. State lives in the repo's task file.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from devgod.router import Router, RouterResponse


class AgentContext(BaseModel):
    """Inputs available to an agent invocation."""
    intent: str
    branch: str = ""
    base_branch: str = ""
    summary: str = ""
    diff: str = ""


class BaseAgent(ABC):
    """
    Base class for devgod agents.

    Subclasses define:
      - role: str — maps to router model
      - system_prompt: str — rules for the model
      - build_messages() — constructs the chat messages
      - parse_response() — validates the reply into a typed value
    """

    role: str = "unknown"
    system_prompt: str = "You are a helpful assistant."

    def __init__(self, router: Router):
        self.router = router

    def run(self, context: AgentContext) -> Any:
        """Execute the agent: build messages → call model → parse."""
        messages = self.build_messages(context)
        response = self.router.complete(role=self.role, messages=messages)
        return self.parse_response(response, context)

    @abstractmethod
    def build_messages(self, context: AgentContext) -> list[dict[str, str]]:
        ...

    @abstractmethod
    def parse_response(self, response: RouterResponse, context: AgentContext) -> Any:
        ...

    def _system_msg(self) -> dict[str, str]:
        return {"role": "system", "content": self.system_prompt}

    def _user_msg(self, content: str) -> dict[str, str]:
        return {"role": "user", "content": content}
