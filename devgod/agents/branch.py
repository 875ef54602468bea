"""
Branch namer — turns an intent into a <type>/<slug> branch name.
"""

from __future__ import annotations

from loguru import logger

from devgod.agents import AgentContext, BaseAgent
from devgod.router import RouterResponse
from devgod.validation import validate_branch_name


class BranchAgent(BaseAgent):
    role = "branch"

    system_prompt = """You are a senior engineer naming git branches.

Your ONLY output is a single git branch name. No explanations, no quotes.

Format: <type>/<slug>
- <type> is one of: feat, fix, chore, refactor, docs, style, test.
- <slug> is 2-6 meaningful lowercase words joined by hyphens.
- Keep the whole name short (about 40 characters).
- Never output the type alone.
- Never invent ticket ids (ABC-123, JIRA-1, BUG-42).

Examples:
intent: add user onboarding flow for new accounts
-> feat/onboarding-flow

intent: fix crash when password empty during login
-> fix/empty-password-login-crash

intent: write setup documentation for new repo
-> docs/setup-guide
"""

    def build_messages(self, context: AgentContext) -> list[dict[str, str]]:
        return [self._system_msg(), self._user_msg(f"intent: {context.intent.strip()}")]

    def parse_response(self, response: RouterResponse, context: AgentContext) -> str:
        branch = validate_branch_name(response.content)
        logger.info(f"[BRANCH] {context.intent!r} → {branch}")
        return branch
