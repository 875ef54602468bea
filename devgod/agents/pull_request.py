"""
PR writer — title + description grounded only in the base..head summary.
"""

from __future__ import annotations

from loguru import logger

from devgod.agents import AgentContext, BaseAgent
from devgod.router import RouterResponse
from devgod.validation import PRMetadata, parse_pr_metadata


class PullRequestAgent(BaseAgent):
    role = "pr"

    system_prompt = """You write GitHub pull request titles and descriptions.

You MUST respond with a valid JSON object ONLY. No markdown, no commentary.

Output schema:
{
  "title": "<short title>",
  "body": "<description based only on the changes>"
}

Rules:
- Base everything ONLY on the provided change summary.
- Never invent changes, tests or files that are not listed.
- Never include reviewers. The user selects reviewers.
- Title: 3-9 words summarizing the change.
- Body: one summary sentence, then a short list of exactly what changed.
  Keep it proportional to the size of the change.
"""

    def build_messages(self, context: AgentContext) -> list[dict[str, str]]:
        user_content = f"""Task Intent:
{context.intent.strip()}

Branch: {context.branch}
Base Branch: {context.base_branch}

Changed files (vs {context.base_branch}):
{context.summary.strip() or '(no changes listed)'}

Produce the PR title and body as JSON."""
        return [self._system_msg(), self._user_msg(user_content)]

    def parse_response(self, response: RouterResponse, context: AgentContext) -> PRMetadata:
        meta = parse_pr_metadata(response.content)
        if meta.reviewers:
            logger.debug(f"[PR] Model suggested reviewers: {meta.reviewers}")
        logger.info(f"[PR] Title: {meta.title}")
        return meta
