"""
Commit writer — proposes a one-line commit subject for the staged changes.

Signal priority: staged summary, then staged diff, then the task intent.
The model may refuse with a WARNING line when the diff looks unsafe;
that comes back as a SafetyConcern, never as a subject.
"""

from __future__ import annotations

from loguru import logger

from devgod.agents import AgentContext, BaseAgent
from devgod.router import RouterResponse
from devgod.validation import CommitSubject, SafetyConcern, validate_commit_subject


class CommitAgent(BaseAgent):
    role = "commit"

    system_prompt = """You are writing a git commit subject.

SOURCES OF TRUTH, IN ORDER:
1) STAGED SUMMARY (what changed: A/M/D/R)
2) STAGED DIFF (details)
3) TASK INTENT (wording help only)
If they conflict, the staged summary and diff win.

OUTPUT exactly ONE line: "<type>: <short description>"
- <type> is one of: feat, fix, chore, refactor, docs, style, test
- <short description> is 3-10 words, imperative mood ("add", "handle", "remove")
- Total length at most 60 characters
- No body, no markdown, no quotes, no emojis
- If the description says "fix", the type is "fix"
- If files were deleted (D) or renamed (R), say so in generic words

TYPE SELECTION:
- fix: corrects or prevents broken behavior in an existing flow
- feat: a new user-facing capability
- chore: tooling, config, maintenance without behavior change
- refactor: structural change without behavior change
- docs/style/test: only when the changes are exclusively that

SAFETY:
- Obvious secrets (API keys, passwords, tokens, private keys, .env values):
  output exactly
  WARNING: possible secret or sensitive data in diff; remove it before committing.
- Large or binary artifacts (media, archives, compiled binaries):
  output exactly
  WARNING: large or binary files detected; consider Git LFS instead of committing.
"""

    def build_messages(self, context: AgentContext) -> list[dict[str, str]]:
        user_content = f"""STAGED SUMMARY (PRIMARY):
{context.summary.strip() or '(unavailable)'}

STAGED DIFF (DETAILS):
{context.diff.strip()}

TASK INTENT (SECONDARY):
{context.intent.strip()}
"""
        return [self._system_msg(), self._user_msg(user_content)]

    def parse_response(
        self, response: RouterResponse, context: AgentContext
    ) -> CommitSubject | SafetyConcern:
        result = validate_commit_subject(response.content)
        if isinstance(result, SafetyConcern):
            logger.warning(f"[COMMIT] Safety concern ({result.kind}): {result.message}")
        else:
            logger.info(f"[COMMIT] Proposed: {result.text}")
        return result
