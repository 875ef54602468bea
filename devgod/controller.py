"""
devgod Controller — The Workflow State Machine

It is NOT smart. It is deterministic.

Three entry points, each safe to re-run:
  - start(intent):  intent → branch name → checkout → persist task
  - finish():       branch guard → stage → commit subject → confirm → commit
  - create_pr():    branch guard → size guard → PR text → reviewers → push → gh

The model writes text; the controller only coordinates, validates
and asks the human before anything irreversible.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from devgod.agents import AgentContext
from devgod.agents.branch import BranchAgent
from devgod.agents.commit import CommitAgent
from devgod.agents.pull_request import PullRequestAgent
from devgod.config_loader import DevgodConfig, load_config
from devgod.errors import (
    ExternalToolError,
    ForgeUnavailableError,
    NoActiveTaskError,
    NotARepoError,
    PolicyBlock,
    SafetyBlock,
)
from devgod.forge import GitHubForge, order_base_branches
from devgod.reviewers import ReviewerResolver, sanitize_reviewers
from devgod.router import Router
from devgod.size_guard import DiffStat, SizeVerdict, classify
from devgod.state import ActiveTask, RepoState, StateStore
from devgod.ui import Prompter, Spinner, status_line
from devgod.validation import SafetyConcern, validate_intent
from devgod.workspace import GitRepo

console = Console()


class Controller:
    """
    Drives one task through start → finish → PR.

    Collaborators (router, git, forge, prompter) are built from config
    unless injected.
    """

    def __init__(
        self,
        repo_path: Path | None = None,
        config: DevgodConfig | None = None,
        auto_approve: bool = False,
        router: Router | None = None,
        git: GitRepo | None = None,
        forge: GitHubForge | None = None,
        prompter: Prompter | None = None,
    ):
        self.repo_path = (repo_path or Path.cwd()).resolve()
        self.config = config or load_config(self.repo_path)
        self.auto_approve = auto_approve

        self.git = git or GitRepo(self.repo_path)
        self.router = router or Router(self.config)
        self.forge = forge or GitHubForge(self.git, remote=self.config.pr.remote)
        self.prompter = prompter or Prompter()

        # Agents
        self.branch_agent = BranchAgent(self.router)
        self.commit_agent = CommitAgent(self.router)
        self.pr_agent = PullRequestAgent(self.router)

        self._store: StateStore | None = None

    # -----------------------------------------------------------------------
    # start
    # -----------------------------------------------------------------------

    def start(self, intent: str) -> dict[str, Any]:
        """Create the task branch for `intent` and make it the active task."""
        self._require_repo()
        intent = validate_intent(intent)

        with Spinner("Asking the model for a branch name..."):
            branch = self.branch_agent.run(AgentContext(intent=intent))

        self.git.create_branch(branch)

        state = RepoState(active_task=ActiveTask(intent=intent, branch=branch))
        self.store.save(state)
        logger.info(f"[CONTROLLER] Task started on {branch}")

        console.print(f"[green]✅ Created branch:[/] [bold]{escape(branch)}[/]")
        console.print("Make your changes, then run: [bold]devgod git[/] to commit.")
        return {"status": "branch_created", "branch": branch, "intent": intent}

    # -----------------------------------------------------------------------
    # finish
    # -----------------------------------------------------------------------

    def finish(self) -> dict[str, Any]:
        """Stage everything, ask for a commit subject and commit on confirmation."""
        self._require_repo()
        state = self.store.load()
        task = self._require_task(state)

        if not self._ensure_on_task_branch(task):
            console.print("[red]Commit cancelled. Switch to the task branch and try again.[/]")
            return {"status": "cancelled", "branch": task.branch}

        if self.git.has_changes():
            self.git.stage_all()

        diff = self.git.staged_diff()
        if not diff.strip():
            console.print("[dim]No staged changes to commit.[/]")
            return {"status": "nothing_to_commit", "branch": task.branch}

        summary = self.git.staged_summary()
        context = AgentContext(
            intent=task.intent,
            branch=task.branch,
            summary=summary,
            diff=self._truncate(diff),
        )
        with Spinner("Asking the model for a commit message..."):
            proposal = self.commit_agent.run(context)

        if isinstance(proposal, SafetyConcern):
            raise SafetyBlock(proposal)

        subject = proposal.text
        task.suggested_subject = subject
        self.store.save(state)

        self._print_commit_plan(task, summary, subject)
        if not self._confirm("Create this commit?"):
            console.print("[yellow]❌ Commit cancelled.[/]")
            console.print(f'[dim]To commit manually: git commit -m "{escape(subject)}"[/]')
            return {"status": "cancelled", "branch": task.branch, "subject": subject}

        sha = self.git.commit(subject)
        console.print(f"[green]✅ Commit created:[/] {escape(subject)}")
        return {"status": "committed", "branch": task.branch, "subject": subject, "sha": sha}

    # -----------------------------------------------------------------------
    # create_pr
    # -----------------------------------------------------------------------

    def create_pr(self) -> dict[str, Any]:
        """Size-guard, describe and open a pull request for the task branch."""
        self._require_repo()
        state = self.store.load()
        task = self._require_task(state)
        self._ensure_forge_ready()

        if not self._ensure_on_task_branch(task):
            console.print("[red]PR creation cancelled. Switch to the task branch and try again.[/]")
            return {"status": "cancelled", "branch": task.branch}

        head = task.branch
        base = self._select_base_branch()
        base_ref = self.git.resolve_base(base, self.config.pr.remote)

        stat = self.git.diff_stat(base_ref, head)
        verdict = classify(stat, self.config.size_guard)
        logger.info(f"[CONTROLLER] Size guard: {verdict.value} ({stat.files_changed} files, {stat.total_lines} lines)")

        if verdict == SizeVerdict.BLOCKED:
            self._print_size_report(stat, verdict)
            raise PolicyBlock(
                f"PR too large: {stat.files_changed} files, {stat.total_lines} lines. "
                "Creation blocked by the size guard.",
                stat=stat,
                verdict=verdict,
            )
        if verdict == SizeVerdict.WARN:
            self._print_size_report(stat, verdict)
            if not self._confirm("Proceed with creating this larger PR anyway?"):
                console.print("[yellow]PR creation cancelled. Consider splitting into smaller PRs.[/]")
                return {"status": "cancelled", "branch": head}

        summary = self.git.diff_summary(base_ref, head)
        context = AgentContext(intent=task.intent, branch=head, base_branch=base, summary=summary)
        with Spinner("Asking the model for a PR title and description..."):
            meta = self.pr_agent.run(context)

        suggested = meta.reviewers if self.config.pr.trust_suggested_reviewers else []
        if self.auto_approve:
            reviewers = sanitize_reviewers(suggested)
        else:
            resolver = ReviewerResolver(self.forge, self.prompter, self.config.pr.include_teams)
            reviewers = resolver.resolve(suggested)

        self._print_pr_preview(head, base, meta.title, meta.body, reviewers)
        if not self._confirm("Create this PR on GitHub?"):
            console.print("[yellow]❌ PR creation cancelled.[/]")
            return {"status": "cancelled", "branch": head}

        self.git.push(head, self.config.pr.remote)
        url = self.forge.create_pull_request(
            title=meta.title,
            body=meta.body,
            base=base,
            head=head,
            reviewers=sanitize_reviewers(reviewers),
        )

        if self.config.pr.clear_task_after_pr:
            self.store.save(RepoState())
            logger.info("[CONTROLLER] Active task cleared after PR creation")

        console.print(f"[green]✅ PR created:[/] {url}")
        return {"status": "pr_created", "branch": head, "base": base, "pr_url": url, "reviewers": reviewers}

    # -----------------------------------------------------------------------
    # Guards
    # -----------------------------------------------------------------------

    @property
    def store(self) -> StateStore:
        if self._store is None:
            self._store = StateStore.for_repo(self.git)
        return self._store

    def _require_repo(self) -> None:
        if not self.git.is_inside_repo():
            raise NotARepoError()

    @staticmethod
    def _require_task(state: RepoState) -> ActiveTask:
        if state.active_task is None:
            raise NoActiveTaskError()
        return state.active_task

    def _ensure_on_task_branch(self, task: ActiveTask) -> bool:
        """False when the user declines to switch; raises when the switch fails."""
        current = self.git.current_branch()
        if current == task.branch:
            return True

        console.print("[yellow]⚠️ You are NOT on the branch for this task.[/]")
        console.print(f"  Expected branch: [bold]{task.branch}[/]")
        console.print(f"  Current branch:  [bold]{current}[/]\n")

        if not self._confirm("Switch to the correct branch now?"):
            return False

        try:
            self.git.checkout(task.branch)
        except ExternalToolError as e:
            console.print("[red]❌ Failed to switch branches automatically.[/]")
            e.hint = f"Run `git checkout {task.branch}` and retry."
            raise

        console.print("[green]✔️ Switched to the correct branch.[/]\n")
        return True

    def _ensure_forge_ready(self) -> None:
        if not self.forge.is_installed():
            raise ForgeUnavailableError(
                "GitHub CLI (gh) is not installed.",
                hint="Install it from https://cli.github.com and run `gh auth login`.",
            )

        ok, raw = self.forge.auth_status()
        if ok:
            return

        console.print("[red]❌ You are not logged into GitHub CLI.[/]")
        if raw:
            console.print(f"[dim]{raw}[/]")
        if self.auto_approve or not self.prompter.confirm("Run `gh auth login` now?"):
            raise ForgeUnavailableError(
                "GitHub CLI is not authenticated.",
                hint="Run `gh auth login`, then re-run `devgod pr`.",
            )

        self.forge.login()
        ok, _ = self.forge.auth_status()
        if not ok:
            raise ForgeUnavailableError(
                "GitHub CLI authentication did not complete.",
                hint="Run `gh auth login`, then re-run `devgod pr`.",
            )
        console.print("[green]✔️ GitHub CLI authentication complete.[/]")

    def _select_base_branch(self) -> str:
        if self.config.pr.base_branch:
            return self.config.pr.base_branch

        branches = order_base_branches(self.forge.list_branches(), self.config.pr.preferred_bases)
        if not branches:
            raise ExternalToolError(
                "No branches found on the remote.",
                hint="Push a base branch first, or set pr.base_branch in .devgod/config.yaml.",
            )

        if self.auto_approve:
            base = branches[0]
        else:
            console.print("[green]Available base branches (from GitHub):[/]")
            base = self.prompter.select_one(branches, "Select base branch by number")
        console.print(f"[green]✔️ Base branch:[/] {base}")
        return base

    # -----------------------------------------------------------------------
    # Display Helpers
    # -----------------------------------------------------------------------

    def _print_commit_plan(self, task: ActiveTask, summary: str, subject: str) -> None:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold cyan")
        table.add_column()
        table.add_row("🌿 Branch", escape(task.branch))
        table.add_row("🎯 Intent", escape(task.intent))

        changes = [status_line(line) for line in summary.splitlines() if line.strip()]
        if changes:
            for i, change in enumerate(changes):
                table.add_row("📦 Staged" if i == 0 else "", change)
        else:
            table.add_row("📦 Staged", "(none)")

        table.add_row("✍️  Subject", f"[bold]{escape(subject)}[/]")
        console.print(Panel(table, title="🚀 DEVGOD COMMIT PREVIEW", border_style="magenta"))

    def _print_pr_preview(self, head: str, base: str, title: str, body: str, reviewers: list[str]) -> None:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold cyan")
        table.add_column()
        table.add_row("🌿 Branch", head)
        table.add_row("🧱 Base", base)
        table.add_row("📝 Title", f"[bold]{escape(title)}[/]")
        table.add_row("📄 Body", escape(body))
        table.add_row(
            "👥 Reviewers",
            ", ".join(f"@{r}" for r in reviewers) if reviewers else "[dim](none selected)[/]",
        )
        console.print(Panel(table, title="🚀 DEVGOD PR PREVIEW", border_style="magenta"))

    def _print_size_report(self, stat: DiffStat, verdict: SizeVerdict) -> None:
        limits = self.config.size_guard
        color = "red" if verdict == SizeVerdict.BLOCKED else "yellow"
        headline = (
            "❌ This PR is very large."
            if verdict == SizeVerdict.BLOCKED
            else "⚠️ This PR is larger than recommended."
        )
        console.print(Panel(
            f"Ideal: around {limits.ideal_lines_max} lines, as few files as possible.\n"
            f"Recommended maximum: {limits.soft_files_max} files, {limits.soft_lines_max} lines.\n"
            f"Current: {stat.files_changed} files, {stat.total_lines} lines "
            f"(+{stat.lines_added} / -{stat.lines_deleted}).",
            title=headline,
            border_style=color,
        ))

    # -----------------------------------------------------------------------
    # Utilities
    # -----------------------------------------------------------------------

    def _confirm(self, prompt: str) -> bool:
        if self.auto_approve:
            return True
        return self.prompter.confirm(prompt)

    def _truncate(self, diff: str) -> str:
        limit = self.config.limits.max_diff_chars
        if len(diff) <= limit:
            return diff
        return diff[:limit] + f"\n... [Truncated, {len(diff)} chars total]"
