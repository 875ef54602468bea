"""
devgod CLI — The Interface

Workflow:
  1. devgod git "fix login crash when password empty"   (start: branch + task)
  2. devgod git                                          (finish: commit)
  3. devgod pr                                           (open a reviewed PR)

Plus utilities:
  - devgod status   (active task, config, tools)
  - devgod reset    (forget the active task)
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from devgod.config_loader import load_config
from devgod.controller import Controller
from devgod.errors import DevgodError
from devgod.identity import BANNER, __codename__, __tagline__, __version__
from devgod.state import RepoState, StateStore
from devgod.workspace import GitRepo

# Load .env from current directory or home
load_dotenv()
load_dotenv(Path.home() / ".devgod" / ".env")

app = typer.Typer(
    name="devgod",
    help=f"{__codename__} — {__tagline__}\nAI-powered git workflow: branch, commit, PR.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__codename__} v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    pass


# ---------------------------------------------------------------------------
# Banner
# ---------------------------------------------------------------------------


def _print_banner():
    console.print(f"[bright_green]{BANNER}[/]")
    console.print(f"  [dim]v{__version__} — {__tagline__}[/]\n")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("git")
def git_command(
    intent: Optional[list[str]] = typer.Argument(None, help="What you want to do. Omit to commit the active task."),
    auto_approve: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompts"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Start a task from an intent, or commit the active task when no intent is given."""
    _configure_logging(verbose)
    text = " ".join(intent or [])

    def action(controller: Controller) -> dict:
        if not text.strip():
            return controller.finish()
        return controller.start(text)

    _run(action, auto_approve)


@app.command("pr")
def pr_command(
    auto_approve: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompts"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Create a pull request for the active task's branch."""
    _configure_logging(verbose)
    _run(lambda controller: controller.create_pr(), auto_approve)


@app.command()
def status():
    """Show the active task, configuration and tool readiness."""
    _print_banner()

    git = GitRepo()
    in_repo = git.is_inside_repo()
    try:
        config = load_config(git.root() if in_repo else None)
    except ValidationError as e:
        console.print(f"[red]❌ Invalid configuration: {escape(str(e))}[/]")
        raise typer.Exit(1)

    if in_repo:
        try:
            state = StateStore.for_repo(git).load()
        except DevgodError as e:
            console.print(f"[red]{escape(e.message)}[/]")
            state = RepoState()

        task = state.active_task
        if task:
            console.print(f"[bold]Active task:[/] {escape(task.intent)}")
            console.print(f"  Branch:  {escape(task.branch)}")
            console.print(f"  Current: {escape(git.current_branch())}")
            if task.suggested_subject:
                console.print(f"  Last suggested subject: {escape(task.suggested_subject)}")
        else:
            console.print("[dim]No active task.[/]")
    else:
        console.print("[yellow]Not inside a git repository.[/]")

    console.print(f"\n[bold]Models:[/]")
    console.print(f"  Branch: {config.routing.branch}")
    console.print(f"  Commit: {config.routing.commit}")
    console.print(f"  PR:     {config.routing.pr}")
    console.print(f"  Server: {config.oracle.api_base} (timeout {config.oracle.timeout_seconds:g}s)")

    guard = config.size_guard
    console.print(f"\n[bold]Size guard:[/]")
    console.print(f"  Warn above:  {guard.soft_files_max} files / {guard.soft_lines_max} lines")
    console.print(f"  Block above: {guard.hard_files_max} files / {guard.hard_lines_max} lines")

    tools_table = Table(title="System Tools", border_style="cyan")
    tools_table.add_column("Tool")
    tools_table.add_column("Status")

    for tool in ["git", "gh"]:
        found = shutil.which(tool)
        s = f"[green]✓ {found}[/]" if found else "[dim]✗ Not found[/]"
        tools_table.add_row(tool, s)

    console.print(tools_table)


@app.command()
def reset(
    auto_approve: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Forget the active task (the branch itself is left untouched)."""
    git = GitRepo()
    if not git.is_inside_repo():
        console.print("[red]Not inside a git repository.[/]")
        raise typer.Exit(1)

    store = StateStore.for_repo(git)
    try:
        state = store.load()
    except DevgodError:
        state = RepoState()
        logger.warning(f"[STATE] Discarding unreadable state at {store.path}")

    if state.active_task is None and not store.path.exists():
        console.print("[dim]No active task.[/]")
        return

    if not auto_approve and not typer.confirm("Clear the active task?", default=False):
        console.print("[yellow]Nothing changed.[/]")
        return

    store.save(RepoState())
    console.print("[green]✅ Active task cleared.[/]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _run(action, auto_approve: bool) -> None:
    """Build a controller, run one workflow step, map failures to exit code 1."""
    try:
        git = GitRepo()
        repo_path = git.root() if git.is_inside_repo() else git.path
        controller = Controller(repo_path=repo_path, auto_approve=auto_approve)
        result = action(controller)
    except DevgodError as e:
        console.print(f"[red]❌ {escape(e.message)}[/]")
        if e.hint:
            console.print(f"[dim]{escape(e.hint)}[/]")
        raise typer.Exit(1)
    except ValidationError as e:
        console.print(f"[red]❌ Invalid configuration: {escape(str(e))}[/]")
        raise typer.Exit(1)

    logger.debug(f"[CLI] Result: {result.get('status', 'unknown')}")


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    if verbose:
        logger.add(
            lambda msg: console.print(f"[dim]{escape(str(msg).rstrip())}[/]", highlight=False),
            level="DEBUG",
            format="{time:HH:mm:ss} | {level:<7} | {message}",
        )
    else:
        logger.add(
            lambda msg: console.print(f"[dim]{escape(str(msg).rstrip())}[/]", highlight=False),
            level="WARNING",
            format="{message}",
        )


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
