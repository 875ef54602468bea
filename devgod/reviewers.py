"""
Reviewer resolution: forge collaborators + user selection, with a
fallback list when the forge has nothing to offer.
"""

from __future__ import annotations

from loguru import logger
from rich.console import Console

from devgod.errors import ExternalToolError

console = Console()


def sanitize_reviewers(handles: list[str]) -> list[str]:
    """Trim, strip a leading '@', drop empties and duplicates."""
    cleaned: list[str] = []
    for handle in handles:
        handle = handle.strip().lstrip("@").strip()
        if handle and handle not in cleaned:
            cleaned.append(handle)
    return cleaned


def resolve_reviewers(
    candidates: list[str],
    suggested: list[str],
    selected: list[str],
) -> list[str]:
    if not candidates or not selected:
        return sanitize_reviewers(suggested)
    return sanitize_reviewers(selected)


class ReviewerResolver:
    def __init__(self, forge, prompter, include_teams: bool = True):
        self.forge = forge
        self.prompter = prompter
        self.include_teams = include_teams

    def candidates(self) -> list[str]:
        try:
            people = self.forge.list_collaborators()
        except ExternalToolError as e:
            logger.warning(f"[REVIEWERS] Could not fetch collaborators: {e.message}")
            console.print("[yellow]⚠️ Could not fetch reviewers from GitHub.[/]")
            return []

        teams: list[str] = []
        if self.include_teams:
            try:
                teams = self.forge.list_teams()
            except ExternalToolError:
                # Personal repos have no teams
                logger.debug("[REVIEWERS] No teams available")

        return people + teams

    def resolve(self, suggested: list[str]) -> list[str]:
        candidates = self.candidates()
        if not candidates:
            console.print("[yellow]⚠️ No collaborators found for this repo.[/]")
            return resolve_reviewers([], suggested, [])

        selected = self.prompter.select_many(
            candidates,
            "Select reviewers by number (comma-separated, blank for none)",
        )
        if not selected:
            console.print("[dim]No reviewers selected.[/]")
        return resolve_reviewers(candidates, suggested, selected)
