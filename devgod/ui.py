"""
Terminal interaction: confirmations, numbered selections and the
spinner shown while the model is thinking.
"""

from __future__ import annotations

import threading

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.text import Text

console = Console()

_STATUS_COLORS = {"A": "green", "M": "yellow", "D": "red", "R": "cyan", "C": "cyan"}


def parse_selection(text: str, options: list[str]) -> list[str]:
    """Map '1, 3' to the matching options; out-of-range or junk entries are ignored."""
    selected: list[str] = []
    for part in text.split(","):
        part = part.strip()
        if not part.isdigit():
            continue
        index = int(part)
        if 1 <= index <= len(options) and options[index - 1] not in selected:
            selected.append(options[index - 1])
    return selected


def status_line(line: str) -> Text:
    """Colorize the status letter of a name-status line (e.g. 'M\\tsrc/app.py')."""
    line = line.strip()
    letter, _, rest = line.partition("\t") if "\t" in line else line.partition(" ")
    text = Text()
    text.append(letter, style=_STATUS_COLORS.get(letter[:1], "white"))
    text.append(f"  {rest.strip()}")
    return text


class Prompter:
    """Line-based prompts over rich."""

    def confirm(self, prompt: str) -> bool:
        return Confirm.ask(f"[bold]{prompt}[/]", default=False)

    def select_one(self, options: list[str], prompt: str) -> str:
        self._print_options(options)
        while True:
            answer = Prompt.ask(f"[cyan]{prompt}[/]")
            chosen = parse_selection(answer, options)
            if len(chosen) == 1:
                return chosen[0]
            console.print(f"[red]Enter a single number between 1 and {len(options)}.[/]")

    def select_many(self, options: list[str], prompt: str) -> list[str]:
        self._print_options(options)
        answer = Prompt.ask(f"[cyan]{prompt}[/]", default="", show_default=False)
        return parse_selection(answer, options)

    @staticmethod
    def _print_options(options: list[str]) -> None:
        console.print()
        for i, option in enumerate(options, start=1):
            console.print(f"  {i:>2}) {option}")
        console.print()


class Spinner:
    """
    Animated status line around a blocking call.

    stop() is safe to call more than once; only the first call clears the line.
    """

    def __init__(self, message: str, out: Console | None = None):
        self._status = (out or console).status(message, spinner="dots")
        self._lock = threading.Lock()
        self._started = False
        self._stopped = False

    def start(self) -> "Spinner":
        with self._lock:
            if not self._started and not self._stopped:
                self._status.start()
                self._started = True
        return self

    def stop(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            if self._started:
                self._status.stop()

    def __enter__(self) -> "Spinner":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()
