"""Terminal decision source backed by rich prompts."""

from collections.abc import Sequence

from rich.console import Console
from rich.prompt import Confirm, Prompt

from notes_sync.domain.interfaces.decision_source import IDecisionSource
from notes_sync.exceptions import DecisionError


class ConsoleDecisionSource(IDecisionSource):
    """Ask the user on the terminal."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def confirm(self, prompt: str) -> bool:
        return Confirm.ask(f"[bold]{prompt}[/bold]", console=self.console)

    def pick_one(self, prompt: str, options: Sequence[str]) -> str:
        if not options:
            msg = f"No options offered for: {prompt}"
            raise DecisionError(msg)
        answer = Prompt.ask(
            f"[bold]{prompt}[/bold]",
            choices=list(options),
            console=self.console,
        )
        if answer not in options:
            msg = f"Answer {answer!r} is not one of {list(options)}"
            raise DecisionError(msg)
        return answer
