"""Operator interaction used by the orchestration steps.

Steps decide *whether* they need a confirmation or an answer; a
``ConfirmationProvider`` decides *how* it is obtained. The CLI uses the rich
terminal implementation below, tests pass a scripted one.
"""

from typing import Callable, Optional, Protocol

from rich.console import Console
from rich.prompt import Confirm, Prompt

# Returns an error message for invalid input, None when the answer is accepted
Validator = Callable[[str], Optional[str]]

STYLES = {
    "info": ("blue", "ℹ"),
    "success": ("green", "✓"),
    "warning": ("yellow", "⚠"),
    "error": ("red", "✗"),
}


class ConfirmationProvider(Protocol):
    def confirm(self, message: str, default: bool = False) -> bool:
        ...

    def ask(self, message: str, validate: Optional[Validator] = None) -> str:
        ...

    def notify(self, message: str, status: str = "info") -> None:
        ...


class RichConfirmationProvider:
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def confirm(self, message: str, default: bool = False) -> bool:
        return Confirm.ask(f"[yellow]{message}[/yellow]", default=default, console=self.console)

    def ask(self, message: str, validate: Optional[Validator] = None) -> str:
        while True:
            answer = Prompt.ask(f"[yellow]{message}[/yellow]", console=self.console).strip()
            error = validate(answer) if validate else None
            if error is None:
                return answer
            self.console.print(f"[red]>> {error}[/red]")

    def notify(self, message: str, status: str = "info") -> None:
        color, symbol = STYLES.get(status, STYLES["info"])
        self.console.print(f"{symbol} {message}", style=color, markup=False, highlight=False)
