from __future__ import annotations

from textwrap import shorten
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel

if TYPE_CHECKING:  # pragma: no cover - import only for type checking
    from .config import InstallConfig
    from .installer import InstallResult


def _preview(text: str, *, limit: int = 400) -> str:
    data = (text or "").strip()
    if not data:
        return "<empty>"
    return shorten(data.replace("\n", " ⏎ "), width=limit, placeholder=" …")


class NullStepLogger:
    """No-op logger used when tracing is disabled."""

    def on_start(self, action: str, cfg: "InstallConfig") -> None:  # pragma: no cover - no behaviour
        return

    def on_step(self, name: str, detail: str) -> None:  # pragma: no cover - no behaviour
        return

    def on_step_done(self, name: str, detail: str = "") -> None:  # pragma: no cover - no behaviour
        return

    def on_error(self, name: str, error: BaseException) -> None:  # pragma: no cover - no behaviour
        return

    def on_final(self, result: "InstallResult") -> None:  # pragma: no cover - no behaviour
        return


class StepLogger(NullStepLogger):
    """Rich-powered tracing of the install steps."""

    def __init__(self, console: Console, *, preview_limit: int = 400) -> None:
        self.console = console
        self.preview_limit = preview_limit

    def on_start(self, action: str, cfg: "InstallConfig") -> None:
        self.console.rule(f"[bold cyan]{action.capitalize()} {cfg.unit_name}")
        self.console.log("template", str(cfg.template_path))
        self.console.log("destination", str(cfg.destination))
        if cfg.dry_run:
            self.console.log("[yellow]dry run: nothing will be changed[/]")

    def on_step(self, name: str, detail: str) -> None:
        self.console.rule(f"[bold magenta]Step → {name}")
        self.console.log(_preview(detail, limit=self.preview_limit))

    def on_step_done(self, name: str, detail: str = "") -> None:
        self.console.log(f"[green]{name}: ok[/]", detail)

    def on_error(self, name: str, error: BaseException) -> None:
        self.console.rule(f"[bold red]Step Error → {name}")
        self.console.log(repr(error))

    def on_final(self, result: "InstallResult") -> None:
        self.console.rule("[bold blue]Done")
        body = (
            f"user={result.user}\n"
            f"destination={result.destination}\n"
            f"replacements={result.replacements}\n"
            f"steps={', '.join(result.steps) or '-'}"
        )
        self.console.print(Panel(body, title="result", expand=False))


__all__ = [
    "StepLogger",
    "NullStepLogger",
]
