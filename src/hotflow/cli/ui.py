"""Progress rendering for hotflow lifecycle commands."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from rich.markup import escape
from rich.tree import Tree

# status -> (symbol, label style)
_STYLES = {
    "pending": ("[green dim]○[/green dim]", "bright_black"),
    "running": ("[cyan]○[/cyan]", "white"),
    "done": ("[green]●[/green]", "white"),
    "error": ("[red]●[/red]", "white"),
    "skipped": ("[yellow]○[/yellow]", "white"),
}


@dataclass
class TrackedStep:
    key: str
    label: str
    status: str = "pending"
    detail: str = ""


class StepTracker:
    """Track lifecycle steps and render them as a Rich tree."""

    def __init__(self, title: str):
        self.title = title
        self.steps: list[TrackedStep] = []

    def _find(self, key: str) -> TrackedStep | None:
        for step in self.steps:
            if step.key == key:
                return step
        return None

    def add(self, key: str, label: str) -> None:
        if self._find(key) is None:
            self.steps.append(TrackedStep(key, label))

    def start(self, key: str, detail: str = "") -> None:
        self._update(key, "running", detail)

    def complete(self, key: str, detail: str = "") -> None:
        self._update(key, "done", detail)

    def error(self, key: str, detail: str = "") -> None:
        self._update(key, "error", detail)

    def skip(self, key: str, detail: str = "") -> None:
        self._update(key, "skipped", detail)

    def status(self, key: str) -> str | None:
        step = self._find(key)
        return step.status if step else None

    @contextmanager
    def step(self, key: str, label: str | None = None) -> Iterator[None]:
        """Mark ``key`` running for the duration of the block; error on exception."""
        if label:
            self.add(key, label)
        self.start(key)
        try:
            yield
        except Exception as exc:
            lines = str(exc).splitlines()
            self.error(key, lines[0] if lines else type(exc).__name__)
            raise
        if self.status(key) == "running":
            self.complete(key)

    def _update(self, key: str, status: str, detail: str) -> None:
        step = self._find(key)
        if step is None:
            step = TrackedStep(key, key)
            self.steps.append(step)
        step.status = status
        if detail:
            step.detail = detail

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{escape(self.title)}[/cyan]", guide_style="grey50")
        for step in self.steps:
            symbol, style = _STYLES.get(step.status, (" ", "white"))
            label = escape(step.label)
            detail = escape(step.detail.strip())
            if step.status == "pending":
                text = f"{label} ({detail})" if detail else label
                tree.add(f"{symbol} [{style}]{text}[/{style}]")
            elif detail:
                tree.add(f"{symbol} [{style}]{label}[/{style}] [bright_black]({detail})[/bright_black]")
            else:
                tree.add(f"{symbol} [{style}]{label}[/{style}]")
        return tree


__all__ = ["StepTracker", "TrackedStep"]
