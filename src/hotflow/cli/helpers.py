"""Shared console and error-reporting helpers for CLI commands."""

from __future__ import annotations

from typing import Callable, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from hotflow.cli.ui import StepTracker
from hotflow.core.errors import HotflowError, PreconditionError
from hotflow.hotfix.report import Summary

T = TypeVar("T")

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def print_summary(summary: Summary) -> None:
    console.print()
    for line in summary.lines():
        console.print(line, markup=False, highlight=False)


def report_error(exc: HotflowError) -> None:
    err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
    if isinstance(exc, PreconditionError):
        result = exc.result
        for issue in result.errors[1:]:
            err_console.print(f"[red]Error:[/red] {escape(issue.message)}")
        for issue in result.errors:
            err_console.print(f"[dim]Hint:[/dim] {escape(issue.remediation)}")
        commands = result.remediation_commands()
        if commands:
            err_console.print("[dim]Run:[/dim]")
            for command in commands:
                err_console.print(f"  {escape(command)}", highlight=False)
        if result.skipped:
            err_console.print(f"[dim]Not checked:[/dim] {escape(', '.join(result.skipped))}")


def run_or_exit(fn: Callable[[], T], tracker: StepTracker | None = None) -> T:
    """Run ``fn`` and turn hotflow errors into a message plus exit code."""
    try:
        result = fn()
    except HotflowError as exc:
        if tracker is not None:
            console.print(tracker.render())
        report_error(exc)
        raise typer.Exit(exc.exit_code) from exc
    if tracker is not None:
        console.print(tracker.render())
    return result


__all__ = ["console", "err_console", "print_summary", "report_error", "run_or_exit"]
