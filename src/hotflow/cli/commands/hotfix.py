"""Hotfix commands: list, start, finish, cancel, track, pull and push."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from hotflow.cli import StepTracker
from hotflow.cli.helpers import console, print_summary, run_or_exit
from hotflow.core.config import load_config
from hotflow.core.git_ops import GitRepo, find_repo_root
from hotflow.hotfix.lifecycle import CancelOptions, FinishOptions, HotfixLifecycle, StartOptions
from hotflow.hotfix.report import (
    cancel_summary,
    finish_summary,
    start_summary,
    sync_summary,
    track_summary,
)

app = typer.Typer(help="Start, finish and cancel hotfix branches")


def _lifecycle(tracker: StepTracker | None = None) -> HotfixLifecycle:
    repo_root: Path = find_repo_root()
    return HotfixLifecycle(GitRepo(repo_root), load_config(repo_root), tracker)


def _list(verbose: bool) -> None:
    listings = run_or_exit(lambda: _lifecycle().list_hotfixes(verbose=verbose))
    if not listings:
        console.print("No hotfix branches exist.")
        console.print()
        console.print("You can start a new hotfix branch:")
        console.print("    hotflow hotfix start <version> [<base>]", markup=False, highlight=False)
        return

    width = max(len(item.name) for item in listings)
    for item in listings:
        marker = "[green]*[/green]" if item.current else " "
        line = f"{marker} {item.name:<{width}}"
        if item.description:
            line += f" {item.description}"
        console.print(line, highlight=False)


@app.callback(invoke_without_command=True)
def hotfix_callback(ctx: typer.Context) -> None:
    """List hotfix branches when no subcommand is given."""
    if ctx.invoked_subcommand is None:
        _list(verbose=False)


@app.command("list")
def list_command(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show the commit each hotfix is based on"),
) -> None:
    """List existing hotfix branches."""
    _list(verbose)


@app.command("start")
def start(
    version: Optional[str] = typer.Argument(None, help="Hotfix version, e.g. 1.2.3"),
    base: Optional[str] = typer.Argument(None, help="Branch to start from (mainline or a support branch)"),
    no_fetch: bool = typer.Option(False, "--no-fetch", "-F", help="Do not fetch from the remote first"),
) -> None:
    """Create a hotfix branch and push it to the remote."""
    options = StartOptions(base=base, fetch=not no_fetch)
    outcome = run_or_exit(lambda: _lifecycle().start(version, options))
    print_summary(start_summary(outcome))


@app.command("finish")
def finish(
    version: Optional[str] = typer.Argument(None, help="Hotfix version to finish"),
    no_fetch: bool = typer.Option(False, "--no-fetch", "-F", help="Do not fetch from the remote first"),
    sign: bool = typer.Option(False, "--sign", "-s", help="Sign the release tag cryptographically"),
    signing_key: str = typer.Option("", "--signingkey", "-u", help="Use this key for signing (implies --sign)"),
    message: str = typer.Option("", "--message", "-m", help="Tag message"),
    no_push: bool = typer.Option(False, "--no-push", "-p", help="Do not push to the remote"),
    keep: bool = typer.Option(False, "--keep", "-k", help="Keep the hotfix branch after finishing"),
    no_tag: bool = typer.Option(False, "--no-tag", "-n", help="Do not tag this hotfix"),
    no_backmerge: bool = typer.Option(
        False, "--no-backmerge", "-b", help="Merge the hotfix branch into development instead of the tag"
    ),
) -> None:
    """Merge a hotfix into its base (and development), tag it and clean up."""
    options = FinishOptions(
        fetch=not no_fetch,
        sign=sign,
        signing_key=signing_key,
        message=message,
        push=not no_push,
        keep=keep,
        no_tag=no_tag,
        no_backmerge=no_backmerge,
    )
    tracker = StepTracker("Hotfix Finish")
    outcome = run_or_exit(lambda: _lifecycle(tracker).finish(version, options), tracker)
    print_summary(finish_summary(outcome))


@app.command("cancel")
def cancel(
    version: Optional[str] = typer.Argument(None, help="Hotfix version to cancel"),
    force: bool = typer.Option(False, "--force", "-f", help="Required: confirm the cancellation"),
    no_fetch: bool = typer.Option(False, "--no-fetch", "-F", help="Do not fetch from the remote first"),
    no_push: bool = typer.Option(False, "--no-push", "-p", help="Do not touch the remote"),
    keep: bool = typer.Option(False, "--keep", "-k", help="Keep the hotfix branch"),
    keep_changes: bool = typer.Option(
        False, "--keep-changes", "-d", help="Merge the hotfix changes instead of discarding them"
    ),
    message: str = typer.Option("", "--message", "-m", help="Merge message when keeping changes"),
) -> None:
    """Abandon a hotfix branch (requires --force)."""
    options = CancelOptions(
        force=force,
        fetch=not no_fetch,
        push=not no_push,
        keep=keep,
        discard=not keep_changes,
        message=message,
    )
    tracker = StepTracker("Hotfix Cancel")
    outcome = run_or_exit(lambda: _lifecycle(tracker).cancel(version, options), tracker)
    print_summary(cancel_summary(outcome))


@app.command("track")
def track(
    version: Optional[str] = typer.Argument(None, help="Hotfix version to track from the remote"),
) -> None:
    """Create a local branch tracking a remote hotfix branch."""
    outcome = run_or_exit(lambda: _lifecycle().track(version))
    print_summary(track_summary(outcome))


@app.command("pull")
def pull(
    remote: Optional[str] = typer.Argument(None, help="Remote to pull from (defaults to the configured remote)"),
    version: Optional[str] = typer.Argument(None, help="Hotfix version (defaults to the current hotfix branch)"),
    rebase: bool = typer.Option(False, "--rebase", "-r", help="Rebase instead of merge"),
) -> None:
    """Pull a hotfix branch from the remote."""
    outcome = run_or_exit(lambda: _lifecycle().pull(remote, version, rebase=rebase))
    print_summary(sync_summary(outcome))


@app.command("push")
def push(
    remote: Optional[str] = typer.Argument(None, help="Remote to push to (defaults to the configured remote)"),
    version: Optional[str] = typer.Argument(None, help="Hotfix version (defaults to the current hotfix branch)"),
) -> None:
    """Push a hotfix branch to the remote."""
    outcome = run_or_exit(lambda: _lifecycle().push(remote, version))
    print_summary(sync_summary(outcome))


__all__ = ["app"]
