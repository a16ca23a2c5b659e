"""Init command: write branch names and prefixes to .hotflow/config.yaml."""

from __future__ import annotations

from typing import Optional

import typer

from hotflow.cli.helpers import console, run_or_exit
from hotflow.core.config import HotflowConfig, load_config, save_config
from hotflow.core.git_ops import GitRepo, find_repo_root


def _init(changes: dict[str, str], create_development: bool) -> tuple[HotflowConfig, list[str]]:
    repo_root = find_repo_root()
    config = load_config(repo_root).replace(**changes)
    path = save_config(repo_root, config)
    notes = [f"Configuration written to {path}"]

    repo = GitRepo(repo_root)
    development = config.development
    if not create_development or repo.branch_exists(development):
        return config, notes

    if repo.remote_branch_exists(config.remote, development):
        repo.create_tracking_branch(development, config.remote, checkout=False)
        notes.append(f"Created branch '{development}' tracking '{config.remote}/{development}'")
    elif repo.branch_exists(config.mainline):
        repo.create_branch(development, config.mainline, checkout=False)
        notes.append(f"Created branch '{development}' from '{config.mainline}'")
    return config, notes


def init(
    mainline: Optional[str] = typer.Option(None, "--mainline", help="Production release branch"),
    development: Optional[str] = typer.Option(None, "--development", help="Integration branch"),
    hotfix_prefix: Optional[str] = typer.Option(None, "--hotfix-prefix", help="Prefix for hotfix branches"),
    support_prefix: Optional[str] = typer.Option(None, "--support-prefix", help="Prefix for support branches"),
    tag_prefix: Optional[str] = typer.Option(None, "--tag-prefix", help="Prefix for version tags"),
    remote: Optional[str] = typer.Option(None, "--remote", help="Remote to synchronize with"),
    create_development: bool = typer.Option(
        True,
        "--create-development/--no-create-development",
        help="Create the development branch from mainline when it is missing",
    ),
) -> None:
    """Configure hotflow for the current repository."""
    changes = {
        key: value
        for key, value in {
            "mainline": mainline,
            "development": development,
            "hotfix_prefix": hotfix_prefix,
            "support_prefix": support_prefix,
            "version_tag_prefix": tag_prefix,
            "remote": remote,
        }.items()
        if value is not None
    }
    config, notes = run_or_exit(lambda: _init(changes, create_development))
    for note in notes:
        console.print(note, markup=False, highlight=False)
    console.print(
        f"Hotfixes start from '{config.mainline}' as '{config.hotfix_prefix}<version>' "
        f"and are tagged '{config.version_tag_prefix}<version>'.",
        markup=False,
        highlight=False,
    )


__all__ = ["init"]
