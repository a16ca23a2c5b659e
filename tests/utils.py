"""Git helpers shared by the test suite."""

from __future__ import annotations

import subprocess
from pathlib import Path


def git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str | None = None) -> str:
    """Write ``name`` and commit it; return the new commit sha."""
    path = repo / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    git(repo, "add", name)
    git(repo, "commit", "-m", message or f"Update {name}")
    return git(repo, "rev-parse", "HEAD")


def remote_heads(repo: Path, remote: str = "origin") -> dict[str, str]:
    """Branch name -> sha as seen on the remote itself (not tracking refs)."""
    output = git(repo, "ls-remote", "--heads", remote)
    heads = {}
    for line in output.splitlines():
        sha, ref = line.split("\t", 1)
        heads[ref[len("refs/heads/"):]] = sha
    return heads


def remote_tags(repo: Path, remote: str = "origin") -> list[str]:
    output = git(repo, "ls-remote", "--tags", "--refs", remote)
    return [line.split("\t", 1)[1][len("refs/tags/"):] for line in output.splitlines() if line]


def merge_parents(repo: Path, ref: str) -> list[str]:
    """Parent shas of ``ref`` (two entries for a merge commit)."""
    return git(repo, "rev-list", "--parents", "-n", "1", ref).split()[1:]
