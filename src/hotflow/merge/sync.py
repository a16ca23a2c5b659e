"""Fetch/push helpers for keeping local branches in step with the remote."""

from __future__ import annotations

import logging

from hotflow.core.git_ops import GitRepo

logger = logging.getLogger(__name__)

__all__ = ["fetch_and_merge", "push_branch"]


def fetch_and_merge(repo: GitRepo, remote: str, branch: str) -> bool:
    """Fetch ``remote`` and merge ``<remote>/<branch>`` into local ``branch``.

    Leaves ``branch`` checked out. Returns True when remote commits were merged.
    """
    repo.fetch(remote)
    repo.checkout(branch)
    if not repo.remote_branch_exists(remote, branch):
        return False

    remote_ref = f"{remote}/{branch}"
    if repo.is_ancestor(remote_ref, branch):
        return False

    logger.info("Merging new commits from '%s' into '%s'", remote_ref, branch)
    repo.merge(remote_ref, no_ff=False)
    return True


def push_branch(repo: GitRepo, remote: str, branch: str) -> None:
    """Push ``branch`` to ``remote`` and record it as upstream."""
    logger.info("Pushing '%s' to '%s'", branch, remote)
    repo.push(remote, f"refs/heads/{branch}:refs/heads/{branch}", set_upstream=True)
