"""Merge helper shared by finish and cancel.

Merges are idempotent: when the target already contains the source, the
merge is skipped instead of attempted, so an interrupted ``finish`` can be
re-run without producing a second merge commit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hotflow.core.errors import GitCommandError
from hotflow.core.git_ops import GitRepo

logger = logging.getLogger(__name__)

__all__ = ["MergeResult", "merge_branch", "default_merge_message"]


@dataclass
class MergeResult:
    """Result of a single merge step."""

    source: str
    target: str
    merged: bool
    already_contained: bool = False


def default_merge_message(source: str, target: str, *, is_tag: bool = False) -> str:
    kind = "tag" if is_tag else "branch"
    return f"Merge {kind} '{source}' into {target}"


def merge_branch(
    repo: GitRepo,
    source: str,
    target: str,
    *,
    fast_forward: bool = False,
    switch_after: bool = False,
    message: str | None = None,
    is_tag: bool = False,
) -> MergeResult:
    """Merge ``source`` into ``target``.

    Args:
        repo: Repository to operate on
        source: Branch or tag to merge
        target: Branch receiving the merge
        fast_forward: Allow a fast-forward instead of forcing a merge commit
        switch_after: Leave ``target`` checked out afterwards; otherwise the
            previously checked out branch is restored
        message: Merge commit message (defaults to "Merge branch '<source>' into <target>")
        is_tag: Whether ``source`` names a tag (only affects the default message)

    Returns:
        MergeResult describing whether a merge actually happened

    Raises:
        GitCommandError: If checkout or merge fails (e.g. conflicts)
    """
    if repo.is_ancestor(source, target):
        logger.info("'%s' already contains '%s'; skipping merge", target, source)
        if switch_after:
            repo.checkout(target)
        return MergeResult(source=source, target=target, merged=False, already_contained=True)

    original = repo.current_branch()
    if original != target:
        repo.checkout(target)

    try:
        repo.merge(
            source,
            no_ff=not fast_forward,
            message=message or default_merge_message(source, target, is_tag=is_tag),
        )
    except GitCommandError as exc:
        raise GitCommandError(
            exc.args_list,
            exc.returncode,
            exc.stderr,
            message=(
                f"Merging '{source}' into '{target}' failed. Resolve the conflicts, "
                f"commit the result on '{target}' and re-run the command."
            ),
        ) from exc

    logger.info("Merged '%s' into '%s'", source, target)
    if not switch_after and original and original != target:
        repo.checkout(original)
    return MergeResult(source=source, target=target, merged=True)
