"""Tests for cancelling hotfix branches."""

from __future__ import annotations

from pathlib import Path

import pytest

from hotflow.core.errors import PreconditionError, UsageError
from hotflow.core.git_ops import GitRepo
from hotflow.hotfix.lifecycle import CancelOptions, HotfixLifecycle
from hotflow.hotfix.report import cancel_summary
from tests.utils import commit_file, git, merge_parents, remote_heads


@pytest.fixture()
def started(repo: Path, lifecycle: HotfixLifecycle) -> str:
    lifecycle.start("1.0.0")
    return commit_file(repo, "fix.txt", "fixed\n", "Fix the bug")


def test_cancel_without_force_changes_nothing(repo: Path, lifecycle: HotfixLifecycle, started: str) -> None:
    heads_before = remote_heads(repo)

    with pytest.raises(UsageError) as excinfo:
        lifecycle.cancel("1.0.0")

    assert "--force" in str(excinfo.value)
    assert git(repo, "rev-parse", "hotfix/1.0.0") == started
    assert GitRepo(repo).current_branch() == "hotfix/1.0.0"
    assert remote_heads(repo) == heads_before


def test_cancel_discards_branch_everywhere(repo: Path, lifecycle: HotfixLifecycle, started: str) -> None:
    develop_before = git(repo, "rev-parse", "develop")
    master_before = git(repo, "rev-parse", "master")

    outcome = lifecycle.cancel("1.0.0", CancelOptions(force=True))

    gitrepo = GitRepo(repo)
    assert not gitrepo.branch_exists("hotfix/1.0.0")
    assert "hotfix/1.0.0" not in remote_heads(repo)
    assert git(repo, "rev-parse", "develop") == develop_before
    assert git(repo, "rev-parse", "master") == master_before
    assert gitrepo.current_branch() == "develop"
    assert outcome.merge is None
    assert gitrepo.config_get("hotflow.branch.hotfix/1.0.0.base") is None


def test_cancel_keeping_changes_merges_into_development(
    repo: Path, lifecycle: HotfixLifecycle, started: str
) -> None:
    outcome = lifecycle.cancel(
        "1.0.0", CancelOptions(force=True, discard=False, message="Salvage the fix")
    )

    assert outcome.merge is not None and outcome.merge.merged
    assert merge_parents(repo, "develop")[1] == started
    assert git(repo, "log", "-1", "--format=%s", "develop") == "Salvage the fix"
    assert remote_heads(repo)["develop"] == git(repo, "rev-parse", "develop")
    assert not GitRepo(repo).is_ancestor(started, "master")


def test_cancel_keep_leaves_local_branch(repo: Path, lifecycle: HotfixLifecycle, started: str) -> None:
    lifecycle.cancel("1.0.0", CancelOptions(force=True, keep=True))

    gitrepo = GitRepo(repo)
    assert gitrepo.branch_exists("hotfix/1.0.0")
    assert "hotfix/1.0.0" not in remote_heads(repo)
    assert gitrepo.config_get("hotflow.branch.hotfix/1.0.0.base") == "master"


def test_cancel_without_push_leaves_remote_alone(repo: Path, lifecycle: HotfixLifecycle, started: str) -> None:
    lifecycle.cancel("1.0.0", CancelOptions(force=True, push=False))

    assert not GitRepo(repo).branch_exists("hotfix/1.0.0")
    assert "hotfix/1.0.0" in remote_heads(repo)


def test_cancel_unknown_hotfix(lifecycle: HotfixLifecycle) -> None:
    with pytest.raises(PreconditionError) as excinfo:
        lifecycle.cancel("9.9.9", CancelOptions(force=True))

    assert excinfo.value.result.first_error.code == "BRANCH_MISSING"


def test_cancel_support_hotfix_returns_to_support(repo: Path, lifecycle: HotfixLifecycle) -> None:
    git(repo, "checkout", "--quiet", "-b", "support/1.x")
    git(repo, "push", "--quiet", "origin", "support/1.x")
    lifecycle.start("1.0.1")

    outcome = lifecycle.cancel("1.0.1", CancelOptions(force=True))

    assert outcome.merge_target == "support/1.x"
    assert GitRepo(repo).current_branch() == "support/1.x"


def test_cancel_summary(repo: Path, lifecycle: HotfixLifecycle, started: str) -> None:
    summary = cancel_summary(lifecycle.cancel("1.0.0", CancelOptions(force=True)))

    assert summary.actions == [
        "Latest objects have been fetched from 'origin'",
        "Changes on 'hotfix/1.0.0' were discarded",
        "Hotfix branch 'hotfix/1.0.0' has been remotely deleted from 'origin'",
        "Hotfix branch 'hotfix/1.0.0' has been locally deleted",
        "You are now on branch 'develop'",
    ]
