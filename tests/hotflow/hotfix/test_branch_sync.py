"""Tests for listing, tracking, pulling and pushing hotfix branches."""

from __future__ import annotations

from pathlib import Path

import pytest

from hotflow.core.config import HotflowConfig
from hotflow.core.errors import PreconditionError, UsageError
from hotflow.core.git_ops import GitRepo
from hotflow.hotfix.lifecycle import HotfixLifecycle
from hotflow.hotfix.report import sync_summary
from tests.utils import commit_file, git, remote_heads


@pytest.fixture()
def published(clone: Path) -> str:
    """hotfix/2.0.0 created by a collaborator and pushed; returns its tip."""
    git(clone, "checkout", "--quiet", "-b", "hotfix/2.0.0")
    sha = commit_file(clone, "fix.txt", "colleague fix\n")
    git(clone, "push", "--quiet", "origin", "hotfix/2.0.0")
    return sha


def test_list_without_hotfixes(lifecycle: HotfixLifecycle) -> None:
    assert lifecycle.list_hotfixes() == []


def test_list_marks_current_branch(repo: Path, lifecycle: HotfixLifecycle) -> None:
    git(repo, "branch", "hotfix/0.9.1")
    git(repo, "checkout", "--quiet", "-b", "hotfix/0.9.2")
    git(repo, "branch", "feature/login")

    listings = lifecycle.list_hotfixes()

    assert [(item.name, item.version, item.current) for item in listings] == [
        ("hotfix/0.9.1", "0.9.1", False),
        ("hotfix/0.9.2", "0.9.2", True),
    ]
    assert all(item.description is None for item in listings)


def test_list_verbose_describes_base(repo: Path, lifecycle: HotfixLifecycle) -> None:
    git(repo, "tag", "-a", "v0.9", "-m", "Release 0.9")
    lifecycle.start("1.0.0")

    assert lifecycle.list_hotfixes(verbose=True)[0].description == "(no commits yet)"

    commit_file(repo, "fix.txt", "fixed\n")
    assert lifecycle.list_hotfixes(verbose=True)[0].description == "(based on v0.9)"


def test_list_verbose_falls_back_to_short_sha(repo: Path, lifecycle: HotfixLifecycle) -> None:
    lifecycle.start("1.0.0")
    commit_file(repo, "fix.txt", "fixed\n")

    description = lifecycle.list_hotfixes(verbose=True)[0].description

    assert description == f"(based on {git(repo, 'rev-parse', '--short', 'master')})"


def test_track_creates_tracking_branch(repo: Path, lifecycle: HotfixLifecycle, published: str) -> None:
    outcome = lifecycle.track("2.0.0")

    assert outcome.branch == "hotfix/2.0.0"
    assert outcome.current_branch == "hotfix/2.0.0"
    assert git(repo, "rev-parse", "hotfix/2.0.0") == published
    assert git(repo, "config", "--get", "branch.hotfix/2.0.0.remote") == "origin"


def test_track_unknown_remote_branch(lifecycle: HotfixLifecycle) -> None:
    with pytest.raises(PreconditionError) as excinfo:
        lifecycle.track("7.7.7")

    assert excinfo.value.result.first_error.code == "REMOTE_BRANCH_MISSING"


def test_track_refuses_existing_local_branch(repo: Path, lifecycle: HotfixLifecycle, published: str) -> None:
    git(repo, "branch", "hotfix/2.0.0")

    with pytest.raises(PreconditionError) as excinfo:
        lifecycle.track("2.0.0")

    assert excinfo.value.result.first_error.code == "BRANCH_EXISTS"


def test_pull_creates_missing_local_branch(repo: Path, lifecycle: HotfixLifecycle, published: str) -> None:
    outcome = lifecycle.pull(version="2.0.0")

    assert outcome.action == "created"
    assert git(repo, "rev-parse", "hotfix/2.0.0") == published


def test_pull_merges_collaborator_commits_into_current_hotfix(
    clone: Path, repo: Path, lifecycle: HotfixLifecycle
) -> None:
    lifecycle.start("1.0.0")
    git(clone, "fetch", "--quiet", "origin")
    git(clone, "checkout", "--quiet", "-b", "hotfix/1.0.0", "origin/hotfix/1.0.0")
    extra = commit_file(clone, "extra.txt", "more\n")
    git(clone, "push", "--quiet", "origin", "hotfix/1.0.0")

    outcome = lifecycle.pull()

    assert outcome.action == "merged"
    assert git(repo, "rev-parse", "hotfix/1.0.0") == extra

    assert lifecycle.pull().action == "up-to-date"


def test_pull_rebases_local_work(clone: Path, repo: Path, lifecycle: HotfixLifecycle) -> None:
    lifecycle.start("1.0.0")
    git(clone, "fetch", "--quiet", "origin")
    git(clone, "checkout", "--quiet", "-b", "hotfix/1.0.0", "origin/hotfix/1.0.0")
    extra = commit_file(clone, "extra.txt", "more\n")
    git(clone, "push", "--quiet", "origin", "hotfix/1.0.0")
    commit_file(repo, "local.txt", "mine\n")

    outcome = lifecycle.pull("origin", "1.0.0", rebase=True)

    assert outcome.action == "rebased"
    assert git(repo, "rev-parse", "hotfix/1.0.0~1") == extra


def test_pull_refuses_other_checked_out_branch(repo: Path, lifecycle: HotfixLifecycle) -> None:
    lifecycle.start("1.0.0")
    git(repo, "checkout", "--quiet", "master")

    with pytest.raises(PreconditionError) as excinfo:
        lifecycle.pull("origin", "1.0.0")

    assert excinfo.value.result.first_error.code == "NOT_ON_BRANCH"
    assert "git checkout hotfix/1.0.0" in excinfo.value.result.remediation_commands()


def test_pull_outside_hotfix_branch_needs_version(repo: Path, lifecycle: HotfixLifecycle) -> None:
    with pytest.raises(UsageError) as excinfo:
        lifecycle.pull()

    assert "Missing argument" in str(excinfo.value)


def test_push_publishes_current_hotfix(repo: Path, lifecycle: HotfixLifecycle) -> None:
    lifecycle.start("1.0.0")
    sha = commit_file(repo, "fix.txt", "fixed\n")

    outcome = lifecycle.push()

    assert outcome.action == "pushed"
    assert remote_heads(repo)["hotfix/1.0.0"] == sha
    assert sync_summary(outcome).actions[0] == "Branch 'hotfix/1.0.0' has been pushed to 'origin'"


def test_custom_prefix_is_respected(repo: Path) -> None:
    config = HotflowConfig(hotfix_prefix="fix-", version_tag_prefix="")
    lifecycle = HotfixLifecycle(GitRepo(repo), config)

    outcome = lifecycle.start("3.1")

    assert outcome.branch == "fix-3.1"
    assert [item.version for item in lifecycle.list_hotfixes()] == ["3.1"]
