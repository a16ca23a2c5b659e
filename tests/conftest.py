from __future__ import annotations

from pathlib import Path

import pytest

from hotflow.core.config import HotflowConfig
from hotflow.core.git_ops import GitRepo
from hotflow.hotfix.lifecycle import HotfixLifecycle
from tests.utils import commit_file, git


@pytest.fixture(autouse=True)
def isolated_git(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's global git config out of the tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Hotflow Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "hotflow@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Hotflow Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "hotflow@example.com")
    monkeypatch.delenv("HOTFLOW_REPO_ROOT", raising=False)


@pytest.fixture()
def remote_repo(tmp_path: Path) -> Path:
    """Bare repository acting as the shared remote."""
    remote = tmp_path / "remote.git"
    git(tmp_path, "init", "--bare", "--initial-branch=master", str(remote))
    return remote


@pytest.fixture()
def repo(tmp_path: Path, remote_repo: Path) -> Path:
    """Working copy with master and develop, both pushed to origin."""
    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    git(repo_dir, "init", "--initial-branch=master")
    commit_file(repo_dir, "README.md", "# Demo\n", "Initial commit")
    git(repo_dir, "branch", "develop")
    git(repo_dir, "remote", "add", "origin", str(remote_repo))
    git(repo_dir, "push", "--quiet", "-u", "origin", "master", "develop")
    return repo_dir


@pytest.fixture()
def clone(tmp_path: Path, repo: Path, remote_repo: Path) -> Path:
    """Second working copy of the same remote (a collaborator)."""
    clone_dir = tmp_path / "clone"
    git(tmp_path, "clone", "--quiet", str(remote_repo), str(clone_dir))
    return clone_dir


@pytest.fixture()
def config() -> HotflowConfig:
    return HotflowConfig()


@pytest.fixture()
def lifecycle(repo: Path, config: HotflowConfig) -> HotfixLifecycle:
    return HotfixLifecycle(GitRepo(repo), config)
