"""Thin git backend used by the hotfix lifecycle.

Every call goes through :meth:`GitRepo.run`, which normalizes the result of
``git`` into a :class:`GitCommandResult` and, unless told otherwise, raises
:class:`GitCommandError` on a non-zero exit.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from hotflow.core.constants import LOCAL_TIMEOUT, NETWORK_TIMEOUT, REPO_ROOT_ENV
from hotflow.core.errors import GitCommandError, HotflowError

logger = logging.getLogger(__name__)

__all__ = ["GitCommandResult", "GitRepo", "find_repo_root"]


@dataclass
class GitCommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _run_git(cwd: Path, args: list[str], timeout: int = LOCAL_TIMEOUT) -> GitCommandResult:
    """Run git command and normalize failure shape for deterministic handling."""
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout,
        )
        return GitCommandResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
    except FileNotFoundError:
        return GitCommandResult(
            returncode=127,
            stdout="",
            stderr="git executable not found on PATH",
        )
    except subprocess.TimeoutExpired:
        return GitCommandResult(
            returncode=124,
            stdout="",
            stderr=f"git command timed out: git {' '.join(args)}",
        )


def find_repo_root(start: Path | None = None) -> Path:
    """Resolve the top level of the git work tree containing ``start``.

    ``HOTFLOW_REPO_ROOT`` takes precedence when set.
    """
    override = os.environ.get(REPO_ROOT_ENV)
    if override:
        return Path(override).resolve()

    cwd = (start or Path.cwd()).resolve()
    result = _run_git(cwd, ["rev-parse", "--show-toplevel"])
    if not result.ok:
        raise HotflowError(f"Not inside a git repository: {cwd}")
    return Path(result.stdout.strip())


class GitRepo:
    """Git primitives for a single working copy."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def run(
        self,
        *args: str,
        check: bool = True,
        timeout: int = LOCAL_TIMEOUT,
    ) -> GitCommandResult:
        result = _run_git(self.root, list(args), timeout=timeout)
        if check and not result.ok:
            raise GitCommandError(args, result.returncode, result.stderr)
        return result

    def _output(self, *args: str) -> str:
        return self.run(*args).stdout.strip()

    def _succeeds(self, *args: str, timeout: int = LOCAL_TIMEOUT) -> bool:
        return self.run(*args, check=False, timeout=timeout).ok

    # Queries

    def is_work_tree(self) -> bool:
        result = self.run("rev-parse", "--is-inside-work-tree", check=False)
        return result.ok and result.stdout.strip().lower() == "true"

    def current_branch(self) -> str | None:
        result = self.run("symbolic-ref", "--quiet", "--short", "HEAD", check=False)
        return result.stdout.strip() if result.ok else None

    def is_clean(self) -> bool:
        """True when tracked files carry no staged or unstaged changes."""
        return not self._output("status", "--porcelain", "--untracked-files=no")

    def local_branches(self) -> list[str]:
        output = self._output("for-each-ref", "--format=%(refname:short)", "refs/heads/")
        return [line for line in output.splitlines() if line]

    def remote_branches(self, remote: str) -> list[str]:
        """Branch names (without the remote prefix) known for ``remote``."""
        prefix = f"refs/remotes/{remote}/"
        output = self._output("for-each-ref", "--format=%(refname)", prefix)
        names = []
        for line in output.splitlines():
            name = line[len(prefix):]
            if name and name != "HEAD":
                names.append(name)
        return names

    def branch_exists(self, name: str) -> bool:
        return self._succeeds("show-ref", "--verify", "--quiet", f"refs/heads/{name}")

    def remote_branch_exists(self, remote: str, name: str) -> bool:
        return self._succeeds("show-ref", "--verify", "--quiet", f"refs/remotes/{remote}/{name}")

    def tag_exists(self, name: str) -> bool:
        return self._succeeds("show-ref", "--verify", "--quiet", f"refs/tags/{name}")

    def rev_parse(self, ref: str) -> str:
        return self._output("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")

    def short_sha(self, ref: str) -> str:
        return self._output("rev-parse", "--short", f"{ref}^{{commit}}")

    def merge_base(self, a: str, b: str) -> str | None:
        result = self.run("merge-base", a, b, check=False)
        return result.stdout.strip() if result.ok else None

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        return self._succeeds("merge-base", "--is-ancestor", ancestor, descendant)

    def count_missing(self, source: str, target: str) -> int:
        """Number of commits reachable from ``source`` but not from ``target``."""
        return int(self._output("rev-list", "--count", f"{target}..{source}") or "0")

    def describe_tag(self, ref: str) -> str | None:
        result = self.run("name-rev", "--tags", "--no-undefined", "--name-only", ref, check=False)
        name = result.stdout.strip() if result.ok else ""
        if name.startswith("tags/"):
            name = name[len("tags/"):]
        if name.endswith("^0"):
            name = name[:-2]
        return name or None

    def remote_url(self, remote: str) -> str | None:
        result = self.run("remote", "get-url", remote, check=False)
        return result.stdout.strip() if result.ok else None

    def remote_reachable(self, remote: str) -> bool:
        return self._succeeds("ls-remote", "--heads", remote, timeout=NETWORK_TIMEOUT)

    # Config

    def config_get(self, key: str) -> str | None:
        result = self.run("config", "--get", key, check=False)
        return result.stdout.strip() if result.ok else None

    def config_set(self, key: str, value: str) -> None:
        self.run("config", key, value)

    def config_unset(self, key: str) -> None:
        # exit 5 means the key was not set
        result = self.run("config", "--unset", key, check=False)
        if result.returncode not in (0, 5):
            raise GitCommandError(["config", "--unset", key], result.returncode, result.stderr)

    # Mutations

    def checkout(self, name: str) -> None:
        self.run("checkout", "--quiet", name)

    def create_branch(self, name: str, start_point: str, *, checkout: bool = True) -> None:
        if checkout:
            self.run("checkout", "--quiet", "-b", name, start_point)
        else:
            self.run("branch", name, start_point)

    def create_tracking_branch(self, name: str, remote: str, *, checkout: bool = True) -> None:
        if checkout:
            self.run("checkout", "--quiet", "-b", name, "--track", f"{remote}/{name}")
        else:
            self.run("branch", "--quiet", "--track", name, f"{remote}/{name}")

    def delete_branch(self, name: str, *, force: bool = False) -> None:
        self.run("branch", "-D" if force else "-d", name)

    def create_tag(
        self,
        name: str,
        ref: str,
        message: str,
        *,
        sign: bool = False,
        signing_key: str = "",
    ) -> None:
        args = ["tag", "-a"]
        if signing_key:
            args += ["-u", signing_key]
        elif sign:
            args.append("-s")
        args += ["-m", message, name, ref]
        self.run(*args)

    def merge(self, source: str, *, no_ff: bool = True, message: str | None = None) -> None:
        args = ["merge", "--quiet"]
        args.append("--no-ff" if no_ff else "--ff")
        if message:
            args += ["-m", message]
        else:
            args.append("--no-edit")
        args.append(source)
        self.run(*args)

    def rebase(self, upstream: str) -> None:
        self.run("rebase", "--quiet", upstream)

    def fetch(self, remote: str, refspec: str | None = None) -> None:
        args = ["fetch", "--quiet", "--prune", remote]
        if refspec:
            args.append(refspec)
        self.run(*args, timeout=NETWORK_TIMEOUT)

    def push(self, remote: str, *refspecs: str, set_upstream: bool = False) -> None:
        args = ["push", "--quiet"]
        if set_upstream:
            args.append("--set-upstream")
        args += [remote, *refspecs]
        self.run(*args, timeout=NETWORK_TIMEOUT)

    def push_delete(self, remote: str, branch: str) -> None:
        self.run("push", "--quiet", remote, "--delete", branch, timeout=NETWORK_TIMEOUT)
