"""Guard checks evaluated before any hotfix lifecycle mutation.

Each guard returns ``None`` when it holds or a :class:`PreconditionIssue`
describing what is wrong and how to fix it. Guards are collected in a
:class:`PreconditionPipeline` and evaluated eagerly, so every failure is
known before the first branch, tag or merge operation runs.
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from typing import Callable

from hotflow.core.config import HotflowConfig
from hotflow.core.errors import PreconditionError, UsageError
from hotflow.core.git_ops import GitRepo
from hotflow.hotfix.naming import is_hotfix_branch, is_support_branch

logger = logging.getLogger(__name__)

__all__ = [
    "PreconditionIssue",
    "PreconditionResult",
    "PreconditionPipeline",
    "Preconditions",
    "USAGE_CODES",
]

# Issue codes reported as usage errors rather than repository state problems.
USAGE_CODES = frozenset({"MISSING_VERSION", "FORCE_REQUIRED"})


@dataclass
class PreconditionIssue:
    """Single failed guard with optional remediation command."""

    code: str
    check: str
    message: str
    remediation: str
    command: str | None = None
    severity: str = "error"


@dataclass
class PreconditionResult:
    """Outcome of a pipeline run."""

    errors: list[PreconditionIssue] = field(default_factory=list)
    warnings: list[PreconditionIssue] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> PreconditionIssue | None:
        return self.errors[0] if self.errors else None

    def remediation_commands(self) -> list[str]:
        return [issue.command for issue in self.errors if issue.command]

    def raise_for_errors(self) -> None:
        primary = self.first_error
        if primary is None:
            return
        if primary.code in USAGE_CODES:
            raise UsageError(primary.message)
        raise PreconditionError(self)


Check = Callable[[], "PreconditionIssue | None"]


@dataclass
class _Step:
    name: str
    check: Check
    blocking: bool


class PreconditionPipeline:
    """Ordered set of guards evaluated eagerly.

    A failing ``blocking`` guard stops evaluation; later guards would only
    produce noise (for example, branch checks outside a repository).
    """

    def __init__(self) -> None:
        self._steps: list[_Step] = []

    def add(self, name: str, check: Check, *, blocking: bool = False) -> "PreconditionPipeline":
        self._steps.append(_Step(name, check, blocking))
        return self

    def run(self) -> PreconditionResult:
        result = PreconditionResult()
        for index, step in enumerate(self._steps):
            issue = step.check()
            if issue is None:
                continue
            if issue.severity == "warning":
                logger.warning(issue.message)
                result.warnings.append(issue)
                continue
            logger.debug("Precondition %s failed: %s", step.name, issue.message)
            result.errors.append(issue)
            if step.blocking:
                result.skipped = [later.name for later in self._steps[index + 1:]]
                break
        return result


class Preconditions:
    """Guard factory bound to one repository and configuration."""

    def __init__(self, repo: GitRepo, config: HotflowConfig):
        self.repo = repo
        self.config = config

    def version_present(self, version: str | None) -> PreconditionIssue | None:
        if version and version.strip():
            return None
        return PreconditionIssue(
            code="MISSING_VERSION",
            check="version_present",
            message="Missing argument <version>.",
            remediation="Pass the hotfix version, e.g. 'hotflow hotfix start 1.2.3'.",
        )

    def force_given(self, force: bool) -> PreconditionIssue | None:
        if force:
            return None
        return PreconditionIssue(
            code="FORCE_REQUIRED",
            check="force_given",
            message="Cancelling a hotfix is destructive; re-run with --force (-f) to confirm.",
            remediation="Add -f if you really want to cancel the hotfix.",
        )

    def initialized(self) -> PreconditionIssue | None:
        if not self.repo.is_work_tree():
            return PreconditionIssue(
                code="NOT_A_GIT_REPOSITORY",
                check="initialized",
                message=f"Not a git repository: {self.repo.root}",
                remediation="Run the command from inside a git working copy.",
            )
        if not self.repo.branch_exists(self.config.mainline):
            return PreconditionIssue(
                code="NOT_INITIALIZED",
                check="initialized",
                message=f"Mainline branch '{self.config.mainline}' does not exist.",
                remediation="Create the mainline branch or run 'hotflow init' to configure branch names.",
                command="hotflow init",
            )
        return None

    def clean_working_tree(self) -> PreconditionIssue | None:
        if self.repo.is_clean():
            return None
        return PreconditionIssue(
            code="DIRTY_WORKING_TREE",
            check="clean_working_tree",
            message="Working tree contains uncommitted changes.",
            remediation="Commit or stash your changes before continuing.",
            command="git stash",
        )

    def remote_reachable(self) -> PreconditionIssue | None:
        remote = self.config.remote
        if self.repo.remote_url(remote) is None:
            return PreconditionIssue(
                code="MISSING_REMOTE",
                check="remote_reachable",
                message=f"Remote '{remote}' is not configured.",
                remediation="Configure the remote or set 'remote' in .hotflow/config.yaml.",
                command=f"git remote add {shlex.quote(remote)} <url>",
            )
        if not self.repo.remote_reachable(remote):
            return PreconditionIssue(
                code="REMOTE_UNREACHABLE",
                check="remote_reachable",
                message=f"Could not reach remote '{remote}'.",
                remediation="Check your network connection and credentials.",
                command=f"git ls-remote --heads {shlex.quote(remote)}",
            )
        return None

    def branch_exists(self, name: str) -> PreconditionIssue | None:
        if self.repo.branch_exists(name):
            return None
        return PreconditionIssue(
            code="BRANCH_MISSING",
            check="branch_exists",
            message=f"Branch '{name}' does not exist.",
            remediation="Check the version, or run 'hotflow hotfix track' to fetch it from the remote.",
        )

    def branch_absent(self, name: str) -> PreconditionIssue | None:
        if not self.repo.branch_exists(name):
            return None
        return PreconditionIssue(
            code="BRANCH_EXISTS",
            check="branch_absent",
            message=f"Branch '{name}' already exists.",
            remediation="Pick another version or finish the existing branch.",
        )

    def remote_branch_exists(self, name: str, remote: str | None = None) -> PreconditionIssue | None:
        remote = remote or self.config.remote
        if self.repo.remote_branch_exists(remote, name):
            return None
        return PreconditionIssue(
            code="REMOTE_BRANCH_MISSING",
            check="remote_branch_exists",
            message=f"Branch '{name}' does not exist on remote '{remote}'.",
            remediation="Check the version and the remote name.",
            command=f"git ls-remote --heads {shlex.quote(remote)}",
        )

    def tag_absent(self, name: str) -> PreconditionIssue | None:
        if not self.repo.tag_exists(name):
            return None
        return PreconditionIssue(
            code="TAG_EXISTS",
            check="tag_absent",
            message=f"Tag '{name}' already exists.",
            remediation="Pick another version; released tags are never re-created.",
        )

    def branches_equal(self, branch: str) -> PreconditionIssue | None:
        """Local ``branch`` must match ``<remote>/<branch>`` when the latter exists."""
        remote = self.config.remote
        if not self.repo.remote_branch_exists(remote, branch):
            return None
        remote_ref = f"{remote}/{branch}"
        local_sha = self.repo.rev_parse(branch)
        remote_sha = self.repo.rev_parse(remote_ref)
        if local_sha == remote_sha:
            return None

        if self.repo.is_ancestor(local_sha, remote_sha):
            detail = f"Branch '{branch}' is behind '{remote_ref}'."
            remediation = "Pull the remote changes before continuing."
            command = f"git checkout {shlex.quote(branch)} && git merge --ff-only {shlex.quote(remote_ref)}"
        elif self.repo.is_ancestor(remote_sha, local_sha):
            # Being ahead is harmless: the local commits get pushed later.
            return PreconditionIssue(
                code="BRANCH_AHEAD",
                check="branches_equal",
                message=f"Local branch '{branch}' is ahead of '{remote_ref}'.",
                remediation="The local commits will be pushed with the next push.",
                command=f"git push {shlex.quote(remote)} {shlex.quote(branch)}",
                severity="warning",
            )
        else:
            detail = f"Branches '{branch}' and '{remote_ref}' have diverged."
            remediation = "Merge the remote branch into the local one and resolve conflicts."
            command = f"git checkout {shlex.quote(branch)} && git merge {shlex.quote(remote_ref)}"
        return PreconditionIssue(
            code="BRANCHES_DIFFER",
            check="branches_equal",
            message=detail,
            remediation=remediation,
            command=command,
        )

    def no_other_hotfix(self, allowed: str | None = None) -> PreconditionIssue | None:
        """No hotfix branch other than ``allowed`` may exist, locally or on the remote."""
        candidates = list(self.repo.local_branches())
        candidates += self.repo.remote_branches(self.config.remote)
        for name in candidates:
            if name == allowed or not is_hotfix_branch(self.config, name):
                continue
            return PreconditionIssue(
                code="HOTFIX_IN_PROGRESS",
                check="no_other_hotfix",
                message=f"There is an existing hotfix branch '{name}'. Finish that one first.",
                remediation="Finish or cancel the existing hotfix before starting another.",
            )
        return None

    def base_is_valid(self, base: str) -> PreconditionIssue | None:
        if base != self.config.mainline and not is_support_branch(self.config, base):
            return PreconditionIssue(
                code="INVALID_BASE",
                check="base_is_valid",
                message=(
                    f"Base '{base}' must be '{self.config.mainline}' "
                    f"or a support branch ('{self.config.support_prefix}*')."
                ),
                remediation="Start hotfixes from the mainline or a support branch.",
            )
        if not self.repo.branch_exists(base):
            return PreconditionIssue(
                code="BASE_MISSING",
                check="base_is_valid",
                message=f"Base branch '{base}' does not exist locally.",
                remediation="Create or track the base branch first.",
            )
        return None
