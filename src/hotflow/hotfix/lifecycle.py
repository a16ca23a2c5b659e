"""Hotfix lifecycle: start, finish, cancel and the branch sync commands.

Every operation first runs its guards through a
:class:`~hotflow.hotfix.preconditions.PreconditionPipeline` and only then
touches branches, tags or the remote. The mutating steps of ``finish`` and
``cancel`` are ordered so that re-running the same command after a failure
(conflict, network error) picks up where the previous attempt stopped:
merges already contained in their target are skipped and existing tags are
reused.
"""

from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from hotflow.core.config import HotflowConfig
from hotflow.core.errors import IntegrityError, PreconditionError
from hotflow.core.git_ops import GitRepo
from hotflow.hotfix.naming import branch_name, is_support_branch, tag_name, version_from_branch
from hotflow.hotfix.preconditions import (
    PreconditionIssue,
    PreconditionPipeline,
    PreconditionResult,
    Preconditions,
)
from hotflow.hotfix.report import (
    CancelOutcome,
    FinishOutcome,
    StartOutcome,
    SyncOutcome,
    TrackOutcome,
)
from hotflow.hotfix.store import BaseStore
from hotflow.merge.executor import merge_branch
from hotflow.merge.sync import fetch_and_merge, push_branch

if TYPE_CHECKING:
    from hotflow.cli.ui import StepTracker

logger = logging.getLogger(__name__)

__all__ = [
    "StartOptions",
    "FinishOptions",
    "CancelOptions",
    "MergePlan",
    "HotfixListing",
    "HotfixLifecycle",
]


@dataclass(frozen=True)
class StartOptions:
    base: str | None = None
    fetch: bool = True


@dataclass(frozen=True)
class FinishOptions:
    fetch: bool = True
    sign: bool = False
    signing_key: str = ""
    message: str = ""
    push: bool = True
    keep: bool = False
    no_tag: bool = False
    no_backmerge: bool = False

    @property
    def signed(self) -> bool:
        return self.sign or bool(self.signing_key)


@dataclass(frozen=True)
class CancelOptions:
    force: bool = False
    fetch: bool = True
    push: bool = True
    keep: bool = False
    discard: bool = True
    message: str = ""


@dataclass
class MergePlan:
    """Where a finished hotfix goes, derived from its base branch."""

    base: str
    tag_target: str
    development_target: str | None
    final_branch: str

    @property
    def targets(self) -> list[str]:
        targets = [self.tag_target]
        if self.development_target:
            targets.append(self.development_target)
        return targets


@dataclass
class HotfixListing:
    name: str
    version: str
    current: bool = False
    description: str | None = None


class _Run:
    """Forwards step updates to an optional tracker."""

    def __init__(self, tracker: StepTracker | None = None):
        self.tracker = tracker

    def plan(self, *steps: tuple[str, str]) -> None:
        if self.tracker is None:
            return
        for key, label in steps:
            self.tracker.add(key, label)

    def step(self, key: str):
        if self.tracker is None:
            return nullcontext()
        return self.tracker.step(key)

    def skip(self, key: str, detail: str = "") -> None:
        if self.tracker is not None:
            self.tracker.skip(key, detail)

    def complete(self, key: str, detail: str = "") -> None:
        if self.tracker is not None:
            self.tracker.complete(key, detail)


class HotfixLifecycle:
    """Hotfix operations bound to one repository and configuration."""

    def __init__(self, repo: GitRepo, config: HotflowConfig, tracker: StepTracker | None = None):
        self.repo = repo
        self.config = config
        self.checks = Preconditions(repo, config)
        self.store = BaseStore(repo)
        self._run = _Run(tracker)

    # Helpers

    def resolve_base(self, base: str | None) -> str:
        """Explicit base, else the current branch if it is a support branch, else mainline."""
        if base:
            return base
        current = self.repo.current_branch()
        if current and is_support_branch(self.config, current):
            return current
        return self.config.mainline

    def resolve_version(self, version: str | None) -> str | None:
        """Use ``version`` or, when omitted, the version of the checked-out hotfix branch."""
        if version and version.strip():
            return version.strip()
        current = self.repo.current_branch()
        if current:
            return version_from_branch(self.config, current)
        return None

    def merge_plan(self, branch: str) -> MergePlan:
        base = self.store.get_base(branch)
        if not base:
            logger.warning(
                "No base recorded for '%s'; assuming mainline '%s'", branch, self.config.mainline
            )
            base = self.config.mainline

        if base == self.config.mainline:
            development = self.config.development
            if not self._ensure_local(development):
                logger.warning("Development branch '%s' does not exist; skipping back-merge", development)
                return MergePlan(base=base, tag_target=base, development_target=None, final_branch=base)
            return MergePlan(
                base=base,
                tag_target=base,
                development_target=development,
                final_branch=development,
            )
        return MergePlan(base=base, tag_target=base, development_target=None, final_branch=base)

    def _ensure_local(self, name: str) -> bool:
        """Make ``name`` available locally, tracking the remote copy when only that exists."""
        if self.repo.branch_exists(name):
            return True
        remote = self.config.remote
        if not self.repo.remote_branch_exists(remote, name):
            return False
        logger.info("Creating local branch '%s' tracking '%s/%s'", name, remote, name)
        self.repo.create_tracking_branch(name, remote, checkout=False)
        return True

    def _pipeline(self, version: str | None) -> PreconditionPipeline:
        return (
            PreconditionPipeline()
            .add("version_present", partial(self.checks.version_present, version), blocking=True)
            .add("initialized", self.checks.initialized, blocking=True)
        )

    def _require_equal(self, *branches: str) -> None:
        pipeline = PreconditionPipeline()
        for name in branches:
            pipeline.add(f"branches_equal:{name}", partial(self.checks.branches_equal, name))
        pipeline.run().raise_for_errors()

    # Lifecycle

    def start(self, version: str | None, options: StartOptions = StartOptions()) -> StartOutcome:
        version = (version or "").strip()
        base = self.resolve_base(options.base)
        branch = branch_name(self.config, version)
        remote = self.config.remote
        self._run.plan(
            ("preflight", "Pre-flight validation"),
            ("fetch", f"Fetch from {remote}"),
            ("create", f"Create {branch} from {base}"),
            ("push", f"Push {branch} to {remote}"),
        )

        with self._run.step("preflight"):
            (
                self._pipeline(version)
                .add("clean_working_tree", self.checks.clean_working_tree)
                .add("remote_reachable", self.checks.remote_reachable)
                .add("base_is_valid", partial(self.checks.base_is_valid, base))
                .add("no_other_hotfix", partial(self.checks.no_other_hotfix, branch))
                .add("branch_absent", partial(self.checks.branch_absent, branch))
                .add("tag_absent", partial(self.checks.tag_absent, tag_name(self.config, version)))
                .run()
                .raise_for_errors()
            )

        if options.fetch:
            with self._run.step("fetch"):
                self.repo.fetch(remote)
        else:
            self._run.skip("fetch", "--no-fetch")

        # Re-evaluated against the freshly fetched refs; still before any mutation.
        with self._run.step("preflight"):
            (
                PreconditionPipeline()
                .add("no_other_hotfix", partial(self.checks.no_other_hotfix, branch))
                .add("tag_absent", partial(self.checks.tag_absent, tag_name(self.config, version)))
                .add(f"branches_equal:{base}", partial(self.checks.branches_equal, base))
                .run()
                .raise_for_errors()
            )

        with self._run.step("create"):
            self.repo.create_branch(branch, base)
            self.store.set_base(branch, base)

        with self._run.step("push"):
            push_branch(self.repo, remote, branch)

        logger.info("Started hotfix '%s' from '%s'", branch, base)
        return StartOutcome(
            version=version,
            branch=branch,
            base=base,
            remote=remote,
            fetched=options.fetch,
            current_branch=self.repo.current_branch(),
        )

    def finish(self, version: str | None, options: FinishOptions = FinishOptions()) -> FinishOutcome:
        version = (version or "").strip()
        branch = branch_name(self.config, version)
        tag = tag_name(self.config, version)
        remote = self.config.remote
        self._run.plan(
            ("preflight", "Pre-flight validation"),
            ("fetch", f"Update {branch} from {remote}"),
            ("push-branch", f"Push {branch} to {remote}"),
            ("merge", "Merge into base"),
            ("tag", f"Tag {tag}"),
            ("backmerge", "Back-merge into development"),
            ("verify", "Verify merge integrity"),
            ("delete", f"Delete {branch}"),
            ("push", f"Push to {remote}"),
        )

        with self._run.step("preflight"):
            (
                self._pipeline(version)
                .add("branch_exists", partial(self.checks.branch_exists, branch), blocking=True)
                .add("clean_working_tree", self.checks.clean_working_tree)
                .add("remote_reachable", self.checks.remote_reachable)
                .run()
                .raise_for_errors()
            )

        if options.fetch:
            with self._run.step("fetch"):
                fetch_and_merge(self.repo, remote, branch)
        else:
            self._run.skip("fetch", "--no-fetch")

        if options.push:
            with self._run.step("push-branch"):
                push_branch(self.repo, remote, branch)
        else:
            self._run.skip("push-branch", "--no-push")

        plan = self.merge_plan(branch)
        outcome = FinishOutcome(
            version=version,
            branch=branch,
            base=plan.base,
            remote=remote,
            tag_target=plan.tag_target,
            development_target=plan.development_target,
            fetched=options.fetch,
            pushed=options.push,
            kept=options.keep,
        )

        with self._run.step("preflight"):
            self._require_equal(*plan.targets)

        with self._run.step("merge"):
            outcome.merges.append(merge_branch(self.repo, branch, plan.tag_target))

        if options.no_tag:
            self._run.skip("tag", "--no-tag")
        else:
            with self._run.step("tag"):
                outcome.tag = tag
                if self.repo.tag_exists(tag):
                    logger.info("Tag '%s' already exists; not re-creating it", tag)
                    self._run.complete("tag", "already exists")
                else:
                    self.repo.create_tag(
                        tag,
                        plan.tag_target,
                        options.message or f"Tagging version {version}",
                        sign=options.signed,
                        signing_key=options.signing_key,
                    )
                    outcome.tag_created = True

        if plan.development_target:
            with self._run.step("backmerge"):
                if options.no_tag or options.no_backmerge:
                    source, is_tag = branch, False
                else:
                    source, is_tag = tag, True
                outcome.backmerged_from_tag = is_tag
                outcome.merges.append(
                    merge_branch(self.repo, source, plan.development_target, is_tag=is_tag)
                )
        else:
            self._run.skip("backmerge", "no development target")

        self.repo.checkout(plan.final_branch)

        with self._run.step("verify"):
            for target in plan.targets:
                missing = self.repo.count_missing(branch, target)
                if missing:
                    raise IntegrityError(branch, target, missing)

        if options.keep:
            self._run.skip("delete", "--keep")
        else:
            with self._run.step("delete"):
                self._delete_local(branch, plan.final_branch)

        if options.push:
            with self._run.step("push"):
                for target in reversed(plan.targets):
                    self.repo.push(remote, f"refs/heads/{target}:refs/heads/{target}")
                if outcome.tag:
                    self.repo.push(remote, f"refs/tags/{tag}:refs/tags/{tag}")
                if not options.keep and self.repo.remote_branch_exists(remote, branch):
                    self.repo.push_delete(remote, branch)
        else:
            self._run.skip("push", "--no-push")

        outcome.current_branch = self.repo.current_branch()
        logger.info("Finished hotfix '%s'", branch)
        return outcome

    def cancel(self, version: str | None, options: CancelOptions = CancelOptions()) -> CancelOutcome:
        version = (version or "").strip()
        branch = branch_name(self.config, version)
        remote = self.config.remote
        self._run.plan(
            ("preflight", "Pre-flight validation"),
            ("fetch", f"Update {branch} from {remote}"),
            ("push-branch", f"Push {branch} to {remote}"),
            ("merge", "Keep changes"),
            ("push", f"Delete {branch} from {remote}"),
            ("delete", f"Delete {branch}"),
        )

        with self._run.step("preflight"):
            (
                PreconditionPipeline()
                .add("force_given", partial(self.checks.force_given, options.force), blocking=True)
                .add("version_present", partial(self.checks.version_present, version), blocking=True)
                .add("initialized", self.checks.initialized, blocking=True)
                .add("branch_exists", partial(self.checks.branch_exists, branch), blocking=True)
                .add("clean_working_tree", self.checks.clean_working_tree)
                .run()
                .raise_for_errors()
            )

        if options.fetch:
            with self._run.step("fetch"):
                fetch_and_merge(self.repo, remote, branch)
        else:
            self._run.skip("fetch", "--no-fetch")

        self.repo.checkout(branch)

        if options.push:
            with self._run.step("push-branch"):
                push_branch(self.repo, remote, branch)
        else:
            self._run.skip("push-branch", "--no-push")

        with self._run.step("preflight"):
            self._require_equal(branch)

        plan = self.merge_plan(branch)
        target = plan.final_branch
        outcome = CancelOutcome(
            version=version,
            branch=branch,
            merge_target=target,
            remote=remote,
            discarded=options.discard,
            fetched=options.fetch,
            pushed=options.push,
            kept=options.keep,
        )

        if options.discard:
            self._run.skip("merge", "changes discarded")
        else:
            with self._run.step("merge"):
                self._require_equal(target)
                outcome.merge = merge_branch(
                    self.repo, branch, target, message=options.message or None
                )
                if options.push:
                    self.repo.push(remote, f"refs/heads/{target}:refs/heads/{target}")

        if options.push:
            with self._run.step("push"):
                if self.repo.remote_branch_exists(remote, branch):
                    self.repo.push_delete(remote, branch)
        else:
            self._run.skip("push", "--no-push")

        if options.keep:
            self._run.skip("delete", "--keep")
        else:
            with self._run.step("delete"):
                self._delete_local(branch, target)

        outcome.current_branch = self.repo.current_branch()
        logger.info("Cancelled hotfix '%s'", branch)
        return outcome

    def _delete_local(self, branch: str, fallback: str) -> None:
        if self.repo.current_branch() == branch:
            self.repo.checkout(fallback)
        self.repo.delete_branch(branch, force=True)
        self.store.clear_base(branch)

    # Branch management

    def list_hotfixes(self, verbose: bool = False) -> list[HotfixListing]:
        PreconditionPipeline().add("initialized", self.checks.initialized).run().raise_for_errors()
        current = self.repo.current_branch()
        listings = []
        for name in sorted(self.repo.local_branches()):
            version = version_from_branch(self.config, name)
            if version is None:
                continue
            listing = HotfixListing(name=name, version=version, current=name == current)
            if verbose:
                listing.description = self._describe(name)
            listings.append(listing)
        return listings

    def _describe(self, branch: str) -> str:
        base = self.store.get_base(branch) or self.config.mainline
        if not self.repo.branch_exists(base):
            return "(base unknown)"
        if self.repo.rev_parse(branch) == self.repo.rev_parse(base):
            return "(no commits yet)"
        merge_base = self.repo.merge_base(branch, base)
        if merge_base is None:
            return "(unrelated history)"
        nicename = self.repo.describe_tag(merge_base) or self.repo.short_sha(merge_base)
        return f"(based on {nicename})"

    def track(self, version: str | None) -> TrackOutcome:
        version = (version or "").strip()
        branch = branch_name(self.config, version)
        remote = self.config.remote
        (
            self._pipeline(version)
            .add("clean_working_tree", self.checks.clean_working_tree)
            .add("branch_absent", partial(self.checks.branch_absent, branch))
            .run()
            .raise_for_errors()
        )
        self.repo.fetch(remote)
        PreconditionPipeline().add(
            "remote_branch_exists", partial(self.checks.remote_branch_exists, branch)
        ).run().raise_for_errors()

        self.repo.create_tracking_branch(branch, remote)
        return TrackOutcome(branch=branch, remote=remote, current_branch=self.repo.current_branch())

    def pull(self, remote: str | None = None, version: str | None = None, rebase: bool = False) -> SyncOutcome:
        remote = remote or self.config.remote
        version = self.resolve_version(version)
        branch = branch_name(self.config, version or "")
        (
            self._pipeline(version)
            .add("clean_working_tree", self.checks.clean_working_tree)
            .run()
            .raise_for_errors()
        )
        self.repo.fetch(remote)
        PreconditionPipeline().add(
            "remote_branch_exists", partial(self.checks.remote_branch_exists, branch, remote)
        ).run().raise_for_errors()

        remote_ref = f"{remote}/{branch}"
        if not self.repo.branch_exists(branch):
            self.repo.create_branch(branch, remote_ref)
            action = "created"
        elif self.repo.current_branch() != branch:
            raise PreconditionError(
                PreconditionResult(
                    errors=[
                        PreconditionIssue(
                            code="NOT_ON_BRANCH",
                            check="current_branch",
                            message=f"Cannot pull into '{branch}' while another branch is checked out.",
                            remediation=f"Check out '{branch}' first.",
                            command=f"git checkout {branch}",
                        )
                    ]
                )
            )
        elif self.repo.is_ancestor(remote_ref, branch):
            action = "up-to-date"
        elif rebase:
            self.repo.rebase(remote_ref)
            action = "rebased"
        else:
            self.repo.merge(remote_ref, no_ff=False)
            action = "merged"
        return SyncOutcome(branch=branch, remote=remote, action=action, current_branch=self.repo.current_branch())

    def push(self, remote: str | None = None, version: str | None = None) -> SyncOutcome:
        remote = remote or self.config.remote
        version = self.resolve_version(version)
        branch = branch_name(self.config, version or "")
        (
            self._pipeline(version)
            .add("branch_exists", partial(self.checks.branch_exists, branch), blocking=True)
            .add("clean_working_tree", self.checks.clean_working_tree)
            .run()
            .raise_for_errors()
        )
        push_branch(self.repo, remote, branch)
        return SyncOutcome(branch=branch, remote=remote, action="pushed", current_branch=self.repo.current_branch())
