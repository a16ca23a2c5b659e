"""Human-readable summaries of what a lifecycle operation did.

The builders here are pure: they only look at the outcome records produced
by :mod:`hotflow.hotfix.lifecycle`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from hotflow.merge.executor import MergeResult

__all__ = [
    "Summary",
    "StartOutcome",
    "FinishOutcome",
    "CancelOutcome",
    "TrackOutcome",
    "SyncOutcome",
    "start_summary",
    "finish_summary",
    "cancel_summary",
    "track_summary",
    "sync_summary",
]


@dataclass
class Summary:
    actions: list[str] = field(default_factory=list)
    follow_up: list[str] = field(default_factory=list)

    def lines(self) -> list[str]:
        out = ["Summary of actions:"]
        out += [f"- {line}" for line in self.actions]
        if self.follow_up:
            out.append("")
            out.append("Follow-up actions:")
            out += [f"- {line}" for line in self.follow_up]
        return out


@dataclass
class StartOutcome:
    version: str
    branch: str
    base: str
    remote: str
    fetched: bool
    current_branch: str | None


@dataclass
class FinishOutcome:
    version: str
    branch: str
    base: str
    remote: str
    tag_target: str
    development_target: str | None = None
    tag: str | None = None
    tag_created: bool = False
    backmerged_from_tag: bool = False
    merges: list[MergeResult] = field(default_factory=list)
    fetched: bool = False
    pushed: bool = False
    kept: bool = False
    current_branch: str | None = None

    def merge_into(self, target: str) -> MergeResult | None:
        for result in self.merges:
            if result.target == target:
                return result
        return None


@dataclass
class CancelOutcome:
    version: str
    branch: str
    merge_target: str
    remote: str
    discarded: bool
    merge: MergeResult | None = None
    fetched: bool = False
    pushed: bool = False
    kept: bool = False
    current_branch: str | None = None


@dataclass
class TrackOutcome:
    branch: str
    remote: str
    current_branch: str | None


@dataclass
class SyncOutcome:
    """Result of a pull or push of a hotfix branch."""

    branch: str
    remote: str
    action: str  # "created", "merged", "rebased", "up-to-date" or "pushed"
    current_branch: str | None = None


def start_summary(outcome: StartOutcome) -> Summary:
    summary = Summary()
    if outcome.fetched:
        summary.actions.append(f"Latest objects have been fetched from '{outcome.remote}'")
    summary.actions.append(f"A new branch '{outcome.branch}' was created, based on '{outcome.base}'")
    summary.actions.append(f"Branch '{outcome.branch}' has been pushed to '{outcome.remote}'")
    summary.actions.append(f"You are now on branch '{outcome.current_branch}'")
    summary.follow_up = [
        "Start committing your hot fixes",
        "Bump the version number now!",
        f"When done, run: hotflow hotfix finish '{outcome.version}'",
    ]
    return summary


def _merge_line(result: MergeResult | None, what: str) -> str | None:
    if result is None:
        return None
    if result.already_contained:
        return f"{what} was already merged into '{result.target}'"
    return f"{what} has been merged into '{result.target}'"


def finish_summary(outcome: FinishOutcome) -> Summary:
    summary = Summary()
    branch = outcome.branch
    if outcome.fetched:
        summary.actions.append(f"Latest objects have been fetched from '{outcome.remote}'")

    line = _merge_line(outcome.merge_into(outcome.tag_target), f"Hotfix branch '{branch}'")
    if line:
        summary.actions.append(line)

    if outcome.tag:
        if outcome.tag_created:
            summary.actions.append(f"The hotfix was tagged '{outcome.tag}'")
        else:
            summary.actions.append(f"Tag '{outcome.tag}' already existed and was kept")

    if outcome.development_target:
        source = (
            f"Hotfix tag '{outcome.tag}'" if outcome.backmerged_from_tag else f"Hotfix branch '{branch}'"
        )
        line = _merge_line(outcome.merge_into(outcome.development_target), source)
        if line:
            summary.actions.append(line)

    if outcome.kept:
        summary.actions.append(f"Hotfix branch '{branch}' is still locally available")
        if outcome.pushed:
            summary.actions.append(f"Hotfix branch '{branch}' is still remotely available in '{outcome.remote}'")
    else:
        summary.actions.append(f"Hotfix branch '{branch}' has been locally deleted")
        if outcome.pushed:
            summary.actions.append(f"Hotfix branch '{branch}' has been remotely deleted from '{outcome.remote}'")

    if outcome.pushed:
        targets = [outcome.tag_target]
        if outcome.development_target:
            targets.insert(0, outcome.development_target)
        pushed = ", ".join(f"'{name}'" for name in targets)
        if outcome.tag:
            pushed += " and tags"
        summary.actions.append(f"{pushed} have been pushed to '{outcome.remote}'")

    summary.actions.append(f"You are now on branch '{outcome.current_branch}'")
    return summary


def cancel_summary(outcome: CancelOutcome) -> Summary:
    summary = Summary()
    branch = outcome.branch
    if outcome.fetched:
        summary.actions.append(f"Latest objects have been fetched from '{outcome.remote}'")

    if outcome.discarded:
        summary.actions.append(f"Changes on '{branch}' were discarded")
    else:
        line = _merge_line(outcome.merge, f"Hotfix branch '{branch}'")
        if line:
            summary.actions.append(line)
        if outcome.pushed:
            summary.actions.append(f"'{outcome.merge_target}' has been pushed to '{outcome.remote}'")

    if outcome.pushed:
        summary.actions.append(f"Hotfix branch '{branch}' has been remotely deleted from '{outcome.remote}'")

    if outcome.kept:
        summary.actions.append(f"Hotfix branch '{branch}' is still locally available")
    else:
        summary.actions.append(f"Hotfix branch '{branch}' has been locally deleted")

    summary.actions.append(f"You are now on branch '{outcome.current_branch}'")
    return summary


def track_summary(outcome: TrackOutcome) -> Summary:
    return Summary(
        actions=[
            f"A new remote tracking branch '{outcome.branch}' was created",
            f"You are now on branch '{outcome.current_branch}'",
        ]
    )


_SYNC_MESSAGES = {
    "created": "Created local branch '{branch}' from '{remote}/{branch}'",
    "merged": "Pulled '{remote}/{branch}' into '{branch}'",
    "rebased": "Rebased '{branch}' onto '{remote}/{branch}'",
    "up-to-date": "Branch '{branch}' is already up to date with '{remote}'",
    "pushed": "Branch '{branch}' has been pushed to '{remote}'",
}


def sync_summary(outcome: SyncOutcome) -> Summary:
    summary = Summary(
        actions=[_SYNC_MESSAGES[outcome.action].format(branch=outcome.branch, remote=outcome.remote)]
    )
    if outcome.current_branch:
        summary.actions.append(f"You are now on branch '{outcome.current_branch}'")
    return summary
