"""Map hotfix versions to branch and tag names."""

from __future__ import annotations

from hotflow.core.config import HotflowConfig


def branch_name(config: HotflowConfig, version: str) -> str:
    return f"{config.hotfix_prefix}{version}"


def tag_name(config: HotflowConfig, version: str) -> str:
    return f"{config.version_tag_prefix}{version}"


def is_hotfix_branch(config: HotflowConfig, name: str) -> bool:
    return name.startswith(config.hotfix_prefix) and len(name) > len(config.hotfix_prefix)


def is_support_branch(config: HotflowConfig, name: str) -> bool:
    prefix = config.support_prefix
    return bool(prefix) and name.startswith(prefix) and len(name) > len(prefix)


def version_from_branch(config: HotflowConfig, name: str) -> str | None:
    """Return the version encoded in a hotfix branch name, or None."""
    if not is_hotfix_branch(config, name):
        return None
    return name[len(config.hotfix_prefix):]


__all__ = [
    "branch_name",
    "tag_name",
    "is_hotfix_branch",
    "is_support_branch",
    "version_from_branch",
]
