"""Base-branch association for hotfix branches, kept in git config."""

from __future__ import annotations

import logging

from hotflow.core.constants import BASE_CONFIG_KEY
from hotflow.core.git_ops import GitRepo

logger = logging.getLogger(__name__)


class BaseStore:
    """Typed view of ``hotflow.branch.<branch>.base`` entries."""

    def __init__(self, repo: GitRepo):
        self.repo = repo

    @staticmethod
    def key(branch: str) -> str:
        return BASE_CONFIG_KEY.format(branch=branch)

    def get_base(self, branch: str) -> str | None:
        return self.repo.config_get(self.key(branch))

    def set_base(self, branch: str, base: str) -> None:
        logger.debug("Recording base %s for %s", base, branch)
        self.repo.config_set(self.key(branch), base)

    def clear_base(self, branch: str) -> None:
        logger.debug("Clearing base association for %s", branch)
        self.repo.config_unset(self.key(branch))


__all__ = ["BaseStore"]
