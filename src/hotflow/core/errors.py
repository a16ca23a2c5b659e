"""Exception hierarchy for hotfix lifecycle failures."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from hotflow.hotfix.preconditions import PreconditionResult


class HotflowError(Exception):
    """Base exception for hotflow errors."""

    exit_code = 1


class UsageError(HotflowError):
    """A required argument or safety flag was not supplied."""


class ConfigError(HotflowError):
    """Raised when hotflow configuration is invalid or unreadable."""


class PreconditionError(HotflowError):
    """One or more guards failed before any mutation was attempted.

    The full :class:`PreconditionResult` is kept so callers can render
    every failing check and its remediation, not just the first.
    """

    def __init__(self, result: "PreconditionResult", message: str | None = None):
        self.result = result
        primary = result.first_error
        if message is None:
            message = primary.message if primary else "Precondition check failed."
        super().__init__(message)


class GitCommandError(HotflowError):
    """A git subprocess exited non-zero."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "", message: str | None = None):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        self.exit_code = returncode if returncode > 0 else 1
        if message is None:
            detail = _first_line(stderr)
            message = f"git {' '.join(self.args_list)} failed (exit {returncode})"
            if detail:
                message = f"{message}: {detail}"
        super().__init__(message)


class IntegrityError(HotflowError):
    """A merge reported success but the target does not contain the source history.

    Distinct from :class:`GitCommandError`: re-running will not fix it
    without a look at the repository.
    """

    exit_code = 2

    def __init__(self, source: str, target: str, missing: int):
        self.source = source
        self.target = target
        self.missing = missing
        super().__init__(
            f"Branch '{target}' is missing {missing} commit(s) from '{source}' after merging. "
            f"Inspect the repository before re-running finish."
        )


def _first_line(text: str) -> str:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""


__all__ = [
    "HotflowError",
    "UsageError",
    "ConfigError",
    "PreconditionError",
    "GitCommandError",
    "IntegrityError",
]
