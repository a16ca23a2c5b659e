"""Hotfix lifecycle subpackage.

Modules:
    naming: Version to branch/tag name mapping
    preconditions: Guard checks and the validation pipeline
    store: Base-branch association kept in git config
    lifecycle: start, finish, cancel, track, pull, push and list
    report: Human-readable summaries of lifecycle outcomes
"""

from __future__ import annotations

__all__: list[str] = []
