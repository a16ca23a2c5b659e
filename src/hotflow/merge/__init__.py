"""Merge subpackage for hotflow.

Modules:
    executor: Idempotent no-fast-forward merge helper
    sync: Fetch-and-merge and push helpers
"""

from __future__ import annotations

from hotflow.merge.executor import MergeResult, merge_branch
from hotflow.merge.sync import fetch_and_merge, push_branch

__all__ = ["MergeResult", "merge_branch", "fetch_and_merge", "push_branch"]
