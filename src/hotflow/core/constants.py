"""Shared constants for hotflow repository layout and git config keys."""

from __future__ import annotations

HOTFLOW_DIR = ".hotflow"
CONFIG_FILE = "config.yaml"
CONFIG_SECTION = "hotfix"
REPO_ROOT_ENV = "HOTFLOW_REPO_ROOT"

# git config key holding a hotfix branch's base: hotflow.branch.<branch>.base
BASE_CONFIG_KEY = "hotflow.branch.{branch}.base"

LOCAL_TIMEOUT = 15
NETWORK_TIMEOUT = 120

__all__ = [
    "HOTFLOW_DIR",
    "CONFIG_FILE",
    "CONFIG_SECTION",
    "REPO_ROOT_ENV",
    "BASE_CONFIG_KEY",
    "LOCAL_TIMEOUT",
    "NETWORK_TIMEOUT",
]
