"""CLI command modules for hotflow."""

from .hotfix import app as hotfix_app
from .init import init

__all__ = ["hotfix_app", "init"]
