"""Core utilities: configuration, errors and the git backend."""

from .config import HotflowConfig, load_config, save_config
from .errors import (
    ConfigError,
    GitCommandError,
    HotflowError,
    IntegrityError,
    PreconditionError,
    UsageError,
)
from .git_ops import GitRepo, find_repo_root

__all__ = [
    "HotflowConfig",
    "load_config",
    "save_config",
    "HotflowError",
    "UsageError",
    "ConfigError",
    "PreconditionError",
    "GitCommandError",
    "IntegrityError",
    "GitRepo",
    "find_repo_root",
]
