"""Project-scoped hotflow configuration in .hotflow/config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

from ruamel.yaml import YAML

from hotflow.core.constants import CONFIG_FILE, CONFIG_SECTION, HOTFLOW_DIR
from hotflow.core.errors import ConfigError


@dataclass(frozen=True, slots=True)
class HotflowConfig:
    """Branch names, prefixes and remote used by every lifecycle operation."""

    mainline: str = "master"
    development: str = "develop"
    hotfix_prefix: str = "hotfix/"
    support_prefix: str = "support/"
    version_tag_prefix: str = "v"
    remote: str = "origin"

    def to_dict(self) -> dict[str, str]:
        return {
            "branches": {
                "mainline": self.mainline,
                "development": self.development,
            },
            "prefixes": {
                "hotfix": self.hotfix_prefix,
                "support": self.support_prefix,
                "version_tag": self.version_tag_prefix,
            },
            "remote": self.remote,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object] | None) -> "HotflowConfig":
        if not isinstance(data, dict):
            return cls()

        defaults = cls()
        branches = data.get("branches")
        prefixes = data.get("prefixes")
        branches = branches if isinstance(branches, dict) else {}
        prefixes = prefixes if isinstance(prefixes, dict) else {}

        def _name(value: object, fallback: str) -> str:
            if isinstance(value, str) and value.strip():
                return value.strip()
            return fallback

        def _prefix(value: object, fallback: str) -> str:
            # Prefixes may legitimately be empty (e.g. bare version tags).
            if isinstance(value, str):
                return value.strip()
            return fallback

        config = cls(
            mainline=_name(branches.get("mainline"), defaults.mainline),
            development=_name(branches.get("development"), defaults.development),
            hotfix_prefix=_prefix(prefixes.get("hotfix"), defaults.hotfix_prefix),
            support_prefix=_prefix(prefixes.get("support"), defaults.support_prefix),
            version_tag_prefix=_prefix(prefixes.get("version_tag"), defaults.version_tag_prefix),
            remote=_name(data.get("remote"), defaults.remote),
        )
        config.validate()
        return config

    def validate(self) -> None:
        if not self.hotfix_prefix:
            raise ConfigError("The hotfix prefix cannot be empty.")
        if self.mainline == self.development:
            raise ConfigError(
                f"Mainline and development branches must differ (both are '{self.mainline}')."
            )
        if self.support_prefix and self.support_prefix == self.hotfix_prefix:
            raise ConfigError("Support and hotfix prefixes must differ.")

    def replace(self, **changes: str) -> "HotflowConfig":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update(changes)
        config = HotflowConfig(**values)
        config.validate()
        return config


def config_path(repo_root: Path) -> Path:
    return repo_root / HOTFLOW_DIR / CONFIG_FILE


def load_config(repo_root: Path) -> HotflowConfig:
    """Load hotflow config from .hotflow/config.yaml, falling back to defaults."""
    path = config_path(repo_root)
    if not path.exists():
        return HotflowConfig()

    yaml = YAML()
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle) or {}
    except Exception as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc

    section = payload.get(CONFIG_SECTION) if isinstance(payload, dict) else None
    return HotflowConfig.from_dict(section if isinstance(section, dict) else None)


def save_config(repo_root: Path, config: HotflowConfig) -> Path:
    """Persist hotflow config into .hotflow/config.yaml, preserving other sections."""
    path = config_path(repo_root)
    path.parent.mkdir(parents=True, exist_ok=True)

    yaml = YAML()
    yaml.preserve_quotes = True

    if path.exists():
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.load(handle) or {}
    else:
        payload = {}

    if not isinstance(payload, dict):
        payload = {}

    payload[CONFIG_SECTION] = config.to_dict()

    with path.open("w", encoding="utf-8") as handle:
        yaml.dump(payload, handle)
    return path


__all__ = ["HotflowConfig", "config_path", "load_config", "save_config"]
