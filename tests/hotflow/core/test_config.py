"""Tests for .hotflow/config.yaml handling."""

from __future__ import annotations

from pathlib import Path

import pytest
from ruamel.yaml import YAML

from hotflow.core.config import HotflowConfig, config_path, load_config, save_config
from hotflow.core.errors import ConfigError


def test_defaults_without_file(tmp_path: Path) -> None:
    assert load_config(tmp_path) == HotflowConfig()


def test_save_then_load(tmp_path: Path) -> None:
    config = HotflowConfig(mainline="main", development="dev", version_tag_prefix="")

    path = save_config(tmp_path, config)

    assert path == tmp_path / ".hotflow" / "config.yaml"
    assert load_config(tmp_path) == config


def test_save_preserves_other_sections(tmp_path: Path) -> None:
    path = config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text("# team settings\nrelease:\n  channel: stable\n", encoding="utf-8")

    save_config(tmp_path, HotflowConfig(remote="upstream"))

    text = path.read_text(encoding="utf-8")
    assert "# team settings" in text
    data = YAML().load(text)
    assert data["release"]["channel"] == "stable"
    assert data["hotfix"]["remote"] == "upstream"


def test_partial_section_falls_back_to_defaults(tmp_path: Path) -> None:
    path = config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text("hotfix:\n  branches:\n    mainline: main\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.mainline == "main"
    assert config.development == "develop"
    assert config.hotfix_prefix == "hotfix/"


def test_unparseable_file(tmp_path: Path) -> None:
    path = config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text("hotfix: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "data",
    [
        {"prefixes": {"hotfix": ""}},
        {"branches": {"mainline": "trunk", "development": "trunk"}},
        {"prefixes": {"hotfix": "fix/", "support": "fix/"}},
    ],
)
def test_invalid_values_are_rejected(data: dict) -> None:
    with pytest.raises(ConfigError):
        HotflowConfig.from_dict(data)


def test_replace_validates() -> None:
    assert HotflowConfig().replace(remote="upstream").remote == "upstream"
    with pytest.raises(ConfigError):
        HotflowConfig().replace(development="master")
