# pyright: reportAny=false
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from speck.config import (
    Config,
    ConfigLoadError,
    ConfigSourceName,
    LogFormat,
    LogLevel,
    deep_merge,
    discover_sources,
    find_project_root,
    get_user_config_path,
    load_config,
    parse_env_vars,
    read_toml_file,
)

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem
    from pytest_mock import MockerFixture

USER_CONFIG = Path("/home/user/.config/speck/config.toml")


@pytest.fixture
def user_config_path(mocker: MockerFixture) -> Path:
    _ = mocker.patch(
        "speck.config._discovery.get_user_config_path", return_value=USER_CONFIG
    )
    return USER_CONFIG


class TestFindProjectRoot:
    def test_finds_marker_in_parent(self, fs: FakeFilesystem) -> None:
        fs.create_dir("/project/.speck")
        fs.create_dir("/project/src/deep")

        assert find_project_root(Path("/project/src/deep")) == Path("/project")

    def test_returns_none_without_marker(self, fs: FakeFilesystem) -> None:
        fs.create_dir("/elsewhere")

        assert find_project_root(Path("/elsewhere")) is None


class TestGetUserConfigPath:
    def test_lives_in_speck_directory(self) -> None:
        result = get_user_config_path()

        assert result.name == "config.toml"
        assert result.parent.name == "speck"


class TestReadTomlFile:
    def test_parses_file(self, fs: FakeFilesystem) -> None:
        fs.create_file("/c.toml", contents='[logging]\nlevel = "debug"\n')

        assert read_toml_file(Path("/c.toml")) == {"logging": {"level": "debug"}}

    def test_invalid_toml_raises_with_path(self, fs: FakeFilesystem) -> None:
        fs.create_file("/c.toml", contents="[logging\nlevel = ")

        with pytest.raises(ConfigLoadError) as exc_info:
            _ = read_toml_file(Path("/c.toml"))

        assert exc_info.value.path == Path("/c.toml")

    def test_missing_file_raises(self, fs: FakeFilesystem) -> None:
        with pytest.raises(FileNotFoundError):
            _ = read_toml_file(Path("/missing.toml"))


class TestDeepMerge:
    def test_nested_dicts_merge(self) -> None:
        base = {"logging": {"level": "info", "format": "text"}}
        override = {"logging": {"level": "debug"}}

        result = deep_merge(base, override)

        assert result == {"logging": {"level": "debug", "format": "text"}}
        assert base == {"logging": {"level": "info", "format": "text"}}

    def test_scalars_replace(self) -> None:
        assert deep_merge({"a": {"b": 1}}, {"a": 2}) == {"a": 2}


class TestParseEnvVars:
    def test_only_set_variables_appear(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECK_LOG_LEVEL", "debug")
        monkeypatch.setenv("SPECIFY_FEATURE", "004-x")

        assert parse_env_vars() == {
            "logging": {"level": "debug"},
            "feature_override": "004-x",
        }

    def test_empty_without_variables(self) -> None:
        assert parse_env_vars() == {}


class TestDiscoverSources:
    def test_orders_sources_by_precedence(
        self, fs: FakeFilesystem, user_config_path: Path
    ) -> None:
        fs.create_file("/project/.speck/config.toml")

        sources = discover_sources(Path("/project"))

        assert [s.name for s in sources] == [
            ConfigSourceName.ENV,
            ConfigSourceName.PROJECT,
            ConfigSourceName.USER,
            ConfigSourceName.DEFAULT,
        ]
        assert sources[1].exists
        assert not sources[2].exists


class TestLoadConfig:
    def test_defaults(self, fs: FakeFilesystem, user_config_path: Path) -> None:
        fs.create_dir("/project/.speck")

        config = load_config(Path("/project"))

        assert config.logging.level is LogLevel.INFO
        assert config.logging.format is LogFormat.TEXT
        assert config.feature_override is None

    def test_project_overrides_user(
        self, fs: FakeFilesystem, user_config_path: Path
    ) -> None:
        fs.create_file(
            user_config_path, contents='[logging]\nlevel = "error"\nformat = "json"\n'
        )
        fs.create_file("/project/.speck/config.toml", contents='[logging]\nlevel = "debug"\n')

        config = load_config(Path("/project"))

        assert config.logging.level is LogLevel.DEBUG
        assert config.logging.format is LogFormat.JSON

    def test_environment_overrides_files(
        self,
        fs: FakeFilesystem,
        user_config_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        fs.create_file("/project/.speck/config.toml", contents='[logging]\nlevel = "debug"\n')
        monkeypatch.setenv("SPECK_LOG_LEVEL", "warning")
        monkeypatch.setenv("SPECIFY_FEATURE", "021-env")

        config = load_config(Path("/project"))

        assert config.logging.level is LogLevel.WARNING
        assert config.feature_override == "021-env"

    def test_unknown_level_falls_back_to_info(
        self, fs: FakeFilesystem, user_config_path: Path
    ) -> None:
        fs.create_file("/project/.speck/config.toml", contents='[logging]\nlevel = "LOUD"\n')

        assert load_config(Path("/project")).logging.level is LogLevel.INFO

    def test_blank_feature_override_is_none(self) -> None:
        assert Config(feature_override="  ").feature_override is None

    def test_broken_project_file_raises(
        self, fs: FakeFilesystem, user_config_path: Path
    ) -> None:
        fs.create_file("/project/.speck/config.toml", contents="not = [valid")

        with pytest.raises(ConfigLoadError, match="Failed to parse TOML file"):
            _ = load_config(Path("/project"))
