"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from buildkeeper.config import ConfigManager
from buildkeeper.models.app_config import AppConfig, PathsConfig


def test_defaults_when_file_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("BUILDKEEPER_ROOT_DIR", "BUILDKEEPER_SERVER_PORT", "BUILDKEEPER_LOG_LEVEL", "BUILDKEEPER_GIT_PATH"):
        monkeypatch.delenv(var, raising=False)

    config = ConfigManager(tmp_path / "missing.yaml").load()

    assert config.server.port == 8740
    assert config.paths.root_dir == Path.home() / ".buildkeeper"
    assert config.paths.database_path == config.paths.root_dir / "builds.db"
    assert config.advanced.default_executable_patterns == ["*.exe", "*.cmd", "*.bat"]


def test_derived_paths_follow_root_dir(tmp_path: Path) -> None:
    paths = PathsConfig(root_dir=tmp_path)

    assert paths.bin_dir == tmp_path / "bin"
    assert paths.templates_dir == tmp_path / "templates"
    assert paths.get_install_path("llvm", "abc") == tmp_path / "llvm" / "abc"
    assert paths.get_current_link("llvm") == tmp_path / "llvm" / "current"
    assert paths.get_repo_path("llvm") == tmp_path / "repos" / "llvm"


def test_yaml_values_and_explicit_paths(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "paths": {"root_dir": str(tmp_path / "root"), "bin_dir": str(tmp_path / "shared-bin")},
                "repositories": {"default_branch": "master"},
                "tools": {"cmake": {"type": "custom", "custom_path": "/opt/cmake/bin/cmake"}},
            }
        )
    )

    config = ConfigManager(config_path).load()

    assert config.paths.bin_dir == tmp_path / "shared-bin"
    assert config.paths.templates_dir == tmp_path / "root" / "templates"
    assert config.repositories.default_branch == "master"
    assert config.tools.cmake.custom_path == "/opt/cmake/bin/cmake"


def test_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUILDKEEPER_ROOT_DIR", str(tmp_path / "env-root"))
    monkeypatch.setenv("BUILDKEEPER_SERVER_PORT", "9001")
    monkeypatch.setenv("BUILDKEEPER_LOG_LEVEL", "debug")
    monkeypatch.setenv("BUILDKEEPER_GIT_PATH", "/usr/local/bin/git")

    config = ConfigManager(tmp_path / "missing.yaml").load()

    assert config.paths.root_dir == tmp_path / "env-root"
    assert config.paths.database_path == tmp_path / "env-root" / "builds.db"
    assert config.server.port == 9001
    assert config.advanced.log_level == "DEBUG"
    assert config.tools.git.type == "custom"
    assert config.tools.git.custom_path == "/usr/local/bin/git"


def test_config_path_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUILDKEEPER_CONFIG_PATH", str(tmp_path / "custom.yaml"))

    assert ConfigManager().config_path == tmp_path / "custom.yaml"


def test_save_and_reload(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BUILDKEEPER_ROOT_DIR", raising=False)
    manager = ConfigManager(tmp_path / "nested" / "config.yaml")
    config = AppConfig(paths=PathsConfig(root_dir=tmp_path / "root"))
    config.server.port = 9100

    manager.save(config)
    reloaded = manager.reload()

    assert reloaded.server.port == 9100
    assert reloaded.paths.root_dir == tmp_path / "root"
    assert manager.get_config() is reloaded
