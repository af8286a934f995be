"""Configuration management for buildkeeper."""

import os
import sys
from pathlib import Path
from typing import Any

import yaml

from buildkeeper.models.app_config import AppConfig


def default_config_path() -> Path:
    """Platform-specific location of config.yaml."""
    if sys.platform == "win32":
        # Windows: %APPDATA%\buildkeeper
        config_dir = Path(os.getenv("APPDATA", str(Path.home()))) / "buildkeeper"
    elif sys.platform == "darwin":
        # macOS: ~/Library/Application Support/buildkeeper
        config_dir = Path.home() / "Library" / "Application Support" / "buildkeeper"
    else:
        # Linux/Unix: ~/.config/buildkeeper
        config_dir = Path.home() / ".config" / "buildkeeper"
    return config_dir / "config.yaml"


class ConfigManager:
    """Manages application configuration with YAML file and environment variable support."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            config_path: Path to config file. If None, uses BUILDKEEPER_CONFIG_PATH
                        environment variable or defaults to platform-specific config directory
        """
        if config_path is None:
            env_path = os.getenv("BUILDKEEPER_CONFIG_PATH")
            config_path = Path(env_path).expanduser() if env_path else default_config_path()

        self.config_path = config_path
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """Load configuration from file and apply environment variable overrides.

        Returns:
            Loaded configuration
        """
        config_data: dict[str, Any] = {}

        # 1. Load from YAML file if it exists
        if self.config_path.exists():
            with open(self.config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

        # 2. Create config object (applies defaults)
        config = AppConfig(**config_data)

        # 3. Apply environment variable overrides
        return self._apply_env_overrides(config)

    def save(self, config: AppConfig) -> None:
        """Save configuration to YAML file.

        Args:
            config: Configuration to save
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.model_dump(mode="json", exclude_none=True)

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(config_dict, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def _apply_env_overrides(self, config: AppConfig) -> AppConfig:
        """Apply environment variable overrides.

        Environment variables use the format: BUILDKEEPER_<SECTION>_<KEY>
        Examples:
            - BUILDKEEPER_SERVER_PORT=9000
            - BUILDKEEPER_ROOT_DIR=~/builds

        Args:
            config: Base configuration

        Returns:
            Configuration with environment overrides applied
        """
        if port := os.getenv("BUILDKEEPER_SERVER_PORT"):
            config.server.port = int(port)
        if host := os.getenv("BUILDKEEPER_SERVER_HOST"):
            config.server.host = host

        if root_dir := os.getenv("BUILDKEEPER_ROOT_DIR"):
            config.paths.root_dir = Path(root_dir).expanduser()
            # Recalculate dependent paths
            config.paths.reset_derived()

        if level := os.getenv("BUILDKEEPER_LOG_LEVEL"):
            if level.upper() in ("INFO", "DEBUG", "TRACE"):
                config.advanced.log_level = level.upper()  # type: ignore

        if git_path := os.getenv("BUILDKEEPER_GIT_PATH"):
            config.tools.git.type = "custom"
            config.tools.git.custom_path = git_path

        return config

    def get_config(self) -> AppConfig:
        """Get configuration, loading it on first use."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def reload(self) -> AppConfig:
        """Reload configuration from file."""
        self._config = self.load()
        return self._config
