"""Configuration data models for buildkeeper."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ServerConfig(BaseModel):
    """HTTP API server configuration."""

    port: int = 8740
    host: str = "127.0.0.1"


class PathsConfig(BaseModel):
    """Paths configuration.

    Layout under root_dir:
        bin/                    flat symlink pool for executables of active builds
        templates/<name>.json   build templates
        repos/<software>/       source checkouts
        <software>/current      symlink to the active build
        <software>/<hash>/      per-build install trees
        builds.db               registry database
    """

    root_dir: Path = Field(default_factory=lambda: Path.home() / ".buildkeeper")
    bin_dir: Path | None = None
    templates_dir: Path | None = None
    repos_dir: Path | None = None
    database_path: Path | None = None

    @field_validator("root_dir", mode="before")
    @classmethod
    def expand_root_dir(cls, v: str | Path) -> Path:
        """Expand user path for root_dir."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @field_validator("bin_dir", "templates_dir", "repos_dir", "database_path", mode="before")
    @classmethod
    def expand_optional_path(cls, v: str | Path | None) -> Path | None:
        """Expand user path for optional paths."""
        if v is None:
            return None
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    def model_post_init(self, __context: object) -> None:
        """Set default subdirectories if not specified."""
        if self.bin_dir is None:
            self.bin_dir = self.root_dir / "bin"
        if self.templates_dir is None:
            self.templates_dir = self.root_dir / "templates"
        if self.repos_dir is None:
            self.repos_dir = self.root_dir / "repos"
        if self.database_path is None:
            self.database_path = self.root_dir / "builds.db"

    def reset_derived(self) -> None:
        """Recalculate derived paths after root_dir changed."""
        self.bin_dir = None
        self.templates_dir = None
        self.repos_dir = None
        self.database_path = None
        self.model_post_init(None)

    # Helper methods for standardized subdirectory access

    def get_software_root(self, software: str) -> Path:
        """Directory holding the install trees and the 'current' link of a software."""
        return self.root_dir / software

    def get_install_path(self, software: str, commit_hash: str) -> Path:
        """Install directory of one build: <root>/<software>/<hash>."""
        return self.get_software_root(software) / commit_hash

    def get_current_link(self, software: str) -> Path:
        """Stable symlink pointing at the active build of a software."""
        return self.get_software_root(software) / "current"

    def get_repo_path(self, software: str) -> Path:
        """Source checkout directory of a software."""
        assert self.repos_dir is not None
        return self.repos_dir / software

    def get_build_marker(self, software: str) -> Path:
        """Marker file present while a build of the software is running."""
        return self.get_software_root(software) / ".build-in-progress"


class ToolSource(BaseModel):
    """Tool source configuration."""

    type: Literal["system", "custom"] = "system"
    custom_path: str = ""


class ToolsConfig(BaseModel):
    """Locations of the external tools buildkeeper shells out to."""

    git: ToolSource = Field(default_factory=ToolSource)
    cmake: ToolSource = Field(default_factory=ToolSource)
    ninja: ToolSource = Field(default_factory=ToolSource)
    dotnet: ToolSource = Field(default_factory=ToolSource)


class RepositoriesConfig(BaseModel):
    """Repositories configuration."""

    default_branch: str = "main"


class AdvancedConfig(BaseModel):
    """Advanced configuration."""

    log_level: Literal["INFO", "DEBUG", "TRACE"] = "INFO"
    default_executable_patterns: list[str] = Field(default_factory=lambda: ["*.exe", "*.cmd", "*.bat"])
    process_timeout: float | None = None  # No timeout unless explicitly configured
    output_buffer_lines: int = 200  # Lines of tool output kept for error reports


class AppConfig(BaseModel):
    """Application configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    repositories: RepositoriesConfig = Field(default_factory=RepositoriesConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)
