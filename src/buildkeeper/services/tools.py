"""External tool resolution."""

import shutil
from typing import Literal

from buildkeeper.logger import get_logger
from buildkeeper.models.app_config import ToolsConfig

logger = get_logger(__name__)

ToolName = Literal["git", "cmake", "ninja", "dotnet"]


class ToolManager:
    """Resolves executables for git and the native build toolchains."""

    def __init__(self, tools: ToolsConfig) -> None:
        self.tools = tools

    def get_executable(self, tool: ToolName) -> str:
        """Get the executable for a tool based on configuration.

        Custom paths are returned as configured; system tools are looked up on
        PATH and fall back to the bare name so the failure surfaces when the
        command runs.
        """
        source = getattr(self.tools, tool)
        if source.type == "custom" and source.custom_path:
            return source.custom_path

        found = shutil.which(tool)
        if found is None:
            logger.warning(f"{tool} not found on PATH")
            return tool
        return found

    def get_git_executable(self) -> str:
        return self.get_executable("git")
