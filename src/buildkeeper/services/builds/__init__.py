"""Build routines."""

from buildkeeper.models.app_config import AppConfig
from buildkeeper.services.tools import ToolManager

from .base import BuildContext, BuildResult, BuildRoutine, BuildRoutineRegistry
from .dotnet import DotNetBuildRoutine
from .flags import render_flags
from .llvm import LLVMBuildRoutine


def default_routines(config: AppConfig, tool_manager: ToolManager) -> BuildRoutineRegistry:
    """Registry pre-populated with the built-in routines."""
    registry = BuildRoutineRegistry()
    registry.register(LLVMBuildRoutine(config, tool_manager))
    registry.register(DotNetBuildRoutine(config, tool_manager))
    return registry


__all__ = [
    "BuildContext",
    "BuildResult",
    "BuildRoutine",
    "BuildRoutineRegistry",
    "DotNetBuildRoutine",
    "LLVMBuildRoutine",
    "default_routines",
    "render_flags",
]
