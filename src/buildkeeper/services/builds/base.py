"""Build routine contract and registry."""

import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from buildkeeper.exceptions import ExternalToolError, OperationalError, ResourceConflictError, ResourceNotFoundError
from buildkeeper.logger import get_logger
from buildkeeper.models.app_config import AppConfig
from buildkeeper.services.templates.configuration import INSTALL_DIR_KEY
from buildkeeper.services.tools import ToolManager, ToolName
from buildkeeper.utils.subprocess_executor import ProcessResult, SubprocessExecutor

logger = get_logger(__name__)


@dataclass
class BuildContext:
    """Everything a routine needs to build one commit of a software."""

    software: str
    commit_hash: str
    source_dir: Path  # Checkout root
    build_script: Path  # Entry point resolved against source_dir
    configuration: dict[str, Any] = field(default_factory=dict)

    @property
    def install_dir(self) -> Path:
        return Path(self.configuration[INSTALL_DIR_KEY])


@dataclass
class BuildResult:
    """What a routine reports back on success."""

    install_path: Path | None = None  # None means the injected InstallDir was used
    duration_seconds: float = 0.0
    skipped: bool = False


class BuildRoutine(ABC):
    """A software-specific build implementation.

    Subclasses set `key`, the identifier templates reference in buildFunction.
    Failures are raised (ExternalToolError for tool exits, AppBaseError otherwise).
    """

    key: str = ""

    def __init__(self, config: AppConfig, tool_manager: ToolManager) -> None:
        self.config = config
        self.tool_manager = tool_manager

    @abstractmethod
    def build(self, context: BuildContext) -> BuildResult:
        """Build the checkout described by context."""

    def run_tool(self, tool: ToolName, *args: str, cwd: Path | None = None) -> ProcessResult:
        """Run a toolchain executable, translating failures into buildkeeper errors."""
        executable = self.tool_manager.get_executable(tool)
        try:
            return SubprocessExecutor.run_streaming(
                executable,
                *args,
                cwd=cwd,
                timeout=self.config.advanced.process_timeout,
                max_buffer_lines=self.config.advanced.output_buffer_lines,
            )
        except subprocess.CalledProcessError as e:
            raise ExternalToolError(tool, e.returncode, output=e.output or "") from e
        except FileNotFoundError as e:
            raise OperationalError("tool.not_found", tool=tool) from e


class BuildRoutineRegistry:
    """Maps routine keys to BuildRoutine instances."""

    def __init__(self) -> None:
        self._routines: dict[str, BuildRoutine] = {}

    def register(self, routine: BuildRoutine) -> None:
        if routine.key in self._routines:
            raise ResourceConflictError("build.routine_conflict", key=routine.key)
        self._routines[routine.key] = routine
        logger.debug(f"Registered build routine: {routine.key}")

    def get(self, key: str) -> BuildRoutine:
        routine = self._routines.get(key)
        if routine is None:
            raise ResourceNotFoundError("build.routine_not_found", key=key)
        return routine

    def keys(self) -> list[str]:
        return sorted(self._routines)

    def __contains__(self, key: object) -> bool:
        return key in self._routines
