"""
.NET build routine.

Runs `dotnet build` on the template's project or solution file, writing the
output straight into the install directory.
"""

import time

from buildkeeper.exceptions import ResourceNotFoundError
from buildkeeper.logger import get_logger

from .base import BuildContext, BuildResult, BuildRoutine
from .flags import FlagTemplate, render_flags

logger = get_logger(__name__)

DOTNET_FLAGS: dict[str, FlagTemplate] = {
    "Framework": ["--framework", "{value}"],
    "Runtime": ["--runtime", "{value}"],
    "SelfContained": ["--self-contained", "{value}"],
    "Version": "-p:Version={value}",
}


class DotNetBuildRoutine(BuildRoutine):
    key = "dotnet"

    def build(self, context: BuildContext) -> BuildResult:
        if not context.build_script.exists():
            raise ResourceNotFoundError("build.script_not_found", path=str(context.build_script))

        install_dir = context.install_dir
        install_dir.mkdir(parents=True, exist_ok=True)

        configuration = str(context.configuration.get("Configuration", "Release"))
        flags = render_flags(DOTNET_FLAGS, context.configuration, true_value="true", false_value="false")

        started = time.monotonic()
        logger.info(f"Building {context.software} ({configuration}) into {install_dir}")
        self.run_tool(
            "dotnet",
            "build",
            str(context.build_script),
            "--configuration",
            configuration,
            "--output",
            str(install_dir),
            *flags,
            cwd=context.source_dir,
        )
        return BuildResult(install_path=install_dir, duration_seconds=time.monotonic() - started)
