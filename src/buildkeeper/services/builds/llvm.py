"""LLVM build routine (CMake + Ninja)."""

import time

from buildkeeper.exceptions import ResourceConflictError, ResourceNotFoundError
from buildkeeper.logger import get_logger
from buildkeeper.services.templates.configuration import summarize_configuration

from .base import BuildContext, BuildResult, BuildRoutine
from .flags import FlagTemplate, render_flags

logger = get_logger(__name__)

LLVM_FLAGS: dict[str, FlagTemplate] = {
    "BuildType": "-DCMAKE_BUILD_TYPE={value}",
    "Projects": "-DLLVM_ENABLE_PROJECTS={value}",
    "Runtimes": "-DLLVM_ENABLE_RUNTIMES={value}",
    "Targets": "-DLLVM_TARGETS_TO_BUILD={value}",
    "EnableAssertions": "-DLLVM_ENABLE_ASSERTIONS={value}",
    "CCompiler": "-DCMAKE_C_COMPILER={value}",
    "CxxCompiler": "-DCMAKE_CXX_COMPILER={value}",
    "UseLinker": "-DLLVM_USE_LINKER={value}",
    "InstallDir": "-DCMAKE_INSTALL_PREFIX={value}",
}

# Written into the install dir after a successful install; holds the configuration summary
CONFIGURATION_STAMP = ".buildkeeper-configuration"


class LLVMBuildRoutine(BuildRoutine):
    """Configures, builds and installs LLVM.

    A marker file under the software root guards against starting a second
    build while one is running. An install directory stamped with the same
    configuration summary is treated as built and returned as is; a different
    configuration is rebuilt into the same directory.
    """

    key = "llvm"

    def build(self, context: BuildContext) -> BuildResult:
        marker = self.config.paths.get_build_marker(context.software)
        if marker.exists():
            raise ResourceConflictError("build.in_progress", software=context.software, marker=str(marker))

        install_dir = context.install_dir
        stamp = install_dir / CONFIGURATION_STAMP
        summary = summarize_configuration(context.configuration)
        if stamp.is_file() and stamp.read_text(encoding="utf-8") == summary:
            logger.info(f"{context.software} {context.commit_hash[:12]} already installed at {install_dir}, skipping")
            return BuildResult(install_path=install_dir, skipped=True)

        if not context.build_script.is_dir():
            raise ResourceNotFoundError("build.script_not_found", path=str(context.build_script))

        build_dir = context.source_dir / "build"
        flags = render_flags(LLVM_FLAGS, context.configuration)

        marker.parent.mkdir(parents=True, exist_ok=True)
        marker.write_text(context.commit_hash, encoding="utf-8")
        started = time.monotonic()
        try:
            logger.info(f"Configuring {context.software} in {build_dir}")
            self.run_tool("cmake", "-S", str(context.build_script), "-B", str(build_dir), "-G", "Ninja", *flags)

            logger.info(f"Building {context.software}")
            self.run_tool("ninja", "-C", str(build_dir))

            logger.info(f"Installing {context.software} into {install_dir}")
            self.run_tool("ninja", "-C", str(build_dir), "install")
            install_dir.mkdir(parents=True, exist_ok=True)
            stamp.write_text(summary, encoding="utf-8")
        finally:
            marker.unlink(missing_ok=True)

        return BuildResult(install_path=install_dir, duration_seconds=time.monotonic() - started)
