"""Active-build switching.

Turns a registry "set active" into filesystem state: a stable
<root>/<software>/current link plus per-executable links in the shared bin
directory.
"""

import fnmatch
import os
from pathlib import Path

from buildkeeper.exceptions import ValidationError
from buildkeeper.logger import get_logger
from buildkeeper.models.app_config import AppConfig
from buildkeeper.services.registry import BuildRegistry
from buildkeeper.services.templates import TemplateStore
from buildkeeper.utils import path_entry_exists

logger = get_logger(__name__)


class ActiveBuildSwitch:
    """Activates registered builds and exposes their executables."""

    def __init__(self, config: AppConfig, builds: BuildRegistry, templates: TemplateStore) -> None:
        self.config = config
        self.builds = builds
        self.templates = templates

    def activate(self, software: str, commit_hash: str) -> bool:
        """
        Make the build of (software, commit_hash) the active one.

        Bin links are only created for names that are still free; an existing
        link, even one left by an older build, is never replaced.

        Args:
            software: Software name
            commit_hash: Commit of a registered build

        Returns:
            True on success, False if the build is unknown or the current link
            could not be replaced
        """
        record = self.builds.get(software, commit_hash)
        if record is None:
            logger.error(f"No registered build of {software} at {commit_hash}")
            return False

        if not self.builds.set_active(software, commit_hash):
            return False

        install_path = Path(record.install_path)
        current_link = self.config.paths.get_current_link(software)
        if not self._repoint_current(current_link, install_path):
            return False

        linked = 0
        for executable in self.find_executables(install_path, self.executable_patterns(software)):
            if self._link_executable(executable):
                linked += 1

        logger.info(f"Activated {software} {commit_hash[:12]}: current -> {install_path}, {linked} new bin links")
        return True

    def executable_patterns(self, software: str) -> list[str]:
        """Patterns from the software's template, or the configured defaults."""
        try:
            template = self.templates.get(software)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable template for {software}: {e}")
            template = None

        if template is not None and template.executable_patterns:
            return template.executable_patterns
        return list(self.config.advanced.default_executable_patterns)

    @staticmethod
    def find_executables(install_path: Path, patterns: list[str]) -> list[Path]:
        """
        Files under install_path whose base name matches a pattern.

        Visited in sorted path order; the first file per base name wins.
        """
        if not install_path.is_dir():
            logger.warning(f"Install path does not exist: {install_path}")
            return []

        found: dict[str, Path] = {}
        for path in sorted(install_path.rglob("*")):
            if not path.is_file() or path.name in found:
                continue
            if any(fnmatch.fnmatch(path.name, pattern) for pattern in patterns):
                found[path.name] = path
        return list(found.values())

    def _repoint_current(self, current_link: Path, install_path: Path) -> bool:
        if current_link.is_symlink():
            current_link.unlink()
        elif current_link.exists():
            logger.error(f"{current_link} exists and is not a symlink; refusing to replace it")
            return False

        try:
            current_link.parent.mkdir(parents=True, exist_ok=True)
            os.symlink(install_path, current_link, target_is_directory=True)
        except OSError as e:
            logger.error(f"Failed to point {current_link} at {install_path}: {e}")
            return False
        return True

    def _link_executable(self, executable: Path) -> bool:
        bin_dir = self.config.paths.bin_dir
        assert bin_dir is not None
        link = bin_dir / executable.name

        if path_entry_exists(link):
            logger.debug(f"Keeping existing bin entry {link}")
            return False

        try:
            bin_dir.mkdir(parents=True, exist_ok=True)
            os.symlink(executable, link)
        except OSError as e:
            logger.error(f"Failed to link {link} -> {executable}: {e}")
            return False
        return True
