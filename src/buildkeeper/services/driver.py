"""Template build driver.

Resolve template -> merge configuration -> refresh repository -> build ->
register -> activate. Any failure before registration leaves the registry
untouched.
"""

import time
from typing import Any

from buildkeeper.logger import get_logger
from buildkeeper.models.app_config import AppConfig
from buildkeeper.models.build import BuildOutcome
from buildkeeper.services.activation import ActiveBuildSwitch
from buildkeeper.services.builds import BuildContext, BuildRoutineRegistry
from buildkeeper.services.git import RepositoryTracker
from buildkeeper.services.registry import BuildRegistry
from buildkeeper.services.templates import (
    INSTALL_DIR_KEY,
    TemplateStore,
    merge_configuration,
    summarize_configuration,
)

logger = get_logger(__name__)

BRANCH_KEY = "Branch"


class TemplateBuildDriver:
    """Builds a software from its template and makes the result active."""

    def __init__(
        self,
        config: AppConfig,
        templates: TemplateStore,
        tracker: RepositoryTracker,
        routines: BuildRoutineRegistry,
        builds: BuildRegistry,
        switch: ActiveBuildSwitch,
    ) -> None:
        self.config = config
        self.templates = templates
        self.tracker = tracker
        self.routines = routines
        self.builds = builds
        self.switch = switch

    def build(
        self,
        software: str,
        configuration: dict[str, Any] | None = None,
        use_defaults: bool = True,
    ) -> BuildOutcome:
        """
        Build a software from its template.

        Args:
            software: Template name
            configuration: Explicit values overriding the template defaults
            use_defaults: Start from the template's default configuration

        Returns:
            Outcome of the build, including whether activation succeeded

        Raises:
            ResourceNotFoundError: Missing template or build routine
            OperationalError: Repository refresh or build tool failure
        """
        started = time.monotonic()

        template = self.templates.require(software)
        routine = self.routines.get(template.build_function)

        merged = merge_configuration(template.default_configuration, configuration, use_defaults)
        branch = str(merged.get(BRANCH_KEY) or self.config.repositories.default_branch)

        logger.info(f"Building {software} from {template.repository} ({branch}) with {routine.key}")
        commit_hash = self.tracker.refresh(software, template.repository, branch)

        source_dir = self.config.paths.get_repo_path(software)
        install_dir = self.config.paths.get_install_path(software, commit_hash)
        merged[INSTALL_DIR_KEY] = str(install_dir)

        context = BuildContext(
            software=software,
            commit_hash=commit_hash,
            source_dir=source_dir,
            build_script=source_dir / template.build_script if template.build_script else source_dir,
            configuration=merged,
        )
        result = routine.build(context)

        install_path = str(result.install_path or install_dir)
        summary = summarize_configuration(merged)
        build_id = self.builds.register(software, commit_hash, summary, install_path)

        activated = self.switch.activate(software, commit_hash)
        if not activated:
            logger.warning(f"Build {build_id} of {software} registered but not activated")

        outcome = BuildOutcome(
            build_id=build_id,
            software=software,
            commit_hash=commit_hash,
            install_path=install_path,
            configuration=summary,
            activated=activated,
            duration_seconds=time.monotonic() - started,
        )
        logger.info(f"Finished {software} build {build_id} in {outcome.duration_seconds:.1f}s")
        return outcome
