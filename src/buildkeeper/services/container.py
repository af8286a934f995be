"""Service wiring.

The configuration is loaded once by an entry point and handed to
build_services(); every service receives what it needs explicitly.
"""

from dataclasses import dataclass

from buildkeeper.models.app_config import AppConfig
from buildkeeper.services.activation import ActiveBuildSwitch
from buildkeeper.services.builds import BuildRoutineRegistry, default_routines
from buildkeeper.services.driver import TemplateBuildDriver
from buildkeeper.services.git import RepositoryTracker
from buildkeeper.services.registry import BuildRegistry, Database, RepositoryRegistry
from buildkeeper.services.templates import TemplateStore
from buildkeeper.services.tools import ToolManager


@dataclass
class ServiceContainer:
    config: AppConfig
    database: Database
    builds: BuildRegistry
    repositories: RepositoryRegistry
    templates: TemplateStore
    tracker: RepositoryTracker
    routines: BuildRoutineRegistry
    switch: ActiveBuildSwitch
    driver: TemplateBuildDriver


def build_services(config: AppConfig, routines: BuildRoutineRegistry | None = None) -> ServiceContainer:
    """
    Construct all services for a configuration.

    Args:
        config: Loaded application configuration
        routines: Routine registry to use instead of the built-in routines

    Returns:
        Wired service container with the registry schema created
    """
    assert config.paths.database_path is not None
    assert config.paths.templates_dir is not None

    database = Database(config.paths.database_path)
    database.create_schema()

    tool_manager = ToolManager(config.tools)
    builds = BuildRegistry(database)
    repositories = RepositoryRegistry(database)
    templates = TemplateStore(config.paths.templates_dir)
    tracker = RepositoryTracker(config, tool_manager, repositories)
    if routines is None:
        routines = default_routines(config, tool_manager)
    switch = ActiveBuildSwitch(config, builds, templates)
    driver = TemplateBuildDriver(config, templates, tracker, routines, builds, switch)

    return ServiceContainer(
        config=config,
        database=database,
        builds=builds,
        repositories=repositories,
        templates=templates,
        tracker=tracker,
        routines=routines,
        switch=switch,
        driver=driver,
    )
