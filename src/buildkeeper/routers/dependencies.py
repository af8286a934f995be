"""Dependency providers shared by the API routers."""

from functools import lru_cache

from buildkeeper.config import ConfigManager
from buildkeeper.services.container import ServiceContainer, build_services


@lru_cache
def get_services() -> ServiceContainer:
    """Get or initialize the service container (singleton)."""
    return build_services(ConfigManager().load())
