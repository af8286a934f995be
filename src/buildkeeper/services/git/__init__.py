"""Git services."""

from .service import RepositoryTracker

__all__ = ["RepositoryTracker"]
