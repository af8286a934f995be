"""Registry services backed by the SQLite database."""

from .builds import BuildRegistry
from .repositories import RepositoryRegistry
from .storage import Base, Build, Database, Repository

__all__ = ["Base", "Build", "BuildRegistry", "Database", "Repository", "RepositoryRegistry"]
