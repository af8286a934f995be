"""Data models for buildkeeper."""

from buildkeeper.models.app_config import AppConfig
from buildkeeper.models.build import BuildOutcome, BuildRecord, RepositoryRecord
from buildkeeper.models.template import BuildTemplate

__all__ = [
    "AppConfig",
    "BuildOutcome",
    "BuildRecord",
    "BuildTemplate",
    "RepositoryRecord",
]
