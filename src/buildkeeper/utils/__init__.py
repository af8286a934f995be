"""Utilities for buildkeeper."""

from buildkeeper.utils.paths import get_resources_dir, path_entry_exists
from buildkeeper.utils.subprocess_executor import ProcessResult, SubprocessExecutor

__all__ = ["ProcessResult", "SubprocessExecutor", "get_resources_dir", "path_entry_exists"]
