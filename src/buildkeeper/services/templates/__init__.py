"""Template services."""

from .configuration import (
    EXTRA_FLAGS_KEY,
    INSTALL_DIR_KEY,
    merge_configuration,
    parse_overrides,
    summarize_configuration,
)
from .store import LEGACY_BUILD_FUNCTIONS, TemplateStore

__all__ = [
    "EXTRA_FLAGS_KEY",
    "INSTALL_DIR_KEY",
    "LEGACY_BUILD_FUNCTIONS",
    "TemplateStore",
    "merge_configuration",
    "parse_overrides",
    "summarize_configuration",
]
