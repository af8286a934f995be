"""Path utilities for buildkeeper, compatible with PyInstaller."""

import os
import sys
from pathlib import Path


def get_resources_dir() -> Path:
    """Get the resources directory path.

    This function returns the correct path for both:
    - Development environment: src/buildkeeper/resources
    - PyInstaller packaged environment: <MEIPASS>/buildkeeper/resources

    Returns:
        Path to the resources directory
    """
    if getattr(sys, "frozen", False):
        # PyInstaller packaged environment
        base_path = Path(sys._MEIPASS)  # type: ignore[attr-defined]
        return base_path / "buildkeeper" / "resources"
    else:
        # Development environment
        # This file is at src/buildkeeper/utils/paths.py
        return Path(__file__).parent.parent / "resources"


def path_entry_exists(path: Path) -> bool:
    """True if anything, including a dangling symlink, occupies `path`."""
    return os.path.lexists(path)
