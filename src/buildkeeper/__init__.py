"""buildkeeper - build orchestration and active-build switching."""

__version__ = "0.1.0"
