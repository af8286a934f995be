import sys

import structlog

# Map string level to integer
LEVEL_MAP = {
    "INFO": 20,
    "DEBUG": 10,
    "TRACE": 5,
}


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # Resolved per call so a replaced sys.stderr is picked up
    return structlog.PrintLogger(sys.stderr)


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog for the process.

    Called once by the entry points (CLI, server) with the level from the
    loaded configuration. Output goes to stderr so command output on stdout
    stays machine readable.

    Args:
        level: One of INFO, DEBUG, TRACE
    """
    log_level = LEVEL_MAP.get(level.upper(), 20)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,  # Disable cache to allow level updates
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance bound to the current structlog configuration
    """
    return structlog.get_logger(name)
