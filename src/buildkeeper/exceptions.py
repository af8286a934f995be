"""Centralized exception hierarchy for buildkeeper.

Errors carry a message key plus formatting parameters; the English text for
each key lives in MESSAGES so log output and API responses stay consistent.
"""

MESSAGES: dict[str, str] = {
    "template.not_found": "No template exists for '{name}'",
    "template.conflict": "Template '{name}' already exists",
    "template.invalid": "Template '{name}' is invalid: {error}",
    "template.file_not_found": "Template file not found: {path}",
    "build.routine_not_found": "No build routine registered under '{key}'",
    "build.routine_conflict": "A build routine is already registered under '{key}'",
    "build.in_progress": "A build of '{software}' is already in progress (marker: {marker})",
    "build.script_not_found": "Build entry point not found: {path}",
    "build.tool_failed": "'{tool}' exited with code {returncode}",
    "build.no_active": "No active build of '{software}'",
    "git.failed": "Git operation failed for {url}: {error}",
    "git.unexpected_error": "Unexpected error while updating {url}: {error}",
    "git.failed_commit_hash": "Unable to read HEAD commit in {path}",
    "tool.not_found": "Executable for '{tool}' not found",
    "config.invalid_override": "Invalid configuration override '{item}', expected KEY=VALUE",
}


class AppBaseError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(
        self,
        message_key: str,
        status_code: int = 500,
        retriable: bool = False,
        **params: object,
    ) -> None:
        """
        Initialize the error.

        Args:
            message_key: Key into MESSAGES (e.g., 'template.not_found')
            status_code: Recommended HTTP status code
            retriable: Whether the operation can be retried
            **params: Parameters for string formatting of the message
        """
        super().__init__(message_key)
        self.message_key = message_key
        self.status_code = status_code
        self.retriable = retriable
        self.params = params

    def __str__(self) -> str:
        """Returns the English message for logging and responses."""
        template = MESSAGES.get(self.message_key)
        if template is not None:
            try:
                return template.format(**self.params)
            except (KeyError, IndexError):
                pass
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"[{self.message_key}] {params_str} (retriable: {self.retriable})"


class ResourceNotFoundError(AppBaseError):
    """Raised when a requested resource (template, build, repository) is not found."""

    def __init__(self, message_key: str, **params: object) -> None:
        super().__init__(message_key, status_code=404, **params)


class ResourceConflictError(AppBaseError):
    """Raised when an operation conflicts with the current state (e.g., duplicate name)."""

    def __init__(self, message_key: str, **params: object) -> None:
        super().__init__(message_key, status_code=409, **params)


class ValidationError(AppBaseError):
    """Raised when input validation fails."""

    def __init__(self, message_key: str, **params: object) -> None:
        super().__init__(message_key, status_code=400, **params)


class OperationalError(AppBaseError):
    """Raised when an operational failure occurs (git command, filesystem, etc.)."""

    def __init__(self, message_key: str, retriable: bool = False, **params: object) -> None:
        super().__init__(message_key, status_code=500, retriable=retriable, **params)


class ExternalToolError(OperationalError):
    """Raised when a build tool subprocess exits with a non-zero code."""

    def __init__(self, tool: str, returncode: int, output: str = "", **params: object) -> None:
        super().__init__("build.tool_failed", tool=tool, returncode=returncode, **params)
        self.tool = tool
        self.returncode = returncode
        self.output = output
