"""Exception hierarchy for scanprep."""

from typing import Any


class ScanprepError(Exception):
    """Base exception class for all scanprep errors.

    Attributes:
        message: Human-readable error message
        details: Additional error details for debugging
        exit_code: Suggested exit code for CLI
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None, exit_code: int = 1):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.exit_code = exit_code

    def __str__(self) -> str:
        return self.message


class LanguageDetectionError(ScanprepError):
    """Exception raised when a project tree cannot be scanned.

    Only failures at the project root end up here; unreadable entries below
    the root are skipped by the scanner.
    """

    def __init__(self, message: str, project_path: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        if project_path:
            self.details["project_path"] = project_path


class ConfigurationError(ScanprepError):
    """Exception raised when run configuration cannot be built.

    Used for unreadable or malformed project configuration files and for
    engines that do not accept resolved options.
    """

    def __init__(self, message: str, file_path: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        if file_path:
            self.details["file_path"] = file_path


class UnknownLinterError(ConfigurationError):
    """Exception raised when an engine identifier is not in the catalog."""

    def __init__(self, linter: str, **kwargs):
        super().__init__(f"Unknown linter '{linter}'", **kwargs)
        self.details["linter"] = linter


class FileOperationError(ScanprepError):
    """Exception raised during file operations.

    Used for options file writes and directory listing failures.
    """

    def __init__(self, message: str, file_path: str | None = None, operation: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        if file_path:
            self.details["file_path"] = file_path
        if operation:
            self.details["operation"] = operation


class CustomPluginsError(FileOperationError):
    """Exception raised when the custom plugins directory exists but cannot be listed."""

    def __init__(self, directory: str, reason: str, **kwargs):
        super().__init__(
            f"Failed to read custom plugins directory {directory}: {reason}",
            file_path=directory,
            operation="list",
            **kwargs,
        )
