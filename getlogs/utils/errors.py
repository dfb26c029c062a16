"""
Custom exceptions for getlogs.

This module defines all custom exceptions used throughout the application
so that the CLI can report failures with the path, pattern or issue involved.
"""

from pathlib import Path
from typing import Any, Optional, Union


class GetlogsException(Exception):
    """Base exception for all getlogs-specific errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(GetlogsException):
    """Configuration error."""

    pass


class InvalidPatternError(ConfigurationError):
    """A configured regular expression does not compile."""

    def __init__(self, pattern_name: str, pattern: str, reason: str) -> None:
        """Initialize with the offending pattern."""
        message = f"Invalid pattern in '{pattern_name}': {pattern!r} ({reason})"
        super().__init__(
            message,
            {"pattern_name": pattern_name, "pattern": pattern, "reason": reason},
        )
        self.pattern_name = pattern_name
        self.pattern = pattern


class ConfigCreatedError(ConfigurationError):
    """A default config file was written and must be edited before rerunning."""

    def __init__(self, path: Union[str, Path]) -> None:
        """Initialize with the created config path."""
        message = (
            f"Created default config at {path}. Please update it with either "
            "`bearer_token` or `user_email` + `api_token`, then rerun."
        )
        super().__init__(message)
        self.path = Path(path)


# =============================================================================
# Filesystem and Archive Exceptions
# =============================================================================


class FileSystemError(GetlogsException):
    """Directory creation, read or write failure."""

    def __init__(self, path: Union[str, Path], operation: str, reason: str) -> None:
        """Initialize with the failing path and operation."""
        message = f"Failed to {operation} '{path}': {reason}"
        super().__init__(message, {"path": str(path), "operation": operation})
        self.path = Path(path)
        self.operation = operation


class InvalidIssueIdError(GetlogsException):
    """Issue ID that cannot be used as a directory name."""

    def __init__(self, issue_id: str) -> None:
        """Initialize with the rejected issue ID."""
        message = f"Invalid issue ID '{issue_id}': must be a single path component"
        super().__init__(message, {"issue_id": issue_id})
        self.issue_id = issue_id


class ArchiveError(GetlogsException):
    """Archive cannot be opened or one of its entries cannot be read."""

    def __init__(self, archive_path: Union[str, Path], reason: str) -> None:
        """Initialize with the offending archive."""
        message = f"Cannot read archive '{archive_path}': {reason}"
        super().__init__(message, {"archive": str(archive_path)})
        self.archive_path = Path(archive_path)


# =============================================================================
# Issue Tracker Exceptions
# =============================================================================


class TrackerError(GetlogsException):
    """Base exception for issue tracker operations."""

    pass


class TrackerAuthenticationError(TrackerError):
    """Authentication with the issue tracker failed or is not configured."""

    pass


class TrackerConnectionError(TrackerError):
    """The tracker could not be reached."""

    pass


class IssueNotFoundError(TrackerError):
    """Issue not found in the tracker."""

    def __init__(self, issue_id: str) -> None:
        """Initialize with issue ID."""
        message = f"Issue '{issue_id}' not found"
        super().__init__(message, {"issue_id": issue_id})
        self.issue_id = issue_id


class TrackerRateLimitError(TrackerError):
    """Tracker API rate limit exceeded."""

    def __init__(self, retry_after: Optional[int] = None) -> None:
        """Initialize with retry information."""
        message = "Issue tracker rate limit exceeded"
        details = {}
        if retry_after:
            message += f". Retry after {retry_after} seconds"
            details["retry_after"] = retry_after
        super().__init__(message, details)
        self.retry_after = retry_after


class AttachmentDownloadError(TrackerError):
    """An attachment could not be written to disk."""

    def __init__(self, filename: str, reason: str) -> None:
        """Initialize with attachment information."""
        message = f"Failed to download attachment '{filename}': {reason}"
        super().__init__(message, {"filename": filename})
