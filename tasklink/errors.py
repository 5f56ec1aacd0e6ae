"""Exceptions raised outside the matching core."""


class TaskLinkError(Exception):
    """Base exception for tasklink errors."""


class ConfigError(TaskLinkError):
    """Raised when configuration is missing, unreadable or invalid."""


class ApiError(TaskLinkError):
    """Raised when the task-tracking API call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FileMonitorError(TaskLinkError):
    """Base exception for file monitor errors."""
