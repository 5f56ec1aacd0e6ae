"""
tasklink - Link file edits to the tasks of a remote project
"""

__version__ = "0.2.0"

from tasklink.api_client import TaskApiClient
from tasklink.cli import cli
from tasklink.config import ConfigManager
from tasklink.errors import ApiError, ConfigError, TaskLinkError
from tasklink.linker import TaskLinker

__all__ = [
    "cli",
    "ApiError",
    "ConfigError",
    "ConfigManager",
    "TaskApiClient",
    "TaskLinkError",
    "TaskLinker",
]
