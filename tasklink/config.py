"""
Configuration Storage
=====================

This module manages the two JSON configuration files tasklink relies on:

* the global config (API credentials and base URL), stored in
  ``~/.config/tasklink/config.json`` unless ``TASKLINK_CONFIG_DIR`` says otherwise
* the project config (``.tasklink.json`` in the project directory) naming the
  remote project and remembering which tasks matched which files

Classes:
    GlobalConfig: API credentials
    ProjectConfig: Per-project settings
    ConfigManager: Loads, saves and merges both files
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from tasklink.environment import DEFAULT_BASE_URL, get_env_config
from tasklink.errors import ConfigError
from tasklink.utils.file import read_json, write_json

GLOBAL_CONFIG_FILE = "config.json"
PROJECT_CONFIG_FILE = ".tasklink.json"


def default_config_dir() -> Path:
    return get_env_config().TASKLINK_CONFIG_DIR or Path.home() / ".config" / "tasklink"


class GlobalConfig(BaseModel):
    api_key: str = ""
    api_secret: str = ""
    base_url: str = DEFAULT_BASE_URL


class ProjectConfig(BaseModel):
    project_id: str
    name: str
    last_sync: Optional[str] = None
    task_mappings: dict[str, list[int]] = Field(default_factory=dict)


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_global_config(config: GlobalConfig) -> list[str]:
    """
    Check a global config for missing or malformed values.

    Returns:
        list[str]: Human-readable errors, empty when the config is usable
    """
    errors = []
    if not config.api_key:
        errors.append("API key is required")
    if not config.api_secret:
        errors.append("API secret is required")
    if not config.base_url:
        errors.append("Base URL is required")
    elif not is_valid_url(config.base_url):
        errors.append("Base URL must be a valid URL")
    return errors


def validate_project_config(config: ProjectConfig) -> list[str]:
    errors = []
    if not config.project_id:
        errors.append("Project ID is required")
    if not config.name:
        errors.append("Project name is required")
    return errors


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ConfigManager:
    """
    Reads and writes the global and project configuration files.

    Attributes:
        config_dir (Path): Directory holding the global config file
        project_dir (Path): Directory holding the project config file
    """

    def __init__(self, config_dir: Path | None = None, project_dir: Path | None = None):
        self.config_dir = Path(config_dir) if config_dir else default_config_dir()
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()

    @property
    def global_config_path(self) -> Path:
        return self.config_dir / GLOBAL_CONFIG_FILE

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / PROJECT_CONFIG_FILE

    # Global configuration

    def get_global_config(self) -> GlobalConfig | None:
        data = read_json(self.global_config_path)
        if data is None:
            return None
        try:
            return GlobalConfig.model_validate(data)
        except ValidationError as error:
            logger.error(f"Invalid global config {self.global_config_path}: {error}")
            return None

    def set_global_config(self, config: GlobalConfig) -> None:
        try:
            write_json(self.global_config_path, config.model_dump())
        except OSError as error:
            raise ConfigError(f"Failed to save global config: {error}") from error
        logger.debug(f"Saved global config to {self.global_config_path}")

    def update_global_config(self, **updates) -> GlobalConfig:
        current = self.get_global_config() or GlobalConfig()
        config = current.model_copy(update=updates)
        self.set_global_config(config)
        return config

    def has_valid_global_config(self) -> bool:
        config = self.get_global_config()
        return bool(config and config.api_key and config.api_secret)

    def remove_global_config(self) -> None:
        self.global_config_path.unlink(missing_ok=True)

    # Project configuration

    def get_project_config(self) -> ProjectConfig | None:
        data = read_json(self.project_config_path)
        if data is None:
            return None
        try:
            return ProjectConfig.model_validate(data)
        except ValidationError as error:
            logger.error(f"Invalid project config {self.project_config_path}: {error}")
            return None

    def set_project_config(self, config: ProjectConfig) -> None:
        try:
            write_json(self.project_config_path, config.model_dump())
        except OSError as error:
            raise ConfigError(f"Failed to save project config: {error}") from error

    def update_project_config(self, **updates) -> ProjectConfig:
        current = self.get_project_config()
        if current is None:
            raise ConfigError('No project configuration found. Run "tasklink init" first.')
        config = current.model_copy(update=updates)
        self.set_project_config(config)
        return config

    def has_project_config(self) -> bool:
        config = self.get_project_config()
        return bool(config and config.project_id)

    def remove_project_config(self) -> None:
        self.project_config_path.unlink(missing_ok=True)

    def record_task_mapping(self, file_path: str, task_ids: list[int]) -> None:
        """Remember which tasks matched a file, merging with earlier matches."""
        config = self.get_project_config()
        if config is None or not task_ids:
            return
        known = config.task_mappings.get(file_path, [])
        merged = known + [task_id for task_id in task_ids if task_id not in known]
        if merged != known:
            mappings = {**config.task_mappings, file_path: merged}
            self.set_project_config(config.model_copy(update={"task_mappings": mappings}))

    def mark_synced(self) -> ProjectConfig:
        return self.update_project_config(last_sync=utc_now())

    # Combined

    def get_api_config(self) -> GlobalConfig | None:
        """
        Credentials for the API client.

        The global config file wins; environment variables are the fallback.

        Returns:
            GlobalConfig | None: Usable credentials, or None when none are set
        """
        config = self.get_global_config()
        if config and config.api_key and config.api_secret:
            return config

        env = get_env_config()
        if env.has_credentials:
            return GlobalConfig(
                api_key=env.TASKLINK_API_KEY,
                api_secret=env.TASKLINK_API_SECRET,
                base_url=env.TASKLINK_BASE_URL,
            )
        return None

    def require_api_config(self) -> tuple[GlobalConfig, ProjectConfig]:
        api_config = self.get_api_config()
        if api_config is None:
            raise ConfigError('No configuration found. Run "tasklink init" first.')
        project_config = self.get_project_config()
        if project_config is None:
            raise ConfigError('No project configuration found. Run "tasklink init" first.')
        return api_config, project_config
