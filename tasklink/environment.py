"""Environment configuration management."""

import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field

load_dotenv()

DEFAULT_BASE_URL = "https://200notes.com"
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def is_sensitive_variable(name: str) -> bool:
    """
    Check if a variable name contains common sensitive terms.

    Args:
        name: The variable name to check

    Returns:
        True if the variable is likely sensitive, False otherwise
    """
    sensitive_terms = ["key", "token", "secret", "password", "credential", "auth"]
    name_lower = name.lower()
    return any(term in name_lower for term in sensitive_terms)


def mask_sensitive_value(value: str, visible: int = 8) -> str:
    """
    Mask a sensitive value for display.

    Args:
        value: The value to mask
        visible: Number of leading characters to keep

    Returns:
        Masked value (leading characters followed by an ellipsis)
    """
    if not value or len(value) <= visible:
        return "***"
    return value[:visible] + "..."


def _parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("true", "1", "yes")


class EnvironmentConfig(BaseModel):
    """Settings read from the process environment (and ``.env``)."""

    TASKLINK_API_KEY: Optional[str] = Field(None, description="API key for the task service")
    TASKLINK_API_SECRET: Optional[str] = Field(None, description="API secret for the task service")
    TASKLINK_BASE_URL: str = Field(DEFAULT_BASE_URL, description="Base URL of the task service")
    TASKLINK_CONFIG_DIR: Optional[Path] = Field(None, description="Directory of the global config file")
    TASKLINK_DEBUG: bool = Field(False, description="Enable debug logging")
    TASKLINK_LOG_LEVEL: str = Field(
        "WARNING", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @property
    def has_credentials(self) -> bool:
        return bool(self.TASKLINK_API_KEY and self.TASKLINK_API_SECRET)

    def masked(self) -> dict[str, str]:
        """Current values with sensitive ones masked, for display."""
        rows = {}
        for name, value in self.model_dump().items():
            if value is None:
                rows[name] = ""
            elif is_sensitive_variable(name):
                rows[name] = mask_sensitive_value(str(value))
            else:
                rows[name] = str(value)
        return rows

    @classmethod
    def load(cls) -> "EnvironmentConfig":
        """Load configuration from environment variables and configure logging."""
        log_level = os.getenv("TASKLINK_LOG_LEVEL", "WARNING").upper()
        if log_level not in VALID_LOG_LEVELS:
            log_level = "WARNING"
        config_dir = os.getenv("TASKLINK_CONFIG_DIR")

        env_vars = {
            "TASKLINK_API_KEY": os.getenv("TASKLINK_API_KEY") or None,
            "TASKLINK_API_SECRET": os.getenv("TASKLINK_API_SECRET") or None,
            "TASKLINK_BASE_URL": os.getenv("TASKLINK_BASE_URL") or DEFAULT_BASE_URL,
            "TASKLINK_CONFIG_DIR": Path(config_dir).expanduser() if config_dir else None,
            "TASKLINK_DEBUG": _parse_bool(os.getenv("TASKLINK_DEBUG")),
            "TASKLINK_LOG_LEVEL": log_level,
        }

        if env_vars["TASKLINK_DEBUG"]:
            log_level = "DEBUG"
        configure_logging(log_level)

        return cls(**env_vars)


def configure_logging(level: str) -> None:
    """Replace loguru's default sink with a stderr sink at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)


# Global environment configuration instance
_env_config: Optional[EnvironmentConfig] = None


def get_env_config() -> EnvironmentConfig:
    """Get the environment configuration singleton."""
    global _env_config
    if _env_config is None:
        _env_config = EnvironmentConfig.load()
    return _env_config


def reset_env_config() -> None:
    """Forget the cached configuration so the next access reloads it."""
    global _env_config
    _env_config = None


def is_debug_enabled() -> bool:
    """Check if debug mode is enabled."""
    return get_env_config().TASKLINK_DEBUG
