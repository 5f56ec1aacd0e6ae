"""
Test Configuration and Fixtures
===============================

This module provides pytest fixtures and helpers for testing tasklink.
"""

import json
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from tasklink.config import ConfigManager, GlobalConfig, ProjectConfig
from tasklink.core.task import Task
from tasklink.environment import reset_env_config

ENV_VARS = [
    "TASKLINK_API_KEY",
    "TASKLINK_API_SECRET",
    "TASKLINK_BASE_URL",
    "TASKLINK_DEBUG",
    "TASKLINK_LOG_LEVEL",
]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path: Path to the temporary directory

    Note:
        The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Keep every test away from the real ~/.config and the caller's credentials."""
    config_dir = tmp_path / "global-config"
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TASKLINK_CONFIG_DIR", str(config_dir))
    reset_env_config()
    yield config_dir
    reset_env_config()


@pytest.fixture
def make_task():
    """Factory for task snapshots with sensible defaults."""
    def create(task_id: int = 1, title: str = "Task", **fields) -> Task:
        return Task(id=task_id, title=title, **fields)
    return create


@pytest.fixture
def sample_tasks(make_task) -> list[Task]:
    return [
        make_task(1, "Implement payment processing", description="Stripe checkout flow", tags=["payment", "backend"]),
        make_task(2, "Fix login redirect", description="Users land on a blank page", tags=["auth"]),
        make_task(3, "Write webhook docs", status="in_progress", tags=["docs"]),
        make_task(4, "Refactor payment controller", status="done", priority="high", tags=["payment"]),
    ]


@pytest.fixture
def api_config() -> GlobalConfig:
    return GlobalConfig(api_key="key-123456789", api_secret="secret-123456789", base_url="https://tasks.example.com")


@pytest.fixture
def project_dir(temp_dir: Path) -> Path:
    project = temp_dir / "project"
    project.mkdir()
    return project


@pytest.fixture
def config_manager(isolated_env: Path, project_dir: Path) -> ConfigManager:
    return ConfigManager(config_dir=isolated_env, project_dir=project_dir)


@pytest.fixture
def configured_manager(config_manager: ConfigManager, api_config: GlobalConfig) -> ConfigManager:
    """A manager with credentials and a project already saved."""
    config_manager.set_global_config(api_config)
    config_manager.set_project_config(ProjectConfig(project_id="42", name="Shop"))
    return config_manager


def build_response(status_code: int = 200, payload: Any = None, raw: bytes | None = None) -> requests.Response:
    """Build a real ``requests.Response`` with the given status and body."""
    response = requests.Response()
    response.status_code = status_code
    if raw is not None:
        response._content = raw
    elif payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
    else:
        response._content = b""
    response.url = "https://tasks.example.com/api/v1"
    return response


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def mock_session() -> MagicMock:
    """A stand-in for ``requests.Session`` whose ``request`` returns canned responses."""
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def mock_client(sample_tasks: list[Task]) -> MagicMock:
    """A stand-in for ``TaskApiClient`` serving ``sample_tasks``."""
    client = MagicMock()
    client.get_tasks.return_value = sample_tasks

    def update_status(task_id, status):
        task = next(task for task in sample_tasks if task.id == task_id)
        return task.model_copy(update={"status": status})

    client.update_task_status.side_effect = update_status
    return client
