"""Fixtures for the command-line tests."""

import pytest
from typer.testing import CliRunner

from tasklink.cli import auth_commands, common, main as cli_main
from tasklink.config import ConfigManager, ProjectConfig


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def in_project(project_dir, monkeypatch):
    """Run commands from inside the project directory."""
    monkeypatch.chdir(project_dir)
    return project_dir


@pytest.fixture
def initialized(in_project, api_config):
    """A project directory with saved credentials and a project config."""
    manager = ConfigManager()
    manager.set_global_config(api_config)
    manager.set_project_config(ProjectConfig(project_id="42", name="Shop"))
    return manager


@pytest.fixture
def patched_client(mock_client, monkeypatch):
    """Make every command talk to ``mock_client`` instead of the network."""
    factory = lambda config: mock_client  # noqa: E731
    monkeypatch.setattr(common, "make_client", factory)
    monkeypatch.setattr(cli_main, "make_client", factory)
    monkeypatch.setattr(auth_commands, "make_client", factory)
    return mock_client
