"""Tests for the top-level tasklink commands."""

import json

from tasklink.api_client import TaskApiClient
from tasklink.cli import common
from tasklink.cli.main import app
from tasklink.config import ConfigManager, ProjectConfig
from tasklink.core.task import Project, TaskStatus
from tasklink.errors import ApiError
from tasklink.session import SESSION_FILE


def test_no_command_shows_help(runner):
    result = runner.invoke(app, [])
    assert result.exit_code == 0
    assert "tasklink <subcommand> --help" in result.output


def test_version(runner):
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "tasklink version:" in result.output


def test_keywords_from_path(runner, in_project):
    result = runner.invoke(app, ["keywords", "src/controllers/PaymentController.js"])
    assert result.exit_code == 0
    assert "paymentcontroller" in result.output
    assert "controllers" in result.output


def test_keywords_from_content(runner, in_project):
    (in_project / "billing.py").write_text("class InvoiceExporter:\n    pass\n")
    result = runner.invoke(app, ["keywords", "billing.py"])
    assert "invoiceexporter" in result.output

    result = runner.invoke(app, ["keywords", "billing.py", "--no-content"])
    assert "invoiceexporter" not in result.output


def test_keywords_same_for_absolute_path(runner, in_project):
    relative = runner.invoke(app, ["keywords", "billing/Invoice.py"])
    absolute = runner.invoke(app, ["keywords", str(in_project / "billing" / "Invoice.py")])

    assert relative.exit_code == absolute.exit_code == 0
    assert "invoice" in relative.output
    assert absolute.output == relative.output


def test_keywords_none_found(runner, in_project):
    result = runner.invoke(app, ["keywords", "src/index.js"])
    assert result.exit_code == 0
    assert "No keywords found" in result.output


def test_status_requires_init(runner, in_project):
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 1
    assert "tasklink init" in result.output


def test_status(runner, initialized, patched_client):
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "Shop" in result.output
    patched_client.get_tasks.assert_called_once_with("42", status=None, priority=None)


def test_status_filters(runner, initialized, patched_client):
    result = runner.invoke(app, ["status", "--filter", "done", "--priority", "high"])
    assert result.exit_code == 0
    patched_client.get_tasks.assert_called_once_with("42", status="done", priority="high")


def test_status_rejects_unknown_filter(runner, initialized, patched_client):
    result = runner.invoke(app, ["status", "--filter", "blocked"])
    assert result.exit_code == 2


def test_status_api_error(runner, initialized, patched_client):
    patched_client.get_tasks.side_effect = ApiError("Access denied.", status_code=403)
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 1
    assert "Access denied." in result.output


def test_sync_updates_report(runner, initialized, patched_client):
    result = runner.invoke(app, ["sync", "--update-report"])

    assert result.exit_code == 0
    report = (initialized.project_dir / "CLAUDE.md").read_text()
    assert report.startswith("# Shop")
    assert "Implement payment processing" in report
    assert initialized.get_project_config().last_sync is not None


def test_sync_without_report(runner, initialized, patched_client):
    result = runner.invoke(app, ["sync"])
    assert result.exit_code == 0
    assert not (initialized.project_dir / "CLAUDE.md").exists()


def test_match(runner, initialized, patched_client):
    result = runner.invoke(app, ["match", "src/controllers/PaymentController.js", "--limit", "2"])

    assert result.exit_code == 0
    assert "41" in result.output
    assert "25" in result.output
    patched_client.update_task_status.assert_not_called()


def test_hook_without_project_config(runner, in_project, patched_client):
    result = runner.invoke(app, ["hook"], env={"TOOL_TYPE": "Edit", "FILE_PATH": "src/Payment.js"})
    assert result.exit_code == 0
    patched_client.get_tasks.assert_not_called()


def test_hook_ignores_non_editing_tools(runner, initialized, patched_client):
    result = runner.invoke(app, ["hook"], env={"TOOL_TYPE": "Read", "FILE_PATH": "src/Payment.js"})
    assert result.exit_code == 0
    patched_client.get_tasks.assert_not_called()


def test_hook_updates_related_tasks(runner, initialized, patched_client):
    result = runner.invoke(
        app,
        ["hook", "--max-matches", "2"],
        env={"TOOL_TYPE": "Edit", "FILE_PATH": "src/controllers/PaymentController.js"},
    )

    assert result.exit_code == 0
    patched_client.update_task_status.assert_called_once_with(1, TaskStatus.IN_PROGRESS)

    session = json.loads((initialized.project_dir / SESSION_FILE).read_text())
    assert session["files_changed"] == ["src/controllers/PaymentController.js"]
    assert session["tasks_modified"] == [1]
    mappings = ConfigManager().get_project_config().task_mappings
    assert mappings == {"src/controllers/PaymentController.js": [4, 1]}


def test_hook_reads_file_content(runner, initialized, patched_client):
    (initialized.project_dir / "notes.txt").write_text("Remember the Webhook retries")
    result = runner.invoke(app, ["hook", "--tool-type", "Edit", "--file-path", "notes.txt"])

    assert result.exit_code == 0
    assert ConfigManager().get_project_config().task_mappings["notes.txt"][0] == 3


def test_hook_dry_run(runner, initialized, patched_client):
    result = runner.invoke(
        app,
        ["hook", "--tool-type", "Write", "--file-path", "src/controllers/PaymentController.js", "--dry-run"],
    )
    assert result.exit_code == 0
    patched_client.update_task_status.assert_not_called()
    assert not (initialized.project_dir / SESSION_FILE).exists()
    assert ConfigManager().get_project_config().task_mappings == {}


def test_hook_survives_api_errors(runner, initialized, patched_client):
    patched_client.get_tasks.side_effect = ApiError("Could not reach the service")
    result = runner.invoke(app, ["hook", "--tool-type", "Edit", "--file-path", "src/Payment.js"])
    assert result.exit_code == 0


def test_hook_survives_malformed_tasks(runner, initialized, monkeypatch, mock_session, make_response):
    mock_session.request.return_value = make_response(200, {"data": [{"id": 1, "status": "todo", "tags": None}]})
    monkeypatch.setattr(common, "make_client", lambda config: TaskApiClient(config, session=mock_session))

    result = runner.invoke(app, ["hook", "--tool-type", "Edit", "--file-path", "src/Payment.js"])

    assert result.exit_code == 0
    mock_session.request.assert_called_once()


def test_hook_without_credentials(runner, in_project, patched_client):
    ConfigManager().set_project_config(ProjectConfig(project_id="42", name="Shop"))
    result = runner.invoke(app, ["hook", "--tool-type", "Edit", "--file-path", "src/Payment.js"])
    assert result.exit_code == 0
    patched_client.get_tasks.assert_not_called()


def test_init_uses_existing_project(runner, in_project, patched_client):
    patched_client.test_connection.return_value = True
    patched_client.get_projects.return_value = [Project(id="7", name=in_project.name)]

    result = runner.invoke(app, ["init", "--api-key", "key", "--api-secret", "secret"], input="y\n")

    assert result.exit_code == 0, result.output
    manager = ConfigManager()
    assert manager.get_project_config().project_id == "7"
    assert manager.get_global_config().api_key == "key"
    assert "Task Integration" in (in_project / "CLAUDE.md").read_text()
    patched_client.create_project.assert_not_called()


def test_init_creates_project(runner, in_project, patched_client):
    patched_client.test_connection.return_value = True
    patched_client.get_projects.return_value = []
    patched_client.create_project.return_value = Project(id="8", name="Storefront")

    result = runner.invoke(
        app, ["init", "Storefront", "--api-key", "key", "--api-secret", "secret"], input="\n\n"
    )

    assert result.exit_code == 0, result.output
    patched_client.create_project.assert_called_once_with("Storefront", None)
    assert ConfigManager().get_project_config().name == "Storefront"


def test_init_backs_up_existing_report(runner, in_project, patched_client):
    patched_client.test_connection.return_value = True
    patched_client.get_projects.return_value = [Project(id="7", name=in_project.name)]
    (in_project / "CLAUDE.md").write_text("hand written notes")

    result = runner.invoke(app, ["init", "--api-key", "key", "--api-secret", "secret"], input="y\n")

    assert result.exit_code == 0, result.output
    backups = list(in_project.glob("CLAUDE.md.backup.*"))
    assert len(backups) == 1
    assert backups[0].read_text() == "hand written notes"


def test_init_connection_failure(runner, in_project, patched_client):
    patched_client.test_connection.return_value = False

    result = runner.invoke(app, ["init", "--api-key", "key", "--api-secret", "bad"])

    assert result.exit_code == 1
    assert not ConfigManager().has_project_config()
    assert ConfigManager().get_global_config() is None


def test_init_already_initialized_cancelled(runner, initialized, patched_client):
    result = runner.invoke(app, ["init"], input="n\n")
    assert result.exit_code == 0
    assert "cancelled" in result.output
    patched_client.test_connection.assert_not_called()
