"""
Main CLI entry point for tasklink.
"""

import importlib.metadata
import os
import time
from pathlib import Path
from typing import Optional

import typer

import tasklink
from tasklink.cli.auth_commands import auth_app
from tasklink.cli.common import (
    cli_errors,
    console,
    display_path,
    get_client_and_project,
    link_change,
    make_client,
    print_link_results,
)
from tasklink.cli.task_commands import task_app
from tasklink.config import ConfigManager, GlobalConfig, ProjectConfig, utc_now
from tasklink.core.keywords import extract
from tasklink.core.matcher import rank
from tasklink.core.status import ChangeType, suggest_status
from tasklink.core.task import Project, TaskPriority, TaskStatus
from tasklink.environment import configure_logging, get_env_config
from tasklink.errors import ApiError, TaskLinkError
from tasklink.file_monitor import FileMonitor
from tasklink.linker import DEFAULT_MAX_MATCHES, TaskLinker, tool_change_type
from tasklink.report import (
    DEFAULT_REPORT_FILE,
    backup_report,
    completion_rate,
    group_by_status,
    render_initial_report,
    render_report,
    write_report,
)
from tasklink.session import SessionTracker
from tasklink.utils.file import safe_read_file
from tasklink.utils.rich_console import get_console_logger, print_panel, print_table

logger = get_console_logger()


app = typer.Typer(
    help="tasklink - Link file edits to tasks\n\nKeeps the tasks of a remote project in step with the files you edit.",
)

app.add_typer(auth_app, name="auth", help="Manage API credentials")
app.add_typer(task_app, name="task", help="Create and update tasks")


def print_main_help_and_exit(code: int = 0):
    typer.echo("\n tasklink - Link file edits to tasks\n")
    command_rows = [
        ["init", "Connect this directory to a project"],
        ["auth", "Manage API credentials"],
        ["status", "Show the project's tasks"],
        ["sync", "Fetch tasks and refresh the report"],
        ["task", "Create and update tasks"],
        ["keywords", "Show the keywords of a file"],
        ["match", "Show the tasks related to a file"],
        ["hook", "Editor hook entry point"],
        ["watch", "Link file changes to tasks as they happen"],
        ["version", "Show tasklink version"],
    ]
    print_table(["Subcommand", "Description"], command_rows, title="Available tasklink Subcommands")
    typer.echo("\nFor more information about a subcommand, run:")
    typer.echo("  tasklink <subcommand> --help")
    raise typer.Exit(code)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """
    tasklink - Link file edits to tasks
    """
    get_env_config()
    if verbose:
        configure_logging("DEBUG")
    if ctx.invoked_subcommand is None:
        print_main_help_and_exit()


def _resolve_credentials(
    manager: ConfigManager, api_key: Optional[str], api_secret: Optional[str]
) -> GlobalConfig:
    """Options first, then the stored/environment credentials, then a prompt."""
    stored = manager.get_api_config()
    if api_key and api_secret:
        base_url = stored.base_url if stored else get_env_config().TASKLINK_BASE_URL
        return GlobalConfig(api_key=api_key, api_secret=api_secret, base_url=base_url)
    if stored and not api_key and not api_secret:
        return stored

    console.print("[bold]API credentials are needed to reach the task service.[/bold]")
    return GlobalConfig(
        api_key=api_key or typer.prompt("API key"),
        api_secret=api_secret or typer.prompt("API secret", hide_input=True),
        base_url=stored.base_url if stored else get_env_config().TASKLINK_BASE_URL,
    )


def _choose_project(client, project_name: Optional[str]) -> Project:
    name = project_name or Path.cwd().name
    projects = client.get_projects()

    for project in projects:
        if project.name == name and typer.confirm(f'Use existing project "{project.name}"?', default=True):
            return project

    if projects and not project_name:
        rows = [[str(index + 1), project.id, project.name] for index, project in enumerate(projects)]
        print_table(["#", "ID", "Name"], rows, title="Existing Projects")
        choice = typer.prompt("Select a project by number, or 0 to create a new one", type=int, default=0)
        if 1 <= choice <= len(projects):
            return projects[choice - 1]

    name = typer.prompt("Project name", default=name)
    description = typer.prompt("Project description", default="", show_default=False) or None
    project = client.create_project(name, description)
    logger.success(f"Created project: {project.name}")
    return project


@app.command()
def init(
    project_name: str = typer.Argument(None, help="Name of the remote project"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite the existing project configuration"),
    api_key: str = typer.Option(None, "--api-key", help="API key"),
    api_secret: str = typer.Option(None, "--api-secret", help="API secret"),
    report_file: str = typer.Option(DEFAULT_REPORT_FILE, "--report", help="Markdown report to create"),
):
    """Connect the current directory to a project of the task service."""
    manager = ConfigManager()
    if manager.has_project_config() and not force:
        if not typer.confirm("Project already initialized. Overwrite existing configuration?", default=False):
            console.print("[yellow]Initialization cancelled.[/yellow]")
            return

    with cli_errors("Initialization failed"):
        credentials = _resolve_credentials(manager, api_key, api_secret)
        client = make_client(credentials)
        if not client.test_connection():
            raise ApiError("Failed to connect to the task service. Check your API credentials.")
        if credentials != manager.get_api_config():
            manager.set_global_config(credentials)

        project = _choose_project(client, project_name)
        manager.set_project_config(ProjectConfig(project_id=project.id, name=project.name, last_sync=utc_now()))

    report_path = manager.project_dir / report_file
    backup = backup_report(report_path)
    if backup:
        console.print(f"[dim]Existing report backed up to {backup.name}[/dim]")
    write_report(report_path, render_initial_report(project))

    print_panel(
        f"Project: {project.name} (ID: {project.id})\n"
        f"Config: {manager.project_config_path.name}\n"
        f"Report: {report_file}\n\n"
        "Next: tasklink sync --update-report",
        title="✅ tasklink initialized",
        style="green",
    )


@app.command()
def status(
    show_all: bool = typer.Option(False, "--all", "-a", help="Include completed tasks"),
    filter_status: TaskStatus = typer.Option(None, "--filter", help="Only tasks with this status"),
    priority: TaskPriority = typer.Option(None, "--priority", "-p", help="Only tasks with this priority"),
):
    """Show the tasks of the configured project."""
    with cli_errors("Failed to get status"):
        manager = ConfigManager()
        client, project = get_client_and_project(manager)
        tasks = client.get_tasks(
            project.project_id,
            status=filter_status.value if filter_status else None,
            priority=priority.value if priority else None,
        )

    by_status = group_by_status(tasks)
    print_table(
        ["Status", "Value"],
        [
            ["Project", f"{project.name} ({project.project_id})"],
            ["Last Sync", project.last_sync or "never"],
            ["Total", len(tasks)],
            ["Todo", len(by_status.get(TaskStatus.TODO, []))],
            ["In Progress", len(by_status.get(TaskStatus.IN_PROGRESS, []))],
            ["Done", len(by_status.get(TaskStatus.DONE, []))],
            ["Progress", f"{completion_rate(tasks)}%"],
        ],
        title="tasklink Status",
    )

    shown = [TaskStatus.IN_PROGRESS, TaskStatus.TODO]
    if show_all or filter_status == TaskStatus.DONE:
        shown.append(TaskStatus.DONE)
    for task_status in shown:
        group = by_status.get(task_status, [])
        if not group:
            continue
        rows = [
            [task.id, task.title, task.priority.value, ", ".join(task.tags), task.due_date or ""]
            for task in group
        ]
        print_table(["ID", "Title", "Priority", "Tags", "Due"], rows, title=task_status.value)

    if not tasks:
        console.print('[dim]No tasks yet. Create one with "tasklink task create".[/dim]')


@app.command()
def sync(
    update_report: bool = typer.Option(
        False, "--update-report/--no-update-report", help="Rewrite the markdown report"
    ),
    output: str = typer.Option(DEFAULT_REPORT_FILE, "--output", "-o", help="Markdown report to write"),
):
    """Fetch the project's tasks and optionally refresh the markdown report."""
    with cli_errors("Sync failed"):
        manager = ConfigManager()
        client, project_config = get_client_and_project(manager)
        tasks = client.get_tasks(project_config.project_id)

        if update_report:
            tracker = SessionTracker(manager.project_dir)
            session = tracker.load() if tracker.path.exists() else None
            project = Project(id=project_config.project_id, name=project_config.name)
            report_path = manager.project_dir / output
            write_report(report_path, render_report(project, tasks, session))
            console.print(f"Updated {output}")

        manager.mark_synced()

    logger.success(f"Synced {len(tasks)} task(s) from {project_config.name}")


@app.command()
def keywords(
    path: str = typer.Argument(..., help="File path"),
    content: bool = typer.Option(True, "--content/--no-content", help="Also read the file content"),
):
    """Show the keywords extracted from a file."""
    text = safe_read_file(path) if content and os.path.isfile(path) else None
    shown = display_path(path)
    found = extract(shown, text)
    if not found:
        console.print(f"[yellow]No keywords found for {shown}[/yellow]")
        return
    print_table(["#", "Keyword"], [[index + 1, keyword] for index, keyword in enumerate(found)], title=shown)


@app.command()
def match(
    path: str = typer.Argument(..., help="File path"),
    content: bool = typer.Option(True, "--content/--no-content", help="Also read the file content"),
    limit: int = typer.Option(5, "--limit", "-n", help="Number of tasks to show"),
    change_type: ChangeType = typer.Option(
        ChangeType.MODIFY, "--change-type", "-c", help="Change used for the status suggestion"
    ),
):
    """Show the tasks most related to a file, with their scores."""
    text = safe_read_file(path) if content and os.path.isfile(path) else None
    found = extract(display_path(path), text)
    if not found:
        console.print(f"[yellow]No keywords found for {path}[/yellow]")
        return

    with cli_errors("Match failed"):
        client, project = get_client_and_project()
        results = rank(client.get_tasks(project.project_id), found)[:limit]

    if not results:
        console.print(f"[yellow]No tasks match {path}[/yellow]")
        return
    rows = [
        [
            result.score,
            result.task.id,
            result.task.title,
            result.task.status.value,
            suggest_status(result.task.status, change_type).value,
        ]
        for result in results
    ]
    print_table(["Score", "ID", "Title", "Status", "Suggested"], rows, title=f"Tasks for {path}")


@app.command()
def hook(
    tool_type: str = typer.Option(None, "--tool-type", envvar="TOOL_TYPE", help="Editor tool that ran"),
    file_path: str = typer.Option(None, "--file-path", envvar="FILE_PATH", help="File the tool touched"),
    content: str = typer.Option(None, "--content", envvar="CONTENT", help="File content after the change"),
    change_type: ChangeType = typer.Option(None, "--change-type", help="Override the change type"),
    new_file: bool = typer.Option(False, "--new-file", help="The file did not exist before the tool ran"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only show the suggested status changes"),
    max_matches: int = typer.Option(DEFAULT_MAX_MATCHES, "--max-matches", help="Tasks considered per change"),
):
    """
    Entry point for editor post-edit hooks.

    Never fails: problems are logged and the command exits 0 so the editor
    carries on.
    """
    manager = ConfigManager()
    if not file_path:
        logger.debug("No file path given, nothing to do")
        return
    if not manager.has_project_config():
        logger.debug(f"No {manager.project_config_path.name} found, skipping")
        return

    change = change_type or tool_change_type(tool_type, file_existed=not new_file)
    if change is None:
        logger.debug(f"Tool {tool_type} doesn't change files, skipping")
        return

    try:
        client, project = get_client_and_project(manager)
        linker = TaskLinker(client, project.project_id, max_matches)
        results = link_change(linker, change, file_path, content, apply=not dry_run, manager=manager)
    except TaskLinkError as error:
        logger.warning(f"tasklink hook skipped: {error}")
        return

    print_link_results(display_path(file_path, manager.project_dir), results, dry_run=dry_run)


@app.command()
def watch(
    path: Path = typer.Argument(Path("."), help="Directory to watch"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only show the suggested status changes"),
    max_matches: int = typer.Option(DEFAULT_MAX_MATCHES, "--max-matches", help="Tasks considered per change"),
):  # pragma: no cover
    """Link file changes to tasks as they happen.

    Press Ctrl+C to stop watching.
    """
    with cli_errors("Watch failed"):
        manager = ConfigManager()
        client, project = get_client_and_project(manager)
        linker = TaskLinker(client, project.project_id, max_matches)
        tracker = SessionTracker(manager.project_dir)

        def on_change(change: ChangeType, file_path: str) -> None:
            try:
                results = link_change(linker, change, file_path, apply=not dry_run, manager=manager, tracker=tracker)
            except TaskLinkError as error:
                logger.error(f"Could not link {file_path}: {error}")
                return
            print_link_results(display_path(file_path, manager.project_dir), results, dry_run=dry_run)

        monitor = FileMonitor(on_change)
        monitor.add_watch_path(path)

    try:
        with monitor:
            typer.echo(f"Watching {path.resolve()} for changes (Ctrl+C to stop)...")
            while True:
                time.sleep(1)
    except KeyboardInterrupt:
        typer.echo("\nStopped watching.")
    except TaskLinkError as error:
        logger.error(f"Error during file monitoring: {error}")
        raise typer.Exit(1)


@app.command()
def version():
    """Show the tasklink version."""
    try:
        current = importlib.metadata.version("tasklink")
    except importlib.metadata.PackageNotFoundError:
        current = tasklink.__version__
    typer.echo(f"tasklink version: {current}")


if __name__ == "__main__":
    app()
