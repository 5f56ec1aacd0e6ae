from datetime import date
from typing import Optional

import typer

from tasklink.cli.common import (
    cli_errors,
    console,
    get_client_and_project,
    resolve_task_id,
    split_csv,
)
from tasklink.config import ConfigManager
from tasklink.core.matcher import rank
from tasklink.core.task import TaskPriority, TaskStatus
from tasklink.errors import ApiError, TaskLinkError
from tasklink.session import SessionTracker
from tasklink.utils.rich_console import get_console_logger, print_table

logger = get_console_logger()

task_app = typer.Typer(help="Create and update tasks of the configured project.")


def _check_due_date(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise typer.BadParameter(f"Invalid date: {value}. Use YYYY-MM-DD.")


@task_app.command()
def create(
    title: str = typer.Argument(None, help="Task title"),
    description: str = typer.Option(None, "--description", "-d", help="Task description"),
    priority: TaskPriority = typer.Option(TaskPriority.MEDIUM, "--priority", "-p", help="Task priority"),
    status: TaskStatus = typer.Option(TaskStatus.TODO, "--status", "-s", help="Initial status"),
    tags: str = typer.Option(None, "--tags", "-t", help="Comma-separated tags"),
    due: str = typer.Option(None, "--due", help="Due date (YYYY-MM-DD)"),
):
    """Create a new task."""
    due = _check_due_date(due)
    if not title:
        title = typer.prompt("Task title")
        if description is None:
            description = typer.prompt("Description", default="", show_default=False) or None

    fields = {
        "title": title,
        "description": description,
        "priority": priority.value,
        "status": status.value,
        "tags": split_csv(tags),
        "due_date": due,
    }
    fields = {key: value for key, value in fields.items() if value is not None}

    with cli_errors("Failed to create task"):
        manager = ConfigManager()
        client, project = get_client_and_project(manager)
        task = client.create_task(project.project_id, **fields)

    SessionTracker(manager.project_dir).record_tasks([task.id], created=True)
    logger.success(f"Created task: {task.label()}")


@task_app.command()
def update(
    task_id: int = typer.Argument(None, help="ID of the task to update"),
    title: str = typer.Option(None, "--title", help="New title"),
    description: str = typer.Option(None, "--description", "-d", help="New description"),
    priority: TaskPriority = typer.Option(None, "--priority", "-p", help="New priority"),
    status: TaskStatus = typer.Option(None, "--status", "-s", help="New status"),
    tags: str = typer.Option(None, "--tags", "-t", help="Comma-separated tags, replacing the current ones"),
    due: str = typer.Option(None, "--due", help="Due date (YYYY-MM-DD)"),
    file_keywords: str = typer.Option(
        None, "--file-keywords", help="Comma-separated keywords; update every task they match instead"
    ),
):
    """Update a task, or every task matching a set of keywords."""
    updates = {
        "title": title,
        "description": description,
        "priority": priority.value if priority else None,
        "status": status.value if status else None,
        "tags": split_csv(tags) if tags is not None else None,
        "due_date": _check_due_date(due),
    }
    updates = {key: value for key, value in updates.items() if value is not None}

    with cli_errors("Failed to update task"):
        if not updates:
            raise TaskLinkError("No updates provided.")
        if task_id is None and not file_keywords:
            raise TaskLinkError("Give a task ID or --file-keywords.")

        client, project = get_client_and_project()
        if not file_keywords:
            task = client.update_task(task_id, **updates)
            logger.success(f"Updated task: {task.label()}")
            return

        keywords = split_csv(file_keywords)
        matches = rank(client.get_tasks(project.project_id), keywords)
        if not matches:
            console.print(f"[yellow]No tasks match: {', '.join(keywords)}[/yellow]")
            return

    rows = []
    failures = 0
    for match in matches:
        try:
            task = client.update_task(match.task.id, **updates)
            rows.append([task.id, task.title, match.score, "✅ updated"])
        except ApiError as error:
            failures += 1
            rows.append([match.task.id, match.task.title, match.score, f"❌ {error}"])
    print_table(["ID", "Title", "Score", "Result"], rows, title="Keyword Update")
    if failures:
        raise typer.Exit(1)


def _set_status(task_ref: str, status: TaskStatus, title: str) -> None:
    with cli_errors(title):
        manager = ConfigManager()
        client, project = get_client_and_project(manager)
        task_id = resolve_task_id(client, project.project_id, task_ref)
        task = client.update_task_status(task_id, status)
    SessionTracker(manager.project_dir).record_tasks([task.id])
    logger.success(f"{task.title} (ID: {task.id}) is now {task.status.value}")


@task_app.command()
def done(task: str = typer.Argument(..., help="Task ID or part of its title")):
    """Mark a task as done."""
    _set_status(task, TaskStatus.DONE, "Failed to complete task")


@task_app.command()
def start(task: str = typer.Argument(..., help="Task ID or part of its title")):
    """Mark a task as in progress."""
    _set_status(task, TaskStatus.IN_PROGRESS, "Failed to start task")


@task_app.command()
def delete(
    task_id: int = typer.Argument(..., help="ID of the task to delete"),
    force: bool = typer.Option(False, "--force", "-f", help="Don't ask for confirmation"),
):
    """Delete a task."""
    with cli_errors("Failed to delete task"):
        client, _ = get_client_and_project()
        task = client.get_task(task_id)
        if not force and not typer.confirm(f'Delete task "{task.title}" (ID: {task.id})?', default=False):
            console.print("Deletion cancelled.")
            return
        client.delete_task(task_id)
    logger.success(f"Deleted task {task_id}")
