"""
Helpers shared by the CLI commands.
"""

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer

from tasklink.api_client import TaskApiClient
from tasklink.config import ConfigManager, GlobalConfig, ProjectConfig
from tasklink.core.status import ChangeType
from tasklink.core.task import Task
from tasklink.errors import TaskLinkError
from tasklink.linker import LinkResult, TaskLinker
from tasklink.session import SessionTracker
from tasklink.utils.file import safe_read_file
from tasklink.utils.rich_console import get_console, print_error, print_table

console = get_console()


def make_client(config: GlobalConfig) -> TaskApiClient:
    return TaskApiClient(config)


@contextmanager
def cli_errors(title: str) -> Iterator[None]:
    """Render tasklink errors as a red panel and exit with status 1."""
    try:
        yield
    except TaskLinkError as error:
        print_error(str(error), title=title)
        raise typer.Exit(1)


def get_client_and_project(manager: Optional[ConfigManager] = None) -> tuple[TaskApiClient, ProjectConfig]:
    manager = manager or ConfigManager()
    api_config, project_config = manager.require_api_config()
    return make_client(api_config), project_config


def split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def select_task(tasks: list[Task], title: str = "Multiple tasks found") -> Task:
    """Ask the user to pick one of several tasks by number."""
    rows = [[str(index + 1), task.id, task.title, task.status.value] for index, task in enumerate(tasks)]
    print_table(["#", "ID", "Title", "Status"], rows, title=title)
    choice = typer.prompt("Select a task by number", type=int)
    if not 1 <= choice <= len(tasks):
        raise TaskLinkError(f"Invalid selection: {choice}")
    return tasks[choice - 1]


def resolve_task_id(client: TaskApiClient, project_id: str, task_ref: str) -> int:
    """
    Turn a task id or a title fragment into a task id.

    Raises:
        TaskLinkError: If no task title contains the fragment
    """
    if task_ref.isdigit():
        return int(task_ref)

    tasks = client.find_tasks_by_keywords(project_id, [task_ref])
    if not tasks:
        raise TaskLinkError(f"No task found with title containing: {task_ref}")
    if len(tasks) == 1:
        return tasks[0].id
    return select_task(tasks).id


def display_path(file_path: str, root: Optional[Path] = None) -> str:
    """Path relative to ``root`` (default: cwd) when it lies inside it."""
    root = (root or Path.cwd()).resolve()
    try:
        return Path(file_path).resolve().relative_to(root).as_posix()
    except ValueError:
        return file_path


def link_change(
    linker: TaskLinker,
    change_type: ChangeType,
    file_path: str,
    content: Optional[str] = None,
    apply: bool = True,
    manager: Optional[ConfigManager] = None,
    tracker: Optional[SessionTracker] = None,
) -> list[LinkResult]:
    """
    Run the linker for one file change and record it in the session and the
    project's task mappings. Nothing is recorded when ``apply`` is False.
    """
    manager = manager or ConfigManager()
    tracker = tracker or SessionTracker(manager.project_dir)

    if content is None and change_type != ChangeType.DELETE and os.path.isfile(file_path):
        content = safe_read_file(file_path)

    relative_path = display_path(file_path, manager.project_dir)
    results = linker.link(relative_path, content, change_type, apply=apply)
    if not apply:
        return results

    tracker.record_file(relative_path)
    applied = [result.task.id for result in results if result.applied]
    if applied:
        tracker.record_tasks(applied)
    if results:
        manager.record_task_mapping(relative_path, [result.task.id for result in results])
    return results


def print_link_results(file_path: str, results: list[LinkResult], dry_run: bool = False) -> None:
    if not results:
        console.print(f"[dim]No related tasks for {file_path}[/dim]")
        return
    for result in results:
        task = result.task
        if result.error:
            console.print(f"[red]❌ Failed to update {task.title} (ID: {task.id}): {result.error}[/red]")
        elif result.applied:
            console.print(
                f"[green]🚧 {task.title} (ID: {task.id}): "
                f"{task.status.value} → {result.suggested_status.value}[/green]"
            )
        elif result.changed and dry_run:
            console.print(
                f"[yellow]Would move {task.title} (ID: {task.id}) "
                f"to {result.suggested_status.value}[/yellow]"
            )
        else:
            console.print(f"[dim]{task.title} (ID: {task.id}) stays {task.status.value}[/dim]")
