"""
Markdown Report
===============

Renders the project's task list into a markdown file (``CLAUDE.md`` by
default) that gives an editor assistant the current working context.
"""

import shutil
from collections import defaultdict
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

from tasklink.core.task import Project, Task, TaskStatus
from tasklink.session import Session

DEFAULT_REPORT_FILE = "CLAUDE.md"
MAX_TODO_TASKS = 10
MAX_DONE_TASKS = 5
MAX_TASKS_PER_TAG = 5
MAX_SESSION_FILES = 5

STATUS_MARKERS = {"todo": "⏳", "in_progress": "🚧", "done": "✅"}
PRIORITY_MARKERS = {"high": "🔴", "medium": "🟡", "low": "🟢"}


def status_marker(status: TaskStatus | str) -> str:
    return STATUS_MARKERS.get(TaskStatus(status).value, "📝")


def priority_marker(priority: str) -> str:
    return PRIORITY_MARKERS.get(getattr(priority, "value", priority), "⚪")


def group_by_status(tasks: list[Task]) -> dict[TaskStatus, list[Task]]:
    groups: dict[TaskStatus, list[Task]] = defaultdict(list)
    for task in tasks:
        groups[task.status].append(task)
    return groups


def group_by_tag(tasks: list[Task]) -> dict[str, list[Task]]:
    """Tasks per tag, untagged tasks under ``general``; tag order is first-seen."""
    groups: dict[str, list[Task]] = defaultdict(list)
    for task in tasks:
        for tag in task.tags or ["general"]:
            groups[tag].append(task)
    return groups


def sort_by_priority(tasks: list[Task]) -> list[Task]:
    return sorted(tasks, key=lambda task: task.priority.rank, reverse=True)


def _parse_date(value: str | None) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def completion_rate(tasks: list[Task]) -> int:
    if not tasks:
        return 0
    done = sum(1 for task in tasks if task.status == TaskStatus.DONE)
    return round(done / len(tasks) * 100)


def format_task(task: Task, today: date, show_completed: bool = False) -> str:
    """One markdown list item describing a task."""
    line = f"- {status_marker(task.status)} {priority_marker(task.priority)} **{task.title}** (#{task.id})"
    if task.description:
        line += f" - {task.description}"

    details = []
    if task.tags:
        details.append("Tags: " + ", ".join(f"#{tag}" for tag in task.tags))
    due = _parse_date(task.due_date)
    if due:
        overdue = due < today and task.status != TaskStatus.DONE
        details.append(f"Due: {due.isoformat()}{' ⚠️' if overdue else ''}")
    if task.assignee:
        details.append(f"Assignee: @{task.assignee.name}")
    if show_completed:
        completed = _parse_date(task.updated_at)
        if completed:
            details.append(f"Completed: {completed.isoformat()}")

    if details:
        line += f" *({', '.join(details)})*"
    return line


def render_report(
    project: Project,
    tasks: list[Task],
    session: Session | None = None,
    now: datetime | None = None,
) -> str:
    """
    Render the markdown report for a project.

    Args:
        project: Project the tasks belong to
        tasks: All tasks of the project
        session: Current editing session, if one is being tracked
        now: Timestamp written into the report, defaults to the current time

    Returns:
        str: Markdown document
    """
    now = now or datetime.now(timezone.utc)
    today = now.date()
    stamp = now.isoformat()
    by_status = group_by_status(tasks)
    in_progress = by_status.get(TaskStatus.IN_PROGRESS, [])
    todo = by_status.get(TaskStatus.TODO, [])
    done = by_status.get(TaskStatus.DONE, [])

    lines = [f"# {project.name}", ""]

    lines += [
        "## 🏗️ Project Information",
        f"- **Project ID**: `{project.id}`",
        f"- **Description**: {project.description or 'No description provided'}",
        f"- **Last Updated**: {stamp}",
        "",
    ]

    lines += [
        "## 📊 Task Summary",
        f"- **Total Tasks**: {len(tasks)}",
        f"- ✅ **Completed**: {len(done)}",
        f"- 🚧 **In Progress**: {len(in_progress)}",
        f"- ⏳ **Todo**: {len(todo)}",
    ]
    if tasks:
        lines.append(f"- 📈 **Progress**: {completion_rate(tasks)}%")
    lines.append("")

    if in_progress or todo:
        lines += ["## 🎯 Current Tasks", ""]
        if in_progress:
            lines.append("### 🚧 In Progress")
            lines += [format_task(task, today) for task in in_progress]
            lines.append("")
        if todo:
            lines.append("### ⏳ Next Up")
            lines += [format_task(task, today) for task in sort_by_priority(todo)[:MAX_TODO_TASKS]]
            if len(todo) > MAX_TODO_TASKS:
                lines.append(f"*... and {len(todo) - MAX_TODO_TASKS} more tasks*")
            lines.append("")

    if done:
        lines.append("## ✅ Recently Completed")
        recent = sorted(done, key=lambda task: task.updated_at or "", reverse=True)
        lines += [format_task(task, today, show_completed=True) for task in recent[:MAX_DONE_TASKS]]
        lines.append("")

    if session:
        lines += _session_section(session)

    lines += [
        "## 🚀 Quick Actions",
        "```bash",
        "# View all tasks",
        "tasklink status",
        "",
        "# Create a new task",
        'tasklink task create "Task title"',
        "",
        "# Mark task as done",
        "tasklink task done <task-id>",
        "",
        "# Start working on a task",
        "tasklink task start <task-id>",
        "```",
        "",
    ]

    lines += [
        "## 🤖 Context for Claude Code",
        "",
        "When working on this project, consider the following tasks and their relationships:",
        "",
    ]
    open_tasks = [task for task in tasks if task.status != TaskStatus.DONE]
    for tag, tag_tasks in group_by_tag(open_tasks).items():
        lines.append(f"### #{tag}")
        for task in tag_tasks[:MAX_TASKS_PER_TAG]:
            lines.append(
                f"- **{task.title}** ({task.status.value}) - {task.description or 'No description'}"
            )
        lines.append("")

    lines += [
        "---",
        "*This file is automatically generated by tasklink.*",
        f"*Last updated: {stamp}*",
    ]
    return "\n".join(lines)


def _session_section(session: Session) -> list[str]:
    lines = ["## 💻 Current Session", f"- **Started**: {session.start_time}"]
    if session.tasks_modified:
        lines.append(f"- **Tasks Modified**: {len(session.tasks_modified)}")
    if session.tasks_created:
        lines.append(f"- **Tasks Created**: {len(session.tasks_created)}")
    if session.files_changed:
        lines.append(f"- **Files Changed**: {len(session.files_changed)}")
        lines += [f"  - `{path}`" for path in session.files_changed[:MAX_SESSION_FILES]]
        if len(session.files_changed) > MAX_SESSION_FILES:
            lines.append(f"  - *... and {len(session.files_changed) - MAX_SESSION_FILES} more files*")
    lines.append("")
    return lines


def render_initial_report(project: Project, now: datetime | None = None) -> str:
    """Placeholder report written by ``tasklink init`` before the first sync."""
    now = now or datetime.now(timezone.utc)
    return "\n".join(
        [
            f"# {project.name}",
            "",
            "## Task Integration",
            f"- Project ID: `{project.id}`",
            f"- Last Sync: {now.isoformat()}",
            "",
            "## Current Tasks",
            "*Tasks will be loaded here by `tasklink sync --update-report`*",
            "",
            "## Session Notes",
            "*This section is updated while files are being edited*",
            "",
        ]
    )


def backup_report(path: Path) -> Path | None:
    """Copy an existing report next to itself with a timestamp suffix."""
    path = Path(path)
    if not path.exists():
        return None
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    backup = path.with_name(f"{path.name}.backup.{stamp}")
    shutil.copy2(path, backup)
    return backup


def write_report(path: Path, content: str) -> None:
    Path(path).write_text(content, encoding="utf-8")
