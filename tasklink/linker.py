"""
Task Linking
============

Connects a file change to the tasks of the configured project: keywords are
extracted from the file, the project's tasks are ranked against them, and the
status advisor's suggestion is applied to the best matches.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from tasklink.api_client import TaskApiClient
from tasklink.core.keywords import extract
from tasklink.core.matcher import rank
from tasklink.core.status import ChangeType, suggest_status
from tasklink.core.task import Task, TaskStatus
from tasklink.errors import ApiError

DEFAULT_MAX_MATCHES = 3

# Editor tools reported by the post-edit hook
MODIFY_TOOLS = {"Edit", "MultiEdit", "NotebookEdit"}
CREATE_TOOLS = {"Write"}
DELETE_TOOLS = {"Delete"}


def tool_change_type(tool_type: str | None, file_existed: bool = True) -> ChangeType | None:
    """
    Translate an editor tool name into a change type.

    Args:
        tool_type: Name of the tool that touched the file
        file_existed: Whether the file existed before the tool ran

    Returns:
        ChangeType | None: The change, or None for tools that don't edit files
    """
    if tool_type in CREATE_TOOLS:
        return ChangeType.MODIFY if file_existed else ChangeType.CREATE
    if tool_type in MODIFY_TOOLS:
        return ChangeType.MODIFY
    if tool_type in DELETE_TOOLS:
        return ChangeType.DELETE
    return None


@dataclass
class LinkResult:
    task: Task
    score: int
    suggested_status: TaskStatus
    applied: bool = False
    error: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.suggested_status != self.task.status


def changed_tasks(results: list[LinkResult]) -> list[Task]:
    return [result.task for result in results if result.applied]


class TaskLinker:
    """
    Links file changes to the tasks of one remote project.

    Attributes:
        client (TaskApiClient): Client for the task service
        project_id (str): Remote project whose tasks are matched
        max_matches (int): Number of top-ranked tasks considered per change
    """

    def __init__(self, client: TaskApiClient, project_id: str, max_matches: int = DEFAULT_MAX_MATCHES):
        self.client = client
        self.project_id = project_id
        self.max_matches = max_matches

    def link(
        self,
        file_path: str,
        content: str | None = None,
        change_type: ChangeType = ChangeType.MODIFY,
        apply: bool = True,
    ) -> list[LinkResult]:
        """
        Find the tasks related to a changed file and advance their status.

        Args:
            file_path: Path of the changed file
            content: Content of the file after the change, if available
            change_type: What happened to the file
            apply: Push status changes to the service; otherwise only suggest

        Returns:
            list[LinkResult]: Best matches first

        Raises:
            ApiError: If the tasks of the project can't be fetched
        """
        keywords = extract(file_path, content)
        if not keywords:
            logger.debug(f"No keywords for {file_path}, nothing to link")
            return []
        logger.debug(f"Keywords for {file_path}: {keywords}")

        tasks = self.client.get_tasks(self.project_id)
        matches = rank(tasks, keywords)[: self.max_matches]

        results = []
        for match in matches:
            result = LinkResult(
                task=match.task,
                score=match.score,
                suggested_status=suggest_status(match.task.status, change_type),
            )
            if apply and result.changed:
                self._apply(result)
            results.append(result)
        return results

    def _apply(self, result: LinkResult) -> None:
        try:
            self.client.update_task_status(result.task.id, result.suggested_status)
        except ApiError as error:
            logger.error(f"Failed to update task {result.task.id}: {error}")
            result.error = str(error)
            return
        result.applied = True
        logger.info(
            f"Task {result.task.id} moved from {result.task.status.value} "
            f"to {result.suggested_status.value}"
        )
