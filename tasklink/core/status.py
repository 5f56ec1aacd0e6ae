"""
Status suggestions for tasks touched by file changes.
"""

from enum import Enum

from tasklink.core.task import TaskStatus


class ChangeType(str, Enum):
    """Kind of file-system change observed for a file."""
    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"


def suggest_status(current_status: TaskStatus | str, change_type: ChangeType | str) -> TaskStatus:
    """
    Suggest the next status of a task after a related file changed.

    Creating or modifying a file starts a ``todo`` task. Finished tasks are
    never reopened and deletions never change anything. The suggestion is
    advisory; callers decide whether to apply it.

    Args:
        current_status: Status the task has now
        change_type: Change observed on the related file

    Returns:
        TaskStatus: Proposed status, equal to ``current_status`` when no
            transition applies
    """
    current_status = TaskStatus(current_status)
    change_type = ChangeType(change_type)

    if change_type in (ChangeType.CREATE, ChangeType.MODIFY) and current_status == TaskStatus.TODO:
        return TaskStatus.IN_PROGRESS
    return current_status
