"""
Core matching engine: keyword extraction, task ranking and status suggestions.
"""

from tasklink.core.keywords import extract, extract_from_content, extract_from_path
from tasklink.core.matcher import DEFAULT_WEIGHTS, MatchResult, ScoreWeights, find_matching, rank, score
from tasklink.core.status import ChangeType, suggest_status
from tasklink.core.task import Project, Task, TaskPriority, TaskStatus

__all__ = [
    "ChangeType",
    "DEFAULT_WEIGHTS",
    "MatchResult",
    "Project",
    "ScoreWeights",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "extract",
    "extract_from_content",
    "extract_from_path",
    "find_matching",
    "rank",
    "score",
    "suggest_status",
]
