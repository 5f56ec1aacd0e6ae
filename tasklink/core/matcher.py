"""
Task Matching
=============

This module scores tasks against a list of keywords and ranks them.

The score is additive over keywords. Title hits weigh the most, tag hits come
next, description hits after that, and every word of the task text that
partially matches a keyword adds a small bonus so that compound identifiers
such as ``PaymentController`` still find a task about ``payment``.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from loguru import logger

from tasklink.core.task import Task


@dataclass(frozen=True)
class ScoreWeights:
    """
    Points awarded per keyword for each kind of hit.

    Attributes:
        title (int): Keyword is a substring of the title
        description (int): Keyword is a substring of the description
        tag (int): Keyword is a substring of at least one tag
        partial (int): Per task word that contains the keyword or is
            contained in it
    """
    title: int = 10
    description: int = 5
    tag: int = 7
    partial: int = 2


DEFAULT_WEIGHTS = ScoreWeights()


@dataclass(frozen=True)
class MatchResult:
    task: Task
    score: int


def score(task: Task, keywords: Iterable[str], weights: ScoreWeights = DEFAULT_WEIGHTS) -> int:
    """
    Calculate how well a task matches the given keywords.

    Args:
        task: Task snapshot to score
        keywords: Query keywords, compared case-insensitively
        weights: Points per kind of hit

    Returns:
        int: Non-negative score, 0 when the task shares no text with any keyword
    """
    title = task.title.lower()
    description = (task.description or "").lower()
    tags = [tag.lower() for tag in task.tags]
    words = task.searchable_text.lower().split()

    total = 0
    for keyword in keywords:
        keyword = keyword.lower()
        if not keyword.strip():
            continue

        if keyword in title:
            total += weights.title
        if description and keyword in description:
            total += weights.description
        if any(keyword in tag for tag in tags):
            total += weights.tag

        # Unbounded: a short keyword can fire once per matching word.
        for word in words:
            if keyword in word or word in keyword:
                total += weights.partial

    return total


def rank(
    tasks: Iterable[Task],
    keywords: Sequence[str],
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> list[MatchResult]:
    """
    Score tasks and order the ones that match by descending score.

    Tasks scoring 0 are dropped. Equal scores keep their input order.

    Args:
        tasks: Candidate tasks
        keywords: Query keywords
        weights: Points per kind of hit

    Returns:
        list[MatchResult]: Matching tasks with their scores
    """
    if not keywords:
        return []

    results = []
    for task in tasks:
        task_score = score(task, keywords, weights)
        if task_score > 0:
            results.append(MatchResult(task=task, score=task_score))

    # sorted() is stable, so ties keep the service order
    results = sorted(results, key=lambda result: result.score, reverse=True)
    logger.debug(f"Ranked {len(results)} matching task(s) for keywords {list(keywords)}")
    return results


def find_matching(
    tasks: Iterable[Task],
    keywords: Sequence[str],
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> list[Task]:
    """Tasks matching the keywords, most relevant first."""
    return [result.task for result in rank(tasks, keywords, weights)]
