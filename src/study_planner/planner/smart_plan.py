# src/study_planner/planner/smart_plan.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from ..tasks.task_models import Task

DEFAULT_PLAN_LIMIT = 5
OVERDUE_BONUS = 50.0
DUE_SOON_BONUS = 20.0
DUE_SOON_HOURS = 24.0


@dataclass(slots=True, frozen=True)
class RankedTask:
    task: Task
    score: float
    hours_until: float


def hours_until(task: Task, now: datetime) -> float:
    return (task.deadline - now).total_seconds() / 3600.0


def score_task(task: Task, now: datetime) -> float:
    """
    Urgency score of a pending task:

        priority weight * 10
        + 50 if overdue, else + 20 if due within 24h
        - hours until deadline / 24

    Overdue tasks get a positive drift from the last term, so older ones rank higher.
    """
    h = hours_until(task, now)
    score = task.priority.weight * 10.0
    if h < 0:
        score += OVERDUE_BONUS
    elif h < DUE_SOON_HOURS:
        score += DUE_SOON_BONUS
    return score - h / 24.0


def rank_pending(
    tasks: Iterable[Task],
    *,
    now: datetime,
    limit: int = DEFAULT_PLAN_LIMIT,
) -> list[RankedTask]:
    """
    Top `limit` pending tasks by descending score.

    sorted() is stable, so equal scores keep store order.
    An empty result means there is nothing to plan.
    """
    ranked = [
        RankedTask(task=t, score=score_task(t, now), hours_until=hours_until(t, now))
        for t in tasks
        if not t.completed
    ]
    ranked.sort(key=lambda r: r.score, reverse=True)
    return ranked[: max(0, int(limit))]
