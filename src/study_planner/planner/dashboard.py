# src/study_planner/planner/dashboard.py

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from ..tasks.task_models import Priority, Task

RECENT_LIMIT = 5


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    total_hours: float
    completion_percentage: int


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    task_list = list(tasks)
    total = len(task_list)
    completed = sum(1 for t in task_list if t.completed)
    total_hours = sum(t.duration for t in task_list)
    pct = _round_half_up(completed / total * 100) if total > 0 else 0
    return TaskStats(
        total=total,
        completed=completed,
        pending=total - completed,
        total_hours=total_hours,
        completion_percentage=pct,
    )


def recent_tasks(tasks: Iterable[Task], limit: int = RECENT_LIMIT) -> list[Task]:
    """Newest first by creation time."""
    return sorted(tasks, key=lambda t: t.created_at, reverse=True)[:limit]


def filter_tasks(
    tasks: Iterable[Task],
    query: str = "",
    priority: Priority | str | None = None,
) -> list[Task]:
    """Case-insensitive substring search on subject/topic plus an optional priority filter."""
    needle = (query or "").strip().lower()
    wanted: Priority | None = None
    if priority is not None and str(priority).lower() != "all":
        wanted = Priority.parse(priority)

    out: list[Task] = []
    for t in tasks:
        if needle and needle not in t.subject.lower() and needle not in t.topic.lower():
            continue
        if wanted is not None and t.priority != wanted:
            continue
        out.append(t)
    return out


def sort_for_display(tasks: Iterable[Task]) -> list[Task]:
    """Pending before completed, then earliest deadline first."""
    return sorted(tasks, key=lambda t: (t.completed, t.deadline))


def days_until(task: Task, now: datetime) -> int:
    return math.ceil((task.deadline - now).total_seconds() / 86400.0)


def deadline_badge(task: Task, now: datetime) -> str:
    days = days_until(task, now)
    if days < 0 and not task.completed:
        return "Overdue"
    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    if 1 < days <= 3:
        return f"{days} days"
    return ""
