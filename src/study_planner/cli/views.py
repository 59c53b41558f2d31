# src/study_planner/cli/views.py

"""Plain-text renderers for the console: they only format already-derived data."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from ..planner.dashboard import TaskStats, deadline_badge
from ..planner.smart_plan import RankedTask
from ..planner.timetable import DAY_NAMES, Timetable
from ..tasks.task_models import Task

CELL_WIDTH = 12


def format_date(dt: datetime) -> str:
    """Like 'Oct 21, 2026, 2:00 PM'."""
    hour = dt.hour % 12 or 12
    period = "PM" if dt.hour >= 12 else "AM"
    return f"{dt:%b} {dt.day}, {dt.year}, {hour}:{dt.minute:02d} {period}"


def format_hour(hour: int) -> str:
    period = "PM" if hour >= 12 else "AM"
    display = hour - 12 if hour > 12 else (12 if hour == 0 else hour)
    return f"{display} {period}"


def format_task_line(task: Task, now: datetime) -> str:
    mark = "[x]" if task.completed else "[ ]"
    badge = deadline_badge(task, now)
    badge_str = f" ({badge})" if badge else ""
    return (
        f"{mark} {task.id}  {task.subject} - {task.topic}  "
        f"{task.duration:g}h  {task.priority.value}  due {format_date(task.deadline)}{badge_str}"
    )


def format_task_list(tasks: Sequence[Task], now: datetime, *, empty: str = "No tasks yet.") -> str:
    if not tasks:
        return empty
    return "\n".join(format_task_line(t, now) for t in tasks)


def format_task_detail(task: Task) -> str:
    return "\n".join(
        [
            f"{task.subject}",
            f"  Topic:    {task.topic}",
            f"  Priority: {task.priority.value}",
            f"  Duration: {task.duration:g}h",
            f"  Start:    {format_date(task.start_date)}",
            f"  Deadline: {format_date(task.deadline)}",
            f"  Status:   {'Completed' if task.completed else 'Pending'}",
            f"  Id:       {task.id}",
        ]
    )


def format_stats(stats: TaskStats) -> str:
    return (
        f"Total: {stats.total}  Completed: {stats.completed}  Pending: {stats.pending}  "
        f"Hours: {stats.total_hours:.1f}\n"
        f"Progress: {stats.completion_percentage}% Complete"
    )


def format_dashboard(stats: TaskStats, recent: Sequence[Task], now: datetime) -> str:
    return "\n".join(
        [
            format_stats(stats),
            "",
            "Recent tasks:",
            format_task_list(recent, now, empty="No tasks yet. Add your first study task with /add."),
        ]
    )


def _clip(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 1] + "~"


def format_timetable(timetable: Timetable) -> str:
    week_of = timetable.week_start.date().isoformat()
    header = ["Time".ljust(8)] + [name[:3].ljust(CELL_WIDTH) for name in DAY_NAMES]
    lines = [f"Week of {week_of} ({timetable.policy.value})", " ".join(header)]
    for hour, cells in timetable.rows():
        row = [format_hour(hour).ljust(8)]
        for cell in cells:
            label = ", ".join(t.subject for t in cell.tasks)
            row.append(_clip(label, CELL_WIDTH).ljust(CELL_WIDTH))
        lines.append(" ".join(row).rstrip())
    return "\n".join(lines)


def format_plan(plan: Sequence[RankedTask], now: datetime) -> str:
    if not plan:
        return "No pending tasks to plan!"
    lines = ["Smart plan (most urgent first):"]
    for i, r in enumerate(plan, start=1):
        lines.append(f"{i}. ({r.score:.1f}) {format_task_line(r.task, now)}")
    return "\n".join(lines)
