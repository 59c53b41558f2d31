# src/study_planner/planner/timetable.py

"""
Weekly timetable: maps tasks onto (day-of-week, hour) cells.

The grid is anchored to the calendar week that contains `now` (Monday 00:00
local time). Days are ISO weekdays 1..7 (Monday..Sunday); hours are the hour
of day of the cell start.

Two placement policies exist and are selected explicitly:

- RANGE_OVERLAP: a task occupies the interval [deadline - duration, deadline];
  it shows in every cell whose [start, start + 1h) window overlaps it.
  Every overlapping task is listed.
- NEAREST_HOUR: a task shows in the cell whose day is the deadline's weekday
  and whose hour is within one hour of the deadline's hour. Duration is
  ignored and only the first such task per cell is kept.

Completed tasks never appear under either policy.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum

from ..tasks.task_models import Task, compute_start_date

DAY_NAMES: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
DEFAULT_HOURS: tuple[int, ...] = tuple(range(8, 19))
SLOT_LENGTH = timedelta(hours=1)


class SlotPolicy(StrEnum):
    RANGE_OVERLAP = "range_overlap"
    NEAREST_HOUR = "nearest_hour"

    @classmethod
    def parse(cls, raw: str | SlotPolicy) -> SlotPolicy:
        if isinstance(raw, SlotPolicy):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"slot policy must be one of {choices} (got {raw!r})") from None


@dataclass(slots=True, frozen=True)
class SlotCell:
    day: int
    hour: int
    start: datetime
    tasks: tuple[Task, ...]

    @property
    def end(self) -> datetime:
        return self.start + SLOT_LENGTH


@dataclass(slots=True, frozen=True)
class Timetable:
    week_start: datetime
    hours: tuple[int, ...]
    policy: SlotPolicy
    cells: dict[tuple[int, int], SlotCell]

    def cell(self, day: int, hour: int) -> SlotCell:
        return self.cells[(day, hour)]

    def rows(self) -> Iterator[tuple[int, list[SlotCell]]]:
        """(hour, [Monday cell .. Sunday cell]) in display order."""
        for hour in self.hours:
            yield hour, [self.cells[(day, hour)] for day in range(1, 8)]

    def occupied(self) -> list[SlotCell]:
        return [c for c in self.cells.values() if c.tasks]


def week_start(now: datetime) -> datetime:
    """Monday 00:00 of the week containing `now`."""
    monday = now - timedelta(days=now.isoweekday() - 1)
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def slot_window(start_of_week: datetime, day: int, hour: int) -> tuple[datetime, datetime]:
    if not 1 <= day <= 7:
        raise ValueError(f"day must be 1..7 (got {day})")
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be 0..23 (got {hour})")
    start = start_of_week + timedelta(days=day - 1, hours=hour)
    return start, start + SLOT_LENGTH


def task_interval(task: Task) -> tuple[datetime, datetime]:
    return compute_start_date(task.deadline, task.duration), task.deadline


def overlaps_window(task: Task, slot_start: datetime, slot_end: datetime) -> bool:
    task_start, task_end = task_interval(task)
    return task_start < slot_end and task_end > slot_start


def near_deadline_hour(task: Task, day: int, hour: int) -> bool:
    return task.deadline.isoweekday() == day and abs(task.deadline.hour - hour) <= 1


def tasks_for_slot(
    tasks: Iterable[Task],
    day: int,
    hour: int,
    *,
    now: datetime,
    policy: SlotPolicy = SlotPolicy.RANGE_OVERLAP,
) -> list[Task]:
    pending = [t for t in tasks if not t.completed]

    if policy == SlotPolicy.NEAREST_HOUR:
        # Validates day/hour the same way the range policy does.
        slot_window(week_start(now), day, hour)
        for t in pending:
            if near_deadline_hour(t, day, hour):
                return [t]
        return []

    slot_start, slot_end = slot_window(week_start(now), day, hour)
    return [t for t in pending if overlaps_window(t, slot_start, slot_end)]


def build_timetable(
    tasks: Iterable[Task],
    *,
    now: datetime,
    policy: SlotPolicy = SlotPolicy.RANGE_OVERLAP,
    hours: Sequence[int] = DEFAULT_HOURS,
) -> Timetable:
    task_list = list(tasks)
    start_of_week = week_start(now)
    cells: dict[tuple[int, int], SlotCell] = {}
    for hour in hours:
        for day in range(1, 8):
            slot_start, _ = slot_window(start_of_week, day, hour)
            placed = tasks_for_slot(task_list, day, hour, now=now, policy=policy)
            cells[(day, hour)] = SlotCell(day=day, hour=hour, start=slot_start, tasks=tuple(placed))
    return Timetable(week_start=start_of_week, hours=tuple(hours), policy=policy, cells=cells)


def hours_from_settings(settings: object) -> tuple[int, ...]:
    first = int(getattr(settings, "timetable_first_hour", DEFAULT_HOURS[0]))
    last = int(getattr(settings, "timetable_last_hour", DEFAULT_HOURS[-1]))
    first = max(0, min(23, first))
    last = max(first, min(23, last))
    return tuple(range(first, last + 1))
