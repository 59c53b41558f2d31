# tests/test_timetable.py

from __future__ import annotations

from datetime import datetime

import pytest

from study_planner.planner.timetable import (
    SlotPolicy,
    build_timetable,
    slot_window,
    tasks_for_slot,
    week_start,
)
from study_planner.tasks.task_models import Priority, Task, compute_start_date

from .fakes import NOW

WEDNESDAY = 3


def make_task(task_id: str, deadline: datetime, duration: float = 2.0, *, completed: bool = False) -> Task:
    return Task(
        id=task_id,
        subject=f"Subject {task_id}",
        topic="topic",
        duration=duration,
        priority=Priority.MEDIUM,
        deadline=deadline,
        start_date=compute_start_date(deadline, duration),
        completed=completed,
        created_at=NOW,
    )


def test_week_start_is_monday_midnight() -> None:
    assert week_start(datetime(2026, 10, 22, 17, 45)) == datetime(2026, 10, 19)
    assert week_start(datetime(2026, 10, 25, 23, 59)) == datetime(2026, 10, 19)
    assert week_start(datetime(2026, 10, 19, 0, 0)) == datetime(2026, 10, 19)


def test_slot_window_maps_day_and_hour_into_the_week() -> None:
    start, end = slot_window(datetime(2026, 10, 19), WEDNESDAY, 13)
    assert start == datetime(2026, 10, 21, 13, 0)
    assert end == datetime(2026, 10, 21, 14, 0)
    with pytest.raises(ValueError):
        slot_window(datetime(2026, 10, 19), 8, 13)


def test_range_overlap_uses_half_open_slots() -> None:
    task = make_task("1", datetime(2026, 10, 21, 14, 0), duration=2)

    occupied = [h for h in range(8, 19) if tasks_for_slot([task], WEDNESDAY, h, now=NOW)]

    assert occupied == [12, 13]


def test_range_overlap_spans_midnight_and_lists_every_task() -> None:
    late = make_task("1", datetime(2026, 10, 22, 9, 0), duration=14)  # Wed 19:00 -> Thu 09:00
    other = make_task("2", datetime(2026, 10, 22, 9, 0), duration=1)

    table = build_timetable([late, other], now=NOW)

    assert [t.id for t in table.cell(4, 8).tasks] == ["1", "2"]
    assert [t.id for t in table.cell(4, 9).tasks] == []
    assert table.cell(WEDNESDAY, 18).tasks == ()


def test_range_overlap_ignores_other_weeks() -> None:
    next_week = make_task("1", datetime(2026, 10, 28, 14, 0))
    table = build_timetable([next_week], now=NOW)
    assert table.occupied() == []


@pytest.mark.parametrize("policy", list(SlotPolicy))
def test_completed_tasks_never_placed(policy: SlotPolicy) -> None:
    done = make_task("1", datetime(2026, 10, 21, 14, 0), completed=True)
    table = build_timetable([done], now=NOW, policy=policy)
    assert table.occupied() == []


def test_nearest_hour_keeps_first_match_within_one_hour() -> None:
    first = make_task("1", datetime(2026, 10, 21, 14, 30))
    second = make_task("2", datetime(2026, 10, 21, 14, 0))

    table = build_timetable([first, second], now=NOW, policy=SlotPolicy.NEAREST_HOUR)

    occupied = {(c.day, c.hour): [t.id for t in c.tasks] for c in table.occupied()}
    assert occupied == {
        (WEDNESDAY, 13): ["1"],
        (WEDNESDAY, 14): ["1"],
        (WEDNESDAY, 15): ["1"],
    }


def test_nearest_hour_matches_weekday_in_any_week() -> None:
    next_week = make_task("1", datetime(2026, 10, 28, 10, 0), duration=5)
    cells = tasks_for_slot([next_week], WEDNESDAY, 9, now=NOW, policy=SlotPolicy.NEAREST_HOUR)
    assert [t.id for t in cells] == ["1"]


def test_build_timetable_grid_shape() -> None:
    table = build_timetable([], now=NOW, hours=range(8, 19))
    assert table.week_start == datetime(2026, 10, 19)
    assert len(table.cells) == 7 * 11
    rows = list(table.rows())
    assert [h for h, _ in rows] == list(range(8, 19))
    assert all(len(cells) == 7 for _, cells in rows)


def test_slot_policy_parse() -> None:
    assert SlotPolicy.parse(" Nearest_Hour ") is SlotPolicy.NEAREST_HOUR
    with pytest.raises(ValueError):
        SlotPolicy.parse("blend")
