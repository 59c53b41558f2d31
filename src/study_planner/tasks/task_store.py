# src/study_planner/tasks/task_store.py

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..core.ports import KeyValueStore
from .task_models import Priority, Task, compute_start_date, parse_duration, parse_timestamp

logger = logging.getLogger(__name__)

TASKS_KEY_PREFIX = "myStudyPlanTasks_"


def tasks_key(user_id: str) -> str:
    return f"{TASKS_KEY_PREFIX}{user_id}"


class TaskStore:
    """
    Ordered task list of one user, persisted as a JSON array in a KeyValueStore.

    The store owns the in-memory sequence; every mutation rewrites the whole
    array under tasks_key(user_id). Lookups by unknown id are no-ops.

    Loading is lenient:
    - missing key or malformed JSON -> empty list
    - records that do not parse as tasks are skipped
    Saving is not: a failing KeyValueStore.set propagates to the caller.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        user_id: str,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if not user_id or not user_id.strip():
            raise ValueError("user_id is required")
        self._kv = kv
        self._user_id = user_id
        self._clock = clock
        self._tasks: list[Task] = self._load()
        logger.info("TaskStore ready user=%s total=%s", user_id, len(self._tasks))

    @property
    def user_id(self) -> str:
        return self._user_id

    # ---- persistence ----

    def _load(self) -> list[Task]:
        raw = self._kv.get(tasks_key(self._user_id))
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored tasks for user=%s are not valid JSON; starting empty.", self._user_id)
            return []
        if not isinstance(data, list):
            logger.warning("Stored tasks for user=%s are not a list; starting empty.", self._user_id)
            return []

        out: list[Task] = []
        seen: set[str] = set()
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                task = Task.from_dict(item)
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning("Skipping malformed task record id=%s: %s", item.get("id"), e)
                continue
            if task.id in seen:
                logger.warning("Skipping duplicate task id=%s", task.id)
                continue
            seen.add(task.id)
            out.append(task)
        return out

    def _commit(self, tasks: list[Task]) -> None:
        """Persist `tasks`, then make it the in-memory list. A failed write changes nothing."""
        payload = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)
        self._kv.set(tasks_key(self._user_id), payload)
        self._tasks = tasks

    # ---- helpers ----

    def _index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def _new_id(self) -> str:
        candidate = int(self._clock().timestamp() * 1000)
        taken = {t.id for t in self._tasks}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    # ---- public API ----

    def list(self) -> list[Task]:
        """Tasks in insertion order (a copy; callers re-sort for display)."""
        return list(self._tasks)

    def get(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        return None if idx is None else self._tasks[idx]

    def add(self, data: Mapping[str, Any]) -> Task:
        """
        Create a task from loosely-typed input (form fields, CLI key=value pairs).

        Required: duration, deadline. subject/topic default to "", priority to medium.
        """
        if "duration" not in data:
            raise ValueError("duration is required")
        if "deadline" not in data:
            raise ValueError("deadline is required")

        duration = parse_duration(data["duration"])
        deadline = parse_timestamp(data["deadline"])

        task = Task(
            id=self._new_id(),
            subject=str(data.get("subject") or "").strip(),
            topic=str(data.get("topic") or "").strip(),
            duration=duration,
            priority=Priority.parse(data.get("priority") or Priority.MEDIUM),
            deadline=deadline,
            start_date=compute_start_date(deadline, duration),
            completed=False,
            created_at=self._clock(),
        )
        self._commit([*self._tasks, task])
        logger.debug("Task added id=%s subject=%s deadline=%s", task.id, task.subject, task.deadline)
        return task

    def update(self, task_id: str, data: Mapping[str, Any]) -> Task | None:
        """
        Replace the mutable fields present in `data`; start_date is recomputed.

        id, completed and created_at are never touched. Unknown id -> None.
        """
        idx = self._index_of(task_id)
        if idx is None:
            logger.debug("update: task id=%s not found", task_id)
            return None

        current = self._tasks[idx]
        duration = parse_duration(data["duration"]) if "duration" in data else current.duration
        deadline = parse_timestamp(data["deadline"]) if "deadline" in data else current.deadline

        updated = replace(
            current,
            subject=str(data["subject"]).strip() if "subject" in data else current.subject,
            topic=str(data["topic"]).strip() if "topic" in data else current.topic,
            duration=duration,
            priority=Priority.parse(data["priority"]) if "priority" in data else current.priority,
            deadline=deadline,
            start_date=compute_start_date(deadline, duration),
        )
        tasks = list(self._tasks)
        tasks[idx] = updated
        self._commit(tasks)
        logger.debug("Task updated id=%s", task_id)
        return updated

    def remove(self, task_id: str) -> bool:
        """Drop the task. Unknown ids return False and write nothing."""
        remaining = [t for t in self._tasks if t.id != task_id]
        if len(remaining) == len(self._tasks):
            return False
        self._commit(remaining)
        logger.debug("Task removed id=%s", task_id)
        return True

    def toggle_complete(self, task_id: str) -> Task | None:
        idx = self._index_of(task_id)
        if idx is None:
            return None
        task = replace(self._tasks[idx], completed=not self._tasks[idx].completed)
        tasks = list(self._tasks)
        tasks[idx] = task
        self._commit(tasks)
        logger.debug("Task id=%s completed=%s", task_id, task.completed)
        return task

    def replace_all(self, tasks: Iterable[Task]) -> int:
        """Swap the whole list (used by import). Duplicate ids keep the first occurrence."""
        out: list[Task] = []
        seen: set[str] = set()
        for t in tasks:
            if t.id in seen:
                continue
            seen.add(t.id)
            out.append(t)
        self._commit(out)
        logger.info("TaskStore replaced user=%s total=%s", self._user_id, len(out))
        return len(out)
