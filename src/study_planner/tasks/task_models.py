# src/study_planner/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def weight(self) -> int:
        return PRIORITY_WEIGHTS[self]

    @classmethod
    def parse(cls, raw: Any) -> Priority:
        """Accept a Priority or a case-insensitive name; anything else is a ValueError."""
        if isinstance(raw, Priority):
            return raw
        text = str(raw or "").strip().lower()
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"priority must be one of low, medium, high (got {raw!r})") from None


PRIORITY_WEIGHTS: dict[Priority, int] = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


def parse_timestamp(raw: str | datetime) -> datetime:
    """
    Parse an ISO-8601 timestamp into a naive local datetime.

    Values with an offset (e.g. the trailing "Z" of JS toISOString) are converted
    to local time first, so every datetime in the app compares against the others.
    """
    if isinstance(raw, datetime):
        dt = raw
    else:
        text = str(raw).strip()
        if not text:
            raise ValueError("timestamp is empty")
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is not None:
        try:
            dt = dt.astimezone().replace(tzinfo=None)
        except OverflowError:
            raise ValueError(f"timestamp is out of range (got {raw!r})") from None
    return dt


def parse_duration(raw: Any) -> float:
    """Duration in hours; float() coercion, must be > 0."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"duration must be a number of hours (got {raw!r})") from None
    if not value > 0:
        raise ValueError(f"duration must be > 0 hours (got {raw!r})")
    return value


def compute_start_date(deadline: datetime, duration: float) -> datetime:
    """deadline - duration hours; a span that leaves the datetime range is a ValueError."""
    try:
        return deadline - timedelta(hours=duration)
    except OverflowError:
        raise ValueError(f"duration of {duration:g} hours is out of range") from None


def parse_completed(raw: Any) -> bool:
    """Only real booleans or the strings "true"/"false"; anything else is a ValueError."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
        return raw.strip().lower() == "true"
    raise ValueError(f"completed must be true or false (got {raw!r})")


def _created_from_id(task_id: str) -> datetime | None:
    # Ids are epoch milliseconds.
    try:
        return datetime.fromtimestamp(int(task_id) / 1000)
    except (ValueError, OverflowError, OSError):
        return None


@dataclass(slots=True)
class Task:
    id: str
    subject: str
    topic: str
    duration: float
    priority: Priority
    deadline: datetime
    start_date: datetime
    completed: bool
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the camelCase keys of the stored/exported format."""
        return {
            "id": self.id,
            "subject": self.subject,
            "topic": self.topic,
            "duration": self.duration,
            "priority": self.priority.value,
            "deadline": self.deadline.isoformat(),
            "startDate": self.start_date.isoformat(),
            "completed": self.completed,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        """
        Inverse of to_dict().

        Raises KeyError/ValueError/TypeError for records that are not tasks.
        A missing startDate is derived from deadline - duration. A missing
        createdAt is read from the epoch-millisecond id, else the start date.
        """
        task_id = str(raw["id"])
        duration = parse_duration(raw["duration"])
        deadline = parse_timestamp(raw["deadline"])
        derived_start = compute_start_date(deadline, duration)
        start_raw = raw.get("startDate")
        start_date = parse_timestamp(start_raw) if start_raw else derived_start
        created_raw = raw.get("createdAt")
        if created_raw:
            created_at = parse_timestamp(created_raw)
        else:
            created_at = _created_from_id(task_id) or start_date
        return cls(
            id=task_id,
            subject=str(raw.get("subject") or ""),
            topic=str(raw.get("topic") or ""),
            duration=duration,
            priority=Priority.parse(raw.get("priority")),
            deadline=deadline,
            start_date=start_date,
            completed=parse_completed(raw.get("completed", False)),
            created_at=created_at,
        )
