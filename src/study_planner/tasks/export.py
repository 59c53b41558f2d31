# src/study_planner/tasks/export.py

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .task_models import Task

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "study_plan_tasks.json"


def export_payload(tasks: Iterable[Task]) -> str:
    """Indented JSON array of tasks, same record format as the stored list."""
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False, indent=2)


def parse_payload(text: str) -> list[Task]:
    """
    Inverse of export_payload().

    Unlike TaskStore loading this is strict: an import the user asked for should
    fail loudly instead of silently dropping records.
    """
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("export payload must be a JSON array of tasks")
    out: list[Task] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"task #{i} is not an object")
        try:
            out.append(Task.from_dict(item))
        except KeyError as e:
            raise ValueError(f"task #{i} is missing field {e.args[0]!r}") from e
        except ValueError as e:
            raise ValueError(f"task #{i}: {e}") from e
    return out


def write_export(tasks: Iterable[Task], directory: str | Path) -> Path:
    """Write <directory>/study_plan_tasks.json atomically and return its path."""
    path = Path(directory).expanduser() / EXPORT_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(export_payload(tasks), "utf-8")
    os.replace(tmp, path)
    logger.info("Exported tasks to %s", path)
    return path


def read_export(path: str | Path) -> list[Task]:
    return parse_payload(Path(path).expanduser().read_text("utf-8"))
