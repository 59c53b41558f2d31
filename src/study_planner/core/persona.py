# src/study_planner/core/persona.py

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Final

from ..tasks.task_models import Task

BASE_PERSONA_PROMPT: Final[str] = """
You are a friendly study assistant inside a personal study planner.

Scope:
- Help the student plan study sessions, break subjects into smaller tasks,
  and keep motivation up.
- Point to planner features when relevant: /plan (smart plan), /timetable, /dashboard.

Truthfulness:
- Only refer to tasks listed below. If a detail is not there, say you do not know it.

Style:
- Match the user's language.
- Keep replies short: 1-3 sentences unless asked for detail.
- No code blocks.
""".strip()


def get_system_prompt(pending: Iterable[Task] = (), *, now: datetime | None = None) -> str:
    """System prompt for the LLM backend, with the student's pending tasks appended."""
    now = now or datetime.now()
    lines = [BASE_PERSONA_PROMPT, "", f"Current local time: {now.replace(microsecond=0).isoformat()}"]

    pending = list(pending)
    if pending:
        lines.append("")
        lines.append("Pending study tasks:")
        for t in pending:
            lines.append(
                f"- {t.subject}: {t.topic} ({t.duration:g}h, {t.priority.value}, "
                f"due {t.deadline.isoformat(timespec='minutes')})"
            )
    return "\n".join(lines)
