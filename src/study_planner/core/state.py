# src/study_planner/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..tasks.task_store import TaskStore
from .chat import StudyAssistant
from .ports import KeyValueStore
from .session import NotLoggedInError, Session


@dataclass
class AppState:
    # Settings object (config.Settings or a SimpleNamespace in tests).
    settings: Any

    kv: KeyValueStore
    session: Session
    assistant: StudyAssistant

    # Open task list of the logged-in user (None while logged out).
    task_store: TaskStore | None = None

    # Two-step delete: /delete remembers the id, /confirm performs it.
    pending_delete_id: str | None = None

    clock: Callable[[], datetime] = field(default=datetime.now)

    def now(self) -> datetime:
        return self.clock()

    def open_task_store(self) -> TaskStore:
        """(Re)load the task list of the current session user."""
        user = self.session.require_user()
        self.task_store = TaskStore(self.kv, user, clock=self.clock)
        self.pending_delete_id = None
        return self.task_store

    def close_task_store(self) -> None:
        self.task_store = None
        self.pending_delete_id = None

    def require_store(self) -> TaskStore:
        if self.task_store is None:
            if not self.session.is_logged_in():
                raise NotLoggedInError("No user is logged in.")
            return self.open_task_store()
        return self.task_store
