# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from study_planner.core.chat import StudyAssistant
from study_planner.core.session import Session
from study_planner.core.state import AppState
from study_planner.llm.offline import CannedLLMClient
from study_planner.tasks.task_store import TaskStore

from .fakes import NOW, FakeClock, FakeKeyValueStore, LastChoiceRandom


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="study-planner",
        data_dir=tmp_path,
        kv_db_path=tmp_path / "storage.sqlite3",
        export_dir=tmp_path / "exports",
        ephemeral=True,
        slot_policy="range_overlap",
        timetable_first_hour=8,
        timetable_last_hour=18,
        smart_plan_limit=5,
        chat_delay_seconds=0.0,
        openrouter_api_key=None,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def kv() -> FakeKeyValueStore:
    return FakeKeyValueStore()


@pytest.fixture()
def store(kv: FakeKeyValueStore, clock: FakeClock) -> TaskStore:
    return TaskStore(kv, "student@example.com", clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, kv: FakeKeyValueStore, clock: FakeClock) -> AppState:
    """AppState wired with deterministic fakes; nobody is logged in yet."""
    return AppState(
        settings=settings,
        kv=kv,
        session=Session(kv),
        assistant=StudyAssistant(CannedLLMClient(LastChoiceRandom()), delay_seconds=0.0),
        clock=clock,
    )
