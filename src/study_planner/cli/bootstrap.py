# src/study_planner/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage, session, chat backend),
- reopens the task list of a remembered session.
"""

from __future__ import annotations

import logging
import random

from ..config import get_settings
from ..core.chat import StudyAssistant
from ..core.ports import KeyValueStore, LLMClient
from ..core.session import Session
from ..core.state import AppState
from ..llm.client import OpenRouterLLMClient
from ..llm.offline import CannedLLMClient
from ..planner.timetable import SlotPolicy
from ..storage.kv_store import MemoryKeyValueStore, SQLiteKeyValueStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.kv_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_kv_store(settings) -> KeyValueStore:
    if getattr(settings, "ephemeral", False):
        logger.info("Ephemeral mode: tasks and session live in memory only.")
        return MemoryKeyValueStore()
    return SQLiteKeyValueStore(settings.kv_db_path)


def create_llm_client(settings, *, rng: random.Random | None = None) -> LLMClient:
    if not getattr(settings, "openrouter_api_key", None):
        return CannedLLMClient(rng)
    try:
        return OpenRouterLLMClient(settings)
    except RuntimeError:
        logger.warning("LLM client unavailable; using canned responses.", exc_info=True)
        return CannedLLMClient(rng)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    # Fail early on a bad STUDYPLAN_SLOT_POLICY instead of on the first /timetable.
    SlotPolicy.parse(settings.slot_policy)

    if not getattr(settings, "ephemeral", False):
        _ensure_local_dirs(settings)

    kv = create_kv_store(settings)
    state = AppState(
        settings=settings,
        kv=kv,
        session=Session(kv),
        assistant=StudyAssistant(
            create_llm_client(settings),
            delay_seconds=getattr(settings, "chat_delay_seconds", 0.6),
        ),
    )

    if state.session.is_logged_in():
        state.open_task_store()
    return state
