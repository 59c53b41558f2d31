# src/study_planner/core/chat.py

"""
Chat assistant orchestration.

Transport-agnostic: the console (or any other front-end) passes user text in
and receives one reply string back. The backend is an LLMClient, either the
canned keyword responder or the OpenAI-compatible streaming client.

Key invariants:
- blank input gets no reply,
- a reply is produced after a fixed delay, once; there is no queue, so
  overlapping calls simply run side by side,
- history is updated only after a successful completion.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from ..tasks.task_models import Task
from .persona import get_system_prompt
from .ports import ChatMessage, LLMClient

logger = logging.getLogger(__name__)

DEFAULT_REPLY_DELAY_SECONDS = 0.6
MAX_HISTORY_MESSAGES = 20


class StudyAssistant:
    def __init__(
        self,
        llm: LLMClient,
        *,
        delay_seconds: float = DEFAULT_REPLY_DELAY_SECONDS,
        max_history: int = MAX_HISTORY_MESSAGES,
    ) -> None:
        self._llm = llm
        self._delay = max(0.0, float(delay_seconds))
        self._max_history = max(0, int(max_history))
        self.history: list[ChatMessage] = []

    @property
    def delay_seconds(self) -> float:
        return self._delay

    @property
    def backend_name(self) -> str:
        return type(self._llm).__name__

    def respond(self, text: str, pending: Iterable[Task] = ()) -> str | None:
        """Generate a reply immediately (no simulated delay)."""
        user_text = (text or "").strip()
        if not user_text:
            return None

        messages: list[ChatMessage] = [*self.history, {"role": "user", "content": user_text}]
        system_prompt = get_system_prompt(pending)

        out = "".join(piece for piece in self._llm.stream_chat(messages, system_prompt) if piece).strip()

        if out:
            self.history.append({"role": "user", "content": user_text})
            self.history.append({"role": "assistant", "content": out})
            if len(self.history) > self._max_history:
                del self.history[: len(self.history) - self._max_history]
        logger.debug("Assistant replied chars=%d", len(out))
        return out

    async def reply(self, text: str, pending: Iterable[Task] = ()) -> str | None:
        """Wait the fixed delay, then answer once."""
        if not (text or "").strip():
            return None
        await asyncio.sleep(self._delay)
        return self.respond(text, pending)
