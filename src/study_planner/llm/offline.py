# src/study_planner/llm/offline.py

from __future__ import annotations

import random
from collections.abc import Iterable
from typing import Final

from ..core.ports import ChatMessage

KEYWORD_RESPONSES: Final[tuple[tuple[tuple[str, ...], str], ...]] = (
    (
        ("hello", "hi"),
        "Hello! I'm here to help you study. Try asking for a plan or advice on a subject.",
    ),
    (
        ("plan", "schedule"),
        "I can help you plan! Check out the Smart Plan feature (/plan), "
        "or tell me what subjects you have pending.",
    ),
    (
        ("math", "calculus"),
        "Math requires practice! I suggest breaking down problems into smaller steps "
        "and setting a timer for 25 minutes (Pomodoro technique).",
    ),
    (
        ("tired", "break"),
        "It's important to rest! Take a 5-10 minute break. Stretch, drink water, or walk around.",
    ),
    (
        ("thank",),
        "You're welcome! Keep up the good work.",
    ),
)

GENERIC_RESPONSES: Final[tuple[str, ...]] = (
    "That sounds important. Have you broken it down into smaller tasks?",
    "Make sure to prioritize your most urgent deadlines first.",
    "Remember to stay hydrated while studying!",
    "I've noted that. Is there anything else you need help organizing?",
)


def canned_response(text: str, rng: random.Random) -> str:
    """
    First keyword group with a substring hit wins; otherwise a uniform pick
    from GENERIC_RESPONSES. Matching is plain substring ("this" hits "hi").
    """
    lower = (text or "").lower()
    for keywords, response in KEYWORD_RESPONSES:
        if any(k in lower for k in keywords):
            return response
    return rng.choice(GENERIC_RESPONSES)


class CannedLLMClient:
    """
    Offline keyword-table responder used when no external LLM is configured.

    It answers the last user message and ignores the system prompt.
    Pass a seeded random.Random to make the fallback picks reproducible.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        user_text = ""
        for m in reversed(messages):
            if m.get("role") == "user":
                user_text = m.get("content", "")
                break
        yield canned_response(user_text, self._rng)
