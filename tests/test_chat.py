# tests/test_chat.py

from __future__ import annotations

import random
from datetime import datetime

import pytest

from study_planner.core.chat import StudyAssistant
from study_planner.llm.offline import (
    GENERIC_RESPONSES,
    KEYWORD_RESPONSES,
    CannedLLMClient,
    canned_response,
)
from study_planner.tasks.task_models import Priority, Task

from .fakes import NOW, FakeLLMClient, LastChoiceRandom


@pytest.mark.parametrize(
    ("text", "group"),
    [
        ("Hello there", 0),
        ("HI", 0),
        ("Can you make a schedule?", 1),
        ("calculus is hard", 2),
        ("I'm so tired", 3),
        ("thanks!", 4),
        # First group wins: "this" contains "hi".
        ("this plan is good", 0),
    ],
)
def test_keyword_routing(text: str, group: int) -> None:
    assert canned_response(text, random.Random(0)) == KEYWORD_RESPONSES[group][1]


def test_unmatched_text_gets_a_generic_reply() -> None:
    assert canned_response("quantum entanglement", LastChoiceRandom()) == GENERIC_RESPONSES[-1]
    assert canned_response("quantum entanglement", random.Random(7)) in GENERIC_RESPONSES


def test_respond_ignores_blank_input() -> None:
    llm = FakeLLMClient("unused")
    assistant = StudyAssistant(llm, delay_seconds=0)
    assert assistant.respond("   ") is None
    assert llm.calls == []
    assert assistant.history == []


def test_respond_passes_pending_tasks_in_system_prompt() -> None:
    llm = FakeLLMClient("Start with Math.")
    assistant = StudyAssistant(llm, delay_seconds=0)
    task = Task(
        id="1",
        subject="Math",
        topic="Series",
        duration=2.0,
        priority=Priority.HIGH,
        deadline=datetime(2026, 10, 20, 10, 0),
        start_date=datetime(2026, 10, 20, 8, 0),
        completed=False,
        created_at=NOW,
    )

    assert assistant.respond("what first?", [task]) == "Start with Math."

    messages, system_prompt = llm.calls[0]
    assert messages[-1] == {"role": "user", "content": "what first?"}
    assert "Math: Series" in system_prompt
    assert assistant.history == [
        {"role": "user", "content": "what first?"},
        {"role": "assistant", "content": "Start with Math."},
    ]


def test_empty_completion_is_not_recorded() -> None:
    assistant = StudyAssistant(FakeLLMClient("   "), delay_seconds=0)
    assert assistant.respond("hello") == ""
    assert assistant.history == []


def test_history_is_capped() -> None:
    assistant = StudyAssistant(FakeLLMClient("ok"), delay_seconds=0, max_history=4)
    for i in range(5):
        assistant.respond(f"msg {i}")
    assert len(assistant.history) == 4
    assert assistant.history[0]["content"] == "msg 3"


@pytest.mark.asyncio
async def test_reply_answers_once_with_canned_backend() -> None:
    assistant = StudyAssistant(CannedLLMClient(LastChoiceRandom()), delay_seconds=0)

    assert await assistant.reply("hi") == KEYWORD_RESPONSES[0][1]
    assert await assistant.reply("   ") is None
    assert await assistant.reply("random words") == GENERIC_RESPONSES[-1]
    assert assistant.backend_name == "CannedLLMClient"
