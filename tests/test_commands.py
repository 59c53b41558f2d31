# tests/test_commands.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from study_planner.cli.commands import CommandRegistry, registry
from study_planner.connectors import console_connector
from study_planner.connectors.console_connector import handle_line
from study_planner.core.state import AppState
from study_planner.llm.offline import GENERIC_RESPONSES, KEYWORD_RESPONSES
from study_planner.tasks.export import EXPORT_FILENAME

from .fakes import NOW, FakeClock


def login(state: AppState) -> None:
    assert registry.handle(state, "/login student@example.com") == "Logged in as student@example.com (0 tasks)."


def add(state: AppState, line: str) -> str:
    reply = registry.handle(state, line) or ""
    assert reply.startswith("Task added successfully!"), reply
    return reply.rsplit("id ", 1)[1].rstrip(")")


def test_command_registry_routes_and_rejects_unknown(state: AppState) -> None:
    reg = CommandRegistry()
    seen: list[list[str]] = []

    def echo(state: AppState, args: list[str]) -> str:
        seen.append(args)
        return "echo"

    reg.register("echo", echo, "Echo.", aliases=["e"])

    assert reg.handle(state, '/E one "two words"') == "echo"
    assert seen == [["one", "two words"]]
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "/echo - Echo." in reg.build_help()


def test_task_commands_require_login(state: AppState) -> None:
    for line in ("/add subject=Math", "/list", "/plan", "/timetable", "/export"):
        assert registry.handle(state, line) == "Please /login <email> first."
    assert registry.handle(state, "/login   ") == "Usage: /login <email>"
    assert registry.handle(state, "/whoami") == "Guest"


def test_add_list_and_toggle(state: AppState, clock: FakeClock) -> None:
    login(state)
    task_id = add(
        state,
        '/add subject=Math topic="Chain rule" duration=1.5 priority=high deadline=2026-10-21T14:00',
    )
    clock.advance(seconds=1)
    add(state, "/add subject=History topic=Rome duration=1 priority=low")

    listing = registry.handle(state, "/list --priority high") or ""
    assert listing.splitlines() == [
        f"[ ] {task_id}  Math - Chain rule  1.5h  high  due Oct 21, 2026, 2:00 PM (3 days)"
    ]
    assert "History" in (registry.handle(state, "/list rome") or "")

    assert registry.handle(state, f"/done {task_id}") == "Task completed!"
    assert registry.handle(state, f"/toggle {task_id}") == "Task marked as pending."
    assert registry.handle(state, "/done nope") == "Task nope not found."


def test_add_defaults_deadline_to_tomorrow(state: AppState) -> None:
    login(state)
    task_id = add(state, "/add subject=Math topic=Limits duration=2")
    task = state.require_store().get(task_id)
    assert task is not None
    assert task.deadline == NOW.replace(day=NOW.day + 1)


def test_invalid_input_is_reported(state: AppState) -> None:
    login(state)
    assert (registry.handle(state, "/add subject=Math duration=abc") or "").startswith("Invalid input:")
    assert (registry.handle(state, "/add colour=red") or "").startswith("Invalid input:")
    assert (registry.handle(state, "/theme neon") or "").startswith("Invalid input:")
    assert state.require_store().list() == []


def test_delete_needs_confirmation(state: AppState) -> None:
    login(state)
    task_id = add(state, "/add subject=Math topic=Limits duration=2")

    assert registry.handle(state, f"/delete {task_id}") == (
        f"Delete 'Math' ({task_id})? Use /confirm to delete or /cancel to keep it."
    )
    assert registry.handle(state, "/cancel") == "Delete cancelled."
    assert registry.handle(state, "/confirm") == "Nothing to confirm."
    assert len(state.require_store().list()) == 1

    registry.handle(state, f"/delete {task_id}")
    assert registry.handle(state, "/confirm") == "Task deleted successfully!"
    assert state.require_store().list() == []


def test_plan_and_timetable_views(state: AppState) -> None:
    login(state)
    assert registry.handle(state, "/plan") == "No pending tasks to plan!"

    add(state, "/add subject=Physics topic=Waves duration=2 priority=high deadline=2026-10-21T14:00")

    plan = (registry.handle(state, "/plan") or "").splitlines()
    assert plan[0] == "Smart plan (most urgent first):"
    assert "Physics - Waves" in plan[1]

    table = (registry.handle(state, "/timetable") or "").splitlines()
    assert table[0] == "Week of 2026-10-19 (range_overlap)"
    rows = {line.split("  ")[0].strip(): line for line in table[2:]}
    assert "Physics" in rows["12 PM"]
    assert "Physics" in rows["1 PM"]
    assert "Physics" not in rows["2 PM"]

    assert "nearest_hour" in (registry.handle(state, "/timetable nearest_hour") or "")


def test_dashboard_reports_progress(state: AppState) -> None:
    login(state)
    task_id = add(state, "/add subject=Math topic=Limits duration=2")
    registry.handle(state, f"/done {task_id}")

    dashboard = registry.handle(state, "/dash") or ""
    assert "Progress: 100% Complete" in dashboard
    assert "Math - Limits" in dashboard


def test_export_and_import(state: AppState, tmp_path: Path) -> None:
    login(state)
    add(state, "/add subject=Math topic=Limits duration=2")

    reply = registry.handle(state, f"/export {tmp_path}") or ""
    exported = tmp_path / EXPORT_FILENAME
    assert reply == f"Exported 1 tasks to {exported}"
    assert json.loads(exported.read_text("utf-8"))[0]["subject"] == "Math"

    registry.handle(state, "/logout")
    registry.handle(state, "/login other@example.com")
    assert registry.handle(state, f"/import {exported}") == f"Imported 1 tasks from {exported}"
    assert [t.subject for t in state.require_store().list()] == ["Math"]

    assert (registry.handle(state, f"/import {tmp_path / 'missing.json'}") or "").startswith("Cannot read")


def test_theme_commands(state: AppState) -> None:
    assert registry.handle(state, "/theme") == "Theme is dark."
    assert registry.handle(state, "/theme toggle") == "Theme set to light."
    assert registry.handle(state, "/theme DARK") == "Theme set to dark."


def test_handle_line_sends_plain_text_to_the_assistant(state: AppState) -> None:
    assert handle_line(state, "hello") == KEYWORD_RESPONSES[0][1]
    assert handle_line(state, "what now") == GENERIC_RESPONSES[-1]
    assert handle_line(state, "   ") is None
    assert handle_line(state, "/whoami") == "Guest"


def test_out_of_range_duration_is_invalid_input(state: AppState, tmp_path: Path) -> None:
    login(state)
    assert (registry.handle(state, "/add subject=Math duration=1e10") or "").startswith("Invalid input:")

    bad = tmp_path / EXPORT_FILENAME
    bad.write_text(
        json.dumps([{"id": "1", "subject": "x", "duration": 1e10, "priority": "low",
                     "deadline": "2026-10-20T10:00"}]),
        "utf-8",
    )
    assert (registry.handle(state, f"/import {bad}") or "").startswith("Invalid input:")
    assert state.require_store().list() == []


def test_console_reports_command_failures_as_internal_errors(
    state: AppState, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def failing_handle_line(state: AppState, line: str) -> str | None:
        raise RuntimeError("boom")

    lines = iter(["/status", "hello", "/exit"])
    monkeypatch.setattr(console_connector, "handle_line", failing_handle_line)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))

    console_connector.run_console_loop(state)

    out = capsys.readouterr().out.splitlines()
    assert sum("Internal error while handling your input." in line for line in out) == 1
    assert sum("[ASSISTANT] boom" in line for line in out) == 1
