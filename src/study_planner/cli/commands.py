# src/study_planner/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path

from ..core.session import NotLoggedInError
from ..core.state import AppState
from ..planner.dashboard import compute_stats, filter_tasks, recent_tasks, sort_for_display
from ..planner.smart_plan import DEFAULT_PLAN_LIMIT, rank_pending
from ..planner.timetable import SlotPolicy, build_timetable, hours_from_settings
from ..tasks.export import read_export, write_export
from . import views

CommandHandler = Callable[[AppState, list[str]], str]

TASK_FIELDS = ("subject", "topic", "duration", "priority", "deadline")

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like '/command args'.
        Returns a reply string or None if the line is not a command.

        Arguments are split shell-style, so values may be quoted:
          /add subject=Math topic="Chain rule" duration=1.5 deadline=2026-10-21T14:00
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except NotLoggedInError:
            return "Please /login <email> first."
        except ValueError as e:
            logger.debug("/%s rejected: %s", name, e)
            return f"Invalid input: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_fields(args: list[str]) -> dict[str, str]:
    """key=value pairs -> dict, restricted to TASK_FIELDS."""
    out: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        key = key.strip().lower()
        if not sep:
            raise ValueError(f"expected key=value, got {arg!r}")
        if key not in TASK_FIELDS:
            raise ValueError(f"unknown field {key!r} (fields: {', '.join(TASK_FIELDS)})")
        out[key] = value
    return out


def _require_id(args: list[str], usage: str) -> str:
    if not args:
        raise ValueError(f"usage: {usage}")
    return args[0]


# ---- session ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    user = state.session.current_user() or "(not logged in)"
    count = len(state.task_store.list()) if state.task_store is not None else 0
    backend = state.assistant.backend_name
    return (
        "Status:\n"
        f"  User: {user}\n"
        f"  Tasks: {count}\n"
        f"  Theme: {state.session.theme()}\n"
        f"  Timetable policy: {getattr(state.settings, 'slot_policy', SlotPolicy.RANGE_OVERLAP.value)}\n"
        f"  Chat backend: {backend}"
    )


def cmd_login(state: AppState, args: list[str]) -> str:
    if not args or not state.session.login(" ".join(args)):
        return "Usage: /login <email>"
    store = state.open_task_store()
    return f"Logged in as {store.user_id} ({len(store.list())} tasks)."


def cmd_logout(state: AppState, args: list[str]) -> str:
    if not state.session.is_logged_in():
        return "Not logged in."
    state.session.logout()
    state.close_task_store()
    return "Logged out."


def cmd_whoami(state: AppState, args: list[str]) -> str:
    return state.session.current_user() or "Guest"


# ---- task CRUD ----


def cmd_add(state: AppState, args: list[str]) -> str:
    store = state.require_store()
    data: dict[str, object] = dict(_parse_fields(args))
    if "deadline" not in data:
        # Same default as the add form: this time tomorrow.
        data["deadline"] = (state.now() + timedelta(days=1)).replace(second=0, microsecond=0)
    task = store.add(data)
    return f"Task added successfully! (id {task.id})"


def cmd_edit(state: AppState, args: list[str]) -> str:
    store = state.require_store()
    task_id = _require_id(args, "/edit <id> field=value ...")
    fields = _parse_fields(args[1:])
    if not fields:
        raise ValueError("nothing to change; pass field=value pairs")
    if store.update(task_id, fields) is None:
        return f"Task {task_id} not found."
    return "Task updated successfully!"


def cmd_view(state: AppState, args: list[str]) -> str:
    store = state.require_store()
    task_id = _require_id(args, "/view <id>")
    task = store.get(task_id)
    if task is None:
        return f"Task {task_id} not found."
    return views.format_task_detail(task)


def cmd_done(state: AppState, args: list[str]) -> str:
    store = state.require_store()
    task_id = _require_id(args, "/done <id>")
    task = store.toggle_complete(task_id)
    if task is None:
        return f"Task {task_id} not found."
    return "Task completed!" if task.completed else "Task marked as pending."


def cmd_delete(state: AppState, args: list[str]) -> str:
    store = state.require_store()
    task_id = _require_id(args, "/delete <id>")
    task = store.get(task_id)
    if task is None:
        return f"Task {task_id} not found."
    state.pending_delete_id = task_id
    return f"Delete '{task.subject}' ({task_id})? Use /confirm to delete or /cancel to keep it."


def cmd_confirm(state: AppState, args: list[str]) -> str:
    store = state.require_store()
    task_id = state.pending_delete_id
    if task_id is None:
        return "Nothing to confirm."
    state.pending_delete_id = None
    store.remove(task_id)
    return "Task deleted successfully!"


def cmd_cancel(state: AppState, args: list[str]) -> str:
    if state.pending_delete_id is None:
        return "Nothing to cancel."
    state.pending_delete_id = None
    return "Delete cancelled."


# ---- views ----


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list                      -> all tasks
    /list calculus             -> search subject/topic
    /list --priority high      -> filter by priority (low|medium|high|all)
    """
    store = state.require_store()
    priority: str | None = None
    words: list[str] = []
    it = iter(args)
    for arg in it:
        if arg in ("--priority", "-p"):
            priority = next(it, None)
            if priority is None:
                raise ValueError("--priority needs a value")
        else:
            words.append(arg)
    tasks = sort_for_display(filter_tasks(store.list(), " ".join(words), priority))
    return views.format_task_list(tasks, state.now())


def cmd_dashboard(state: AppState, args: list[str]) -> str:
    tasks = state.require_store().list()
    return views.format_dashboard(compute_stats(tasks), recent_tasks(tasks), state.now())


def cmd_timetable(state: AppState, args: list[str]) -> str:
    """
    /timetable                        -> policy from settings
    /timetable nearest_hour           -> override the placement policy once
    """
    tasks = state.require_store().list()
    raw_policy = args[0] if args else getattr(state.settings, "slot_policy", SlotPolicy.RANGE_OVERLAP)
    timetable = build_timetable(
        tasks,
        now=state.now(),
        policy=SlotPolicy.parse(raw_policy),
        hours=hours_from_settings(state.settings),
    )
    return views.format_timetable(timetable)


def cmd_plan(state: AppState, args: list[str]) -> str:
    tasks = state.require_store().list()
    limit = int(getattr(state.settings, "smart_plan_limit", DEFAULT_PLAN_LIMIT))
    return views.format_plan(rank_pending(tasks, now=state.now(), limit=limit), state.now())


# ---- export / preferences ----


def cmd_export(state: AppState, args: list[str]) -> str:
    store = state.require_store()
    directory = Path(args[0]) if args else Path(getattr(state.settings, "export_dir", "."))
    path = write_export(store.list(), directory)
    return f"Exported {len(store.list())} tasks to {path}"


def cmd_import(state: AppState, args: list[str]) -> str:
    store = state.require_store()
    path = _require_id(args, "/import <file>")
    try:
        tasks = read_export(path)
    except OSError as e:
        return f"Cannot read {path}: {e.strerror or e}"
    count = store.replace_all(tasks)
    return f"Imported {count} tasks from {path}"


def cmd_theme(state: AppState, args: list[str]) -> str:
    """
    /theme               -> show
    /theme light|dark    -> set
    /theme toggle        -> switch
    """
    if not args:
        return f"Theme is {state.session.theme()}."
    arg = args[0].lower()
    value = state.session.toggle_theme() if arg == "toggle" else state.session.set_theme(arg)
    return f"Theme set to {value}."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show session and settings.")
registry.register("login", cmd_login, help_text="Start a session: /login <email>.")
registry.register("logout", cmd_logout, help_text="End the session.")
registry.register("whoami", cmd_whoami, help_text="Show the current user.", aliases=["profile"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add subject=.. topic=.. duration=<hours> priority=low|medium|high "
    "deadline=YYYY-MM-DDTHH:MM.",
)
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> field=value ...")
registry.register("view", cmd_view, help_text="Show one task: /view <id>.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("delete", cmd_delete, help_text="Delete a task (asks to confirm): /delete <id>.")
registry.register("confirm", cmd_confirm, help_text="Confirm a pending delete.")
registry.register("cancel", cmd_cancel, help_text="Cancel a pending delete.")
registry.register(
    "list", cmd_list, help_text="List tasks: /list [search] [--priority low|medium|high|all]."
)
registry.register("dashboard", cmd_dashboard, help_text="Stats and recent tasks.", aliases=["dash"])
registry.register(
    "timetable", cmd_timetable, help_text="Weekly grid: /timetable [range_overlap|nearest_hour]."
)
registry.register("plan", cmd_plan, help_text="Smart plan: most urgent pending tasks.")
registry.register("export", cmd_export, help_text="Write study_plan_tasks.json: /export [dir].")
registry.register("import", cmd_import, help_text="Replace tasks from an export: /import <file>.")
registry.register("theme", cmd_theme, help_text="Theme: /theme [light|dark|toggle].")
