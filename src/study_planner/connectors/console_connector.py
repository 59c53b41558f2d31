# src/study_planner/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..llm.client import friendly_llm_error_message

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def _pending_tasks(state: AppState) -> list:
    if state.task_store is None:
        return []
    return [t for t in state.task_store.list() if not t.completed]


def handle_line(state: AppState, line: str) -> str | None:
    """
    One REPL step: slash-commands go to the registry, anything else to the assistant.
    Returns the text to show, or None when there is nothing to print.
    """
    cmd_response = command_registry.handle(state, line)
    if cmd_response is not None:
        return cmd_response
    return asyncio.run(state.assistant.reply(line, _pending_tasks(state)))


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    app_name = str(getattr(state.settings, "app_name", "study-planner"))
    _print_ts("[CONSOLE] Type /help for commands, anything else to chat. Use /exit to quit.\n")

    if state.session.is_logged_in():
        _print_ts(f"Welcome back, {state.session.current_user()}.")
    else:
        _print_ts("Not logged in. Use /login <email> to open your study plan.")

    while True:
        try:
            user_input = input(">>> You: ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            response = handle_line(state, user_input)
        except RuntimeError as e:
            if user_input.startswith("/"):
                logger.exception("Command failed: %s", user_input)
                _print_ts("Internal error while handling your input.")
                continue
            msg = friendly_llm_error_message(e)
            logger.info("Assistant runtime error: %s", msg)
            _print_ts(f"[ASSISTANT] {msg}")
            continue
        except Exception:
            logger.exception("Console handler crashed.")
            _print_ts("Internal error while handling your input.")
            continue

        if response is None:
            continue

        if user_input.startswith("/"):
            _print_ts(response)
        else:
            _print_ts(f"<<< {app_name}: {response}\n")

    logger.info("Console connector finished.")
