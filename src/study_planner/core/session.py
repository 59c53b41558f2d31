# src/study_planner/core/session.py

"""
Session presence and UI preferences kept in the key-value store.

A "session" is only the remembered identity string. It gates access to a
task list; it is not authentication and carries no security guarantee.
"""

from __future__ import annotations

import logging

from .ports import KeyValueStore

logger = logging.getLogger(__name__)

USER_KEY = "myStudyPlanUser"
THEME_KEY = "myStudyPlanTheme"

THEMES = ("dark", "light")
DEFAULT_THEME = "dark"


class NotLoggedInError(RuntimeError):
    """Raised when an operation needs a user but no session is present."""


class Session:
    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def current_user(self) -> str | None:
        user = self._kv.get(USER_KEY)
        if user is None or not user.strip():
            return None
        return user

    def is_logged_in(self) -> bool:
        return self.current_user() is not None

    def require_user(self) -> str:
        user = self.current_user()
        if user is None:
            raise NotLoggedInError("No user is logged in.")
        return user

    def login(self, identity: str) -> bool:
        """Remember `identity` as the current user. Blank input is ignored."""
        identity = (identity or "").strip()
        if not identity:
            return False
        self._kv.set(USER_KEY, identity)
        logger.info("Session started user=%s", identity)
        return True

    def logout(self) -> None:
        user = self.current_user()
        self._kv.remove(USER_KEY)
        logger.info("Session ended user=%s", user)

    # ---- theme ----

    def theme(self) -> str:
        raw = (self._kv.get(THEME_KEY) or "").strip().lower()
        return raw if raw in THEMES else DEFAULT_THEME

    def set_theme(self, theme: str) -> str:
        value = (theme or "").strip().lower()
        if value not in THEMES:
            raise ValueError(f"theme must be one of {', '.join(THEMES)} (got {theme!r})")
        self._kv.set(THEME_KEY, value)
        return value

    def toggle_theme(self) -> str:
        return self.set_theme("light" if self.theme() == "dark" else "dark")
