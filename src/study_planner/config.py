# src/study_planner/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- Every component takes the settings object it needs, so tests can pass a SimpleNamespace.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

ENV_PREFIX = "STUDYPLAN"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    kv_db_path: Path
    export_dir: Path
    ephemeral: bool

    # ---- Planner ----
    slot_policy: str
    timetable_first_hour: int
    timetable_last_hour: int
    smart_plan_limit: int

    # ---- Chat assistant ----
    chat_delay_seconds: float
    openrouter_api_key: Optional[str]
    openrouter_base_url: str
    llm_models: List[str]
    extra_headers: Dict[str, str]
    llm_connect_timeout: float
    llm_read_timeout: float
    llm_first_token_timeout: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "study-planner")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/study_planner"))
        kv_db_path = _env_path(_k("KV_DB_PATH"), data_dir / "storage.sqlite3")
        export_dir = _env_path(_k("EXPORT_DIR"), data_dir)
        ephemeral = _env_bool(_k("EPHEMERAL"), False)

        slot_policy = _env(_k("SLOT_POLICY"), "range_overlap").strip().lower()
        timetable_first_hour = _env_int(_k("TIMETABLE_FIRST_HOUR"), 8)
        timetable_last_hour = _env_int(_k("TIMETABLE_LAST_HOUR"), 18)
        smart_plan_limit = _env_int(_k("SMART_PLAN_LIMIT"), 5)

        chat_delay_seconds = _env_float(_k("CHAT_DELAY_SECONDS"), 0.6)

        openrouter_api_key = _first_env(_k("OPENROUTER_API_KEY"), "OPENROUTER_API_KEY", default=None)
        openrouter_base_url = _env(_k("OPENROUTER_BASE_URL"), "https://openrouter.ai/api/v1")
        extra_headers = {
            "HTTP-Referer": _env(_k("HTTP_REFERER"), "https://example.com"),
            "X-Title": app_name,
        }
        llm_models = _env_list(
            _k("LLM_MODELS"),
            [
                "qwen/qwen-2.5-72b-instruct:free",
                "deepseek/deepseek-chat-v3-0324:free",
            ],
        )

        # keep read >= first_token as a sane baseline
        first_token = _env_float(_k("LLM_FIRST_TOKEN_TIMEOUT_SECONDS"), 20.0)
        read_timeout = max(_env_float(_k("LLM_READ_TIMEOUT_SECONDS"), 25.0), first_token)
        connect_timeout = _env_float(_k("LLM_CONNECT_TIMEOUT_SECONDS"), 5.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            kv_db_path=kv_db_path,
            export_dir=export_dir,
            ephemeral=ephemeral,
            slot_policy=slot_policy,
            timetable_first_hour=timetable_first_hour,
            timetable_last_hour=timetable_last_hour,
            smart_plan_limit=smart_plan_limit,
            chat_delay_seconds=chat_delay_seconds,
            openrouter_api_key=openrouter_api_key,
            openrouter_base_url=openrouter_base_url,
            llm_models=llm_models,
            extra_headers=extra_headers,
            llm_connect_timeout=connect_timeout,
            llm_read_timeout=read_timeout,
            llm_first_token_timeout=first_token,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
