# src/things3_query/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing touches the host database at import time.
- Invalid values fall back to defaults instead of raising.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "THINGS3"

DEFAULT_CONTAINER_DIR = Path("~/Library/Group Containers/JLMPQHK86H.com.culturedcode.ThingsMac")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


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


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Host database ----
    db_path: Path | None  # explicit main.sqlite; None -> discover under container_dir
    container_dir: Path

    # ---- Host conventions ----
    date_offset_days: int
    someday_area: str

    # ---- Output / limits ----
    json_output: bool
    search_limit: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "things3-query") or "things3-query"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/things3-query")) or Path(".local/things3-query")

        db_path = _env_path(_k("DB_PATH"), None)
        container_dir = _env_path(_k("CONTAINER_DIR"), None) or DEFAULT_CONTAINER_DIR.expanduser()

        # 0 = plain encoding; 33 = the shifted variant seen in one host integration.
        date_offset_days = _env_int(_k("DATE_OFFSET_DAYS"), 0)
        someday_area = _env(_k("SOMEDAY_AREA"), "Someday").strip() or "Someday"

        json_output = _env_bool(_k("JSON_OUTPUT"), False)
        search_limit = max(1, _env_int(_k("SEARCH_LIMIT"), 200))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            db_path=db_path,
            container_dir=container_dir,
            date_offset_days=date_offset_days,
            someday_area=someday_area,
            json_output=json_output,
            search_limit=search_limit,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
