# src/things3_query/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- locates the host database (explicit path or discovery),
- wires the store, codec, classifier and engine into AppState.

The store connection itself is opened lazily by the first query.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import get_settings
from ..core.dates import DateCodec
from ..core.state import AppState
from ..errors import StoreUnavailable
from ..tasks.filters import FilterClassifier
from ..tasks.query_engine import QueryEngine
from ..tasks.task_store import Things3Store

logger = logging.getLogger(__name__)

DATA_DIR_PREFIX = "ThingsData-"
DB_RELATIVE_PATH = Path("Things Database.thingsdatabase") / "main.sqlite"


def find_things_database(container_dir: str | Path) -> Path:
    """
    Locate main.sqlite under the host's group container:

        <container>/ThingsData-*/Things Database.thingsdatabase/main.sqlite
    """
    base = Path(container_dir).expanduser()
    if not base.is_dir():
        raise StoreUnavailable(f"Things directory not found at {base}. Is Things installed?")

    candidates = sorted(p for p in base.iterdir() if p.is_dir() and p.name.startswith(DATA_DIR_PREFIX))
    if not candidates:
        raise StoreUnavailable(f"no {DATA_DIR_PREFIX}* directory under {base}")

    db_path = candidates[0] / DB_RELATIVE_PATH
    if not db_path.is_file():
        raise StoreUnavailable(f"Things database not found at {db_path}")
    if len(candidates) > 1:
        logger.warning("Several %s* directories found, using %s", DATA_DIR_PREFIX, candidates[0].name)
    return db_path


def resolve_db_path(settings) -> Path:
    explicit = getattr(settings, "db_path", None)
    if explicit:
        return Path(explicit)
    return find_things_database(settings.container_dir)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    db_path = resolve_db_path(settings)
    codec = DateCodec(offset_days=int(getattr(settings, "date_offset_days", 0)))
    if codec.offset_days:
        logger.info("Packed dates use a %d-day offset", codec.offset_days)

    store = Things3Store(db_path)
    engine = QueryEngine(
        store,
        codec=codec,
        classifier=FilterClassifier(codec, someday_area=getattr(settings, "someday_area", "Someday")),
        search_limit=getattr(settings, "search_limit", None),
    )
    return AppState(
        settings=settings,
        store=store,
        engine=engine,
        json_output=bool(getattr(settings, "json_output", False)),
    )
