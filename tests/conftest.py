# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from things3_query.core.dates import DateCodec
from things3_query.core.state import AppState
from things3_query.tasks.filters import FilterClassifier
from things3_query.tasks.query_engine import QueryEngine
from things3_query.tasks.task_store import Things3Store

from .fakes import ThingsDbBuilder

# Naive datetimes are read as local wall time, so tests do not depend on the machine's TZ.
NOW = datetime(2026, 3, 14, 10, 30)


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def codec() -> DateCodec:
    return DateCodec()


@pytest.fixture()
def classifier(codec: DateCodec) -> FilterClassifier:
    return FilterClassifier(codec)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="things3-query-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        db_path=tmp_path / "main.sqlite",
        container_dir=tmp_path / "container",
        date_offset_days=0,
        someday_area="Someday",
        json_output=False,
        search_limit=50,
    )


@pytest.fixture()
def things_db(settings: SimpleNamespace) -> ThingsDbBuilder:
    return ThingsDbBuilder(settings.db_path)


@pytest.fixture()
def store(things_db: ThingsDbBuilder):
    s = Things3Store(things_db.path)
    yield s
    s.close()


@pytest.fixture()
def engine(store: Things3Store, codec: DateCodec) -> QueryEngine:
    return QueryEngine(store, codec=codec, clock=lambda: NOW, search_limit=50)


@pytest.fixture()
def state(settings: SimpleNamespace, store: Things3Store, engine: QueryEngine) -> AppState:
    """
    AppState wired to a real (read-only) SQLite store and a fixed clock.

    NOTE: the store is real on purpose: SQL compilation and ordering are part of what we test.
    """
    return AppState(settings=settings, store=store, engine=engine, json_output=False)
