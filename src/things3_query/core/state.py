# src/things3_query/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.query_engine import QueryEngine
from .ports import TaskRepo


@dataclass
class AppState:
    # Settings live on the state so commands can read them without global lookups.
    settings: object

    store: TaskRepo
    engine: QueryEngine

    json_output: bool = False
