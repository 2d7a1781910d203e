# src/things3_query/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The query engine depends on Protocols instead of the concrete SQLite store.
This keeps the store swappable and lets tests run against in-memory fakes.
"""

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any, Protocol

Clock = Callable[[], datetime]
# Returns "now". Injected so list boundaries (today/tomorrow) are testable.


class TaskRepo(Protocol):
    """Read-only access to host rows, already aliased to logical field names."""

    # Task rows
    def select_task_rows(self, constraint: Any, *, limit: int | None = None) -> list[dict[str, Any]]: ...
    def tags_by_task(self, task_ids: Sequence[str]) -> dict[str, list[str]]: ...
    def checklist_by_task(self, task_ids: Sequence[str]) -> dict[str, list[dict[str, Any]]]: ...

    # Containers / tags
    def list_areas(self) -> list[dict[str, Any]]: ...
    def list_open_projects(self) -> list[dict[str, Any]]: ...
    def find_area(self, title: str) -> dict[str, Any] | None: ...
    def find_project(self, title: str) -> dict[str, Any] | None: ...
    def list_tags(self) -> list[dict[str, Any]]: ...
    def find_tag(self, title: str) -> dict[str, Any] | None: ...

    def close(self) -> None: ...


def local_now() -> datetime:
    """Default clock: timezone-aware local wall time."""
    return datetime.now().astimezone()
