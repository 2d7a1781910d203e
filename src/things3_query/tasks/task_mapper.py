# src/things3_query/tasks/task_mapper.py

"""
Raw row -> Task.

The mapper reads logical field names, not host column names. The store aliases its columns
to this contract:

    id, title, notes, status, type,
    created_at, modified_at, completed_at,
    start, scheduled, deadline, start_bucket, today_index, today_reference,
    area_id, area_title, project_id, project_title, heading_id,
    index, checklist_count, open_checklist_count

`scheduled`, `deadline` and `today_reference` are packed dates and go through the codec.
`start`, `start_bucket` and `today_index` pass through untouched.
Missing keys read as NULL.

No I/O here: tags and checklist items are fetched by the caller.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..core.dates import DateCodec
from .task_models import ChecklistItem, Task, TaskStatus, TaskType

_DEFAULT_CODEC = DateCodec()


def _opt_int(value: Any) -> int | None:
    return int(value) if value is not None else None


def _opt_float(value: Any) -> float | None:
    return float(value) if value is not None else None


def _opt_str(value: Any) -> str | None:
    return str(value) if value is not None else None


def map_checklist_item(raw: ChecklistItem | Mapping[str, Any]) -> ChecklistItem:
    if isinstance(raw, ChecklistItem):
        return raw
    return ChecklistItem(
        title=str(raw.get("title") or ""),
        status=TaskStatus.from_db(raw.get("status")),
    )


def map_task_row(
    row: Mapping[str, Any],
    tags: Iterable[str] = (),
    checklist_items: Iterable[ChecklistItem | Mapping[str, Any]] = (),
    codec: DateCodec | None = None,
) -> Task:
    codec = codec or _DEFAULT_CODEC
    get = row.get

    return Task(
        id=str(row["id"]),
        title=str(get("title") or ""),
        notes=_opt_str(get("notes")),
        status=TaskStatus.from_db(get("status")),
        type=TaskType.from_db(get("type")),
        created_at=_opt_float(get("created_at")),
        modified_at=_opt_float(get("modified_at")),
        completed_at=_opt_float(get("completed_at")),
        start=int(get("start") or 0),
        scheduled=codec.decode(get("scheduled")),
        deadline=codec.decode(get("deadline")),
        start_bucket=_opt_int(get("start_bucket")),
        today_index=_opt_int(get("today_index")),
        today_reference=codec.decode(get("today_reference")),
        area_id=_opt_str(get("area_id")),
        area_title=_opt_str(get("area_title")),
        project_id=_opt_str(get("project_id")),
        project_title=_opt_str(get("project_title")),
        heading_id=_opt_str(get("heading_id")),
        index=_opt_int(get("index")),
        checklist_count=int(get("checklist_count") or 0),
        open_checklist_count=int(get("open_checklist_count") or 0),
        tags=frozenset(tags),
        checklist=tuple(map_checklist_item(c) for c in checklist_items),
    )
