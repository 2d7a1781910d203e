# src/things3_query/tasks/task_api.py

"""Task -> plain data / text for callers. No store access."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from .task_models import Area, Tag, Task, TaskStatus

_STATUS_NAMES = {
    TaskStatus.INCOMPLETE: "incomplete",
    TaskStatus.COMPLETED: "completed",
    TaskStatus.CANCELED: "canceled",
}


def _iso_day(d: date | None) -> str | None:
    return d.isoformat() if d is not None else None


def _iso_instant(ts: float | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def task_to_dict(task: Task, *, detailed: bool = False) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": task.id,
        "title": task.title,
        "notes": task.notes,
        "status": _STATUS_NAMES[task.status],
        "due_date": _iso_day(task.deadline),
        "start_date": _iso_day(task.scheduled),
        "project": task.project_title,
        "area": task.area_title,
        "tags": sorted(task.tags),
    }
    if detailed:
        out.update(
            {
                "project_id": task.project_id,
                "area_id": task.area_id,
                "created_at": _iso_instant(task.created_at),
                "modified_at": _iso_instant(task.modified_at),
                "completed_at": _iso_instant(task.completed_at),
                "checklist_items": [{"title": c.title, "completed": c.completed} for c in task.checklist],
            }
        )
    return out


def format_task_line(task: Task) -> str:
    mark = {"incomplete": "[ ]", "completed": "[x]", "canceled": "[-]"}[_STATUS_NAMES[task.status]]
    parts = [f"{mark} {task.title or '(untitled)'}"]
    if task.scheduled:
        parts.append(f"start {task.scheduled.isoformat()}")
    if task.deadline:
        parts.append(f"due {task.deadline.isoformat()}")
    where = task.project_title or task.area_title
    if where:
        parts.append(f"in {where}")
    if task.tags:
        parts.append("#" + " #".join(sorted(task.tags)))
    return " | ".join(parts) + f"  ({task.id})"


def format_task_detail(task: Task) -> str:
    d = task_to_dict(task, detailed=True)
    lines = [f"{d['title'] or '(untitled)'}  ({d['id']})", f"  status: {d['status']}"]
    for key in ("start_date", "due_date", "project", "area", "created_at", "modified_at", "completed_at"):
        if d.get(key):
            lines.append(f"  {key}: {d[key]}")
    if d["tags"]:
        lines.append(f"  tags: {', '.join(d['tags'])}")
    if task.notes:
        lines.append("  notes:")
        lines.extend(f"    {ln}" for ln in task.notes.splitlines())
    if task.checklist:
        lines.append("  checklist:")
        lines.extend(f"    {'[x]' if c.completed else '[ ]'} {c.title}" for c in task.checklist)
    return "\n".join(lines)


def container_to_dict(item: Area) -> dict[str, Any]:
    return {"id": item.id, "title": item.title, "type": item.kind}


def tag_to_dict(tag: Tag) -> dict[str, Any]:
    return {"id": tag.id, "title": tag.title}
