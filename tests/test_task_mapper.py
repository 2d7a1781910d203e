# tests/test_task_mapper.py

from __future__ import annotations

from datetime import date

from things3_query.core.dates import DateCodec, encode
from things3_query.tasks.task_mapper import map_task_row
from things3_query.tasks.task_models import ChecklistItem, StartBucket, TaskStatus, TaskType

from .fakes import make_record


def test_maps_dates_and_passes_scheduling_fields_through() -> None:
    row = make_record(
        id="ABC",
        title="Write report",
        notes="draft first",
        status=3,
        start=2,
        start_bucket=1,
        today_index=7,
        scheduled=encode(date(2026, 3, 15)),
        deadline=encode(date(2026, 4, 1)),
        today_reference=encode(date(2026, 3, 14)),
        project_id="P1",
        project_title="Work",
        completed_at=1_700_000_500.0,
        checklist_count=2,
        open_checklist_count=1,
    )
    task = map_task_row(row, ["work", "urgent"], [{"title": "outline", "status": 3}])

    assert task.id == "ABC"
    assert task.status is TaskStatus.COMPLETED
    assert task.type is TaskType.ACTION
    assert task.start == 2
    assert task.start_kind is StartBucket.UPCOMING
    assert task.start_bucket == 1
    assert task.today_index == 7
    assert task.scheduled == date(2026, 3, 15)
    assert task.deadline == date(2026, 4, 1)
    assert task.today_reference == date(2026, 3, 14)
    assert task.project_title == "Work"
    assert task.completed_at == 1_700_000_500.0
    assert task.tags == frozenset({"work", "urgent"})
    assert task.checklist == (ChecklistItem("outline", TaskStatus.COMPLETED),)
    assert task.checklist[0].completed
    assert (task.checklist_count, task.open_checklist_count) == (2, 1)


def test_missing_title_defaults_to_empty_string() -> None:
    task = map_task_row(make_record(title=None))
    assert task.title == ""
    assert task.notes is None


def test_unset_dates_are_none() -> None:
    task = map_task_row(make_record(scheduled=0, deadline=None, today_reference=None))
    assert task.scheduled is None
    assert task.deadline is None
    assert task.today_reference is None


def test_missing_keys_read_as_null() -> None:
    task = map_task_row({"id": "X1"})
    assert task.title == ""
    assert task.start == 0
    assert task.status is TaskStatus.INCOMPLETE
    assert task.tags == frozenset()
    assert task.checklist == ()


def test_unknown_status_and_type_fall_back() -> None:
    task = map_task_row(make_record(status=99, type=42, start=9))
    assert task.status is TaskStatus.INCOMPLETE
    assert task.type is TaskType.ACTION
    assert task.start == 9
    assert task.start_kind is None


def test_codec_offset_is_applied() -> None:
    shifted = DateCodec(33)
    row = make_record(scheduled=shifted.encode(date(2026, 3, 15)))
    assert map_task_row(row, codec=shifted).scheduled == date(2026, 3, 15)
