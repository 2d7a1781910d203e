# src/things3_query/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import IntEnum, StrEnum


class TaskStatus(IntEnum):
    """Task lifecycle status as stored by the host (integer codes)."""

    INCOMPLETE = 0
    CANCELED = 2
    COMPLETED = 3

    @classmethod
    def from_db(cls, raw: int | None) -> TaskStatus:
        if raw is None:
            return cls.INCOMPLETE
        try:
            return cls(int(raw))
        except ValueError:
            return cls.INCOMPLETE


class TaskType(IntEnum):
    """
    Row kind in the host task table.

    Only ACTION rows take part in list filtering; projects and headings share the table.
    """

    ACTION = 0
    PROJECT = 1
    HEADING = 2

    @classmethod
    def from_db(cls, raw: int | None) -> TaskType:
        if raw is None:
            return cls.ACTION
        try:
            return cls(int(raw))
        except ValueError:
            return cls.ACTION


class StartBucket(IntEnum):
    """The host's coarse scheduling field (`start` column), independent of the scheduled date."""

    NONE = 0
    TODAY = 1
    UPCOMING = 2


class Bucket(StrEnum):
    """Named lists a caller can ask for."""

    ALL = "all"
    TODAY = "today"
    TOMORROW = "tomorrow"
    UPCOMING = "upcoming"
    ANYTIME = "anytime"
    SOMEDAY = "someday"
    INBOX = "inbox"


class SearchField(StrEnum):
    TITLE = "title"
    NOTES = "notes"
    BOTH = "both"


@dataclass(frozen=True, slots=True)
class ChecklistItem:
    title: str
    status: TaskStatus

    @property
    def completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    notes: str | None
    status: TaskStatus
    type: TaskType

    # unix timestamps as stored by the host
    created_at: float | None
    modified_at: float | None
    completed_at: float | None

    # scheduling: `start` and `scheduled` are set independently by the host
    start: int
    scheduled: date | None
    deadline: date | None
    start_bucket: int | None
    today_index: int | None
    today_reference: date | None

    area_id: str | None
    area_title: str | None
    project_id: str | None
    project_title: str | None
    heading_id: str | None

    index: int | None
    checklist_count: int
    open_checklist_count: int

    tags: frozenset[str] = field(default_factory=frozenset)
    checklist: tuple[ChecklistItem, ...] = ()

    @property
    def start_kind(self) -> StartBucket | None:
        try:
            return StartBucket(self.start)
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class Area:
    """A named container: a host area, or a project (kind="project")."""

    id: str
    title: str
    kind: str = "area"
    visible: bool = True


@dataclass(frozen=True, slots=True)
class Tag:
    id: str
    title: str
