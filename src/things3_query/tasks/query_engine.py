# src/things3_query/tasks/query_engine.py

"""
Query orchestration.

criteria -> FilterClassifier -> Constraint -> store rows -> mapper -> ordered Tasks.

The store returns rows already in host display order (today index ascending with nulls
last, then creation time descending); the engine keeps that order. Failures from the store
propagate unchanged: queries are read-only and deterministic, so nothing is retried here.
"""

from __future__ import annotations

import logging
from datetime import date

from ..core.dates import DateCodec
from ..core.ports import Clock, TaskRepo, local_now
from .filters import (
    BucketQuery,
    Constraint,
    Criteria,
    DateQuery,
    FilterClassifier,
    IdQuery,
    RangeQuery,
    SearchQuery,
)
from .task_mapper import map_task_row
from .task_models import Area, Bucket, SearchField, Tag, Task

logger = logging.getLogger(__name__)


class QueryEngine:
    def __init__(
        self,
        repo: TaskRepo,
        *,
        codec: DateCodec | None = None,
        classifier: FilterClassifier | None = None,
        clock: Clock = local_now,
        search_limit: int | None = None,
    ) -> None:
        self.repo = repo
        self.codec = codec or DateCodec()
        self.classifier = classifier or FilterClassifier(self.codec)
        self.clock = clock
        self.search_limit = search_limit

    # ---- tasks ----

    def query(self, criteria: Criteria) -> list[Task]:
        # Validation happens here, before the store is touched.
        constraint = self.classifier.classify(criteria, self.clock())
        limit = self.search_limit if isinstance(criteria, SearchQuery) else None
        tasks = self._fetch(constraint, limit=limit)
        logger.debug("query %s -> %d tasks", criteria, len(tasks))
        return tasks

    def get(self, identifier: str) -> Task | None:
        """Single task by id, or None when no (non-trashed) row matches."""
        tasks = self.query(IdQuery(identifier))
        return tasks[0] if tasks else None

    def list_bucket(self, bucket: Bucket, include_completed: bool = False) -> list[Task]:
        return self.query(BucketQuery(bucket, include_completed))

    def list_date(self, day: date, include_completed: bool = False) -> list[Task]:
        return self.query(DateQuery(day, include_completed))

    def list_range(self, start: date, end: date, include_completed: bool = False) -> list[Task]:
        return self.query(RangeQuery(start, end, include_completed))

    def search(self, text: str, search_in: SearchField = SearchField.BOTH) -> list[Task]:
        return self.query(SearchQuery(text, search_in))

    def _fetch(self, constraint: Constraint, *, limit: int | None = None) -> list[Task]:
        rows = self.repo.select_task_rows(constraint, limit=limit)
        if not rows:
            return []
        ids = [str(r["id"]) for r in rows]
        tags = self.repo.tags_by_task(ids)
        checklists = self.repo.checklist_by_task(ids)
        return [
            map_task_row(r, tags.get(str(r["id"]), ()), checklists.get(str(r["id"]), ()), self.codec)
            for r in rows
        ]

    # ---- containers / tags ----

    def list_containers(self, include_areas: bool = True) -> list[Area]:
        """Visible areas (optional) followed by open projects."""
        out: list[Area] = []
        if include_areas:
            out.extend(
                Area(id=r["uuid"], title=r["title"] or "", kind="area", visible=r["visible"] == 1)
                for r in self.repo.list_areas()
            )
        out.extend(Area(id=r["uuid"], title=r["title"] or "", kind="project") for r in self.repo.list_open_projects())
        return out

    def find_container(self, name: str) -> Area | None:
        """Look a container up by exact title: areas first, then open projects."""
        row = self.repo.find_area(name)
        if row is not None:
            return Area(id=row["uuid"], title=row["title"], kind="area", visible=row["visible"] == 1)
        row = self.repo.find_project(name)
        if row is not None:
            return Area(id=row["uuid"], title=row["title"], kind="project")
        return None

    def list_tags(self) -> list[Tag]:
        return [Tag(id=r["uuid"], title=r["title"] or "") for r in self.repo.list_tags()]

    def find_tag(self, name: str) -> Tag | None:
        """Tag by exact title, or None."""
        row = self.repo.find_tag(name)
        return Tag(id=row["uuid"], title=row["title"] or "") if row is not None else None
