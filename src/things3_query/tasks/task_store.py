# src/things3_query/tasks/task_store.py

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from ..errors import StoreUnavailable
from .filters import AnyOf, Constraint, Eq, Field, InRange, IsNull, Like, NotEq, Predicate
from .task_models import TaskStatus, TaskType

logger = logging.getLogger(__name__)

# Logical field -> host column. Everything outside this module speaks logical names.
_FIELD_COLUMNS: dict[Field, str] = {
    Field.ID: "t.uuid",
    Field.TITLE: "t.title",
    Field.NOTES: "t.notes",
    Field.STATUS: "t.status",
    Field.TYPE: "t.type",
    Field.TRASHED: "t.trashed",
    Field.START: "t.start",
    Field.SCHEDULED: "t.startDate",
    Field.TODAY_REFERENCE: "t.todayIndexReferenceDate",
    Field.AREA_ID: "t.area",
    Field.AREA_TITLE: "a.title",
    Field.PROJECT_ID: "t.project",
}

_TASK_SELECT = """
    SELECT
        t.uuid AS id,
        t.title AS title,
        t.notes AS notes,
        t.status AS status,
        t.type AS type,
        t.trashed AS trashed,
        t.creationDate AS created_at,
        t.userModificationDate AS modified_at,
        t.stopDate AS completed_at,
        t.start AS start,
        t.startDate AS scheduled,
        t.deadline AS deadline,
        t.startBucket AS start_bucket,
        t.todayIndex AS today_index,
        t.todayIndexReferenceDate AS today_reference,
        t.area AS area_id,
        a.title AS area_title,
        t.project AS project_id,
        p.title AS project_title,
        t.heading AS heading_id,
        t."index" AS "index",
        t.checklistItemsCount AS checklist_count,
        t.openChecklistItemsCount AS open_checklist_count
    FROM TMTask t
    LEFT JOIN TMArea a ON t.area = a.uuid
    LEFT JOIN TMTask p ON t.project = p.uuid
"""

# Host display order: manual today index (nulls last), newest first.
_TASK_ORDER = "ORDER BY t.todayIndex IS NULL, t.todayIndex ASC, t.creationDate DESC"

# Stay under SQLite's default host-parameter limit.
_IN_CHUNK = 500


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _compile_predicate(pred: Predicate, params: list[Any]) -> str:
    if isinstance(pred, AnyOf):
        if not pred.options:
            return "0"
        return "(" + " OR ".join(_compile_predicate(p, params) for p in pred.options) + ")"

    col = _FIELD_COLUMNS[pred.field]
    if isinstance(pred, Eq):
        params.append(pred.value)
        return f"{col} = ?"
    if isinstance(pred, NotEq):
        params.append(pred.value)
        return f"({col} IS NULL OR {col} <> ?)"
    if isinstance(pred, IsNull):
        return f"{col} IS NULL"
    if isinstance(pred, InRange):
        params.extend((pred.low, pred.high))
        return f"({col} >= ? AND {col} < ?)"
    if isinstance(pred, Like):
        params.append(f"%{_escape_like(pred.text)}%")
        return f"{col} LIKE ? ESCAPE '\\'"
    raise TypeError(f"unsupported predicate: {pred!r}")


def compile_constraint(constraint: Constraint) -> tuple[str, list[Any]]:
    """Constraint -> (WHERE body, params)."""
    params: list[Any] = []
    parts = [_compile_predicate(p, params) for p in constraint.predicates]
    return (" AND ".join(parts) if parts else "1"), params


def _chunks(items: Sequence[str], size: int = _IN_CHUNK) -> Iterable[Sequence[str]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


class Things3Store:
    """
    Read-only access to the host's SQLite database.

    The schema belongs to the host: nothing here creates, migrates or writes.

    Thread-safety:
    - one connection, opened lazily on first use (double-checked under a lock),
    - every statement runs under the same lock.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path).expanduser()
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.debug("Things3Store closed db=%s", self._db_path)

    # ---- low-level helpers ----

    def _open(self) -> sqlite3.Connection:
        if not self._db_path.is_file():
            raise StoreUnavailable(f"Things database not found at {self._db_path}")
        uri = f"{self._db_path.resolve().as_uri()}?mode=ro"
        try:
            conn = sqlite3.connect(uri, uri=True, timeout=30.0, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StoreUnavailable(f"cannot open Things database {self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        logger.info("Things3Store opened db=%s (read-only)", self._db_path)
        return conn

    def _get_conn(self) -> sqlite3.Connection:
        conn = self._conn
        if conn is None:
            with self._lock:
                if self._conn is None:
                    self._conn = self._open()
                conn = self._conn
        return conn

    def _fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            with self._lock:
                rows = conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            logger.exception("Query failed db=%s", self._db_path)
            raise StoreUnavailable(f"query against {self._db_path} failed: {exc}") from exc
        logger.debug("Query ok rows=%d params=%s", len(rows), list(params))
        return [dict(r) for r in rows]

    # ---- tasks ----

    def count_tasks(self) -> int:
        (row,) = self._fetchall("SELECT COUNT(*) AS n FROM TMTask WHERE trashed = 0")
        return int(row["n"])

    def select_task_rows(self, constraint: Constraint, *, limit: int | None = None) -> list[dict[str, Any]]:
        where, params = compile_constraint(constraint)
        sql = f"{_TASK_SELECT} WHERE {where} {_TASK_ORDER}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        return self._fetchall(sql, params)

    def tags_by_task(self, task_ids: Sequence[str]) -> dict[str, list[str]]:
        out: dict[str, list[str]] = {}
        for chunk in _chunks(list(task_ids)):
            placeholders = ",".join("?" for _ in chunk)
            rows = self._fetchall(
                f"""
                SELECT tt.tasks AS task_id, tg.title AS title
                FROM TMTaskTag tt
                JOIN TMTag tg ON tt.tags = tg.uuid
                WHERE tt.tasks IN ({placeholders})
                """,
                chunk,
            )
            for r in rows:
                out.setdefault(r["task_id"], []).append(r["title"])
        return out

    def checklist_by_task(self, task_ids: Sequence[str]) -> dict[str, list[dict[str, Any]]]:
        out: dict[str, list[dict[str, Any]]] = {}
        for chunk in _chunks(list(task_ids)):
            placeholders = ",".join("?" for _ in chunk)
            rows = self._fetchall(
                f"""
                SELECT task AS task_id, title, status
                FROM TMChecklistItem
                WHERE task IN ({placeholders})
                ORDER BY stopDate, rowid
                """,
                chunk,
            )
            for r in rows:
                out.setdefault(r["task_id"], []).append({"title": r["title"], "status": r["status"]})
        return out

    # ---- containers / tags ----

    def list_areas(self) -> list[dict[str, Any]]:
        return self._fetchall("SELECT uuid, title, visible FROM TMArea WHERE visible = 1")

    def list_open_projects(self) -> list[dict[str, Any]]:
        return self._fetchall(
            "SELECT uuid, title FROM TMTask WHERE type = ? AND trashed = 0 AND status = ?",
            (int(TaskType.PROJECT), int(TaskStatus.INCOMPLETE)),
        )

    def find_area(self, title: str) -> dict[str, Any] | None:
        rows = self._fetchall(
            "SELECT uuid, title, visible FROM TMArea WHERE title = ? AND visible = 1 LIMIT 1",
            (title,),
        )
        return rows[0] if rows else None

    def find_project(self, title: str) -> dict[str, Any] | None:
        rows = self._fetchall(
            "SELECT uuid, title FROM TMTask WHERE type = ? AND title = ? AND trashed = 0 AND status = ? LIMIT 1",
            (int(TaskType.PROJECT), title, int(TaskStatus.INCOMPLETE)),
        )
        return rows[0] if rows else None

    def list_tags(self) -> list[dict[str, Any]]:
        return self._fetchall("SELECT uuid, title FROM TMTag ORDER BY title")

    def find_tag(self, title: str) -> dict[str, Any] | None:
        rows = self._fetchall("SELECT uuid, title FROM TMTag WHERE title = ? LIMIT 1", (title,))
        return rows[0] if rows else None
