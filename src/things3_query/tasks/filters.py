# src/things3_query/tasks/filters.py

"""
List classification.

Turns a bucket name (or an explicit day / day range / search / identifier) into a Constraint:
a conjunction of field predicates over logical task fields. The store compiles a Constraint
into SQL; tests and fakes evaluate it in memory with Constraint.matches(). Nothing in this
module knows SQL.

Bucket membership reads two independent host fields: the coarse `start` code and the packed
scheduled date. Neither decides on its own. A deadline never places a task in any list.

| bucket   | constraint (on top of: not trashed, action, incomplete)        |
|----------|----------------------------------------------------------------|
| all      | -                                                              |
| today    | start = 1, not in Someday                                      |
| tomorrow | start = 2 and scheduled on (today + 1), not in Someday         |
| upcoming | start = 2, not in Someday                                      |
| anytime  | start = 0, not in Someday                                      |
| someday  | area title = "Someday" (always incomplete)                     |
| inbox    | no area and no project                                         |

An open action lands in exactly one of today / upcoming / anytime / someday
(tomorrow is a subset of upcoming).

Day boundaries are computed on the local calendar on both sides: `now` is converted to a
local date first, then encoded.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Any, assert_never

from ..core.dates import DateCodec, local_today
from ..errors import MalformedCriteria
from .task_models import Bucket, SearchField, StartBucket, TaskStatus, TaskType

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9-]{1,64}$")
_DAY_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})\s*$")

DEFAULT_SOMEDAY_AREA = "Someday"

_ASCII_UPPER = str.maketrans("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz")


def _ascii_lower(text: str) -> str:
    return text.translate(_ASCII_UPPER)


class Field(StrEnum):
    """Logical task fields a predicate can test. Values match the mapper's row contract."""

    ID = "id"
    TITLE = "title"
    NOTES = "notes"
    STATUS = "status"
    TYPE = "type"
    TRASHED = "trashed"
    START = "start"
    SCHEDULED = "scheduled"
    TODAY_REFERENCE = "today_reference"
    AREA_ID = "area_id"
    AREA_TITLE = "area_title"
    PROJECT_ID = "project_id"


# ---- predicates ----


@dataclass(frozen=True, slots=True)
class Eq:
    field: Field
    value: Any

    def matches(self, record: Mapping[str, Any]) -> bool:
        v = record.get(self.field.value)
        return v is not None and v == self.value


@dataclass(frozen=True, slots=True)
class NotEq:
    """field != value. NULL counts as different."""

    field: Field
    value: Any

    def matches(self, record: Mapping[str, Any]) -> bool:
        return record.get(self.field.value) != self.value


@dataclass(frozen=True, slots=True)
class IsNull:
    field: Field

    def matches(self, record: Mapping[str, Any]) -> bool:
        return record.get(self.field.value) is None


@dataclass(frozen=True, slots=True)
class InRange:
    """low <= field < high. NULL never matches."""

    field: Field
    low: int
    high: int

    def matches(self, record: Mapping[str, Any]) -> bool:
        v = record.get(self.field.value)
        return v is not None and self.low <= v < self.high


@dataclass(frozen=True, slots=True)
class Like:
    """
    Substring match; `text` is literal (no wildcards).

    Case folding is ASCII-only, like SQLite's built-in LIKE: "a" matches "A",
    but "é" does not match "É".
    """

    field: Field
    text: str

    def matches(self, record: Mapping[str, Any]) -> bool:
        v = record.get(self.field.value)
        return v is not None and _ascii_lower(self.text) in _ascii_lower(str(v))


@dataclass(frozen=True, slots=True)
class AnyOf:
    options: tuple[Predicate, ...]

    def matches(self, record: Mapping[str, Any]) -> bool:
        return any(p.matches(record) for p in self.options)


Predicate = Eq | NotEq | IsNull | InRange | Like | AnyOf


@dataclass(frozen=True, slots=True)
class Constraint:
    predicates: tuple[Predicate, ...] = ()

    def matches(self, record: Mapping[str, Any]) -> bool:
        return all(p.matches(record) for p in self.predicates)

    def fields(self) -> set[Field]:
        out: set[Field] = set()
        stack: list[Predicate] = list(self.predicates)
        while stack:
            p = stack.pop()
            if isinstance(p, AnyOf):
                stack.extend(p.options)
            else:
                out.add(p.field)
        return out


# ---- criteria ----


@dataclass(frozen=True, slots=True)
class BucketQuery:
    bucket: Bucket
    include_completed: bool = False


@dataclass(frozen=True, slots=True)
class DateQuery:
    day: date
    include_completed: bool = False


@dataclass(frozen=True, slots=True)
class RangeQuery:
    start: date
    end: date
    include_completed: bool = False


@dataclass(frozen=True, slots=True)
class SearchQuery:
    text: str
    search_in: SearchField = SearchField.BOTH


@dataclass(frozen=True, slots=True)
class IdQuery:
    identifier: str


Criteria = BucketQuery | DateQuery | RangeQuery | SearchQuery | IdQuery


# ---- parsing helpers (caller input -> typed criteria) ----


def parse_day(raw: str, field: str = "date") -> date:
    """Parse YYYY-MM-DD as a local calendar date."""
    m = _DAY_RE.match(raw or "")
    if not m:
        raise MalformedCriteria(field, f"invalid date format {raw!r}, expected YYYY-MM-DD")
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError as exc:
        raise MalformedCriteria(field, f"invalid date value {raw!r}: {exc}") from exc


def parse_bucket(raw: str) -> Bucket:
    try:
        return Bucket((raw or "").strip().lower())
    except ValueError:
        allowed = ", ".join(b.value for b in Bucket)
        raise MalformedCriteria("filter", f"unknown list {raw!r} (expected one of: {allowed})") from None


def parse_search_field(raw: str) -> SearchField:
    try:
        return SearchField((raw or "").strip().lower())
    except ValueError:
        raise MalformedCriteria("search_in", f"expected title, notes or both, got {raw!r}") from None


def validate_identifier(identifier: str) -> str:
    ident = (identifier or "").strip()
    if not _IDENTIFIER_RE.match(ident):
        raise MalformedCriteria("identifier", f"malformed task id {identifier!r}")
    return ident


# ---- classifier ----


class FilterClassifier:
    """Builds the Constraint for a list, day, range, search or identifier lookup."""

    def __init__(self, codec: DateCodec | None = None, *, someday_area: str = DEFAULT_SOMEDAY_AREA) -> None:
        self.codec = codec or DateCodec()
        self.someday_area = someday_area

    @staticmethod
    def _base(include_completed: bool) -> list[Predicate]:
        preds: list[Predicate] = [Eq(Field.TRASHED, 0), Eq(Field.TYPE, int(TaskType.ACTION))]
        if not include_completed:
            preds.append(Eq(Field.STATUS, int(TaskStatus.INCOMPLETE)))
        return preds

    def _on_days(self, start: date, end: date) -> AnyOf:
        # Carryover: tasks rolled into a day's Today list carry that day in today_reference.
        lo, hi = self.codec.day_span(start, end)
        return AnyOf((InRange(Field.SCHEDULED, lo, hi), InRange(Field.TODAY_REFERENCE, lo, hi)))

    def for_bucket(self, bucket: Bucket, now: datetime, include_completed: bool = False) -> Constraint:
        if bucket is Bucket.SOMEDAY:
            include_completed = False
        preds = self._base(include_completed)
        not_someday = NotEq(Field.AREA_TITLE, self.someday_area)

        match bucket:
            case Bucket.ALL:
                pass
            case Bucket.TODAY:
                preds.append(Eq(Field.START, int(StartBucket.TODAY)))
                preds.append(not_someday)
            case Bucket.TOMORROW:
                tomorrow = local_today(now) + timedelta(days=1)
                lo, hi = self.codec.day_span(tomorrow)
                preds.append(Eq(Field.START, int(StartBucket.UPCOMING)))
                preds.append(InRange(Field.SCHEDULED, lo, hi))
                preds.append(not_someday)
            case Bucket.UPCOMING:
                preds.append(Eq(Field.START, int(StartBucket.UPCOMING)))
                preds.append(not_someday)
            case Bucket.ANYTIME:
                preds.append(Eq(Field.START, int(StartBucket.NONE)))
                preds.append(not_someday)
            case Bucket.SOMEDAY:
                preds.append(Eq(Field.AREA_TITLE, self.someday_area))
            case Bucket.INBOX:
                preds.append(IsNull(Field.AREA_ID))
                preds.append(IsNull(Field.PROJECT_ID))
            case _:
                assert_never(bucket)

        return Constraint(tuple(preds))

    def for_date(self, day: date, include_completed: bool = False) -> Constraint:
        preds = self._base(include_completed)
        preds.append(self._on_days(day, day))
        return Constraint(tuple(preds))

    def for_range(self, start: date, end: date, include_completed: bool = False) -> Constraint:
        if end < start:
            raise MalformedCriteria("end", f"end date {end.isoformat()} is before start date {start.isoformat()}")
        preds = self._base(include_completed)
        preds.append(self._on_days(start, end))
        return Constraint(tuple(preds))

    def for_search(self, text: str, search_in: SearchField = SearchField.BOTH) -> Constraint:
        needle = (text or "").strip()
        if not needle:
            raise MalformedCriteria("query", "search text is empty")
        preds = self._base(False)

        match search_in:
            case SearchField.TITLE:
                preds.append(Like(Field.TITLE, needle))
            case SearchField.NOTES:
                preds.append(Like(Field.NOTES, needle))
            case SearchField.BOTH:
                preds.append(AnyOf((Like(Field.TITLE, needle), Like(Field.NOTES, needle))))
            case _:
                assert_never(search_in)

        return Constraint(tuple(preds))

    def for_identifier(self, identifier: str) -> Constraint:
        ident = validate_identifier(identifier)
        return Constraint((Eq(Field.TRASHED, 0), Eq(Field.ID, ident)))

    def classify(self, criteria: Criteria, now: datetime) -> Constraint:
        match criteria:
            case BucketQuery(bucket=bucket, include_completed=inc):
                return self.for_bucket(bucket, now, inc)
            case DateQuery(day=day, include_completed=inc):
                return self.for_date(day, inc)
            case RangeQuery(start=start, end=end, include_completed=inc):
                return self.for_range(start, end, inc)
            case SearchQuery(text=text, search_in=search_in):
                return self.for_search(text, search_in)
            case IdQuery(identifier=identifier):
                return self.for_identifier(identifier)
            case _:
                assert_never(criteria)

    def buckets_of(self, record: Mapping[str, Any], now: datetime) -> list[Bucket]:
        """Every named list (except `all`) whose constraint `record` satisfies."""
        return [
            b
            for b in Bucket
            if b is not Bucket.ALL and self.for_bucket(b, now).matches(record)
        ]
