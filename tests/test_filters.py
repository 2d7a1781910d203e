# tests/test_filters.py

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from things3_query.core.dates import DateCodec
from things3_query.errors import MalformedCriteria
from things3_query.tasks.filters import (
    AnyOf,
    BucketQuery,
    DateQuery,
    Eq,
    Field,
    FilterClassifier,
    IdQuery,
    InRange,
    IsNull,
    Like,
    NotEq,
    RangeQuery,
    SearchQuery,
    parse_bucket,
    parse_day,
    parse_search_field,
    validate_identifier,
)
from things3_query.tasks.task_models import Bucket, SearchField

from .fakes import make_record


def _in(classifier: FilterClassifier, bucket: Bucket, record, now: datetime) -> bool:
    return classifier.for_bucket(bucket, now).matches(record)


# ---- bucket table ----


def test_today_task_without_date(classifier, now) -> None:
    task_a = make_record(start=1)
    assert classifier.buckets_of(task_a, now) == [Bucket.TODAY, Bucket.INBOX]
    assert not _in(classifier, Bucket.UPCOMING, task_a, now)
    assert not _in(classifier, Bucket.ANYTIME, task_a, now)


def test_scheduled_tomorrow_is_upcoming_and_tomorrow(classifier, codec, now) -> None:
    task_b = make_record(start=2, scheduled=codec.encode(date(2026, 3, 15)), area_id="A1", area_title="Home")
    assert classifier.buckets_of(task_b, now) == [Bucket.TOMORROW, Bucket.UPCOMING]


def test_deadline_alone_never_makes_upcoming(classifier, codec, now) -> None:
    task_c = make_record(start=0, deadline=codec.encode(date(2026, 3, 15)), project_id="P1")
    assert classifier.buckets_of(task_c, now) == [Bucket.ANYTIME]


def test_scheduled_date_alone_does_not_decide(classifier, codec, now) -> None:
    # scheduled for tomorrow but start says "today": the start field wins for membership
    rec = make_record(start=1, scheduled=codec.encode(date(2026, 3, 15)), project_id="P1")
    assert classifier.buckets_of(rec, now) == [Bucket.TODAY]


def test_tomorrow_boundaries(classifier, codec, now) -> None:
    plus_one = make_record(start=2, scheduled=codec.encode(date(2026, 3, 15)))
    plus_two = make_record(start=2, scheduled=codec.encode(date(2026, 3, 16)))
    same_day = make_record(start=2, scheduled=codec.encode(date(2026, 3, 14)))
    assert _in(classifier, Bucket.TOMORROW, plus_one, now)
    assert not _in(classifier, Bucket.TOMORROW, plus_two, now)
    assert not _in(classifier, Bucket.TOMORROW, same_day, now)


def test_tomorrow_at_year_rollover(classifier, codec) -> None:
    late = datetime(2025, 12, 31, 23, 59)
    jan_first = make_record(start=2, scheduled=codec.encode(date(2026, 1, 1)))
    dec_31 = make_record(start=2, scheduled=codec.encode(date(2025, 12, 31)))
    assert _in(classifier, Bucket.TOMORROW, jan_first, late)
    assert not _in(classifier, Bucket.TOMORROW, dec_31, late)


def test_tomorrow_just_before_and_after_midnight(classifier, codec) -> None:
    rec = make_record(start=2, scheduled=codec.encode(date(2026, 3, 15)))
    assert _in(classifier, Bucket.TOMORROW, rec, datetime(2026, 3, 14, 23, 59, 59))
    assert not _in(classifier, Bucket.TOMORROW, rec, datetime(2026, 3, 15, 0, 0, 0))


def test_tomorrow_with_offset_codec() -> None:
    shifted = DateCodec(33)
    classifier = FilterClassifier(shifted)
    rec = make_record(start=2, scheduled=shifted.encode(date(2026, 3, 15)))
    assert _in(classifier, Bucket.TOMORROW, rec, datetime(2026, 3, 14, 9, 0))


@pytest.mark.parametrize("area_title", [None, "Home", "Someday"])
@pytest.mark.parametrize("start", [0, 1, 2])
def test_open_action_lands_in_exactly_one_list(classifier, codec, now, start, area_title) -> None:
    area_id = "A1" if area_title else None
    for scheduled in (None, codec.encode(date(2026, 3, 15)), codec.encode(date(2026, 6, 1))):
        rec = make_record(start=start, scheduled=scheduled, area_id=area_id, area_title=area_title)
        hits = [
            b
            for b in (Bucket.TODAY, Bucket.UPCOMING, Bucket.ANYTIME, Bucket.SOMEDAY)
            if _in(classifier, b, rec, now)
        ]
        assert len(hits) == 1
        if area_title == "Someday":
            assert hits == [Bucket.SOMEDAY]
            assert not _in(classifier, Bucket.TOMORROW, rec, now)
        if _in(classifier, Bucket.TOMORROW, rec, now):
            assert hits == [Bucket.UPCOMING]


def test_someday_uses_area_title(classifier, now) -> None:
    rec = make_record(start=0, area_id="A9", area_title="Someday")
    assert _in(classifier, Bucket.SOMEDAY, rec, now)
    assert classifier.buckets_of(rec, now) == [Bucket.SOMEDAY]
    assert not _in(classifier, Bucket.SOMEDAY, make_record(area_id="A1", area_title="Home"), now)


def test_someday_area_is_kept_out_of_start_lists(classifier, codec, now) -> None:
    scheduled = codec.encode(date(2026, 3, 15))
    rec = make_record(start=2, scheduled=scheduled, area_id="A9", area_title="Someday")
    assert classifier.buckets_of(rec, now) == [Bucket.SOMEDAY]

    elsewhere = make_record(start=2, scheduled=scheduled, area_id="A1", area_title="Home")
    assert classifier.buckets_of(elsewhere, now) == [Bucket.TOMORROW, Bucket.UPCOMING]


def test_not_eq_treats_null_as_different() -> None:
    assert NotEq(Field.AREA_TITLE, "Someday").matches(make_record(area_title=None))
    assert NotEq(Field.AREA_TITLE, "Someday").matches(make_record(area_title="Home"))
    assert not NotEq(Field.AREA_TITLE, "Someday").matches(make_record(area_title="Someday"))


def test_like_folds_ascii_case_only() -> None:
    assert Like(Field.TITLE, "MILK").matches(make_record(title="buy milk"))
    assert not Like(Field.TITLE, "É").matches(make_record(title="café"))


def test_someday_area_title_is_configurable(codec, now) -> None:
    classifier = FilterClassifier(codec, someday_area="Eventually")
    assert _in(classifier, Bucket.SOMEDAY, make_record(area_id="A9", area_title="Eventually"), now)


def test_someday_always_requires_incomplete(classifier, now) -> None:
    done = make_record(status=3, area_id="A9", area_title="Someday")
    assert not classifier.for_bucket(Bucket.SOMEDAY, now, include_completed=True).matches(done)


def test_inbox_requires_no_area_and_no_project(classifier, now) -> None:
    assert _in(classifier, Bucket.INBOX, make_record(), now)
    assert not _in(classifier, Bucket.INBOX, make_record(area_id="A1"), now)
    assert not _in(classifier, Bucket.INBOX, make_record(project_id="P1"), now)


def test_all_applies_only_base_constraint(classifier, now) -> None:
    constraint = classifier.for_bucket(Bucket.ALL, now)
    assert constraint.predicates == (
        Eq(Field.TRASHED, 0),
        Eq(Field.TYPE, 0),
        Eq(Field.STATUS, 0),
    )


@pytest.mark.parametrize("bucket", list(Bucket))
def test_base_constraint_excludes_trashed_projects_and_completed(classifier, now, bucket) -> None:
    base = dict(start=2, scheduled=DateCodec().encode(date(2026, 3, 15)), area_title="Someday", area_id=None)
    assert not _in(classifier, bucket, make_record(trashed=1, **base), now)
    assert not _in(classifier, bucket, make_record(type=1, **base), now)
    assert not _in(classifier, bucket, make_record(status=3, **base), now)


def test_include_completed_drops_status(classifier, now) -> None:
    done = make_record(status=3, start=1)
    assert classifier.for_bucket(Bucket.TODAY, now, include_completed=True).matches(done)
    assert Field.STATUS not in classifier.for_bucket(Bucket.ALL, now, include_completed=True).fields()


# ---- explicit day / range ----


def test_date_matches_scheduled_or_today_reference(classifier, codec) -> None:
    day = date(2026, 3, 20)
    constraint = classifier.for_date(day)
    assert constraint.matches(make_record(scheduled=codec.encode(day)))
    assert constraint.matches(make_record(today_reference=codec.encode(day)))
    assert not constraint.matches(make_record(scheduled=codec.encode(day + timedelta(days=1))))
    assert not constraint.matches(make_record())


def test_range_is_inclusive(classifier, codec) -> None:
    start, end = date(2026, 3, 1), date(2026, 3, 3)
    constraint = classifier.for_range(start, end)
    assert constraint.matches(make_record(scheduled=codec.encode(start)))
    assert constraint.matches(make_record(today_reference=codec.encode(end)))
    assert not constraint.matches(make_record(scheduled=codec.encode(end + timedelta(days=1))))
    assert not constraint.matches(make_record(scheduled=codec.encode(start - timedelta(days=1))))


def test_single_day_range_equals_date(classifier) -> None:
    d = date(2026, 3, 1)
    assert classifier.for_range(d, d) == classifier.for_date(d)


def test_reversed_range_is_rejected(classifier) -> None:
    with pytest.raises(MalformedCriteria) as ei:
        classifier.for_range(date(2026, 3, 2), date(2026, 3, 1))
    assert ei.value.field == "end"


# ---- search / identifier ----


def test_search_scopes(classifier) -> None:
    rec = make_record(title="Buy Milk", notes="at the corner shop")
    assert classifier.for_search("milk", SearchField.TITLE).matches(rec)
    assert not classifier.for_search("milk", SearchField.NOTES).matches(rec)
    assert classifier.for_search("corner", SearchField.BOTH).matches(rec)
    assert not classifier.for_search("corner", SearchField.TITLE).matches(rec)


def test_search_predicate_shape(classifier) -> None:
    constraint = classifier.for_search("x")
    assert constraint.predicates[-1] == AnyOf((Like(Field.TITLE, "x"), Like(Field.NOTES, "x")))


@pytest.mark.parametrize("text", ["", "   "])
def test_empty_search_is_rejected(classifier, text) -> None:
    with pytest.raises(MalformedCriteria):
        classifier.for_search(text)


def test_identifier_constraint(classifier) -> None:
    constraint = classifier.for_identifier(" ABC-123 ")
    assert constraint.predicates == (Eq(Field.TRASHED, 0), Eq(Field.ID, "ABC-123"))


@pytest.mark.parametrize("ident", ["", "a b", "x' OR 1=1 --", "z" * 65])
def test_malformed_identifier(ident) -> None:
    with pytest.raises(MalformedCriteria) as ei:
        validate_identifier(ident)
    assert ei.value.field == "identifier"


# ---- dispatch / parsing ----


def test_classify_dispatches_every_criteria_kind(classifier, now) -> None:
    d = date(2026, 3, 20)
    assert classifier.classify(BucketQuery(Bucket.TODAY), now) == classifier.for_bucket(Bucket.TODAY, now)
    assert classifier.classify(DateQuery(d), now) == classifier.for_date(d)
    assert classifier.classify(RangeQuery(d, d), now) == classifier.for_range(d, d)
    assert classifier.classify(SearchQuery("a"), now) == classifier.for_search("a")
    assert classifier.classify(IdQuery("A1"), now) == classifier.for_identifier("A1")


def test_every_bucket_produces_a_constraint(classifier, now) -> None:
    for bucket in Bucket:
        assert classifier.for_bucket(bucket, now).predicates


def test_constraint_fields(classifier, now) -> None:
    assert classifier.for_bucket(Bucket.INBOX, now).fields() == {
        Field.TRASHED,
        Field.TYPE,
        Field.STATUS,
        Field.AREA_ID,
        Field.PROJECT_ID,
    }


def test_predicates_treat_null_as_no_match() -> None:
    rec = make_record(scheduled=None)
    assert not InRange(Field.SCHEDULED, 0, 10**9).matches(rec)
    assert not Eq(Field.AREA_TITLE, "Someday").matches(rec)
    assert IsNull(Field.SCHEDULED).matches(rec)


def test_parse_day() -> None:
    assert parse_day("2026-03-14") == date(2026, 3, 14)
    assert parse_day(" 2026-3-4 ") == date(2026, 3, 4)


@pytest.mark.parametrize("raw", ["", "2026/03/14", "14-03-2026", "2026-02-30", "2026-13-01"])
def test_parse_day_rejects(raw) -> None:
    with pytest.raises(MalformedCriteria) as ei:
        parse_day(raw, "start")
    assert ei.value.field == "start"


def test_parse_bucket_and_search_field() -> None:
    assert parse_bucket(" Today ") is Bucket.TODAY
    assert parse_search_field("NOTES") is SearchField.NOTES
    with pytest.raises(MalformedCriteria):
        parse_bucket("later")
    with pytest.raises(MalformedCriteria):
        parse_search_field("tags")
