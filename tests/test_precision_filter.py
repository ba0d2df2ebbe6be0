from datetime import timedelta

import pytest

from gmailreader.application.use_cases.precision_filter import filter_records
from gmailreader.domain.errors import RemoteFetchError
from gmailreader.domain.time_range import UNBOUNDED, TimeRange
from gmailreader.infrastructure.gmail.mapper import find_header, raw_detail_to_record
from tests.helpers import make_detail, utc

WINDOW = TimeRange(start=utc(2024, 3, 5, 10), end=utc(2024, 3, 5, 18))


def test_records_outside_window_are_dropped():
    details = [
        make_detail("early", utc(2024, 3, 5, 10) - timedelta(milliseconds=1)),
        make_detail("start", utc(2024, 3, 5, 10)),
        make_detail("mid", utc(2024, 3, 5, 12)),
        make_detail("end", utc(2024, 3, 5, 18)),
        make_detail("late", utc(2024, 3, 5, 18) + timedelta(milliseconds=1)),
    ]
    assert [r.id for r in filter_records(details, WINDOW)] == ["start", "mid", "end"]


def test_unbounded_window_keeps_everything_after_start():
    details = [make_detail("a", utc(2030, 1, 1)), make_detail("b", utc(2024, 3, 5, 9))]
    window = TimeRange(start=utc(2024, 3, 5, 10), end=UNBOUNDED)
    assert [r.id for r in filter_records(details, window)] == ["a"]


def test_boundary_ids_drop_already_emitted_records_at_start_only():
    details = [
        make_detail("seen", utc(2024, 3, 5, 10)),
        make_detail("new-same-ms", utc(2024, 3, 5, 10)),
        make_detail("later", utc(2024, 3, 5, 11)),
    ]
    kept = filter_records(details, WINDOW, frozenset({"seen", "later"}))
    assert [r.id for r in kept] == ["new-same-ms", "later"]


def test_filtering_is_idempotent_for_a_snapshot():
    details = [make_detail(f"m{i}", utc(2024, 3, 5, 8 + i)) for i in range(12)]
    assert filter_records(details, WINDOW) == filter_records(details, WINDOW)


def test_mapper_converts_internal_date_exactly():
    detail = make_detail("m1", utc(2024, 3, 5, 10, 0, 0) + timedelta(milliseconds=123),
                         subject="Hello", sender="Alice <alice@example.com>")
    record = raw_detail_to_record(detail)
    assert record.time == utc(2024, 3, 5, 10) + timedelta(milliseconds=123)
    assert record.subject == "Hello"
    assert record.from_ == "Alice <alice@example.com>"
    assert record.to_dict()["time"] == "2024-03-05T10:00:00.123Z"


def test_header_lookup_is_case_sensitive_and_defaults_to_empty():
    detail = {"payload": {"headers": [{"name": "subject", "value": "lower"}]}}
    assert find_header(detail, "Subject") == ""
    assert find_header(detail, "subject") == "lower"
    assert find_header({"id": "x"}, "From") == ""


def test_invalid_internal_date():
    with pytest.raises(RemoteFetchError):
        raw_detail_to_record({"id": "x", "internalDate": "not-a-number"})
