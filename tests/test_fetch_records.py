import asyncio

from gmailreader.application.use_cases.fetch_records import RecordFetcher
from tests.helpers import FakeMessageSource, make_detail, utc


def test_two_pages_are_concatenated_in_page_order():
    details = [make_detail(f"m{i}", utc(2024, 3, 5, i)) for i in range(5)]
    source = FakeMessageSource(details, page_size=3)

    result = asyncio.run(RecordFetcher(source).fetch("after:2024/03/05"))

    assert [d["id"] for d in result] == ["m2", "m1", "m0", "m4", "m3"]
    assert source.list_calls == [None, "3"]
    assert source.batch_calls == [["m0", "m1", "m2"], ["m3", "m4"]]


def test_empty_listing_yields_nothing_without_batch_call():
    source = FakeMessageSource([])
    assert asyncio.run(RecordFetcher(source).fetch("after:2024/03/05")) == []
    assert source.batch_calls == []


def test_starts_from_given_page_token():
    details = [make_detail(f"m{i}", utc(2024, 3, 5, i)) for i in range(4)]
    source = FakeMessageSource(details, page_size=2)
    result = asyncio.run(RecordFetcher(source).fetch("q", page_token="2"))
    assert sorted(d["id"] for d in result) == ["m2", "m3"]
