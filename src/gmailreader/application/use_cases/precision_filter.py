"""Restore millisecond exactness lost by day-quantized search bounds."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from gmailreader.domain.entities.gmail_record import GmailRecord
from gmailreader.domain.time_range import TimeRange
from gmailreader.infrastructure.gmail.mapper import raw_detail_to_record


def filter_records(
    details: Iterable[Mapping[str, Any]],
    time_range: TimeRange,
    boundary_ids: frozenset[str] = frozenset(),
) -> list[GmailRecord]:
    """Map raw details to records and keep those inside ``time_range``.

    Records at exactly ``time_range.start`` whose id is in ``boundary_ids``
    were already emitted by an earlier cycle and are dropped.
    """
    records = []
    for detail in details:
        record = raw_detail_to_record(detail)
        if not time_range.contains(record.time):
            continue
        if record.time == time_range.start and record.id in boundary_ids:
            continue
        records.append(record)
    return records
