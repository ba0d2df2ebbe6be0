"""Build Gmail search strings for a time window.

Gmail's ``after:``/``before:`` operators only have day granularity, so the
bounds are quantized to days in a fixed reference zone and exact filtering
happens after the fetch.
"""

from __future__ import annotations

from datetime import timedelta, tzinfo
from typing import Optional

from gmailreader.domain.time_range import TimeRange

DAY_FORMAT = "%Y/%m/%d"


def format_day(moment, zone: tzinfo) -> str:
    return moment.astimezone(zone).strftime(DAY_FORMAT)


def format_next_day(moment, zone: tzinfo) -> str:
    # calendar day in the zone, not 24 elapsed hours (DST days are 23h or 25h)
    return (moment.astimezone(zone).date() + timedelta(days=1)).strftime(DAY_FORMAT)


def build_search_query(
    time_range: TimeRange,
    zone: tzinfo,
    raw: Optional[str] = None,
    filter_expr: Optional[str] = None,
) -> str:
    """Return ``raw filter_expr after:D [before:D+1]``.

    The ``before:`` bound is the day after ``end``, so ``end`` itself is never
    excluded by the coarse server-side filter. Unbounded ranges get no
    ``before:`` at all.
    """
    parts = [p.strip() for p in (raw, filter_expr) if p and p.strip()]
    parts.append(f"after:{format_day(time_range.start, zone)}")
    if time_range.is_bounded:
        parts.append(f"before:{format_next_day(time_range.end, zone)}")
    return " ".join(parts)
