"""Time windows and the state threaded between poll cycles."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum


class Unbounded(str, Enum):
    """Open-ended upper bound, distinct from any concrete future timestamp."""

    END = "end"


UNBOUNDED = Unbounded.END


@dataclass(frozen=True)
class TimeRange:
    """Inclusive window ``[start, end]``; ``end`` may be :data:`UNBOUNDED`."""

    start: datetime
    end: datetime | Unbounded

    def __post_init__(self) -> None:
        if self.start.tzinfo is None:
            raise ValueError("TimeRange.start must be timezone-aware")
        if isinstance(self.end, datetime):
            if self.end.tzinfo is None:
                raise ValueError("TimeRange.end must be timezone-aware")
            if self.start > self.end:
                raise ValueError("TimeRange.start must not be after TimeRange.end")

    @property
    def is_bounded(self) -> bool:
        return self.end is not UNBOUNDED

    def contains(self, t: datetime) -> bool:
        if t < self.start:
            return False
        if self.is_bounded and t > self.end:
            return False
        return True

    def ended_by(self, now: datetime) -> bool:
        """True when the range lies entirely at or before ``now``."""
        return self.is_bounded and self.end <= now


@dataclass(frozen=True)
class PollState:
    """Resumption point for the next poll cycle.

    ``boundary_ids`` holds ids already emitted at exactly ``current_from`` so
    that records sharing the last emitted millisecond are neither re-delivered
    nor skipped.
    """

    current_from: datetime
    to: datetime | Unbounded
    delay: timedelta
    boundary_ids: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def initial(cls, time_range: TimeRange, delay: timedelta) -> "PollState":
        return cls(current_from=time_range.start, to=time_range.end, delay=delay)

    @property
    def window(self) -> TimeRange:
        return TimeRange(start=self.current_from, end=self.to)

    def advance(self, last_time: datetime, last_ids: frozenset[str]) -> "PollState":
        """State after a cycle whose last emitted record(s) were at ``last_time``."""
        if last_time < self.current_from:
            raise ValueError("poll state must never move backwards")
        if last_time == self.current_from:
            return replace(self, boundary_ids=self.boundary_ids | last_ids)
        return replace(self, current_from=last_time, boundary_ids=last_ids)
