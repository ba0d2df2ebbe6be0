"""Window poll driver: one fetch-filter-sort-emit-reschedule pass per cycle."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Callable, Optional

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from gmailreader.application.ports.record_sink import RecordSink
from gmailreader.application.ports.scheduler import Scheduler
from gmailreader.application.query.query_builder import build_search_query
from gmailreader.application.use_cases.fetch_records import RecordFetcher
from gmailreader.application.use_cases.precision_filter import filter_records
from gmailreader.domain.entities.gmail_record import GmailRecord
from gmailreader.domain.errors import RemoteFetchError
from gmailreader.domain.time_range import PollState, TimeRange


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DriverStatus(str, Enum):
    ACTIVE = "active"
    TERMINATED = "terminated"  # bounded range fully consumed
    FAILED = "failed"  # fetch retries exhausted


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for a failing cycle."""

    attempts: int = 5
    multiplier: float = 1.0
    max_wait: float = 30.0


class WindowPollDriver:
    """Turn a paginated mailbox into an ordered, duplicate-free record stream.

    Flow per cycle:
    1. Build a day-quantized search query for ``[current_from, to]``
    2. Fetch every matching message's details (paginated + batched)
    3. Drop records outside the exact window, sort ascending by time, emit
    4. Terminate if the range ended before this cycle began, otherwise
       schedule the next cycle ``delay`` later from the last emitted record

    Cycles never overlap: the next one is scheduled only after the current
    one has fully resolved.
    """

    def __init__(
        self,
        *,
        fetcher: RecordFetcher,
        sink: RecordSink,
        scheduler: Scheduler,
        time_range: TimeRange,
        delay: timedelta,
        zone: tzinfo,
        raw: Optional[str] = None,
        filter_expr: Optional[str] = None,
        retry: RetryPolicy = RetryPolicy(),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if delay <= timedelta(0):
            raise ValueError("delay must be positive")
        self.fetcher = fetcher
        self.sink = sink
        self.scheduler = scheduler
        self.zone = zone
        self.raw = raw
        self.filter_expr = filter_expr
        self.retry = retry
        self._clock = clock

        self.state = PollState.initial(time_range, delay)
        self.status = DriverStatus.ACTIVE
        self.cycles = 0

    @property
    def finished(self) -> bool:
        return self.status is not DriverStatus.ACTIVE

    async def start(self) -> None:
        """Run the first cycle; later cycles are driven by the scheduler."""
        to = self.state.to
        to_text = to.isoformat() if isinstance(to, datetime) else to.value
        logger.info(f"Reading gmail from={self.state.current_from.isoformat()} to={to_text}")
        await self.run_cycle(self.state)

    async def run_cycle(self, state: PollState) -> Optional[PollState]:
        """Run one poll cycle and return the state scheduled next, if any."""
        if self.finished:
            return None

        now = self._clock()
        window = state.window
        query = build_search_query(window, self.zone, raw=self.raw, filter_expr=self.filter_expr)
        logger.debug(f"Cycle #{self.cycles + 1} search string: {query}")

        try:
            records = await self._read_window(query, state)
        except RemoteFetchError as e:
            self.status = DriverStatus.FAILED
            logger.error(f"Could not read latest emails: {e}")
            self.sink.fail(e)
            return None

        self.cycles += 1
        if records:
            self.sink.emit(records)
        logger.info(f"Cycle #{self.cycles}: emitted {len(records)} records")

        if window.ended_by(now):
            self.status = DriverStatus.TERMINATED
            logger.info(f"Range ended, stopping after {self.cycles} cycle(s)")
            self.sink.eof()
            return None

        next_state = state
        if records:
            last_time = records[-1].time
            last_ids = frozenset(r.id for r in records if r.time == last_time)
            next_state = state.advance(last_time, last_ids)

        self.state = next_state
        next_poll = now + state.delay
        logger.debug(f"Next poll at {next_poll.isoformat()} from {next_state.current_from.isoformat()}")

        async def _next_cycle() -> None:
            await self._run_scheduled(next_state)

        self.scheduler.schedule(next_poll, _next_cycle)
        return next_state

    async def _read_window(self, query: str, state: PollState) -> list[GmailRecord]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retry.attempts),
            wait=wait_exponential(multiplier=self.retry.multiplier, max=self.retry.max_wait),
            retry=retry_if_exception_type(RemoteFetchError),
            before_sleep=self._log_retry,
            reraise=True,
        ):
            with attempt:
                details = await self.fetcher.fetch(query)

        records = filter_records(details, state.window, state.boundary_ids)
        # stable: equal timestamps keep fetch order within the cycle
        records.sort(key=lambda r: r.time)
        return records

    async def _run_scheduled(self, state: PollState) -> None:
        try:
            await self.run_cycle(state)
        except Exception as e:
            self.status = DriverStatus.FAILED
            logger.exception(f"Poll cycle crashed: {e}")
            self.sink.fail(e)

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            f"Fetch attempt {retry_state.attempt_number} failed ({exc}), retrying in {wait:.1f}s"
        )
