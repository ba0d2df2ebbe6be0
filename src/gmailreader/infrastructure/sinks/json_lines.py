"""Write records as JSON lines and expose completion to the host."""

from __future__ import annotations

import asyncio
import json
from typing import Optional, Sequence, TextIO

from loguru import logger

from gmailreader.application.ports.record_sink import RecordSink
from gmailreader.domain.entities.gmail_record import GmailRecord


class JsonLinesSink(RecordSink):
    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._done: Optional[asyncio.Future] = None
        self.emitted = 0

    def _future(self) -> asyncio.Future:
        if self._done is None:
            self._done = asyncio.get_running_loop().create_future()
        return self._done

    def emit(self, records: Sequence[GmailRecord]) -> None:
        for record in records:
            self._stream.write(json.dumps(record.to_dict(), ensure_ascii=False) + "\n")
        self._stream.flush()
        self.emitted += len(records)

    def eof(self) -> None:
        logger.info(f"End of stream after {self.emitted} records")
        fut = self._future()
        if not fut.done():
            fut.set_result(None)

    def fail(self, error: BaseException) -> None:
        fut = self._future()
        if not fut.done():
            fut.set_exception(error)

    async def wait(self) -> None:
        """Return at end-of-stream, raise the failure if the run failed."""
        await self._future()
