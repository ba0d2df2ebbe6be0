from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Sequence

from gmailreader.application.ports.record_sink import RecordSink
from gmailreader.domain.entities.gmail_record import GmailRecord

@dataclass
class CollectingSink(RecordSink):
    """Keeps every emitted batch in memory."""
    batches: list[list[GmailRecord]] = field(default_factory=list)
    finished: bool = False
    error: Optional[BaseException] = None

    def emit(self, records: Sequence[GmailRecord]) -> None:
        self.batches.append(list(records))

    def eof(self) -> None:
        self.finished = True

    def fail(self, error: BaseException) -> None:
        self.error = error
        self.finished = True

    @property
    def records(self) -> list[GmailRecord]:
        return [r for batch in self.batches for r in batch]
