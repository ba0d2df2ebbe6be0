from __future__ import annotations
from typing import Protocol, Sequence
from gmailreader.domain.entities.gmail_record import GmailRecord

class RecordSink(Protocol):
    def emit(self, records: Sequence[GmailRecord]) -> None: ...
    def eof(self) -> None: ...
    def fail(self, error: BaseException) -> None: ...
