from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any

@dataclass(frozen=True)
class GmailRecord:
    id: str
    time: datetime  # UTC, millisecond precision (from internalDate)
    snippet: str
    from_: str
    to: str
    subject: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "id": self.id,
            "snippet": self.snippet,
            "from": self.from_,
            "to": self.to,
            "subject": self.subject,
        }
