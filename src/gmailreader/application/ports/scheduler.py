from __future__ import annotations
from datetime import datetime
from typing import Awaitable, Callable, Protocol

Callback = Callable[[], Awaitable[None]]

class Scheduler(Protocol):
    def schedule(self, at: datetime, callback: Callback) -> None: ...
