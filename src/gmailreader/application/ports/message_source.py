from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

@dataclass(frozen=True)
class ListPage:
    # One page of the remote listing; next_page_token None on the final page
    ids: list[str] = field(default_factory=list)
    next_page_token: Optional[str] = None

class MessageSource(Protocol):
    async def list_messages(self, query: str, page_token: Optional[str] = None) -> ListPage: ...
    async def batch_get_messages(self, ids: Sequence[str]) -> list[dict[str, Any]]: ...
