"""Paginated listing followed by a batched detail fetch per page."""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from gmailreader.application.ports.message_source import MessageSource


class RecordFetcher:
    """Fetch raw message details for every listed message matching a query.

    Page N+1 is only requested after page N's batch fetch has completed;
    results are concatenated in page order.
    """

    def __init__(self, source: MessageSource) -> None:
        self.source = source

    async def fetch(self, query: str, page_token: Optional[str] = None) -> list[dict[str, Any]]:
        details: list[dict[str, Any]] = []
        pages = 0
        while True:
            page = await self.source.list_messages(query, page_token)
            pages += 1
            if not page.ids:
                break

            logger.debug(f"Got {len(page.ids)} potential messages on page {pages}")
            details.extend(await self.source.batch_get_messages(page.ids))

            page_token = page.next_page_token
            if not page_token:
                break

        logger.debug(f"Fetched {len(details)} message details over {pages} page(s)")
        return details
