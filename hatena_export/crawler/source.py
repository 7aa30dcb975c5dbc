"""
Paginated traversal of a blog's entry feed.
"""

import asyncio
from typing import AsyncIterator, Awaitable, Callable, Optional

from ..blog.feed import Entry
from ..utils.constants import DEFAULT_PAGE_DELAY
from ..utils.log import get_logger


class EntrySource:
    """
    Yields every entry of a blog, page by page, in feed order.

    The first page is fetched without a page token. After each page the
    token of the following page is derived from its ``first``/``next``
    links; the traversal ends on a page without one. Consecutive fetches
    are separated by ``delay`` seconds. A failing fetch ends the traversal
    with the client's error.
    """

    def __init__(
        self,
        client,
        account_id: str,
        blog_id: str,
        delay: float = DEFAULT_PAGE_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        cancel_event: Optional[asyncio.Event] = None
    ):
        """
        Initialize the entry source.

        Args:
            client: Feed client providing ``list_entries(account_id, blog_id, page)``
            account_id: Blog owner's account
            blog_id: Blog identifier
            delay: Seconds to wait between page fetches
            sleep: Coroutine function used for the wait
            cancel_event: Stops the traversal before the next fetch when set
        """
        self.client = client
        self.account_id = account_id
        self.blog_id = blog_id
        self.delay = delay
        self.sleep = sleep
        self.cancel_event = cancel_event
        self.logger = get_logger("source")

        self.pages_fetched = 0

    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    async def entries(self) -> AsyncIterator[Entry]:
        page_token = ""
        while True:
            if self.cancelled():
                self.logger.info("Crawl cancelled, not fetching further pages")
                return

            page = await self.client.list_entries(self.account_id, self.blog_id, page_token)
            self.pages_fetched += 1
            self.logger.info(
                f"Fetched page {self.pages_fetched} ({len(page.entries)} entries)"
            )

            for entry in page.entries:
                yield entry

            page_token = page.next_page()
            if not page_token:
                return

            # Rate limiting
            await self.sleep(self.delay)
