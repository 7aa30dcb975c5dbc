"""
AtomPub client for listing blog entries.

Uses aiohttp; one session is opened per crawl run.

http://developer.hatena.ne.jp/ja/documents/blog/apis/atom
"""

import asyncio
from typing import Optional

import aiohttp
from aiohttp import ClientTimeout, ClientError

from .feed import FeedPage, parse_feed
from ..errors import TransportError
from ..utils.constants import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT, FEED_BASE_URL
from ..utils.log import get_logger


class BlogClient:
    """
    Fetches pages of a blog's entry feed.

    Requests are decorated by an optional authenticator (``OAuth1Auth`` or
    ``WSSEAuth``). Nothing is retried.
    """

    def __init__(
        self,
        auth=None,
        base_url: str = FEED_BASE_URL,
        timeout: int = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT
    ):
        """
        Initialize the client.

        Args:
            auth: Authenticator providing ``headers(method, url, params)``
            base_url: Root URL of the AtomPub service
            timeout: Request timeout in seconds
            user_agent: User agent string for requests
        """
        self.auth = auth
        self.base_url = base_url.rstrip("/")
        self.timeout = ClientTimeout(total=timeout)
        self.user_agent = user_agent
        self.logger = get_logger("blog")

        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent}
            )

    async def stop(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    def entry_feed_url(self, account_id: str, blog_id: str) -> str:
        return f"{self.base_url}/{account_id}/{blog_id}/atom/entry"

    async def list_entries(self, account_id: str, blog_id: str, page: str = "") -> FeedPage:
        """
        Fetch one page of the entry feed.

        Args:
            account_id: Blog owner's account
            blog_id: Blog identifier (domain)
            page: Page token; empty for the first page

        Returns:
            Decoded FeedPage

        Raises:
            TransportError: On network failures and non-200 responses
            DecodeError: If the response is not an Atom feed
        """
        await self.start()

        url = self.entry_feed_url(account_id, blog_id)
        params = {"page": page} if page else {}
        headers = self.auth.headers("GET", url, params) if self.auth else {}

        self.logger.debug(f"Fetching {url} (page {page or 'first'})")
        try:
            async with self._session.get(url, params=params, headers=headers) as response:
                body = await response.read()
                if response.status != 200:
                    raise TransportError(
                        f"server returned {response.status} {response.reason}",
                        status=response.status,
                        page=page,
                        body=body.decode("utf-8", errors="replace"),
                    )
        except ClientError as e:
            raise TransportError(f"unable to fetch {url}: {e}", page=page) from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"timeout fetching {url}", page=page) from e

        return parse_feed(body)

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
