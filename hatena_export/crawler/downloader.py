"""
Image downloader for fetching the pictures embedded in entries.

Uses aiohttp; downloads run one at a time.
"""

import asyncio
from typing import Optional

import aiohttp
from aiohttp import ClientTimeout, ClientError

from ..errors import TransportError
from ..utils.constants import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from ..utils.log import get_logger


class ImageDownloader:
    """
    Downloads image files over HTTP.

    The session lives for one crawl run: open it with ``async with`` or
    ``start()``/``stop()``.
    """

    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT
    ):
        """
        Initialize the image downloader.

        Args:
            timeout: Request timeout in seconds
            user_agent: User agent string for requests
        """
        self.timeout = ClientTimeout(total=timeout)
        self.user_agent = user_agent
        self.logger = get_logger("downloader")

        self._session: Optional[aiohttp.ClientSession] = None
        self.downloaded = 0

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

    async def fetch(self, url: str) -> bytes:
        """
        Download a single image.

        Args:
            url: Image URL

        Returns:
            Response body

        Raises:
            TransportError: On network failures and non-200 responses
        """
        await self.start()

        try:
            async with self._session.get(url, allow_redirects=True) as response:
                if response.status != 200:
                    raise TransportError(
                        f"unable to download {url}: HTTP {response.status}",
                        status=response.status,
                    )
                content = await response.read()
        except ClientError as e:
            raise TransportError(f"unable to download {url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"timeout downloading {url}") from e

        self.downloaded += 1
        self.logger.debug(f"Downloaded: {url} ({len(content)} bytes)")
        return content

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
