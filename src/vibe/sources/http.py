"""Shared HTTP client for the signal sources via aiohttp.

Wraps a single aiohttp.ClientSession with a total timeout and a User-Agent
header. Non-2xx responses and transport errors surface as
SourceUnavailableError so fetchers have a single failure type to handle.
"""

import asyncio
from typing import Any

import aiohttp

from vibe.config import SourceSettings
from vibe.exceptions import SourceUnavailableError
from vibe.logging import get_logger

logger = get_logger(__name__)


class HttpClient:
    """Thin async HTTP client used by every fetcher.

    Usage:
        client = HttpClient(settings.sources)
        await client.connect()
        data = await client.get_json("https://api.alternative.me/fng/")
        await client.close()
    """

    def __init__(self, settings: SourceSettings) -> None:
        self._settings = settings
        self._session: aiohttp.ClientSession | None = None

    async def connect(self) -> None:
        """Create the underlying session. Safe to call more than once."""
        if self._session is not None and not self._session.closed:
            return
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self._settings.timeout_seconds),
            headers={"User-Agent": self._settings.user_agent},
        )
        logger.debug("http_session_opened", timeout=self._settings.timeout_seconds)

    async def close(self) -> None:
        """Close the session. CRITICAL: must be called to avoid unclosed-session warnings."""
        if self._session is not None:
            await self._session.close()
            self._session = None
            logger.debug("http_session_closed")

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET a URL and decode the body as JSON."""
        session = await self._get_session()
        try:
            async with session.get(url, params=params) as response:
                self._raise_for_status(url, response)
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SourceUnavailableError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            raise SourceUnavailableError(f"GET {url} returned invalid JSON") from e

    async def get_text(self, url: str, params: dict[str, Any] | None = None) -> str:
        """GET a URL and return the body as text."""
        session = await self._get_session()
        try:
            async with session.get(url, params=params) as response:
                self._raise_for_status(url, response)
                return await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise SourceUnavailableError(f"GET {url} failed: {e}") from e

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            await self.connect()
        assert self._session is not None
        return self._session

    @staticmethod
    def _raise_for_status(url: str, response: aiohttp.ClientResponse) -> None:
        if response.status >= 400:
            raise SourceUnavailableError(f"GET {url} returned HTTP {response.status}")
