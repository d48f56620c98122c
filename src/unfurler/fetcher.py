"""Streaming HTTP fetcher with async support."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, NamedTuple, Optional
import aiohttp
import structlog

logger = structlog.get_logger()


class Body(NamedTuple):
    """An open response body, read chunk by chunk."""

    charset: Optional[str]
    chunks: AsyncIterator[bytes]


class Fetcher:
    """Async HTTP client wrapper that streams response bodies."""

    def __init__(
        self,
        user_agent: str = "unfurler/0.1.0",
        timeout: int = 10,
        max_retries: int = 1,
        chunk_size: int = 16384,
    ):
        self.user_agent = user_agent
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.max_retries = max_retries
        self.chunk_size = chunk_size
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Create session on context enter."""
        self._session = aiohttp.ClientSession(
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close session on context exit."""
        if self._session:
            await self._session.close()
            self._session = None

    @asynccontextmanager
    async def stream(self, url: str) -> AsyncIterator[Body]:
        """
        Open a URL and expose its body as a stream of chunks.

        The connection is released when the context exits. If the body was
        not read to the end (error, cancellation) the connection is closed
        instead of being returned to the pool.

        Args:
            url: The URL to fetch

        Yields:
            Body with the announced charset and a chunk iterator

        Raises:
            aiohttp.ClientError: On request failure or a 4xx/5xx status
            asyncio.TimeoutError: When the request exceeds the timeout
        """
        response = await self._open(url)
        async with response:
            yield Body(
                charset=response.charset,
                chunks=response.content.iter_chunked(self.chunk_size),
            )

    async def _open(self, url: str) -> aiohttp.ClientResponse:
        if not self._session:
            raise RuntimeError("Fetcher must be used as async context manager")

        for attempt in range(self.max_retries):
            try:
                response = await self._session.get(url)
                response.raise_for_status()
                logger.info(
                    "fetched_url",
                    url=url,
                    status=response.status,
                    content_type=response.content_type,
                )
                return response

            except aiohttp.ClientResponseError as e:
                logger.warning("bad_status", url=url, status=e.status)
                raise

            except asyncio.TimeoutError:
                logger.warning("timeout", url=url, attempt=attempt + 1)
                if attempt == self.max_retries - 1:
                    raise

            except aiohttp.ClientError as e:
                logger.error("fetch_error", url=url, error=str(e), attempt=attempt + 1)
                if attempt == self.max_retries - 1:
                    raise
                await asyncio.sleep(2**attempt)  # Exponential backoff

        raise RuntimeError("Unreachable code")
