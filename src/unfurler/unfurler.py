"""Core unfurl engine."""

import asyncio
from typing import Iterable, Optional
import aiohttp
from lxml import etree
from tqdm.asyncio import tqdm
import structlog

from unfurler.events import TagEventSource
from unfurler.extractors import LinkIconAccumulator, MetaTagAccumulator, TitleAccumulator
from unfurler.fetcher import Fetcher
from unfurler.models import UnfurlConfig, UnfurlError, UnfurlResult
from unfurler.resolver import resolve

logger = structlog.get_logger()

# Errors that can surface while fetching or tokenizing a page
FETCH_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, etree.LxmlError, UnicodeError)


def is_valid_url(url: object) -> bool:
    """Accept only strings with an http:// or https:// prefix."""
    return isinstance(url, str) and url.startswith(("http://", "https://"))


class Unfurler:
    """Extracts link preview metadata in one streaming pass per URL."""

    def __init__(self, config: Optional[UnfurlConfig] = None):
        """
        Initialize unfurler with configuration.

        Args:
            config: Unfurler configuration, uses defaults if None
        """
        self.config = config or UnfurlConfig()
        self._fetcher: Optional[Fetcher] = None

    async def __aenter__(self):
        """Open the shared HTTP session."""
        self._fetcher = Fetcher(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout,
            max_retries=self.config.max_retries,
            chunk_size=self.config.chunk_size,
        )
        await self._fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Close the shared HTTP session."""
        if self._fetcher:
            await self._fetcher.__aexit__(exc_type, exc_val, exc_tb)
            self._fetcher = None

    @property
    def fetcher(self) -> Fetcher:
        if self._fetcher is None:
            raise RuntimeError("Unfurler must be used as async context manager")
        return self._fetcher

    async def unfurl(self, url: str) -> UnfurlResult:
        """
        Fetch a page and extract its title, description, image and favicon.

        Every call gets its own accumulators and tokenizer, so concurrent
        calls on the same instance do not share any extraction state.

        Args:
            url: Absolute http(s) URL of the page

        Returns:
            UnfurlResult holding either UnfurledData or an UnfurlError
        """
        if not is_valid_url(url):
            logger.info("unfurl_rejected", url=repr(url)[:200])
            return UnfurlResult.failure(UnfurlError.BAD_PARAM)

        title = TitleAccumulator()
        meta = MetaTagAccumulator()
        icons = LinkIconAccumulator()

        logger.debug("unfurl_started", url=url)

        try:
            async with self.fetcher.stream(url) as body:
                source = (
                    TagEventSource(encoding=body.charset)
                    .on("meta", meta)
                    .on("title", title)
                    .on("link", icons)
                )
                async for chunk in body.chunks:
                    source.feed(chunk)
                source.close()

        except FETCH_ERRORS as e:
            logger.warning(
                "unfurl_failed",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return UnfurlResult.failure(UnfurlError.FAILED_FETCH)

        data = resolve(url, title, meta, icons)

        logger.info(
            "unfurl_completed",
            url=url,
            bytes=source.bytes_fed,
            fields=sorted(data.to_dict()),
        )
        return UnfurlResult.success(data)

    async def unfurl_many(
        self, urls: Iterable[str], progress: bool = False
    ) -> list[tuple[str, UnfurlResult]]:
        """
        Unfurl several URLs concurrently.

        Args:
            urls: URLs to unfurl
            progress: Show a progress bar (for CLI use)

        Returns:
            (url, result) pairs in input order
        """
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def _bounded(url: str) -> tuple[str, UnfurlResult]:
            async with semaphore:
                return url, await self.unfurl(url)

        tasks = [_bounded(url) for url in urls]
        if progress:
            return await tqdm.gather(*tasks, desc="Unfurling", unit="url")
        return list(await asyncio.gather(*tasks))


async def unfurl(url: str, config: Optional[UnfurlConfig] = None) -> UnfurlResult:
    """
    Unfurl a single URL with a short-lived HTTP session.

    Args:
        url: Absolute http(s) URL of the page
        config: Optional configuration

    Returns:
        UnfurlResult holding either UnfurledData or an UnfurlError
    """
    if not is_valid_url(url):
        return UnfurlResult.failure(UnfurlError.BAD_PARAM)

    async with Unfurler(config) as unfurler:
        return await unfurler.unfurl(url)
