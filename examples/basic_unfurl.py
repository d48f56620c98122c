"""
Basic unfurl example.

This script demonstrates the simplest way to use unfurler.
"""

import asyncio
from unfurler import Unfurler, unfurl


async def main():
    """Unfurl one URL, then a few more over a shared session."""
    result = await unfurl("https://example.com")

    if result.ok:
        print(f"Title: {result.value.title or 'No title'}")
        print(f"Description: {result.value.description or 'No description'}")
    else:
        print(f"Failed: {result.error.value}")

    urls = [
        "https://www.python.org",
        "https://docs.aiohttp.org",
        "not-a-url",
    ]

    async with Unfurler() as unfurler:
        for url, result in await unfurler.unfurl_many(urls):
            print(f"\n{url}")
            if result.ok:
                for field, value in result.value.to_dict().items():
                    print(f"   {field}: {value}")
            else:
                print(f"   error: {result.error.value}")


if __name__ == "__main__":
    asyncio.run(main())
