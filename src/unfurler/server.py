"""HTTP adapter serving unfurl results as JSON."""

from typing import AsyncIterator, Optional
from aiohttp import web
import structlog

from unfurler.models import UnfurlConfig, UnfurlError
from unfurler.unfurler import Unfurler

logger = structlog.get_logger()

CONFIG_KEY = web.AppKey("config", UnfurlConfig)
UNFURLER_KEY = web.AppKey("unfurler", Unfurler)


async def handle_unfurl_request(request: web.Request) -> web.Response:
    """
    Unfurl the URL given in the `url` query parameter.

    e.g. GET /foo/bar?url=https://example.com
    """
    url = request.query.get("url")
    if not url:
        return web.Response(status=400, text="Missing URL query parameter.")

    result = await request.app[UNFURLER_KEY].unfurl(url)

    if result.ok:
        return web.json_response(result.value.to_dict())
    if result.error is UnfurlError.BAD_PARAM:
        return web.Response(status=400, text="Bad URL query parameter.")
    return web.Response(status=422, text="Failed to fetch URL.")


async def _unfurler_context(app: web.Application) -> AsyncIterator[None]:
    async with Unfurler(app[CONFIG_KEY]) as unfurler:
        app[UNFURLER_KEY] = unfurler
        logger.info("server_ready", timeout=app[CONFIG_KEY].timeout)
        yield


def create_app(config: Optional[UnfurlConfig] = None) -> web.Application:
    """
    Build the aiohttp application.

    Every GET path is handled the same way; only the query string matters.

    Args:
        config: Unfurler configuration, uses defaults if None

    Returns:
        Configured web.Application
    """
    app = web.Application()
    app[CONFIG_KEY] = config or UnfurlConfig()
    app.cleanup_ctx.append(_unfurler_context)
    app.router.add_get("/{tail:.*}", handle_unfurl_request)
    return app
