"""Pytest configuration and fixtures."""

import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from unfurler.models import UnfurlConfig


@pytest.fixture
def sample_html():
    """Sample HTML carrying every supported metadata convention."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Test Page</title>
        <meta name="description" content="A test page">
        <meta property="og:title" content="Test OG Title">
        <meta property="og:description" content="OG description">
        <meta property="og:image" content="/images/preview.png">
        <meta name="twitter:title" content="Twitter Title">
        <meta name="twitter:image" content="https://cdn.example.com/twitter.png">
        <link rel="icon" href="/favicon.ico">
        <link rel="apple-touch-icon" href="/apple-touch-icon.png">
        <link rel="stylesheet" href="/style.css">
    </head>
    <body>
        <h1>Welcome</h1>
        <p>This is a test page with some content.</p>
    </body>
    </html>
    """


@pytest.fixture
def plain_html():
    """HTML with only a title and a description."""
    return """
    <html>
    <head>
        <title>Plain &amp; Simple</title>
        <meta name="description" content="Nothing fancy">
        <link rel="shortcut icon" href="/legacy.ico">
    </head>
    <body><p>Hello</p></body>
    </html>
    """


@pytest.fixture
def sample_url():
    """Sample page URL for testing."""
    return "https://example.com/page"


@pytest.fixture
def fast_config():
    """Config with the shortest allowed timeout."""
    return UnfurlConfig(timeout=1)


@pytest_asyncio.fixture
async def site(sample_html, plain_html):
    """Local HTTP server with a handful of pages."""

    async def full(request):
        return web.Response(text=sample_html, content_type="text/html")

    async def plain(request):
        return web.Response(text=plain_html, content_type="text/html")

    async def bare(request):
        return web.Response(text="<html><body><p>No head here</p></body></html>", content_type="text/html")

    async def empty(request):
        return web.Response(body=b"", content_type="text/html")

    async def unicode(request):
        return web.Response(
            text="<html><head><title>Café – menu</title></head></html>",
            content_type="text/html",
        )

    async def chunked(request):
        response = web.StreamResponse(headers={"Content-Type": "text/html; charset=utf-8"})
        await response.prepare(request)
        for part in (b"<html><head><title>Hel", b"lo</title><meta property=", b'"og:image" content="img/a.png"></head>'):
            await response.write(part)
            await asyncio.sleep(0)
        await response.write_eof()
        return response

    async def malformed(request):
        return web.Response(
            text='<html><head><title>Odd links</title><meta property="og:image" content="//[bad">'
            '<link rel="icon" href="/favicon.ico"></head></html>',
            content_type="text/html",
        )

    async def error(request):
        return web.Response(status=500, text="boom")

    async def slow(request):
        await asyncio.sleep(3)
        return web.Response(text="<title>Too late</title>", content_type="text/html")

    app = web.Application()
    app.router.add_get("/full", full)
    app.router.add_get("/plain", plain)
    app.router.add_get("/bare", bare)
    app.router.add_get("/empty", empty)
    app.router.add_get("/unicode", unicode)
    app.router.add_get("/chunked", chunked)
    app.router.add_get("/malformed", malformed)
    app.router.add_get("/error", error)
    app.router.add_get("/slow", slow)

    async with TestServer(app) as server:
        yield server


@pytest_asyncio.fixture
async def truncated_url():
    """Raw server that promises more body than it sends, then hangs up."""

    async def handle(reader, writer):
        await reader.readuntil(b"\r\n\r\n")
        writer.write(
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/html\r\n"
            b"Content-Length: 1000\r\n"
            b"\r\n"
            b"<html><head><title>Cut"
        )
        await writer.drain()
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    async with server:
        yield f"http://127.0.0.1:{port}/page"
