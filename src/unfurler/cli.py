"""CLI interface for unfurler."""

import asyncio
import json
import sys
from pathlib import Path
import click
import structlog
from aiohttp import web

from unfurler.models import UnfurlConfig
from unfurler.server import create_app
from unfurler.unfurler import Unfurler, unfurl
from unfurler.writers import Writer
from unfurler import __version__

DEFAULTS = UnfurlConfig()

# Configure structured logging; stdout is reserved for results
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer(),
    ],
    logger_factory=structlog.PrintLoggerFactory(sys.stderr),
)


@click.group()
@click.version_option(version=__version__)
def main():
    """
    unfurler - link preview metadata in a single streaming pass.
    """
    pass


@main.command()
@click.argument("url")
@click.option(
    "--timeout",
    "-t",
    default=DEFAULTS.timeout,
    help=f"Request timeout in seconds (default: {DEFAULTS.timeout})",
    type=int,
)
@click.option(
    "--user-agent",
    default=DEFAULTS.user_agent,
    help="Custom User-Agent string",
)
def fetch(url: str, timeout: int, user_agent: str):
    """
    Unfurl a single URL and print its metadata as JSON.

    Examples:

        unfurler fetch https://example.com

        unfurler fetch https://example.com/article --timeout 5
    """
    config = UnfurlConfig(timeout=timeout, user_agent=user_agent)
    result = asyncio.run(unfurl(url, config))

    if not result.ok:
        click.echo(f"Error: {result.error.value}", err=True)
        sys.exit(1)

    click.echo(json.dumps(result.value.to_dict(), indent=2, ensure_ascii=False))


@main.command()
@click.argument("file_path", type=click.Path(exists=True))
@click.option(
    "--format",
    "-f",
    type=click.Choice(["json", "jsonl"], case_sensitive=False),
    default="jsonl",
    help="Output format (default: jsonl)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Output file path (default: unfurl_output.<format>)",
)
@click.option(
    "--concurrency",
    "-c",
    default=DEFAULTS.max_concurrency,
    help=f"Number of concurrent requests (default: {DEFAULTS.max_concurrency})",
    type=int,
)
@click.option(
    "--timeout",
    "-t",
    default=DEFAULTS.timeout,
    help=f"Request timeout in seconds (default: {DEFAULTS.timeout})",
    type=int,
)
def batch(file_path: str, format: str, output: str, concurrency: int, timeout: int):
    """
    Unfurl every URL listed in FILE_PATH, one per line.

    Examples:

        unfurler batch urls.txt

        unfurler batch urls.txt --format json -o previews.json -c 20
    """
    urls = [
        line.strip()
        for line in Path(file_path).read_text(encoding="utf-8").splitlines()
        if line.strip() and not line.startswith("#")
    ]
    if not urls:
        click.echo("No URLs to unfurl")
        return

    config = UnfurlConfig(max_concurrency=concurrency, timeout=timeout)

    async def _run():
        async with Unfurler(config) as unfurler:
            return await unfurler.unfurl_many(urls, progress=True)

    results = asyncio.run(_run())

    if output is None:
        output = f"unfurl_output.{format}"
    output_path = Path(output)

    try:
        if format == "json":
            Writer.write_json(results, output_path)
        else:
            Writer.write_jsonl(results, output_path)
    except OSError as e:
        click.echo(f"Error writing output: {e}", err=True)
        sys.exit(1)

    succeeded = sum(1 for _, result in results if result.ok)
    click.echo(f"Unfurled {succeeded}/{len(results)} URLs to {output_path}")


@main.command()
@click.option("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
@click.option("--port", "-p", default=8080, help="Port to listen on (default: 8080)", type=int)
@click.option(
    "--timeout",
    "-t",
    default=DEFAULTS.timeout,
    help=f"Upstream request timeout in seconds (default: {DEFAULTS.timeout})",
    type=int,
)
def serve(host: str, port: int, timeout: int):
    """
    Serve unfurl results over HTTP.

    Examples:

        unfurler serve --port 8080

        curl "http://127.0.0.1:8080/?url=https://example.com"
    """
    app = create_app(UnfurlConfig(timeout=timeout))
    web.run_app(app, host=host, port=port)


@main.command()
def version():
    """Show version information."""
    click.echo(f"unfurler version {__version__}")
    click.echo("Link preview metadata in a single streaming pass.")


if __name__ == "__main__":
    main()
