"""CLI interface using typer."""

import asyncio

import typer

from .config import settings
from .core import HttpFetcher
from .log import configure_logging

app = typer.Typer(
    name="gallery-crawler",
    help="Paced gallery image crawler",
    no_args_is_help=True,
)


def _fetcher(no_proxy: bool) -> HttpFetcher:
    return HttpFetcher(
        timeout=settings.timeout,
        user_agent=settings.user_agent,
        proxy=None if no_proxy else settings.proxy,
    )


async def _fetch_text(url: str, no_proxy: bool) -> str:
    fetcher = _fetcher(no_proxy)
    try:
        response = await fetcher.fetch(url)
    finally:
        await fetcher.close()
    if not response.ok:
        raise typer.BadParameter(f"Http status: {response.status}, {url}")
    return response.text


async def _wait_for_enter():
    await asyncio.to_thread(input, "Press Enter for the next image...")


@app.command()
def run(
    auto: bool = typer.Option(settings.auto_play, "--auto/--manual", help="Advance on a timer or on Enter"),
    interval: float = typer.Option(settings.interval, "--interval", "-i", help="Seconds between images in auto mode"),
    count: int = typer.Option(None, "--count", "-n", help="Stop after this many images (or failures)"),
    output: str = typer.Option(None, "-o", "--output", help="Directory to save downloaded images"),
    no_proxy: bool = typer.Option(False, "--no-proxy", help="Connect directly instead of via the proxy"),
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level"),
):
    """Crawl the gallery listing and download images one at a time."""
    from .crawl import run_session
    from .outcome import Completed

    configure_logging(log_level)
    config = settings.model_copy(update={
        "auto_play": auto,
        "interval": interval,
        "use_proxy": settings.use_proxy and not no_proxy,
    })

    history = asyncio.run(run_session(
        config,
        count=count,
        output_dir=output,
        prompt=_wait_for_enter,
    ))

    done = sum(1 for outcome in history if isinstance(outcome, Completed))
    typer.echo(f"Downloaded {done} images")


@app.command("parse-listing")
def parse_listing(
    url: str = typer.Argument(..., help="Listing page URL"),
    no_proxy: bool = typer.Option(False, "--no-proxy", help="Connect directly instead of via the proxy"),
):
    """Print the gallery links found on a listing page."""
    from .parser import parse_listing_page

    for link in parse_listing_page(asyncio.run(_fetch_text(url, no_proxy))):
        typer.echo(link)


@app.command("parse-sub")
def parse_sub(
    url: str = typer.Argument(..., help="Gallery page URL"),
    no_proxy: bool = typer.Option(False, "--no-proxy", help="Connect directly instead of via the proxy"),
):
    """Print the image URLs embedded in a gallery page."""
    from .errors import ParseError
    from .parser import parse_sub_page

    try:
        images = parse_sub_page(asyncio.run(_fetch_text(url, no_proxy)), settings.gallery_marker)
    except ParseError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    for image in images:
        typer.echo(image)


@app.command()
def version():
    """Show version."""
    from . import __version__

    typer.echo(f"gallery-crawler {__version__}")


if __name__ == "__main__":
    app()
