"""Download functionality with progress reporting."""

import asyncio
import logging

import httpx

from blindspot.core.decompress import Sink
from blindspot.core.errors import BlindspotError
from blindspot.core.ui import Context

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 50
PROGRESS_INTERVAL = 0.02  # seconds between progress samples
CHUNK_SIZE = 64 * 1024


class DownloadError(BlindspotError):
    """Error during download."""

    pass


def create_http_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """HTTP client used for binary downloads."""
    return httpx.AsyncClient(
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
        timeout=60.0,
        transport=transport,
    )


async def _report_progress(
    response: httpx.Response,
    total: int,
    label: str,
    ctx: Context,
    finished: asyncio.Event,
    interval: float,
) -> None:
    """Sample the transfer and forward it as kilobytes until it completes."""
    while True:
        done = finished.is_set()
        transferred = response.num_bytes_downloaded
        if total:
            await ctx.progress(transferred // 1000, total // 1000, label)
            if transferred >= total or done:
                return
        elif done:
            # Unknown length: the finished transfer defines the total
            await ctx.progress(transferred // 1000, transferred // 1000, label)
            return
        else:
            await ctx.progress(transferred // 1000, 0, label)

        try:
            await asyncio.wait_for(finished.wait(), interval)
        except asyncio.TimeoutError:
            pass


async def download(
    url: str,
    sink: Sink,
    ctx: Context,
    client: httpx.AsyncClient,
    interval: float = PROGRESS_INTERVAL,
) -> int:
    """Stream *url* into *sink* while reporting progress through *ctx*.

    The body is copied in the calling task while a sibling task polls the
    transfer counters; both are finished before this returns.

    Returns:
        Number of body bytes written to the sink.
    """
    logger.info("Downloading %s", url)
    written = 0
    try:
        async with client.stream("GET", url) as response:
            if response.status_code != 200:
                raise DownloadError(
                    f"Failed to download {url}: HTTP {response.status_code}"
                )

            total = int(response.headers.get("content-length", 0) or 0)
            finished = asyncio.Event()
            reporter = asyncio.create_task(
                _report_progress(response, total, url, ctx, finished, interval)
            )
            try:
                async for chunk in response.aiter_bytes(CHUNK_SIZE):
                    sink.write(chunk)
                    written += len(chunk)
                sink.flush()
            finally:
                finished.set()
                await reporter
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e

    logger.info("Downloaded %s (%d bytes)", url, written)
    return written
