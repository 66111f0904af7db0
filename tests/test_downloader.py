"""
Tests for streaming downloads and progress reporting.
"""

import asyncio
import io

import httpx
import pytest

from blindspot.core.downloader import DownloadError, create_http_client, download
from conftest import FakeWeb, RecordingContext

URL = "https://example.com/tool"


async def slow_body(chunks: int = 5, size: int = 1000, delay: float = 0.01):
    for _ in range(chunks):
        await asyncio.sleep(delay)
        yield b"x" * size


def fetch(web: FakeWeb, url: str = URL, interval: float = 0.005):
    ctx = RecordingContext()
    out = io.BytesIO()

    async def main():
        async with create_http_client(web.transport()) as client:
            return await download(url, out, ctx, client, interval=interval)

    written = asyncio.run(main())
    return written, out.getvalue(), ctx


class TestDownload:
    def test_body_lands_in_the_sink(self, web: FakeWeb):
        web.serve(URL, b"binary" * 100)

        written, body, _ = fetch(web)

        assert written == 600
        assert body == b"binary" * 100

    def test_progress_is_monotonic_and_ends_once(self, web: FakeWeb):
        web.routes[URL] = lambda request: httpx.Response(
            200, content=slow_body(), headers={"Content-Length": "5000"}
        )

        _, _, ctx = fetch(web)

        ticks = [(t.current, t.total) for t in ctx.ticks]
        assert all(t.label == URL for t in ctx.ticks)
        assert all(total == 5 for _, total in ticks)
        assert [current for current, _ in ticks] == sorted(current for current, _ in ticks)
        assert ticks[-1] == (5, 5)
        assert ticks.count((5, 5)) == 1

    def test_unknown_length_reports_the_final_size(self, web: FakeWeb):
        web.routes[URL] = lambda request: httpx.Response(200, content=slow_body(chunks=3))

        written, _, ctx = fetch(web)

        assert written == 3000
        assert all(t.total == 0 for t in ctx.ticks[:-1])
        assert (ctx.ticks[-1].current, ctx.ticks[-1].total) == (3, 3)

    def test_redirects_are_followed(self, web: FakeWeb):
        web.serve(URL, status=302, headers={"Location": "https://cdn.example.com/tool"})
        web.serve("https://cdn.example.com/tool", b"moved")

        _, body, _ = fetch(web)

        assert body == b"moved"
        assert web.requests == [URL, "https://cdn.example.com/tool"]

    def test_error_status_fails(self, web: FakeWeb):
        web.serve(URL, b"gone", status=410)

        with pytest.raises(DownloadError, match="HTTP 410"):
            fetch(web)

    def test_transport_errors_become_download_errors(self, web: FakeWeb):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        web.routes[URL] = refuse

        with pytest.raises(DownloadError, match="connection refused"):
            fetch(web)

    def test_malformed_url_becomes_a_download_error(self, web: FakeWeb):
        with pytest.raises(DownloadError, match=r"http://\[::1/x"):
            fetch(web, url="http://[::1/x")
        assert web.requests == []
